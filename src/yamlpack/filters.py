"""
Line-oriented regular-expression filtering of sections.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Iterable, List, Sequence

from .errors import FilterPatternError

if TYPE_CHECKING:
    from .section import YamlSection

logger = logging.getLogger(__name__)


def compile_filters(patterns: Iterable[str]) -> List[re.Pattern[str]]:
    """
    Compile filter patterns.

    :param patterns: Regular expressions.
    :type patterns: Iterable[str]
    :return: Compiled patterns in input order.
    :rtype: list[re.Pattern[str]]
    :raises FilterPatternError: If any pattern does not compile.
    """
    compiled: List[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise FilterPatternError(pattern=pattern, reason=str(exc)) from exc
    return compiled


def matches_any_line(data: bytes, patterns: Sequence[re.Pattern[str]]) -> bool:
    """
    Return whether any pattern matches any single line of the data.

    :param data: Section bytes.
    :type data: bytes
    :param patterns: Compiled patterns.
    :type patterns: Sequence[re.Pattern[str]]
    :return: True on the first match.
    :rtype: bool
    """
    lines = data.decode("utf-8", errors="replace").splitlines()
    return any(pattern.search(line) for pattern in patterns for line in lines)


def filter_sections(
    sections: Sequence["YamlSection"], patterns: Iterable[str]
) -> List["YamlSection"]:
    """
    Keep the sections whose original text matches at least one pattern on one line.

    :param sections: Sections in document order.
    :type sections: Sequence[YamlSection]
    :param patterns: Regular expressions, combined with OR.
    :type patterns: Iterable[str]
    :return: Matching sections in their original order.
    :rtype: list[YamlSection]
    :raises FilterPatternError: If any pattern does not compile.
    """
    compiled = compile_filters(patterns)
    kept = [section for section in sections if matches_any_line(section.original_data, compiled)]
    logger.debug("Filter kept %d of %d sections", len(kept), len(sections))
    return kept
