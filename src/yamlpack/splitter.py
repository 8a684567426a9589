"""
Split multi-document YAML byte streams into document spans.
"""

from __future__ import annotations

import re
from typing import List, Mapping, Tuple

from .constants import DOCUMENT_DELIMITER, DOCUMENT_PREFIX

_DELIMITER_RE = re.compile(re.escape(DOCUMENT_DELIMITER))


def split_documents(data: bytes) -> List[bytes]:
    """
    Split a byte buffer into the spans that follow each ``---`` delimiter.

    Text before the first delimiter is discarded. A buffer without any delimiter is
    returned whole as a single span.

    :param data: Raw multi-document bytes.
    :type data: bytes
    :return: Document spans in source order.
    :rtype: list[bytes]
    """
    matches = list(_DELIMITER_RE.finditer(data))
    if not matches:
        return [data]
    spans: List[bytes] = []
    for position, match in enumerate(matches):
        end = matches[position + 1].start() if position + 1 < len(matches) else len(data)
        spans.append(data[match.end() : end])
    return spans


def _criteria_patterns(criteria: Mapping[str, str]) -> List[re.Pattern[bytes]]:
    patterns: List[re.Pattern[bytes]] = []
    for key, value in criteria.items():
        expression = f'{key}:\\s*"?{value}"?'
        patterns.append(re.compile(expression.encode("utf-8")))
    return patterns


def extract_documents(data: bytes, criteria: Mapping[str, str]) -> Tuple[bytes, bytes]:
    """
    Partition documents by ``key: value`` criteria.

    Every criterion becomes the pattern ``key:\\s*"?value"?``. Documents matching all
    criteria go to the extracted stream, the rest to the remaining stream. Both streams
    are re-joined with ``---`` separators.

    :param data: Raw multi-document bytes.
    :type data: bytes
    :param criteria: Mapping of keys to expected values (both may be regular expressions).
    :type criteria: Mapping[str, str]
    :return: Extracted and remaining streams.
    :rtype: tuple[bytes, bytes]
    """
    patterns = _criteria_patterns(criteria)
    extracted = bytearray()
    remaining = bytearray()
    for span in split_documents(data):
        if all(pattern.search(span) for pattern in patterns):
            extracted += DOCUMENT_PREFIX + span
        else:
            remaining += DOCUMENT_PREFIX + span
    return bytes(extracted), bytes(remaining)
