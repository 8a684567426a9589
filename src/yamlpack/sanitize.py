"""
Normalization of decoded YAML structures into string-keyed mappings.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, Mapping

import yaml

from .errors import SectionParseError

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, bytes, bool, int, float, datetime.date, datetime.datetime, type(None))


def sanitize(value: Any) -> Any:
    """
    Recursively convert nested mappings to ``dict[str, Any]``.

    Non-string mapping keys are dropped with a warning. Lists are preserved, tuples
    and sets become lists, scalars pass through. Unknown leaf types are returned
    unchanged.

    :param value: Decoded YAML value.
    :type value: Any
    :return: Sanitized value.
    :rtype: Any
    """
    if isinstance(value, Mapping):
        output: Dict[str, Any] = {}
        for key, inner in value.items():
            if not isinstance(key, str):
                logger.warning(
                    "sanitize: dropping non-string key %r of type %s", key, type(key).__name__
                )
                continue
            output[key] = sanitize(inner)
        return output
    if isinstance(value, (list, tuple, set, frozenset)):
        return [sanitize(item) for item in value]
    if not isinstance(value, _SCALAR_TYPES):
        logger.debug("sanitize: passing through unhandled type %s", type(value).__name__)
    return value


def lower_keys(value: Any) -> Any:
    """
    Recursively lower-case every mapping key of a sanitized structure.

    :param value: Sanitized value.
    :type value: Any
    :return: Value with lower-cased keys.
    :rtype: Any
    """
    if isinstance(value, dict):
        return {key.lower(): lower_keys(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [lower_keys(item) for item in value]
    return value


def map_from_bytes(data: bytes) -> Dict[str, Any]:
    """
    Decode a single YAML document that must be a mapping or empty.

    :param data: YAML bytes.
    :type data: bytes
    :return: Sanitized mapping (empty for an empty document).
    :rtype: dict[str, Any]
    :raises SectionParseError: If the bytes are not valid YAML or not a mapping.
    """
    try:
        loaded = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise SectionParseError(str(exc), data=data) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise SectionParseError(
            f"expected a mapping at the document root, got {type(loaded).__name__}", data=data
        )
    return sanitize(loaded)
