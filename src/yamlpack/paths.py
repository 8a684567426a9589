"""
Dotted-path access over nested string-keyed mappings.
"""

from __future__ import annotations

import datetime
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from .constants import FALSE_STRINGS, KEY_DELIMITER, TRUE_STRINGS

_MISSING = object()


def split_path(dotted_key: str) -> List[str]:
    """
    Split a dotted key into its non-empty parts.

    :param dotted_key: Key such as ``metadata.name``.
    :type dotted_key: str
    :return: Key parts.
    :rtype: list[str]
    """
    return [part.strip() for part in dotted_key.split(KEY_DELIMITER) if part.strip()]


def _lookup(data: Mapping[str, Any], dotted_key: str) -> Any:
    parts = split_path(dotted_key)
    if not parts:
        return data
    current: Any = data
    for part in parts:
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def get_path(data: Mapping[str, Any], dotted_key: str) -> Optional[Any]:
    """
    Look up a value by dotted key.

    :param data: Nested mapping.
    :type data: Mapping[str, Any]
    :param dotted_key: Dotted key.
    :type dotted_key: str
    :return: Value, or None when any part of the path is missing.
    :rtype: Any or None
    """
    value = _lookup(data, dotted_key)
    return None if value is _MISSING else value


def has_path(data: Mapping[str, Any], dotted_key: str) -> bool:
    """
    Return whether a dotted key resolves to a value (including explicit nulls).

    :param data: Nested mapping.
    :type data: Mapping[str, Any]
    :param dotted_key: Dotted key.
    :type dotted_key: str
    :return: True when the key is present.
    :rtype: bool
    """
    return _lookup(data, dotted_key) is not _MISSING


def sub_mapping(data: Mapping[str, Any], dotted_key: str) -> Optional[Dict[str, Any]]:
    """
    Return the mapping rooted at a dotted key.

    :param data: Nested mapping.
    :type data: Mapping[str, Any]
    :param dotted_key: Dotted key.
    :type dotted_key: str
    :return: Subtree, or None when the key is missing or not a mapping.
    :rtype: dict[str, Any] or None
    """
    value = _lookup(data, dotted_key)
    if isinstance(value, Mapping):
        return dict(value)
    return None


def set_path(target: MutableMapping[str, Any], dotted_key: str, value: Any) -> None:
    """
    Set a value by dotted key, creating intermediate mappings.

    :param target: Mapping to update in place.
    :type target: MutableMapping[str, Any]
    :param dotted_key: Dotted key.
    :type dotted_key: str
    :param value: Value to assign.
    :type value: Any
    :raises ValueError: If the key is empty.
    """
    parts = split_path(dotted_key)
    if not parts:
        raise ValueError("Override keys must be non-empty")
    current: MutableMapping[str, Any] = target
    for part in parts[:-1]:
        existing = current.get(part)
        if not isinstance(existing, dict):
            nested: Dict[str, Any] = {}
            current[part] = nested
            current = nested
        else:
            current = existing
    current[parts[-1]] = value


def to_string(value: Any) -> str:
    """
    Coerce a scalar to its string form, or an empty string when it has none.

    :param value: Value to coerce.
    :type value: Any
    :return: String form.
    :rtype: str
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return ""


def to_bool(value: Any) -> bool:
    """
    Coerce a value to a boolean; unparseable values are False.

    :param value: Value to coerce.
    :type value: Any
    :return: Boolean form.
    :rtype: bool
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        stripped = value.strip()
        if stripped in TRUE_STRINGS:
            return True
        if stripped in FALSE_STRINGS:
            return False
    return False


def to_string_list(value: Any) -> List[str]:
    """
    Coerce a value to a list of strings.

    Lists convert item by item; strings split on whitespace.

    :param value: Value to coerce.
    :type value: Any
    :return: List of strings.
    :rtype: list[str]
    """
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [to_string(item) for item in value]
    return []
