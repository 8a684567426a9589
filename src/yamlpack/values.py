"""
Template value loading and dotted overrides.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .paths import set_path
from .sanitize import sanitize


_KEYWORDS: Dict[str, object] = {
    "true": True,
    "false": False,
    "null": None,
    "none": None,
    "~": None,
}


def _coerce_scalar(text: str) -> object:
    lowered = text.lower()
    if lowered in _KEYWORDS:
        return _KEYWORDS[lowered]
    for kind in (int, float):
        try:
            return kind(text)
        except ValueError:
            continue
    return text


def parse_override_value(raw: str) -> object:
    """
    Turn the right-hand side of a ``key=value`` pair into a template value.

    JSON objects and arrays are decoded, booleans, nulls and numbers become their
    Python values, and anything else stays text. Malformed JSON is kept as written.

    :param raw: Text after the first ``=``.
    :type raw: str
    :return: Template value.
    :rtype: object
    """
    text = str(raw).strip()
    if not text:
        return ""
    if text[0] in "{[":
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return str(raw)
    return _coerce_scalar(text)


def parse_value_overrides(pairs: Optional[List[str]]) -> Dict[str, object]:
    """
    Build a nested value mapping from ``key.path=value`` pairs.

    Later pairs win when they address the same key.

    :param pairs: Pairs such as ``image.tag=1.2``.
    :type pairs: list[str] or None
    :return: Nested value mapping.
    :rtype: dict[str, object]
    :raises ValueError: If a pair is not key=value.
    """
    values: Dict[str, object] = {}
    for item in pairs or []:
        if "=" not in item:
            raise ValueError(f"Values must be key=value (got {item!r})")
        key, raw = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Value keys must be non-empty")
        set_path(values, key, parse_override_value(raw))
    return values


def _merge(base: Dict[str, Any], update: Mapping[str, Any]) -> None:
    for key, value in update.items():
        existing = base.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            _merge(existing, value)
        else:
            base[key] = copy.deepcopy(value)


def apply_value_overrides(
    values: Mapping[str, Any], overrides: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Deep-merge overrides onto a value mapping.

    Keys containing dots are treated as dotted paths.

    :param values: Base values.
    :type values: Mapping[str, Any]
    :param overrides: Nested or dotted overrides.
    :type overrides: Mapping[str, Any]
    :return: New value mapping with overrides applied.
    :rtype: dict[str, Any]
    """
    updated: Dict[str, Any] = copy.deepcopy(dict(values))
    for key, value in overrides.items():
        nested: Dict[str, Any] = {}
        set_path(nested, key, value)
        _merge(updated, nested)
    return updated


def load_values_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load template values from a YAML file.

    :param path: Values file path.
    :type path: str or Path
    :return: Value mapping (empty for an empty file).
    :rtype: dict[str, Any]
    :raises FileNotFoundError: If the file is missing.
    :raises ValueError: If the file is not a mapping.
    """
    candidate = Path(path)
    if not candidate.is_file():
        raise FileNotFoundError(f"Values file not found: {candidate}")
    loaded = yaml.safe_load(candidate.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ValueError(f"Values file must be a mapping/object: {candidate}")
    return sanitize(loaded)
