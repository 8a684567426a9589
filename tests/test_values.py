"""
Tests for template value loading, overrides and dotted-path helpers.
"""

from __future__ import annotations

import pytest

from yamlpack.paths import get_path, set_path, sub_mapping, to_bool, to_string
from yamlpack.values import (
    apply_value_overrides,
    load_values_file,
    parse_override_value,
    parse_value_overrides,
)


def test_parse_override_value_types():
    """
    Override strings are parsed into scalars, lists and objects.
    """
    assert parse_override_value("true") is True
    assert parse_override_value("FALSE") is False
    assert parse_override_value("null") is None
    assert parse_override_value("42") == 42
    assert parse_override_value("-3") == -3
    assert parse_override_value("1.5") == 1.5
    assert parse_override_value("[80, 443]") == [80, 443]
    assert parse_override_value('{"a": 1}') == {"a": 1}
    assert parse_override_value("[not json") == "[not json"
    assert parse_override_value("  ") == ""
    assert parse_override_value("nginx") == "nginx"


def test_parse_value_overrides_builds_nested_values():
    """
    Dotted keys build nested mappings.
    """
    values = parse_value_overrides(["image.repository=nginx", "image.tag=1", "debug=true"])
    assert values == {"image": {"repository": "nginx", "tag": 1}, "debug": True}
    assert parse_value_overrides(None) == {}


def test_parse_value_overrides_rejects_malformed_pairs():
    """
    Pairs must be key=value with a non-empty key.
    """
    with pytest.raises(ValueError):
        parse_value_overrides(["novalue"])
    with pytest.raises(ValueError):
        parse_value_overrides([" =1"])


def test_apply_value_overrides_deep_merges_without_mutating():
    """
    Overrides merge into a copy of the base values.
    """
    base = {"image": {"repository": "nginx", "tag": "1.0"}, "replicas": 1}
    updated = apply_value_overrides(base, {"image.tag": "2.0", "extra": {"a": 1}})
    assert updated == {
        "image": {"repository": "nginx", "tag": "2.0"},
        "replicas": 1,
        "extra": {"a": 1},
    }
    assert base["image"]["tag"] == "1.0"


def test_load_values_file(tmp_path):
    """
    Values files must exist and contain a mapping.
    """
    values_path = tmp_path / "values.yaml"
    values_path.write_text("name: web\nports: [80]\n", encoding="utf-8")
    assert load_values_file(values_path) == {"name": "web", "ports": [80]}
    empty_path = tmp_path / "empty.yaml"
    empty_path.write_text("", encoding="utf-8")
    assert load_values_file(empty_path) == {}
    list_path = tmp_path / "list.yaml"
    list_path.write_text("- a\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_values_file(list_path)
    with pytest.raises(FileNotFoundError):
        load_values_file(tmp_path / "missing.yaml")


def test_dotted_path_helpers():
    """
    Dotted paths read, write and extract nested mappings.
    """
    data = {}
    set_path(data, "a.b.c", 1)
    set_path(data, "a.d", 2)
    assert data == {"a": {"b": {"c": 1}, "d": 2}}
    assert get_path(data, "a.b.c") == 1
    assert get_path(data, "a.x.c") is None
    assert sub_mapping(data, "a.b") == {"c": 1}
    assert sub_mapping(data, "a.d") is None
    with pytest.raises(ValueError):
        set_path(data, "..", 1)


def test_scalar_coercions():
    """
    Coercions mirror permissive configuration lookups.
    """
    assert to_string(None) == ""
    assert to_string(False) == "false"
    assert to_string(3) == "3"
    assert to_string({"a": 1}) == ""
    assert to_bool("t") is True
    assert to_bool("0") is False
    assert to_bool(2.5) is True
    assert to_bool(None) is False
