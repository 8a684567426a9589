"""
Tests for line-oriented section filtering.
"""

from __future__ import annotations

import pytest

from yamlpack.errors import FilterPatternError
from yamlpack.filters import compile_filters, filter_sections
from yamlpack.section import YamlSection


def _sections(*documents: bytes):
    return [YamlSection(document, file="bundle") for document in documents]


def test_filter_keeps_sections_matching_any_pattern():
    """
    Patterns are combined with OR and order is preserved.
    """
    sections = _sections(b"kind: Service\n", b"kind: Deployment\n", b"kind: ConfigMap\n")
    kept = filter_sections(sections, ["^kind: Service$", "ConfigMap"])
    assert kept == [sections[0], sections[2]]


def test_filter_matches_line_by_line():
    """
    A pattern spanning a line break never matches.
    """
    sections = _sections(b"a: 1\nb: 2\n")
    assert filter_sections(sections, ["a: 1\nb"]) == []
    assert filter_sections(sections, ["^b: 2$"]) == sections


def test_filter_without_patterns_drops_everything():
    """
    With no patterns, no section can match.
    """
    assert filter_sections(_sections(b"a: 1\n"), []) == []


def test_filter_uses_original_text_not_rendered_text():
    """
    Filters look at the text as it was imported.
    """
    section = YamlSection(b"name: {{ name }}\n")
    section.render({"name": "web"})
    assert section.get_string("name") == "web"
    assert filter_sections([section], ["web"]) == []
    assert filter_sections([section], [r"name: \{\{ name \}\}"]) == [section]


def test_filter_result_is_subsequence():
    """
    Every kept section matches and every dropped section does not.
    """
    sections = _sections(b"tier: web\n", b"tier: db\n", b"", b"tier: web-cache\n")
    kept = filter_sections(sections, ["web"])
    assert len(kept) <= len(sections)
    assert kept == [sections[0], sections[3]]
    dropped = [section for section in sections if section not in kept]
    assert all(b"web" not in section.original_data for section in dropped)


def test_invalid_pattern_is_reported_before_filtering():
    """
    A pattern that does not compile raises a configuration error.
    """
    with pytest.raises(FilterPatternError) as excinfo:
        filter_sections(_sections(b"a: 1\n"), ["a", "("])
    assert excinfo.value.pattern == "("
    assert isinstance(excinfo.value, ValueError)


def test_compile_filters_preserves_order():
    """
    Compiled patterns come back in input order.
    """
    compiled = compile_filters(["b", "a"])
    assert [pattern.pattern for pattern in compiled] == ["b", "a"]
