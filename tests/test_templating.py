"""
Tests for the default Jinja2 template function and its helpers.
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from yamlpack.errors import RenderError
from yamlpack.templating import default_template, null_template, strict_template


class ImageValues(BaseModel):
    repository: str
    tag: str = "latest"


def test_default_template_substitutes_values():
    """
    Mapping items are available as template variables.
    """
    assert default_template(b"name: {{ name }}\n", {"name": "web"}) == b"name: web\n"


def test_default_template_renders_missing_values_empty():
    """
    Missing names and attribute chains render as empty strings.
    """
    rendered = default_template(b"name: {{ name }}\nimage: {{ image.repo.tag }}\n", {})
    assert rendered == b"name: \nimage: \n"


def test_strict_template_fails_on_missing_value():
    """
    Strict rendering treats missing values as errors.
    """
    with pytest.raises(RenderError) as excinfo:
        strict_template(b"name: {{ name }}\n", {})
    assert excinfo.value.data == b"name: {{ name }}\n"


def test_syntax_errors_fail_in_both_modes():
    """
    Template syntax errors fail regardless of strictness.
    """
    with pytest.raises(RenderError, match="syntax"):
        default_template(b"name: {{ name \n", {"name": "web"})
    with pytest.raises(RenderError, match="syntax"):
        strict_template(b"name: {{ name \n", {"name": "web"})


def test_render_error_carries_partial_output():
    """
    Output produced before the failure is attached to the error.
    """
    with pytest.raises(RenderError) as excinfo:
        strict_template(b"a: 1\nb: {{ missing }}\n", {})
    assert excinfo.value.partial is not None
    assert excinfo.value.partial.startswith(b"a: 1")


def test_whole_value_object_is_exposed_as_values():
    """
    Non-mapping values are reachable through the ``values`` variable.
    """
    assert default_template(b"count: {{ values }}", 5) == b"count: 5"
    assert default_template(b"name: {{ values.name }}", {"name": "web"}) == b"name: web"


def test_pydantic_values_are_dumped_into_context():
    """
    Pydantic models expose their fields as template variables.
    """
    values = ImageValues(repository="registry/app")
    rendered = default_template(b"image: {{ repository }}:{{ tag }}\n", values)
    assert rendered == b"image: registry/app:latest\n"


def test_helper_filters():
    """
    The helper library serializes, encodes and quotes values.
    """
    template = (
        b"encoded: {{ secret | b64enc }}\n"
        b"decoded: {{ 'YWJj' | b64dec }}\n"
        b"quoted: {{ name | quote }}\n"
        b"single: {{ name | squote }}\n"
        b"short: {{ name | trunc(2) }}\n"
        b"config:{{ config | to_yaml | nindent(2) }}\n"
        b"json: {{ config | to_json }}\n"
    )
    rendered = default_template(
        template, {"secret": "abc", "name": "web", "config": {"a": 1, "b": [1, 2]}}
    )
    assert rendered == (
        b"encoded: YWJj\n"
        b"decoded: abc\n"
        b'quoted: "web"\n'
        b"single: 'web'\n"
        b"short: we\n"
        b"config:\n  a: 1\n  b:\n  - 1\n  - 2\n"
        b'json: {"a": 1, "b": [1, 2]}\n'
    )


def test_required_filter_fails_with_message():
    """
    The required helper fails the render with its message when a value is missing.
    """
    with pytest.raises(RenderError, match="name is required"):
        default_template(b"name: {{ name | required('name is required') }}\n", {})
    rendered = default_template(b"name: {{ name | required('name is required') }}\n", {"name": "x"})
    assert rendered == b"name: x\n"


def test_env_global_reads_environment(monkeypatch):
    """
    The env helper reads process environment variables with a default.
    """
    monkeypatch.setenv("YAMLPACK_TEST_REGION", "eu-west-1")
    rendered = default_template(
        b"region: {{ env('YAMLPACK_TEST_REGION') }}\nzone: {{ env('YAMLPACK_MISSING', 'a') }}\n"
    )
    assert rendered == b"region: eu-west-1\nzone: a\n"


def test_null_template_ignores_values():
    """
    The null render never sees values.
    """
    assert null_template(b"name: {{ name }}\n", {"name": "web"}) == b"name: \n"


def test_invalid_utf8_is_a_render_error():
    """
    Templates must be UTF-8.
    """
    with pytest.raises(RenderError, match="UTF-8"):
        default_template(b"name: \xff\n")


def test_engine_errors_are_render_errors_with_partial_output():
    """
    Exceptions raised while evaluating expressions keep the output produced so far.
    """
    with pytest.raises(RenderError) as excinfo:
        default_template(b"a: 1\nb: {{ 1 / 0 }}\n", None)
    assert "ZeroDivisionError" in str(excinfo.value)
    assert excinfo.value.partial.startswith(b"a: 1")
    with pytest.raises(RenderError, match="Error"):
        default_template(b"decoded: {{ 'not base64!' | b64dec }}\n")


def test_only_double_braces_start_template_syntax():
    """
    Single-brace sequences pass through; statements and comments use double braces.
    """
    plain = b"color: '{#fff'\nformat: '{%d}'\nname: {{ name }}\n"
    assert default_template(plain, {"name": "web"}) == b"color: '{#fff'\nformat: '{%d}'\nname: web\n"
    template = b"{{# ports #}}{{% for port in ports %}}- {{ port }}\n{{% endfor %}}"
    assert default_template(template, {"ports": [80, 443]}) == b"- 80\n- 443\n"
