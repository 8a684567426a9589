from __future__ import annotations

import json

from behave import given, then, when
from pydantic import BaseModel

from yamlpack import YamlPack, YamlPackConfig, YamlPackError


class NameOnly(BaseModel):
    name: str


def _text(context) -> bytes:
    return str(getattr(context, "text", "") or "").encode("utf-8")


def _capture(context, operation) -> None:
    context.last_error = None
    try:
        operation()
    except YamlPackError as exc:
        context.last_error = exc


@given("a case-insensitive store")
def step_case_insensitive_store(context) -> None:
    context.pack = YamlPack(YamlPackConfig(case_sensitive=False))


@given('I import "{identifier}" with:')
@when('I import "{identifier}" with:')
def step_import(context, identifier: str) -> None:
    data = _text(context)
    _capture(context, lambda: context.pack.import_data(identifier, data))


@given('a file "{name}" containing:')
def step_write_file(context, name: str) -> None:
    path = context.workdir / name
    path.write_bytes(_text(context))


@when('I import the file "{name}"')
def step_import_file(context, name: str) -> None:
    path = context.workdir / name
    _capture(context, lambda: context.pack.import_file(path))


@when('I filter "{identifier}" with patterns {patterns}')
def step_filter(context, identifier: str, patterns: str) -> None:
    parsed = json.loads(patterns)
    _capture(context, lambda: context.pack.apply_filters(identifier, parsed))


@when('I render "{identifier}" with values {values}')
def step_render(context, identifier: str, values: str) -> None:
    parsed = json.loads(values)
    _capture(context, lambda: context.pack.apply_default_template(identifier, parsed))


@when('I strictly render "{identifier}" with values {values}')
def step_render_strict(context, identifier: str, values: str) -> None:
    parsed = json.loads(values)
    _capture(context, lambda: context.pack.apply_default_template_strict(identifier, parsed))


@when('I extract "{path}" from section {index:d}')
def step_sub(context, path: str, index: int) -> None:
    context.last_sub = context.pack.all_sections()[index].sub(path)


@when("I strictly decode section {index:d} into a name-only shape")
def step_decode_strict(context, index: int) -> None:
    section = context.pack.all_sections()[index]
    _capture(context, lambda: setattr(context, "last_decoded", section.unmarshal_strict(NameOnly)))


@when("I decode section {index:d} into a name-only shape")
def step_decode(context, index: int) -> None:
    section = context.pack.all_sections()[index]
    _capture(context, lambda: setattr(context, "last_decoded", section.unmarshal(NameOnly)))


@then("the store has {count:d} sections")
def step_section_count(context, count: int) -> None:
    assert context.last_error is None, context.last_error
    assert len(context.pack.all_sections()) == count


@then('section {index:d} has "{path}" equal to "{expected}"')
def step_section_value(context, index: int, path: str, expected: str) -> None:
    section = context.pack.all_sections()[index]
    assert section.get_string(path) == expected, section.all_settings()


@then('section {index:d} has "{path}" set to {expected}')
def step_section_bool(context, index: int, path: str, expected: str) -> None:
    section = context.pack.all_sections()[index]
    assert section.get_bool(path) is (expected == "true")


@then('every section belongs to "{identifier}"')
def step_section_files(context, identifier: str) -> None:
    assert all(section.file == identifier for section in context.pack.all_sections())


@then('every section belongs to the file "{name}"')
def step_section_workdir_files(context, name: str) -> None:
    expected = str(context.workdir / name)
    assert all(section.file == expected for section in context.pack.all_sections())


@then('the extracted section has "{path}" equal to "{expected}"')
def step_sub_value(context, path: str, expected: str) -> None:
    assert context.last_sub is not None
    assert context.last_sub.get_string(path) == expected


@then("nothing was extracted")
def step_sub_missing(context) -> None:
    assert context.last_sub is None


@then('the decoded name is "{expected}"')
def step_decoded_name(context, expected: str) -> None:
    assert context.last_error is None, context.last_error
    assert context.last_decoded.name == expected


@then('the operation fails with "{error_name}"')
def step_failure(context, error_name: str) -> None:
    assert context.last_error is not None, "expected an error"
    assert type(context.last_error).__name__ == error_name, repr(context.last_error)


@then("the section names are {names}")
def step_list_yamls(context, names: str) -> None:
    assert context.pack.list_yamls() == json.loads(names)


@then('section {index:d} has no value at "{path}"')
def step_section_empty(context, index: int, path: str) -> None:
    section = context.pack.all_sections()[index]
    assert section.get_string(path) == "", section.all_settings()
