"""
A single YAML document taken from a multi-document stream.
"""

from __future__ import annotations

import collections.abc
import copy
import dataclasses
import logging
import types
from typing import (
    Any,
    Dict,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    is_typeddict,
)

import yaml
from pydantic import BaseModel, TypeAdapter, ValidationError

from .constants import DEFAULT_EXPORT_KEY
from .errors import (
    DecodeError,
    RenderError,
    SectionKeyError,
    SectionNotParsedError,
    SectionParseError,
)
from .paths import get_path, has_path, sub_mapping, to_bool, to_string, to_string_list
from .sanitize import lower_keys, map_from_bytes, sanitize
from .templating import TemplateFunc, default_template

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, collections.abc.Sequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping)


def _dump_yaml(value: Any) -> str:
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False)


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def _declared_fields(annotation: Any) -> Optional[Dict[str, Any]]:
    """
    Map the keys a structured type accepts to their annotations.

    Returns None for types without a fixed key set, and for types that accept
    extra keys.
    """
    if not isinstance(annotation, type):
        return None
    if issubclass(annotation, BaseModel):
        if annotation.model_config.get("extra") == "allow":
            return None
        accepted: Dict[str, Any] = {}
        for name, field in annotation.model_fields.items():
            accepted[name] = field.annotation
            if field.alias:
                accepted[field.alias] = field.annotation
            if isinstance(field.validation_alias, str):
                accepted[field.validation_alias] = field.annotation
        return accepted
    if dataclasses.is_dataclass(annotation):
        config = getattr(annotation, "__pydantic_config__", None) or {}
        if config.get("extra") == "allow":
            return None
        hints = _type_hints(annotation)
        return {
            field.name: hints.get(field.name, field.type)
            for field in dataclasses.fields(annotation)
            if field.init
        }
    if is_typeddict(annotation):
        return _type_hints(annotation)
    return None


def _join(prefix: str, key: Any) -> str:
    return f"{prefix}.{key}" if prefix else str(key)


def _conform_fields(
    accepted: Dict[str, Any], data: Any, prefix: str, unknown: List[str]
) -> Any:
    if not isinstance(data, dict):
        return data
    output: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = _join(prefix, key)
        if key not in accepted:
            unknown.append(dotted)
            continue
        output[key] = _conform_value(accepted[key], value, dotted, unknown)
    return output


def _conform_value(annotation: Any, value: Any, dotted: str, unknown: List[str]) -> Any:
    accepted = _declared_fields(annotation)
    if accepted is not None:
        return _conform_fields(accepted, value, dotted, unknown)
    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin in _SEQUENCE_ORIGINS and isinstance(value, list) and args:
        return [
            _conform_value(args[0], item, _join(dotted, position), unknown)
            for position, item in enumerate(value)
        ]
    if origin in _MAPPING_ORIGINS and isinstance(value, dict) and len(args) == 2:
        return {
            key: _conform_value(args[1], item, _join(dotted, key), unknown)
            for key, item in value.items()
        }
    if origin is Union or origin is types.UnionType:
        structured = [arg for arg in args if _declared_fields(arg) is not None]
        if len(structured) == 1:
            return _conform_value(structured[0], value, dotted, unknown)
    return value


class YamlSection:
    """
    One YAML document with its original bytes, rendered bytes and parsed view.

    Rendering always starts from the original bytes, so repeated renders with
    different values are independent of each other.

    :param original_data: Bytes as sliced from the source.
    :type original_data: bytes
    :param file: Identifier of the originating import.
    :type file: str or None
    :param template_func: Render function bound to this section.
    :type template_func: TemplateFunc or None
    :param case_sensitive: Whether keys keep their case in the parsed view.
    :type case_sensitive: bool
    """

    def __init__(
        self,
        original_data: bytes,
        *,
        file: Optional[str] = None,
        template_func: Optional[TemplateFunc] = None,
        case_sensitive: bool = True,
    ) -> None:
        self._original_data = bytes(original_data)
        self.data = self._original_data
        self.file = file
        self.template_func: TemplateFunc = template_func or default_template
        self.case_sensitive = case_sensitive
        self._view: Optional[Dict[str, Any]] = None

    @property
    def original_data(self) -> bytes:
        """
        Bytes as sliced from the source, before any rendering.

        :return: Original bytes.
        :rtype: bytes
        """
        return self._original_data

    @property
    def is_parsed(self) -> bool:
        """
        Whether the current bytes have a parsed view.

        :return: True after a successful parse of the current bytes.
        :rtype: bool
        """
        return self._view is not None

    @property
    def view(self) -> Dict[str, Any]:
        """
        Parsed view of the current bytes.

        :return: String-keyed nested mapping.
        :rtype: dict[str, Any]
        :raises SectionNotParsedError: If the current bytes have not been parsed.
        """
        if self._view is None:
            raise SectionNotParsedError(file=self.file)
        return self._view

    def parse(self) -> None:
        """
        Rebuild the parsed view from the current bytes.

        :raises SectionParseError: If the bytes are not a valid YAML mapping.
        """
        self._view = None
        try:
            view = map_from_bytes(self.data)
        except SectionParseError as exc:
            if self.file is None:
                raise
            raise exc.with_location(file=self.file) from exc
        self._view = view if self.case_sensitive else lower_keys(view)

    def _key(self, dotted_key: str) -> str:
        return dotted_key if self.case_sensitive else dotted_key.lower()

    def get(self, dotted_key: str) -> Optional[Any]:
        """
        Return the raw value at a dotted key.

        :param dotted_key: Dotted key.
        :type dotted_key: str
        :return: Value, or None when absent.
        :rtype: Any or None
        """
        return get_path(self.view, self._key(dotted_key))

    def is_set(self, dotted_key: str) -> bool:
        """
        Return whether a dotted key is present.

        :param dotted_key: Dotted key.
        :type dotted_key: str
        :return: True when present.
        :rtype: bool
        """
        return has_path(self.view, self._key(dotted_key))

    def get_string(self, dotted_key: str) -> str:
        """
        Return the value at a dotted key as a string.

        :param dotted_key: Dotted key.
        :type dotted_key: str
        :return: String value, or an empty string when absent.
        :rtype: str
        """
        return to_string(self.get(dotted_key))

    def get_string_slice(self, dotted_key: str) -> List[str]:
        """
        Return the value at a dotted key as a list of strings.

        :param dotted_key: Dotted key.
        :type dotted_key: str
        :return: String list, or an empty list when absent.
        :rtype: list[str]
        """
        return to_string_list(self.get(dotted_key))

    def get_bool(self, dotted_key: str) -> bool:
        """
        Return the value at a dotted key as a boolean.

        :param dotted_key: Dotted key.
        :type dotted_key: str
        :return: Boolean value, or False when absent.
        :rtype: bool
        """
        return to_bool(self.get(dotted_key))

    def sub(self, dotted_key: str) -> Optional["YamlSection"]:
        """
        Extract the mapping at a dotted key as an independent section.

        :param dotted_key: Dotted key.
        :type dotted_key: str
        :return: New section, or None when the key is absent or not a mapping.
        :rtype: YamlSection or None
        """
        subtree = sub_mapping(self.view, self._key(dotted_key))
        if subtree is None:
            return None
        section = YamlSection(
            _dump_yaml(subtree).encode("utf-8"),
            file=self.file,
            template_func=self.template_func,
            case_sensitive=self.case_sensitive,
        )
        section.parse()
        return section

    def all_settings(self) -> Dict[str, Any]:
        """
        Return a copy of the full parsed view.

        :return: String-keyed nested mapping.
        :rtype: dict[str, Any]
        """
        return copy.deepcopy(self.view)

    def to_yaml(self, dotted_key: str = DEFAULT_EXPORT_KEY) -> str:
        """
        Serialize the value at a dotted key as YAML text.

        :param dotted_key: Dotted key, ``data`` by default.
        :type dotted_key: str
        :return: YAML text.
        :rtype: str
        :raises SectionKeyError: If the key is absent.
        """
        if not self.is_set(dotted_key):
            raise SectionKeyError(key=dotted_key, file=self.file)
        return _dump_yaml(self.get(dotted_key))

    def unmarshal(self, target: Type[T]) -> T:
        """
        Decode the parsed view into a target type, ignoring unknown keys.

        :param target: Pydantic model class, ``dict``, or any type pydantic can validate.
        :type target: type
        :return: Decoded value.
        :rtype: T
        :raises DecodeError: If the data does not fit the target type.
        """
        return self._decode(target, strict=False)

    def unmarshal_strict(self, target: Type[T]) -> T:
        """
        Decode the parsed view into a target type, rejecting unknown keys.

        :param target: Pydantic model class, ``dict``, or any type pydantic can validate.
        :type target: type
        :return: Decoded value.
        :rtype: T
        :raises DecodeError: If the data does not fit the target type or has unknown keys.
        """
        return self._decode(target, strict=True)

    def _decode(self, target: Type[T], *, strict: bool) -> T:
        target_name = getattr(target, "__name__", repr(target))
        data = sanitize(self.view)
        try:
            if target is dict:
                return data  # type: ignore[return-value]
            unknown: List[str] = []
            conformed = _conform_value(target, data, "", unknown)
            if strict and unknown:
                raise DecodeError(
                    target=target_name,
                    reason=f"unknown keys {', '.join(unknown)}",
                    unknown_keys=unknown,
                )
            if isinstance(target, type) and issubclass(target, BaseModel):
                return target.model_validate(conformed)  # type: ignore[return-value]
            return TypeAdapter(target).validate_python(conformed)
        except DecodeError:
            raise
        except ValidationError as exc:
            raise DecodeError(target=target_name, reason=str(exc)) from exc
        except Exception as exc:
            logger.debug("Decoding into %s failed", target_name, exc_info=True)
            raise DecodeError(target=target_name, reason=f"{type(exc).__name__}: {exc}") from exc

    def render(self, values: Any = None) -> None:
        """
        Render the section with its bound template function.

        :param values: Value object exposed to the template.
        :type values: Any
        :raises RenderError: If the template fails; the section is unchanged.
        :raises SectionParseError: If the output is not valid YAML; the rendered bytes
            are kept and the section is left unparsed.
        """
        self.render_with_template_func(self.template_func, values)

    def render_with_template_func(self, template_func: TemplateFunc, values: Any = None) -> None:
        """
        Render the original bytes with a template function and re-parse the output.

        :param template_func: Render function.
        :type template_func: TemplateFunc
        :param values: Value object exposed to the template.
        :type values: Any
        :raises RenderError: If the template fails; the section is unchanged.
        :raises SectionParseError: If the output is not valid YAML; the rendered bytes
            are kept and the section is left unparsed.
        """
        try:
            rendered = template_func(self._original_data, values)
        except RenderError as exc:
            if self.file is None:
                raise
            raise exc.with_location(file=self.file) from exc
        except Exception as exc:
            raise RenderError(
                f"{type(exc).__name__}: {exc}", data=self._original_data, file=self.file
            ) from exc
        if isinstance(rendered, str):
            rendered = rendered.encode("utf-8")
        self.data = bytes(rendered)
        self.parse()

    def __str__(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"YamlSection(file={self.file!r}, size={len(self.data)}, parsed={self.is_parsed})"
