"""
Store of multi-document YAML files split into sections.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import IO, Any, Callable, Dict, Iterable, List, Optional, Union

from .constants import METADATA_NAME_KEY
from .errors import (
    FileNotImportedError,
    HandlerExistsError,
    RenderError,
    SectionKeyError,
    SectionParseError,
    SourceReadError,
)
from .filters import filter_sections
from .models import YamlPackConfig
from .section import YamlSection
from .splitter import split_documents
from .templating import TemplateFunc, default_template, null_template, strict_template

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, IO[bytes], IO[str]]
Handler = Callable[[str], Any]


def _read_source(identifier: str, source: Source) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    read = getattr(source, "read", None)
    if read is None:
        raise SourceReadError(
            source=identifier,
            reason=f"expected bytes or a readable file object, got {type(source).__name__}",
        )
    try:
        data = read()
    except (OSError, ValueError) as exc:
        raise SourceReadError(source=identifier, reason=str(exc)) from exc
    if isinstance(data, str):
        try:
            return data.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise SourceReadError(source=identifier, reason=str(exc)) from exc
    return bytes(data)


class YamlPack:
    """
    Ordered YAML sections per imported file, plus a registry of named handlers.

    A single re-entrant lock guards the file and handler maps; every operation that
    changes them holds it for the whole call.

    :param config: Store configuration.
    :type config: YamlPackConfig or None
    :param default_template_func: Render function bound to new sections. Defaults to the
        Jinja2 renderer, strict when ``config.strict_templates`` is set.
    :type default_template_func: TemplateFunc or None
    """

    def __init__(
        self,
        config: Optional[YamlPackConfig] = None,
        *,
        default_template_func: Optional[TemplateFunc] = None,
    ) -> None:
        self.config = config or YamlPackConfig()
        if default_template_func is None:
            default_template_func = (
                strict_template if self.config.strict_templates else default_template
            )
        self.default_template_func: TemplateFunc = default_template_func
        self.files: Dict[str, List[YamlSection]] = {}
        self.handlers: Dict[str, Handler] = {}
        self._lock = threading.RLock()

    def new_section(self, data: bytes, *, file: str) -> YamlSection:
        """
        Create a section bound to this store's template function and key case.

        :param data: Original section bytes.
        :type data: bytes
        :param file: File identifier.
        :type file: str
        :return: New unparsed section.
        :rtype: YamlSection
        """
        return YamlSection(
            data,
            file=file,
            template_func=self.default_template_func,
            case_sensitive=self.config.case_sensitive,
        )

    def import_data(self, identifier: str, source: Source) -> None:
        """
        Import a multi-document source under an identifier.

        The source is split into sections, each section is rendered without values,
        then every section of every imported file is parsed. A previous import under
        the same identifier is replaced.

        :param identifier: File identifier (path, URI or any label).
        :type identifier: str
        :param source: Raw bytes or a readable file object.
        :type source: bytes or IO
        :raises SourceReadError: If the source cannot be read or is not bytes or a
            readable object.
        :raises RenderError: If a section fails to render without values.
        :raises SectionParseError: If any section is not a valid YAML mapping.
        """
        data = _read_source(identifier, source)
        sections = [self.new_section(span, file=identifier) for span in split_documents(data)]
        with self._lock:
            previous = self.files.get(identifier)
            self.files[identifier] = sections
            try:
                self._apply_null_template(identifier)
                self._parse_all()
            except (RenderError, SectionParseError):
                if previous is None:
                    del self.files[identifier]
                else:
                    self.files[identifier] = previous
                raise
        logger.debug("Imported %d sections from %s", len(sections), identifier)

    def import_file(self, path: Union[str, Path]) -> None:
        """
        Import a multi-document YAML file using its path as the identifier.

        :param path: File path.
        :type path: str or Path
        :raises SourceReadError: If the file cannot be opened or read.
        :raises RenderError: If a section fails to render without values.
        :raises SectionParseError: If any section is not a valid YAML mapping.
        """
        identifier = str(path)
        try:
            handle = open(path, "rb")
        except OSError as exc:
            raise SourceReadError(source=identifier, reason=str(exc)) from exc
        with handle:
            self.import_data(identifier, handle)

    def import_with_template_func_and_filters(
        self,
        identifier: str,
        source: Source,
        template_func: TemplateFunc,
        patterns: Iterable[str],
    ) -> None:
        """
        Import a source, render it with a template function, then filter it.

        :param identifier: File identifier.
        :type identifier: str
        :param source: Raw bytes or a readable file object.
        :type source: bytes or IO
        :param template_func: Render function applied without values.
        :type template_func: TemplateFunc
        :param patterns: Filter patterns.
        :type patterns: Iterable[str]
        """
        with self._lock:
            self.import_data(identifier, source)
            self.apply_template(identifier, template_func, None)
            self.apply_filters(identifier, patterns)
            self.parse(identifier)

    def _sections(self, identifier: str, operation: str) -> List[YamlSection]:
        sections = self.files.get(identifier)
        if sections is None:
            raise FileNotImportedError(file=identifier, operation=operation)
        return sections

    def _apply_null_template(self, identifier: str) -> None:
        for index, section in enumerate(self._sections(identifier, "Null template")):
            try:
                section.render_with_template_func(null_template, None)
            except (RenderError, SectionParseError) as exc:
                raise exc.with_location(file=identifier, index=index) from exc
            section.template_func = self.default_template_func

    def _parse_all(self) -> None:
        for identifier, sections in self.files.items():
            for index, section in enumerate(sections):
                try:
                    section.parse()
                except SectionParseError as exc:
                    raise exc.with_location(file=identifier, index=index) from exc

    def parse(self, identifier: str) -> None:
        """
        Re-parse every section of every imported file.

        :param identifier: File identifier that must have been imported.
        :type identifier: str
        :raises FileNotImportedError: If the identifier is unknown.
        :raises SectionParseError: If any section is not a valid YAML mapping.
        """
        with self._lock:
            self._sections(identifier, "Parse")
            self._parse_all()

    def apply_filters(self, identifier: str, patterns: Iterable[str]) -> None:
        """
        Keep only the sections of a file whose original text matches a pattern.

        :param identifier: File identifier.
        :type identifier: str
        :param patterns: Regular expressions matched line by line.
        :type patterns: Iterable[str]
        :raises FileNotImportedError: If the identifier is unknown.
        :raises FilterPatternError: If a pattern does not compile.
        """
        with self._lock:
            sections = self._sections(identifier, "Apply filters")
            self.files[identifier] = filter_sections(sections, patterns)

    def _render_all(
        self,
        identifier: str,
        template_func: Optional[TemplateFunc],
        values: Any,
        operation: str,
    ) -> None:
        with self._lock:
            for index, section in enumerate(self._sections(identifier, operation)):
                try:
                    if template_func is None:
                        section.render(values)
                    else:
                        section.render_with_template_func(template_func, values)
                except (RenderError, SectionParseError) as exc:
                    raise exc.with_location(file=identifier, index=index) from exc
            logger.debug("%s rendered file %s", operation, identifier)

    def apply_template(self, identifier: str, template_func: TemplateFunc, values: Any) -> None:
        """
        Render every section of a file with a template function.

        :param identifier: File identifier.
        :type identifier: str
        :param template_func: Render function.
        :type template_func: TemplateFunc
        :param values: Value object exposed to the template.
        :type values: Any
        :raises FileNotImportedError: If the identifier is unknown.
        :raises RenderError: On the first section that fails to render.
        :raises SectionParseError: On the first rendered section that fails to parse.
        """
        self._render_all(identifier, template_func, values, "Apply template")

    def apply_default_template(self, identifier: str, values: Any) -> None:
        """
        Render every section of a file with its bound template function.

        Missing values render empty unless the store is configured strict.

        :param identifier: File identifier.
        :type identifier: str
        :param values: Value object exposed to the template.
        :type values: Any
        :raises FileNotImportedError: If the identifier is unknown.
        :raises RenderError: On the first section that fails to render.
        :raises SectionParseError: On the first rendered section that fails to parse.
        """
        self._render_all(identifier, None, values, "Apply default template")

    def apply_default_template_strict(self, identifier: str, values: Any) -> None:
        """
        Render every section of a file, failing on any missing value.

        :param identifier: File identifier.
        :type identifier: str
        :param values: Value object exposed to the template.
        :type values: Any
        :raises FileNotImportedError: If the identifier is unknown.
        :raises RenderError: On the first section that fails to render.
        :raises SectionParseError: On the first rendered section that fails to parse.
        """
        self._render_all(identifier, strict_template, values, "Apply default template strict")

    def all_sections(self) -> List[YamlSection]:
        """
        Return every section of every file.

        :return: Snapshot list; files in import order, sections in document order.
        :rtype: list[YamlSection]
        """
        with self._lock:
            return [section for sections in self.files.values() for section in sections]

    def list_yamls(self) -> List[str]:
        """
        Return the ``metadata.name`` of every section.

        :return: Section names.
        :rtype: list[str]
        :raises SectionKeyError: If a section has no ``metadata.name``.
        """
        names: List[str] = []
        for section in self.all_sections():
            if not section.is_set(METADATA_NAME_KEY):
                raise SectionKeyError(key=METADATA_NAME_KEY, file=section.file)
            names.append(section.get_string(METADATA_NAME_KEY))
        return names

    def register_handler(self, name: str, handler: Handler) -> None:
        """
        Register a named handler.

        :param name: Handler name.
        :type name: str
        :param handler: Callable taking a string.
        :type handler: Callable[[str], Any]
        :raises HandlerExistsError: If the name is already registered.
        """
        with self._lock:
            if name in self.handlers:
                raise HandlerExistsError(name=name)
            self.handlers[name] = handler

    def deregister_handler(self, name: str) -> None:
        """
        Remove a named handler if it is registered.

        :param name: Handler name.
        :type name: str
        """
        with self._lock:
            self.handlers.pop(name, None)
