"""
Error types for yamlpack.
"""

from __future__ import annotations

from typing import Optional, Sequence


def _preview(data: Optional[bytes], limit: int = 200) -> str:
    if not data:
        return ""
    text = data.decode("utf-8", errors="replace")
    if len(text) > limit:
        text = text[:limit] + "..."
    return text


class YamlPackError(RuntimeError):
    """
    Base class for every error raised by yamlpack.
    """


class SourceReadError(YamlPackError):
    """
    A source could not be opened or fully read.

    :param source: Identifier of the source being read.
    :type source: str
    :param reason: Human-readable failure reason.
    :type reason: str
    """

    def __init__(self, *, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Could not read data from {source!r}: {reason}")


class FileNotImportedError(YamlPackError, KeyError):
    """
    An operation referenced a file identifier that was never imported.

    :param file: File identifier.
    :type file: str
    :param operation: Operation that was attempted.
    :type operation: str
    """

    def __init__(self, *, file: str, operation: str) -> None:
        self.file = file
        self.operation = operation
        super().__init__(f"{operation} failed, file has not been imported: {file!r}")

    def __str__(self) -> str:
        return self.args[0]


class HandlerExistsError(YamlPackError):
    """
    A handler with the same name is already registered.

    :param name: Handler name.
    :type name: str
    """

    def __init__(self, *, name: str) -> None:
        self.name = name
        super().__init__(f"Handler {name!r} already exists")


class FilterPatternError(YamlPackError, ValueError):
    """
    A filter pattern is not a valid regular expression.

    :param pattern: Offending pattern.
    :type pattern: str
    :param reason: Compiler error message.
    :type reason: str
    """

    def __init__(self, *, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid filter pattern {pattern!r}: {reason}")


class RenderError(YamlPackError):
    """
    A template function failed while rendering a section.

    :param message: Failure description.
    :type message: str
    :param data: Source bytes that were being rendered.
    :type data: bytes
    :param partial: Partial render output, when the engine produced any.
    :type partial: bytes or None
    :param file: File identifier, once known.
    :type file: str or None
    :param index: Section index within the file, once known.
    :type index: int or None
    """

    def __init__(
        self,
        message: str,
        *,
        data: bytes = b"",
        partial: Optional[bytes] = None,
        file: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.data = data
        self.partial = partial
        self.file = file
        self.index = index
        super().__init__(self._format())

    def _format(self) -> str:
        location = ""
        if self.file is not None:
            location = f" in file {self.file!r}"
            if self.index is not None:
                location += f" section {self.index}"
        return f"Failed to render template{location}: {self.message}\n---\n{_preview(self.data)}"

    def with_location(self, *, file: str, index: Optional[int] = None) -> "RenderError":
        """
        Return a copy of this error annotated with its file and section index.

        :param file: File identifier.
        :type file: str
        :param index: Section index.
        :type index: int or None
        :return: Annotated error.
        :rtype: RenderError
        """
        return RenderError(
            self.message, data=self.data, partial=self.partial, file=file, index=index
        )


class SectionParseError(YamlPackError):
    """
    Section bytes are not a valid YAML mapping.

    :param message: Parser failure description.
    :type message: str
    :param data: Offending bytes.
    :type data: bytes
    :param file: File identifier, once known.
    :type file: str or None
    :param index: Section index within the file, once known.
    :type index: int or None
    """

    def __init__(
        self,
        message: str,
        *,
        data: bytes = b"",
        file: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.data = data
        self.file = file
        self.index = index
        super().__init__(self._format())

    def _format(self) -> str:
        location = ""
        if self.file is not None:
            location = f" in file {self.file!r}"
            if self.index is not None:
                location += f" section {self.index}"
        return f"Failed to parse yaml section{location}: {self.message}\n---\n{_preview(self.data)}"

    def with_location(self, *, file: str, index: Optional[int] = None) -> "SectionParseError":
        """
        Return a copy of this error annotated with its file and section index.

        :param file: File identifier.
        :type file: str
        :param index: Section index.
        :type index: int or None
        :return: Annotated error.
        :rtype: SectionParseError
        """
        return SectionParseError(self.message, data=self.data, file=file, index=index)


class DecodeError(YamlPackError):
    """
    Section data could not be decoded into the requested shape.

    :param target: Name of the destination type.
    :type target: str
    :param reason: Failure description.
    :type reason: str
    :param unknown_keys: Dotted keys rejected by a strict decode.
    :type unknown_keys: Sequence[str]
    """

    def __init__(self, *, target: str, reason: str, unknown_keys: Sequence[str] = ()) -> None:
        self.target = target
        self.reason = reason
        self.unknown_keys = list(unknown_keys)
        super().__init__(f"yaml unmarshal into {target} failed: {reason}")


class SectionKeyError(YamlPackError, KeyError):
    """
    A required key is missing from a section.

    :param key: Dotted key that was requested.
    :type key: str
    :param file: File identifier of the section.
    :type file: str or None
    """

    def __init__(self, *, key: str, file: Optional[str] = None) -> None:
        self.key = key
        self.file = file
        super().__init__(f"Key {key!r} not found in section from file {file!r}")

    def __str__(self) -> str:
        return self.args[0]


class SectionNotParsedError(YamlPackError):
    """
    Section data was read before its current bytes were parsed.

    :param file: File identifier of the section.
    :type file: str or None
    """

    def __init__(self, *, file: Optional[str] = None) -> None:
        self.file = file
        super().__init__(f"Section from file {file!r} has no parsed view for its current bytes")
