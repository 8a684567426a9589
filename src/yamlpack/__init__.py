"""
yamlpack public package interface.
"""

from .errors import (
    DecodeError,
    FileNotImportedError,
    FilterPatternError,
    HandlerExistsError,
    RenderError,
    SectionKeyError,
    SectionNotParsedError,
    SectionParseError,
    SourceReadError,
    YamlPackError,
)
from .filters import compile_filters, filter_sections
from .models import YamlPackConfig
from .pack import YamlPack
from .sanitize import map_from_bytes, sanitize
from .section import YamlSection
from .splitter import extract_documents, split_documents
from .templating import TemplateFunc, default_template, null_template, strict_template
from .values import apply_value_overrides, load_values_file, parse_value_overrides

__all__ = [
    "__version__",
    "DecodeError",
    "FileNotImportedError",
    "FilterPatternError",
    "HandlerExistsError",
    "RenderError",
    "SectionKeyError",
    "SectionNotParsedError",
    "SectionParseError",
    "SourceReadError",
    "TemplateFunc",
    "YamlPack",
    "YamlPackConfig",
    "YamlPackError",
    "YamlSection",
    "apply_value_overrides",
    "compile_filters",
    "default_template",
    "extract_documents",
    "filter_sections",
    "load_values_file",
    "map_from_bytes",
    "null_template",
    "parse_value_overrides",
    "sanitize",
    "split_documents",
    "strict_template",
]

__version__ = "0.1.0"
