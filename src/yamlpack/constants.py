"""
Shared constants for yamlpack.
"""

DOCUMENT_DELIMITER = b"---"
DOCUMENT_PREFIX = b"---\n"
KEY_DELIMITER = "."
METADATA_NAME_KEY = "metadata.name"
DEFAULT_EXPORT_KEY = "data"
TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
