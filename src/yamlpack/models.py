"""
Pydantic models for yamlpack.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class YamlPackConfig(BaseModel):
    """
    Configuration for a yamlpack store.

    :ivar case_sensitive: Whether section keys keep their case. When False, keys are
        lower-cased on parse and dotted lookups are lower-cased before matching.
    :vartype case_sensitive: bool
    :ivar strict_templates: Whether the store's default template function fails on
        missing values.
    :vartype strict_templates: bool
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    case_sensitive: bool = True
    strict_templates: bool = False
