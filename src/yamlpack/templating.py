"""
Template rendering for YAML sections.

Sections are rendered with Jinja2 before they are parsed. The environment carries a
small helper library for the things manifests usually need (serialization, encoding,
quoting, indentation, required values) on top of the Jinja2 built-in filters.
"""

from __future__ import annotations

import base64
import datetime
import json
import logging
import os
import uuid
from functools import lru_cache
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml
from jinja2 import ChainableUndefined, Environment, StrictUndefined, Undefined
from jinja2.exceptions import TemplateError, TemplateRuntimeError, TemplateSyntaxError
from pydantic import BaseModel

from .errors import RenderError

logger = logging.getLogger(__name__)

TemplateFunc = Callable[[bytes, Any], bytes]


def _to_yaml(value: Any) -> str:
    if isinstance(value, BaseModel):
        value = value.model_dump()
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False).rstrip("\n")


def _to_json(value: Any) -> str:
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value)


def _b64enc(value: Any) -> str:
    raw = value if isinstance(value, bytes) else str(value).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _b64dec(value: Any) -> str:
    return base64.b64decode(str(value), validate=True).decode("utf-8")


def _quote(value: Any) -> str:
    return json.dumps(str(value))


def _squote(value: Any) -> str:
    return "'" + str(value) + "'"


def _nindent(value: Any, width: int = 2) -> str:
    prefix = " " * width
    lines = str(value).splitlines()
    return "\n" + "\n".join(prefix + line if line else line for line in lines)


def _trunc(value: Any, length: int) -> str:
    text = str(value)
    if length < 0:
        return text[length:]
    return text[:length]


def _required(value: Any, message: str = "a required value is missing") -> Any:
    if isinstance(value, Undefined) or value is None or value == "":
        raise TemplateRuntimeError(message)
    return value


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default)


def _uuid4() -> str:
    return str(uuid.uuid4())


@lru_cache(maxsize=2)
def build_environment(strict: bool = False) -> Environment:
    """
    Build the Jinja2 environment used by the default template function.

    Statements are written as ``{{% ... %}}`` and comments as ``{{# ... #}}`` so that
    only ``{{`` starts template syntax. Plain YAML such as ``color: "{#fff"`` or
    ``pattern: "{%d}"`` passes through untouched.

    :param strict: Whether undefined names fail the render.
    :type strict: bool
    :return: Configured environment.
    :rtype: jinja2.Environment
    """
    env = Environment(
        block_start_string="{{%",
        block_end_string="%}}",
        comment_start_string="{{#",
        comment_end_string="#}}",
        undefined=StrictUndefined if strict else ChainableUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters.update(
        to_yaml=_to_yaml,
        to_json=_to_json,
        b64enc=_b64enc,
        b64dec=_b64dec,
        quote=_quote,
        squote=_squote,
        nindent=_nindent,
        trunc=_trunc,
        required=_required,
    )
    env.globals.update(now=_now, env=_env, uuid4=_uuid4, required=_required)
    return env


def template_context(values: Any) -> Dict[str, Any]:
    """
    Build the template variables for a value object.

    Mapping items (or pydantic model fields) become top-level variables. The whole
    value object is also available as ``values``.

    :param values: Value object passed to a render.
    :type values: Any
    :return: Template variables.
    :rtype: dict[str, Any]
    """
    context: Dict[str, Any] = {}
    if isinstance(values, BaseModel):
        context.update(values.model_dump())
    elif isinstance(values, Mapping):
        context.update({str(key): value for key, value in values.items()})
    context.setdefault("values", values if values is not None else {})
    return context


def default_template(data: bytes, values: Any = None, *, strict: bool = False) -> bytes:
    """
    Render section bytes as a Jinja2 template.

    :param data: Template bytes (UTF-8).
    :type data: bytes
    :param values: Value object exposed to the template.
    :type values: Any
    :param strict: Whether missing values fail the render instead of rendering empty.
    :type strict: bool
    :return: Rendered bytes.
    :rtype: bytes
    :raises RenderError: If the template cannot be parsed or executed.
    """
    try:
        source = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RenderError(f"template is not valid UTF-8: {exc}", data=data) from exc
    env = build_environment(strict)
    try:
        template = env.from_string(source)
    except TemplateSyntaxError as exc:
        raise RenderError(
            f"template syntax error on line {exc.lineno}: {exc.message}", data=data
        ) from exc
    chunks: List[str] = []
    try:
        for chunk in template.generate(template_context(values)):
            chunks.append(chunk)
    except Exception as exc:
        partial = "".join(chunks)
        logger.debug("Template render failed, partial output:\n---\n%s\n---", partial)
        message = str(exc) if isinstance(exc, TemplateError) else f"{type(exc).__name__}: {exc}"
        raise RenderError(message, data=data, partial=partial.encode("utf-8")) from exc
    return "".join(chunks).encode("utf-8")


def strict_template(data: bytes, values: Any = None) -> bytes:
    """
    Render section bytes with missing values treated as errors.

    :param data: Template bytes (UTF-8).
    :type data: bytes
    :param values: Value object exposed to the template.
    :type values: Any
    :return: Rendered bytes.
    :rtype: bytes
    :raises RenderError: If the template cannot be parsed or executed.
    """
    return default_template(data, values, strict=True)


def null_template(data: bytes, values: Optional[Any] = None) -> bytes:
    """
    Render section bytes without values, leaving missing names empty.

    :param data: Template bytes (UTF-8).
    :type data: bytes
    :param values: Ignored.
    :type values: Any
    :return: Rendered bytes.
    :rtype: bytes
    :raises RenderError: If the template cannot be parsed or executed.
    """
    return default_template(data, None)
