"""
Render Options Normalizer.

Turns a partially specified options mapping (JSON body or dotted query string)
into a complete RenderOptions value by merging it over the defaults.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from ..errors import ValidationError
from ..models import GotoOptions, PdfOptions, RenderOptions, ViewportOptions

logger = logging.getLogger("url_to_pdf.options")


DEFAULT_OPTIONS = RenderOptions(
    scroll_page=False,
    emulate_screen_media=False,
    ignore_https_errors=False,
    viewport=ViewportOptions(width=1600, height=1200),
    goto=GotoOptions(wait_until="networkidle", network_idle_timeout=2000),
    pdf=PdfOptions(format="A4", print_background=True),
)


def unflatten(flat: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Expand dotted keys into nested mappings.

    Example:
        >>> unflatten({"url": "https://x.test", "pdf.margin.top": "1cm"})
        {'url': 'https://x.test', 'pdf': {'margin': {'top': '1cm'}}}
    """
    nested: Dict[str, Any] = {}
    for key, value in flat.items():
        parts = key.split(".")
        target = nested
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = target[part] = {}
            target = child
        target[parts[-1]] = value
    return nested


def options_from_query(query: Mapping[str, str]) -> Dict[str, Any]:
    """
    Build a raw options mapping from query parameters.

    Empty values count as absent and inline HTML is never read from the
    query string.
    """
    flat = {key: value for key, value in query.items() if value != "" and key != "html"}
    return unflatten(flat)


def _options_group(field: FieldInfo) -> Optional[Type[BaseModel]]:
    annotation = field.annotation
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _merge(model_cls: Type[BaseModel], base: Mapping[str, Any], raw: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for name, field in model_cls.model_fields.items():
        key = field.alias or name
        value = raw.get(key)
        if value is None:
            value = raw.get(name)
        if value is None:
            continue

        group = _options_group(field)
        if group is None:
            merged[key] = value
            continue

        if not isinstance(value, Mapping):
            raise ValidationError(f"{key} must be an object")
        merged[key] = _merge(group, base.get(key) or {}, value)
    return merged


def normalize(raw: Mapping[str, Any], defaults: RenderOptions = DEFAULT_OPTIONS) -> RenderOptions:
    """
    Merge raw options over the defaults.

    The merge follows the fields declared on the options models: nested
    groups merge recursively, a given leaf (including False and 0) wins and a
    missing or None leaf keeps the default.

    Args:
        raw: Nested options, keyed by camelCase alias or attribute name
        defaults: Options used for every leaf the request leaves out

    Returns:
        Complete RenderOptions

    Raises:
        ValidationError: If a value cannot be coerced to its field type
    """
    merged = _merge(RenderOptions, defaults.model_dump(by_alias=True), raw)
    try:
        return RenderOptions.model_validate(merged)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        logger.debug(f"Rejected render options: {problems}")
        raise ValidationError(f"Invalid render options: {problems}")
