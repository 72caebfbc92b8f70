"""Prompt template rendering.

Templates use ``str.format`` replacement fields named after request fields,
plus one extra format spec for list fields::

    Guests: {num_adults} adults, kids aged {kids_ages:join:, }
    Reviews: {hotel_reviews:,}

``join:<sep>`` joins the list items with ``<sep>``. Standard specs such as
``,`` (thousands separator) work as usual.
"""

from __future__ import annotations

import string
from typing import Any
from collections.abc import Mapping

from ..errors import ValidationFailure

_JOIN_PREFIX = "join:"


class PromptFormatter(string.Formatter):
    def format_field(self, value: Any, format_spec: str) -> str:
        if format_spec.startswith(_JOIN_PREFIX):
            if not isinstance(value, (list, tuple)):
                raise ValueError(f"join format needs a list, got {type(value).__name__}")
            separator = format_spec[len(_JOIN_PREFIX):]
            return separator.join(str(item) for item in value)
        return super().format_field(value, format_spec)


_FORMATTER = PromptFormatter()


def render_template(template: str, fields: Mapping[str, Any], *, source: str = "template") -> str:
    """Render ``template`` with ``fields``; any failure is a ``template_error``."""
    try:
        return _FORMATTER.vformat(template, (), fields)
    except KeyError as exc:
        raise ValidationFailure("template_error", f"{source} references unknown field {exc}") from exc
    except (IndexError, ValueError, AttributeError, TypeError) as exc:
        raise ValidationFailure("template_error", f"failed to render {source}: {exc}") from exc


def load_template(env: Mapping[str, str], name: str) -> str:
    template = env.get(name, "")
    if not template:
        raise ValidationFailure("template_error", f"environment variable {name} not set")
    return template


__all__ = ["PromptFormatter", "render_template", "load_template"]
