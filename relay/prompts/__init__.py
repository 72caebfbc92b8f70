"""Request validation and prompt rendering."""

from .builder import PromptParts, PromptBuilder
from .render import PromptFormatter, load_template, render_template
from .requests import (
    IndeedRequest,
    RequestEnvelope,
    TripAdvisorRequest,
    parse_request,
    parse_envelope,
)

__all__ = [
    "PromptParts",
    "PromptBuilder",
    "PromptFormatter",
    "load_template",
    "render_template",
    "RequestEnvelope",
    "TripAdvisorRequest",
    "IndeedRequest",
    "parse_envelope",
    "parse_request",
]
