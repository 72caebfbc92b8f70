"""Prompt template sources.

Templates are operator-supplied and live in environment variables so they can
be rotated without a deploy. Each request type names the variable holding
its user-message template and the one holding its system prompt.
"""

from __future__ import annotations

TRIPADVISOR_TEMPLATE_ENV = "TRIPADVISOR_TEMPLATE"
TRIPADVISOR_SYSTEM_PROMPT_ENV = "TAROTREADING_SYSTEM_PROMPT"

INDEED_TEMPLATE_ENV = "INDEED_TEMPLATE"
INDEED_SYSTEM_PROMPT_ENV = "INDEED_SYSTEM_PROMPT"

# request type -> (user template env var, system prompt env var)
PROMPT_TEMPLATE_ENVS: dict[str, tuple[str, str]] = {
    "tripadvisor_request": (TRIPADVISOR_TEMPLATE_ENV, TRIPADVISOR_SYSTEM_PROMPT_ENV),
    "indeed_request": (INDEED_TEMPLATE_ENV, INDEED_SYSTEM_PROMPT_ENV),
}

DATE_FORMAT = "%Y-%m-%d"

__all__ = [
    "TRIPADVISOR_TEMPLATE_ENV",
    "TRIPADVISOR_SYSTEM_PROMPT_ENV",
    "INDEED_TEMPLATE_ENV",
    "INDEED_SYSTEM_PROMPT_ENV",
    "PROMPT_TEMPLATE_ENVS",
    "DATE_FORMAT",
]
