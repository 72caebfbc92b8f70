"""Turn a raw client frame into the user content and system prompt of a relay."""

from __future__ import annotations

import os
import logging
from dataclasses import asdict, dataclass
from collections.abc import Mapping

from ..errors import ValidationFailure
from ..config.prompts import PROMPT_TEMPLATE_ENVS
from .render import load_template, render_template
from .requests import parse_request, parse_envelope

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PromptParts:
    request_type: str
    content: str
    system: str


class PromptBuilder:
    """Validates a request and renders its templates.

    Templates are read from ``env`` on every build so operators can rotate
    them without restarting the process.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = env if env is not None else os.environ

    def build(self, raw_request: str | bytes) -> PromptParts:
        envelope = parse_envelope(raw_request)
        request = parse_request(envelope)

        template_envs = PROMPT_TEMPLATE_ENVS.get(envelope.type)
        if template_envs is None:
            raise ValidationFailure("unknown_request_type", f"Unknown request type: {envelope.type}")
        template_env, system_env = template_envs

        fields = asdict(request)
        content = render_template(load_template(self._env, template_env), fields, source=template_env)
        system = render_template(load_template(self._env, system_env), fields, source=system_env)
        logger.debug(
            "rendered %s prompt content_chars=%s system_chars=%s",
            envelope.type,
            len(content),
            len(system),
        )
        return PromptParts(request_type=envelope.type, content=content, system=system)


__all__ = ["PromptParts", "PromptBuilder"]
