"""Relay request envelope and per-type parameter validation.

A client frame is a JSON object ``{"type": ..., "parameters": {...}}``. The
type selects which parameter model applies; every field is checked before the
upstream is ever contacted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import orjson

from ..errors import ValidationFailure
from ..config.prompts import DATE_FORMAT


@dataclass(frozen=True, slots=True)
class RequestEnvelope:
    type: str
    parameters: dict[str, Any]


@dataclass(frozen=True, slots=True)
class TripAdvisorRequest:
    num_adults: int
    num_kids: int
    kids_ages: list[int]
    start_date: str
    end_date: str
    hotel_name: str
    hotel_type: str
    hotel_rating: float
    hotel_reviews: int
    hotel_ranking: int
    cards: str


@dataclass(frozen=True, slots=True)
class IndeedRequest:
    job_title: str
    job_description: str
    skills: list[str]
    experience: int
    education: str
    location: str
    salary: float
    job_type: str
    resume_text: str
    cards: str


def parse_envelope(raw: str | bytes) -> RequestEnvelope:
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ValidationFailure("invalid_json", f"Error parsing request JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ValidationFailure("invalid_request", "request must be a JSON object")

    request_type = data.get("type")
    if not isinstance(request_type, str) or not request_type.strip():
        raise ValidationFailure("missing_type", "type is required and must be a non-empty string")

    parameters = data.get("parameters")
    if parameters is None:
        raise ValidationFailure("missing_parameters", "parameters is required")
    if not isinstance(parameters, dict):
        raise ValidationFailure("invalid_parameters", "parameters must be a JSON object")

    return RequestEnvelope(type=request_type.strip(), parameters=parameters)


# ============================================================================
# Field validators
# ============================================================================

def _missing(name: str) -> ValidationFailure:
    return ValidationFailure("missing_field", f"{name} is required")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_str(params: dict[str, Any], name: str) -> str:
    value = params.get(name)
    if value is None:
        raise _missing(name)
    if not isinstance(value, str):
        raise ValidationFailure("invalid_field", f"{name} must be a string")
    if not value.strip():
        raise ValidationFailure("invalid_field", f"{name} cannot be empty")
    return value


def _require_int(
    params: dict[str, Any],
    name: str,
    *,
    minimum: int | None = None,
    nonzero: bool = False,
) -> int:
    value = params.get(name)
    if value is None or (nonzero and value == 0):
        raise _missing(name)
    if not _is_int(value):
        raise ValidationFailure("invalid_field", f"{name} must be an integer")
    if minimum is not None and value < minimum:
        raise ValidationFailure("invalid_field", f"{name} must be >= {minimum}")
    return value


def _require_number(
    params: dict[str, Any],
    name: str,
    *,
    minimum: float | None = None,
    maximum: float | None = None,
    nonzero: bool = False,
) -> float:
    value = params.get(name)
    if value is None or (nonzero and value == 0):
        raise _missing(name)
    if not (_is_int(value) or isinstance(value, float)):
        raise ValidationFailure("invalid_field", f"{name} must be a number")
    if minimum is not None and value < minimum:
        raise ValidationFailure("invalid_field", f"{name} must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationFailure("invalid_field", f"{name} must be <= {maximum}")
    return float(value)


def _require_date(params: dict[str, Any], name: str) -> str:
    value = _require_str(params, name)
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ValidationFailure("invalid_field", f"{name} must be a date formatted YYYY-MM-DD") from None
    return value


def _int_list(params: dict[str, Any], name: str, *, minimum: int = 0) -> list[int]:
    value = params.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationFailure("invalid_field", f"{name} must be a list of integers")
    for item in value:
        if not _is_int(item) or item < minimum:
            raise ValidationFailure("invalid_field", f"{name} entries must be integers >= {minimum}")
    return list(value)


def _require_str_list(params: dict[str, Any], name: str) -> list[str]:
    value = params.get(name)
    if value is None:
        raise _missing(name)
    if not isinstance(value, list) or not value:
        raise ValidationFailure("invalid_field", f"{name} must be a non-empty list of strings")
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValidationFailure("invalid_field", f"{name} entries must be non-empty strings")
    return list(value)


# ============================================================================
# Request models
# ============================================================================

def parse_tripadvisor_request(params: dict[str, Any]) -> TripAdvisorRequest:
    num_adults = _require_int(params, "num_adults", minimum=1)
    num_kids = _require_int(params, "num_kids", minimum=0)
    kids_ages = _int_list(params, "kids_ages")
    if len(kids_ages) != num_kids:
        raise ValidationFailure(
            "invalid_field",
            f"kids_ages must list exactly num_kids ({num_kids}) ages, got {len(kids_ages)}",
        )
    return TripAdvisorRequest(
        num_adults=num_adults,
        num_kids=num_kids,
        kids_ages=kids_ages,
        start_date=_require_date(params, "start_date"),
        end_date=_require_date(params, "end_date"),
        hotel_name=_require_str(params, "hotel_name"),
        hotel_type=_require_str(params, "hotel_type"),
        hotel_rating=_require_number(params, "hotel_rating", minimum=0, maximum=5, nonzero=True),
        hotel_reviews=_require_int(params, "hotel_reviews", nonzero=True),
        hotel_ranking=_require_int(params, "hotel_ranking", nonzero=True),
        cards=_require_str(params, "cards"),
    )


def parse_indeed_request(params: dict[str, Any]) -> IndeedRequest:
    return IndeedRequest(
        job_title=_require_str(params, "job_title"),
        job_description=_require_str(params, "job_description"),
        skills=_require_str_list(params, "skills"),
        experience=_require_int(params, "experience", minimum=0, nonzero=True),
        education=_require_str(params, "education"),
        location=_require_str(params, "location"),
        salary=_require_number(params, "salary", minimum=0, nonzero=True),
        job_type=_require_str(params, "job_type"),
        resume_text=_require_str(params, "resume_text"),
        cards=_require_str(params, "cards"),
    )


RequestParser = Callable[[dict[str, Any]], Any]

REQUEST_PARSERS: dict[str, RequestParser] = {
    "tripadvisor_request": parse_tripadvisor_request,
    "indeed_request": parse_indeed_request,
}


def parse_request(envelope: RequestEnvelope) -> TripAdvisorRequest | IndeedRequest:
    parser = REQUEST_PARSERS.get(envelope.type)
    if parser is None:
        raise ValidationFailure("unknown_request_type", f"Unknown request type: {envelope.type}")
    return parser(envelope.parameters)


__all__ = [
    "RequestEnvelope",
    "TripAdvisorRequest",
    "IndeedRequest",
    "REQUEST_PARSERS",
    "parse_envelope",
    "parse_request",
    "parse_tripadvisor_request",
    "parse_indeed_request",
]
