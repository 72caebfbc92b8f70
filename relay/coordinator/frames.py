"""Client frame encoding.

json (default)::

    {"type": "token", "text": "..."}
    {"type": "error", "error_code": "...", "message": "..."}
    {"type": "done"}

text: increments and error messages are sent verbatim and completion is
signalled only by the connection closing.
"""

from __future__ import annotations

import orjson


class FrameEncoder:
    def __init__(self, frame_format: str = "json") -> None:
        if frame_format not in ("json", "text"):
            raise ValueError(f"unsupported frame format: {frame_format!r}")
        self.frame_format = frame_format

    @property
    def is_json(self) -> bool:
        return self.frame_format == "json"

    def token(self, text: str) -> str:
        if not self.is_json:
            return text
        return orjson.dumps({"type": "token", "text": text}).decode()

    def error(self, error_code: str, message: str) -> str:
        if not self.is_json:
            return message
        return orjson.dumps({"type": "error", "error_code": error_code, "message": message}).decode()

    def done(self) -> str | None:
        if not self.is_json:
            return None
        return orjson.dumps({"type": "done"}).decode()


__all__ = ["FrameEncoder"]
