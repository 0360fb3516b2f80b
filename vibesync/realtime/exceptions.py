from __future__ import annotations

from typing import Any


class RealtimeError(Exception):
    """Rejection of a client event, reported back in the event acknowledgement."""

    code = "error"

    def __init__(self, detail: Any = None):
        super().__init__(detail or self.code)
        self.detail = detail

    def as_ack(self) -> dict[str, Any]:
        ack: dict[str, Any] = {"ok": False, "error": self.code}
        if self.detail is not None:
            ack["detail"] = self.detail
        return ack


class Unauthenticated(RealtimeError):
    code = "unauthenticated"


class Forbidden(RealtimeError):
    code = "forbidden"


class InvalidPayload(RealtimeError):
    code = "invalid_payload"


class NotJoined(RealtimeError):
    code = "not_joined"
