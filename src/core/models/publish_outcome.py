"""Result of a single telemetry publish attempt."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DropReason(Enum):
    NOT_CONNECTED = "not_connected"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class PublishOutcome:
    sent: bool
    reason: Optional[DropReason] = None
    payload: Optional[str] = None
    detail: str = ""

    @classmethod
    def sent_with(cls, payload: str) -> "PublishOutcome":
        return cls(sent=True, payload=payload)

    @classmethod
    def dropped(cls, reason: DropReason, payload: Optional[str] = None, detail: str = "") -> "PublishOutcome":
        return cls(sent=False, reason=reason, payload=payload, detail=detail)
