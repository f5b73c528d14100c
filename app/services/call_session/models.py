"""Call session models."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CallState(str, Enum):
    """Lifecycle of an answered call."""

    ANSWERING = "answering"  # Answer requested, waiting for CallConnected
    PROMPTING = "prompting"  # Connected, issuing a recognition prompt
    AWAITING_RECOGNITION = "awaiting_recognition"
    RESPONDING = "responding"  # Waiting on the model for a reply
    FAREWELL = "farewell"  # Goodbye message playing, hang-up follows
    TERMINATED = "terminated"

    def __str__(self) -> str:
        return self.value


class OutcomeKind(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED_SILENCE = "failed_silence"
    FAILED_OTHER = "failed_other"


class RecognitionOutcome(BaseModel):
    """Result of one recognition round."""

    kind: OutcomeKind
    text: Optional[str] = None
    sub_code: Optional[int] = None

    @classmethod
    def succeeded(cls, text: Optional[str]) -> "RecognitionOutcome":
        return cls(kind=OutcomeKind.SUCCEEDED, text=text or "")

    @classmethod
    def failed_silence(cls, sub_code: Optional[int] = None) -> "RecognitionOutcome":
        return cls(kind=OutcomeKind.FAILED_SILENCE, sub_code=sub_code)

    @classmethod
    def failed_other(cls, sub_code: Optional[int] = None) -> "RecognitionOutcome":
        return cls(kind=OutcomeKind.FAILED_OTHER, sub_code=sub_code)

    @property
    def is_silence(self) -> bool:
        return self.kind == OutcomeKind.FAILED_SILENCE

    @property
    def has_speech(self) -> bool:
        return self.kind == OutcomeKind.SUCCEEDED and bool(self.text and self.text.strip())


class CallSession(BaseModel):
    """State of one answered telephone call."""

    correlation_id: str  # Path segment of this call's callback URL
    caller_id: str
    connection_id: Optional[str] = None
    retries_remaining: int = Field(default=2, ge=0)
    turn_count: int = 0
    state: CallState = CallState.ANSWERING
    recognition_pending: bool = False

    def consume_retry(self) -> bool:
        """Spend one silence retry; False once the budget is exhausted."""
        if self.retries_remaining <= 0:
            return False
        self.retries_remaining -= 1
        return True
