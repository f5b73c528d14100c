"""Call automation interface."""
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class TelephonyError(Exception):
    """A call automation request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TextPrompt(BaseModel):
    """Text to be synthesized by the telephony service."""

    text: str
    voice: str


class RecognizeRequest(BaseModel):
    """Parameters of one speech recognition round."""

    target: str  # Raw id of the participant to listen to
    prompt: TextPrompt
    language: str
    initial_silence_timeout_s: int = 15
    end_silence_timeout_ms: int = 500
    interrupt_prompt: bool = False
    operation_context: Optional[str] = None


class CallAutomationClient(ABC):
    """Abstract base class for the telephony call-control service.

    Every media operation is acknowledged synchronously; its outcome
    arrives later as a callback event.
    """

    @abstractmethod
    async def answer_call(
        self, incoming_call_context: str, callback_url: str, cognitive_services_endpoint: str
    ) -> str:
        """Answer an incoming call and return its connection id."""
        pass

    @abstractmethod
    async def start_recognizing(self, connection_id: str, request: RecognizeRequest) -> None:
        """Play a prompt and start recognizing the target's speech."""
        pass

    @abstractmethod
    async def play_to_all(
        self, connection_id: str, prompt: TextPrompt, operation_context: Optional[str] = None
    ) -> None:
        """Play a prompt to every participant."""
        pass

    @abstractmethod
    async def hang_up(self, connection_id: str, for_everyone: bool = True) -> None:
        """Hang up the call, optionally ending it for all participants."""
        pass

    async def close(self) -> None:
        """Release any underlying resources."""
        pass
