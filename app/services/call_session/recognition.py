"""Recognition session manager: speech prompts and the silence retry budget."""
import logging

from app.services.call_session.models import CallSession, CallState, RecognitionOutcome
from app.services.dialogue.profile import DialogueProfile
from app.services.telephony.base import CallAutomationClient, RecognizeRequest, TextPrompt
from app.services.telephony.events import (
    RECOGNIZE_INITIAL_SILENCE_TIMED_OUT,
    CallEvent,
    CallEventType,
)

logger = logging.getLogger(__name__)

INITIAL_SILENCE_TIMEOUT_S = 15
END_SILENCE_TIMEOUT_MS = 500


class RecognitionInProgressError(RuntimeError):
    """A recognition is already outstanding for this session."""


class RecognitionSessionManager:
    """Issues recognition prompts against a call and tracks retries."""

    def __init__(
        self,
        telephony: CallAutomationClient,
        profile: DialogueProfile,
        initial_silence_timeout_s: int = INITIAL_SILENCE_TIMEOUT_S,
        end_silence_timeout_ms: int = END_SILENCE_TIMEOUT_MS,
    ):
        self.telephony = telephony
        self.profile = profile
        self.initial_silence_timeout_s = initial_silence_timeout_s
        self.end_silence_timeout_ms = end_silence_timeout_ms

    async def prompt(self, session: CallSession, message: str, operation_context: str) -> None:
        """
        Speak ``message`` and start listening to the caller.

        The outcome is not returned; it arrives later as a RecognizeCompleted
        or RecognizeFailed callback.
        """
        if session.recognition_pending:
            raise RecognitionInProgressError(
                f"Recognition already outstanding for {session.connection_id}"
            )

        request = RecognizeRequest(
            target=session.caller_id,
            prompt=TextPrompt(text=message, voice=self.profile.voice),
            language=self.profile.language,
            initial_silence_timeout_s=self.initial_silence_timeout_s,
            end_silence_timeout_ms=self.end_silence_timeout_ms,
            operation_context=operation_context,
        )
        logger.info(
            f"[RECOGNIZE] Prompting caller - ConnectionId: {session.connection_id}, "
            f"Context: {operation_context}, Prompt: '{message[:80]}'"
        )
        await self.telephony.start_recognizing(session.connection_id, request)
        session.recognition_pending = True
        session.state = CallState.AWAITING_RECOGNITION

    def consume_outcome(self, session: CallSession, event: CallEvent) -> RecognitionOutcome:
        """Turn a recognize callback into an outcome and clear the pending flag."""
        session.recognition_pending = False

        if event.event_type == CallEventType.RECOGNIZE_COMPLETED:
            return RecognitionOutcome.succeeded(event.recognized_speech)

        sub_code = event.result_information.sub_code
        if sub_code == RECOGNIZE_INITIAL_SILENCE_TIMED_OUT:
            return RecognitionOutcome.failed_silence(sub_code)
        return RecognitionOutcome.failed_other(sub_code)

    def try_retry(self, session: CallSession, outcome: RecognitionOutcome) -> bool:
        """True if the failure should be retried; spends one unit of budget."""
        if not outcome.is_silence:
            return False
        if not session.consume_retry():
            logger.info(
                f"[RECOGNIZE] Silence retry budget exhausted - ConnectionId: {session.connection_id}"
            )
            return False
        logger.info(
            f"[RECOGNIZE] Silence timeout, retrying - ConnectionId: {session.connection_id}, "
            f"Retries remaining: {session.retries_remaining}"
        )
        return True
