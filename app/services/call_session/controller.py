"""Call session controller: drives one call from answer to hang-up."""
import logging
import uuid
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import quote

from app.services.call_session.models import CallSession, CallState
from app.services.call_session.recognition import RecognitionSessionManager
from app.services.call_session.registry import SessionRegistry
from app.services.dialogue.profile import DialogueProfile, EmptyUtterancePolicy
from app.services.llm.client import DialogueClient
from app.services.telephony.base import CallAutomationClient, TextPrompt
from app.services.telephony.events import CallEvent, CallEventType, EventGridEvent

logger = logging.getLogger(__name__)

# Operation contexts tag each media operation so its callbacks are traceable
GREETING_CONTEXT = "GetFreeFormText"
RETRY_CONTEXT = "RetryFreeFormText"
CHAT_RESPONSE_CONTEXT = "ChatResponse"
FAREWELL_CONTEXT = "Goodbye"

EventHandler = Callable[[CallEvent, Optional[CallSession]], Awaitable[None]]


class CallSessionController:
    """Event-driven state machine for answered calls.

    Incoming-call events create sessions; callback events are routed by
    connection id through a dispatch table to one handler per event type.
    """

    def __init__(
        self,
        telephony: CallAutomationClient,
        recognition: RecognitionSessionManager,
        dialogue: DialogueClient,
        profile: DialogueProfile,
        sessions: SessionRegistry,
        callback_base_url: str,
        cognitive_services_endpoint: str,
        max_silence_retries: int = 2,
    ):
        self.telephony = telephony
        self.recognition = recognition
        self.dialogue = dialogue
        self.profile = profile
        self.sessions = sessions
        self.callback_base_url = callback_base_url.rstrip("/")
        self.cognitive_services_endpoint = cognitive_services_endpoint
        self.max_silence_retries = max_silence_retries
        self._handlers: Dict[CallEventType, EventHandler] = {
            CallEventType.CALL_CONNECTED: self.on_call_connected,
            CallEventType.CALL_DISCONNECTED: self.on_call_disconnected,
            CallEventType.PLAY_COMPLETED: self.on_play_completed,
            CallEventType.PLAY_FAILED: self.on_play_failed,
            CallEventType.RECOGNIZE_COMPLETED: self.on_recognize_completed,
            CallEventType.RECOGNIZE_FAILED: self.on_recognize_failed,
        }

    def callback_url(self, correlation_id: str, caller_id: str) -> str:
        return (
            f"{self.callback_base_url}/api/callbacks/{correlation_id}"
            f"?callerId={quote(caller_id, safe='')}"
        )

    async def handle_incoming_call(self, event: EventGridEvent) -> Optional[Dict[str, str]]:
        """
        Accept one Event Grid event from the incoming call endpoint.

        Returns:
            The validation response for a subscription-validation event,
            None otherwise.
        """
        if event.is_subscription_validation:
            logger.info("[INCOMING CALL] Subscription validation handshake received")
            return {"validationResponse": event.validation_code}

        if not event.is_incoming_call:
            logger.debug(f"[INCOMING CALL] Ignoring event type {event.event_type}")
            return None

        caller_id = event.caller_id
        call_context = event.incoming_call_context
        if not caller_id or not call_context:
            logger.warning(
                f"[INCOMING CALL] Event {event.id} missing caller id or call context, ignoring"
            )
            return None

        session = CallSession(
            correlation_id=str(uuid.uuid4()),
            caller_id=caller_id,
            retries_remaining=self.max_silence_retries,
        )
        self.sessions.add(session)

        try:
            connection_id = await self.telephony.answer_call(
                call_context,
                self.callback_url(session.correlation_id, caller_id),
                self.cognitive_services_endpoint,
            )
        except Exception:
            self.sessions.remove(session)
            raise

        self.sessions.bind(session, connection_id)
        logger.info(
            f"[INCOMING CALL] Answered call - Caller: {caller_id}, ConnectionId: {connection_id}"
        )
        return None

    async def dispatch(self, event: CallEvent, correlation_id: Optional[str] = None) -> None:
        """Route one callback event to its handler."""
        event_type = event.event_type
        if event_type is None:
            logger.debug(f"[CALLBACK] No handler for event type {event.type}")
            return

        session = self.sessions.find(event.connection_id, correlation_id)
        logger.info(
            f"[CALLBACK] {event_type.name} - ConnectionId: {event.connection_id}, "
            f"OperationContext: {event.operation_context}, "
            f"State: {session.state if session else 'no session'}"
        )
        await self._handlers[event_type](event, session)

    async def on_call_connected(self, event: CallEvent, session: Optional[CallSession]) -> None:
        if session is None:
            logger.warning(f"[SESSION] CallConnected for unknown call {event.connection_id}")
            return
        session.state = CallState.PROMPTING
        await self.recognition.prompt(session, self.profile.greeting, GREETING_CONTEXT)

    async def on_play_completed(self, event: CallEvent, session: Optional[CallSession]) -> None:
        await self._hang_up(event.connection_id, session)

    async def on_play_failed(self, event: CallEvent, session: Optional[CallSession]) -> None:
        logger.warning(
            f"[SESSION] Play failed - ConnectionId: {event.connection_id}, "
            f"Result: {event.result_information.model_dump()}"
        )
        await self._hang_up(event.connection_id, session)

    async def on_recognize_completed(
        self, event: CallEvent, session: Optional[CallSession]
    ) -> None:
        if session is None:
            logger.warning(f"[SESSION] RecognizeCompleted for unknown call {event.connection_id}")
            return

        outcome = self.recognition.consume_outcome(session, event)
        if not outcome.has_speech:
            logger.warning(
                f"[SESSION] Empty recognized text - ConnectionId: {session.connection_id}, "
                f"Policy: {self.profile.empty_utterance_policy}"
            )
            if self.profile.empty_utterance_policy == EmptyUtterancePolicy.REPROMPT:
                await self.recognition.prompt(session, self.profile.retry_prompt, RETRY_CONTEXT)
            return

        logger.info(
            f"[SESSION] Recognized speech - ConnectionId: {session.connection_id}, "
            f"Text: '{outcome.text}'"
        )
        session.state = CallState.RESPONDING
        reply = await self.dialogue.respond(outcome.text)
        if not reply:
            logger.warning("[SESSION] Model returned an empty reply, using apology")
            reply = self.profile.apology

        session.turn_count += 1
        await self.recognition.prompt(session, reply, CHAT_RESPONSE_CONTEXT)

    async def on_recognize_failed(self, event: CallEvent, session: Optional[CallSession]) -> None:
        if session is None:
            logger.warning(f"[SESSION] RecognizeFailed for unknown call {event.connection_id}")
            return

        outcome = self.recognition.consume_outcome(session, event)
        if self.recognition.try_retry(session, outcome):
            await self.recognition.prompt(session, self.profile.retry_prompt, RETRY_CONTEXT)
            return

        logger.info(
            f"[SESSION] Playing farewell - ConnectionId: {session.connection_id}, "
            f"SubCode: {outcome.sub_code}"
        )
        session.state = CallState.FAREWELL
        await self.telephony.play_to_all(
            session.connection_id,
            TextPrompt(text=self.profile.farewell, voice=self.profile.voice),
            FAREWELL_CONTEXT,
        )

    async def on_call_disconnected(
        self, event: CallEvent, session: Optional[CallSession]
    ) -> None:
        if session is None:
            return
        session.state = CallState.TERMINATED
        self.sessions.remove(session)

    async def _hang_up(self, connection_id: str, session: Optional[CallSession]) -> None:
        logger.info(f"[SESSION] Hanging up - ConnectionId: {connection_id}")
        await self.telephony.hang_up(connection_id, for_everyone=True)
        if session is not None:
            session.state = CallState.TERMINATED
            self.sessions.remove(session)
