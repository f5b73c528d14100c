"""Azure Communication Services Call Automation backed by the azure SDK."""
import logging
from typing import Optional

from azure.communication.callautomation import (
    RecognizeInputType,
    TextSource,
)
from azure.communication.callautomation._shared.models import identifier_from_raw_id
from azure.communication.callautomation.aio import CallAutomationClient as AcsSdkClient
from azure.core.exceptions import AzureError, HttpResponseError

from app.services.telephony.base import (
    CallAutomationClient,
    RecognizeRequest,
    TelephonyError,
    TextPrompt,
)

logger = logging.getLogger(__name__)


def text_source(prompt: TextPrompt) -> TextSource:
    return TextSource(text=prompt.text, voice_name=prompt.voice)


class AcsCallAutomationClient(CallAutomationClient):
    """Call Automation client for Azure Communication Services."""

    def __init__(self, connection_string: str, client: Optional[AcsSdkClient] = None):
        self._client = client or AcsSdkClient.from_connection_string(connection_string)

    async def _call(self, operation: str, coro):
        try:
            return await coro
        except HttpResponseError as e:
            raise TelephonyError(
                f"Call automation {operation} failed with {e.status_code}: {e.message}",
                status_code=e.status_code,
            ) from e
        except AzureError as e:
            raise TelephonyError(f"Call automation {operation} failed: {e}") from e

    async def answer_call(
        self, incoming_call_context: str, callback_url: str, cognitive_services_endpoint: str
    ) -> str:
        result = await self._call(
            "answer",
            self._client.answer_call(
                incoming_call_context=incoming_call_context,
                callback_url=callback_url,
                cognitive_services_endpoint=cognitive_services_endpoint,
            ),
        )
        logger.info(f"[ACS] Answered call - ConnectionId: {result.call_connection_id}")
        return result.call_connection_id

    async def start_recognizing(self, connection_id: str, request: RecognizeRequest) -> None:
        connection = self._client.get_call_connection(connection_id)
        await self._call(
            "recognize",
            connection.start_recognizing_media(
                input_type=RecognizeInputType.SPEECH,
                target_participant=identifier_from_raw_id(request.target),
                play_prompt=text_source(request.prompt),
                interrupt_prompt=request.interrupt_prompt,
                initial_silence_timeout=request.initial_silence_timeout_s,
                end_silence_timeout=request.end_silence_timeout_ms / 1000,
                speech_language=request.language,
                operation_context=request.operation_context,
            ),
        )

    async def play_to_all(
        self, connection_id: str, prompt: TextPrompt, operation_context: Optional[str] = None
    ) -> None:
        connection = self._client.get_call_connection(connection_id)
        await self._call(
            "play",
            connection.play_media_to_all(
                text_source(prompt), loop=False, operation_context=operation_context
            ),
        )

    async def hang_up(self, connection_id: str, for_everyone: bool = True) -> None:
        connection = self._client.get_call_connection(connection_id)
        await self._call("hang up", connection.hang_up(is_for_everyone=for_everyone))

    async def close(self) -> None:
        await self._client.close()
