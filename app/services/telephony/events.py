"""Inbound webhook event models (Event Grid and Call Automation CloudEvents)."""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

SUBSCRIPTION_VALIDATION_EVENT = "Microsoft.EventGrid.SubscriptionValidationEvent"
INCOMING_CALL_EVENT = "Microsoft.Communication.IncomingCall"

# Result sub-code reported by RecognizeFailed when the caller never spoke
RECOGNIZE_INITIAL_SILENCE_TIMED_OUT = 8510


class EventGridEvent(BaseModel):
    """Event Grid schema event posted to the incoming call endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    event_type: str = Field(alias="eventType")
    subject: Optional[str] = None
    data: Dict[str, Any] = {}

    @property
    def is_subscription_validation(self) -> bool:
        return self.event_type == SUBSCRIPTION_VALIDATION_EVENT

    @property
    def is_incoming_call(self) -> bool:
        return self.event_type == INCOMING_CALL_EVENT

    @property
    def validation_code(self) -> Optional[str]:
        return self.data.get("validationCode")

    @property
    def caller_id(self) -> Optional[str]:
        return (self.data.get("from") or {}).get("rawId")

    @property
    def incoming_call_context(self) -> Optional[str]:
        return self.data.get("incomingCallContext")


class CallEventType(str, Enum):
    """Call Automation callback event types handled by the controller."""

    CALL_CONNECTED = "Microsoft.Communication.CallConnected"
    CALL_DISCONNECTED = "Microsoft.Communication.CallDisconnected"
    PLAY_COMPLETED = "Microsoft.Communication.PlayCompleted"
    PLAY_FAILED = "Microsoft.Communication.PlayFailed"
    RECOGNIZE_COMPLETED = "Microsoft.Communication.RecognizeCompleted"
    RECOGNIZE_FAILED = "Microsoft.Communication.RecognizeFailed"

    def __str__(self) -> str:
        return self.value


class ResultInformation(BaseModel):
    """Outcome details attached to media operation events."""

    code: Optional[int] = None
    sub_code: Optional[int] = Field(default=None, alias="subCode")
    message: Optional[str] = None


class CallEvent(BaseModel):
    """CloudEvent posted to the per-call callback endpoint."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    source: Optional[str] = None
    data: Dict[str, Any] = {}

    @property
    def event_type(self) -> Optional[CallEventType]:
        try:
            return CallEventType(self.type)
        except ValueError:
            return None

    @property
    def connection_id(self) -> Optional[str]:
        return self.data.get("callConnectionId")

    @property
    def operation_context(self) -> Optional[str]:
        return self.data.get("operationContext")

    @property
    def result_information(self) -> ResultInformation:
        return ResultInformation.model_validate(self.data.get("resultInformation") or {})

    @property
    def recognized_speech(self) -> Optional[str]:
        return (self.data.get("speechResult") or {}).get("speech")
