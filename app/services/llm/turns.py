"""Dialogue turns exchanged with the chat model."""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class TurnRole(str, Enum):
    """Chat message roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"

    def __str__(self) -> str:
        return self.value


class ToolCallDirective(BaseModel):
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: str  # Raw JSON text as produced by the model


class DialogueTurn(BaseModel):
    """One message in the sequence sent to the model."""

    role: TurnRole
    content: Optional[str] = None
    tool_calls: List[ToolCallDirective] = []
    name: Optional[str] = None  # Tool name on tool-result turns
    tool_call_id: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> "DialogueTurn":
        return cls(role=TurnRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "DialogueTurn":
        return cls(role=TurnRole.USER, content=content)

    @classmethod
    def tool_result(cls, directive: ToolCallDirective, content: str) -> "DialogueTurn":
        return cls(
            role=TurnRole.TOOL,
            content=content,
            name=directive.name,
            tool_call_id=directive.id,
        )

    def to_message(self) -> Dict[str, Any]:
        """Serialize to a chat-completions message dict."""
        message: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        if self.role == TurnRole.TOOL:
            message["name"] = self.name
            message["tool_call_id"] = self.tool_call_id
        return message


def pending_tool_calls(turns: List[DialogueTurn]) -> List[str]:
    """Ids of tool calls in ``turns`` that have no matching tool-result turn."""
    requested = [call.id for turn in turns for call in turn.tool_calls]
    answered = {turn.tool_call_id for turn in turns if turn.role == TurnRole.TOOL}
    return [call_id for call_id in requested if call_id not in answered]
