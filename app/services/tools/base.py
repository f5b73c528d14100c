"""Tool definitions and the process-wide tool registry."""
import json
from typing import Any, Callable, Dict, Iterable, List, Type

from pydantic import BaseModel, ConfigDict, ValidationError

from app.services.llm.errors import MalformedArgumentsError, UnknownToolError


class DuplicateToolError(ValueError):
    """Raised when two tools are registered under the same name."""


class ToolDefinition(BaseModel):
    """A capability the model may invoke.

    ``arguments_model`` validates the JSON arguments produced by the model;
    ``handler`` receives the validated model and must return something
    JSON-serializable (a dict or a pydantic model).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, Any]
    arguments_model: Type[BaseModel]
    handler: Callable[[Any], Any]

    def declaration(self) -> Dict[str, Any]:
        """Chat-completions ``tools`` entry for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def parse_arguments(self, raw_arguments: str) -> BaseModel:
        """Validate the model-supplied JSON arguments."""
        try:
            return self.arguments_model.model_validate_json(raw_arguments or "{}")
        except ValidationError as e:
            raise MalformedArgumentsError(self.name, raw_arguments or "", str(e)) from e

    def invoke(self, arguments: BaseModel) -> str:
        """Run the handler and serialize its result for a tool-result turn."""
        result = self.handler(arguments)
        if isinstance(result, BaseModel):
            result = result.model_dump(mode="json")
        return json.dumps(result, ensure_ascii=False)


class ToolRegistry:
    """Static name -> tool mapping, read-only once built."""

    def __init__(self, tools: Iterable[ToolDefinition] = ()):
        self._tools: Dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise DuplicateToolError(f"Tool {tool.name!r} is already registered")
            self._tools[tool.name] = tool

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolDefinition:
        """Look up a tool by name."""
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def declarations(self) -> List[Dict[str, Any]]:
        """Declarations for every registered tool, in registration order."""
        return [tool.declaration() for tool in self._tools.values()]

    def subset(self, names: Iterable[str]) -> "ToolRegistry":
        """Build a registry holding only the named tools."""
        return ToolRegistry(self.get(name) for name in names)
