"""Errors raised while resolving a caller utterance with the model."""


class DialogueError(Exception):
    """The model exchange for one utterance could not be completed."""


class UnknownToolError(DialogueError):
    """The model asked for a tool that is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name!r}")
        self.tool_name = tool_name


class MalformedArgumentsError(DialogueError):
    """The model's tool arguments could not be parsed for the tool."""

    def __init__(self, tool_name: str, arguments: str, reason: str):
        super().__init__(
            f"Malformed arguments for tool {tool_name!r}: {reason} (raw: {arguments[:200]!r})"
        )
        self.tool_name = tool_name
        self.arguments = arguments
