"""LLM dialogue client: one caller utterance in, one spoken reply out."""
import asyncio
import logging
from typing import List

from openai import AsyncAzureOpenAI, AsyncOpenAI

from app.core.config import Settings
from app.services.dialogue.profile import DialogueProfile
from app.services.llm.errors import DialogueError
from app.services.llm.turns import DialogueTurn, ToolCallDirective, TurnRole, pending_tool_calls
from app.services.tools.base import ToolRegistry

logger = logging.getLogger(__name__)

FINISH_TOOL_CALLS = "tool_calls"


def create_openai_client(settings: Settings) -> AsyncOpenAI:
    """Azure OpenAI when an Azure endpoint is configured, OpenAI otherwise."""
    if settings.azure_openai_endpoint:
        return AsyncAzureOpenAI(
            azure_endpoint=settings.azure_openai_endpoint,
            api_key=settings.openai_api_key,
            api_version=settings.azure_openai_api_version,
        )
    return AsyncOpenAI(api_key=settings.openai_api_key)


class DialogueClient:
    """Resolves an utterance with the chat model, running requested tools.

    The turn list is built fresh for every utterance and dropped once a
    final answer comes back; only the profile's system prompt carries over
    between utterances.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        profile: DialogueProfile,
        tools: ToolRegistry,
        max_tool_rounds: int = 5,
    ):
        self.client = client
        self.model = model
        self.profile = profile
        self.tools = tools
        self.max_tool_rounds = max_tool_rounds

    def build_turns(self, utterance: str) -> List[DialogueTurn]:
        """Initial turn sequence for an utterance."""
        return [
            DialogueTurn.system(self.profile.system_prompt),
            DialogueTurn.user(self.profile.render_user_prompt(utterance)),
        ]

    async def respond(self, utterance: str) -> str:
        """
        Produce the reply for one caller utterance.

        Raises:
            UnknownToolError: the model asked for an unregistered tool
            MalformedArgumentsError: tool arguments failed validation
            openai.OpenAIError: the model service failed
        """
        turns = self.build_turns(utterance)
        logger.info(f"[LLM] Resolving utterance: '{utterance[:100]}'")

        choice = await self._complete(turns)
        rounds = 0
        while choice.finish_reason == FINISH_TOOL_CALLS:
            if rounds >= self.max_tool_rounds:
                logger.warning(
                    f"[LLM] Tool round limit reached ({self.max_tool_rounds}), "
                    f"answering with apology"
                )
                return self.profile.apology
            rounds += 1

            directives = [
                ToolCallDirective(
                    id=call.id,
                    name=call.function.name,
                    arguments=call.function.arguments,
                )
                for call in (choice.message.tool_calls or [])
            ]
            if not directives:
                raise DialogueError("Model finished with tool_calls but requested no tool")

            turns.append(
                DialogueTurn(
                    role=TurnRole.ASSISTANT,
                    content=choice.message.content,
                    tool_calls=directives,
                )
            )
            for directive in directives:
                turns.append(await self._run_tool(directive))

            choice = await self._complete(turns)

        content = (choice.message.content or "").strip()
        logger.info(
            f"[LLM] Final answer after {rounds} tool round(s), "
            f"finish_reason={choice.finish_reason}: '{content[:100]}'"
        )
        return content

    async def _complete(self, turns: List[DialogueTurn]):
        """Submit the turn sequence and return the first choice."""
        unanswered = pending_tool_calls(turns)
        if unanswered:
            raise DialogueError(f"Tool calls without results: {unanswered}")

        kwargs = dict(
            model=self.model,
            messages=[turn.to_message() for turn in turns],
            max_tokens=self.profile.max_tokens,
        )
        declarations = self.tools.declarations()
        if declarations:
            kwargs["tools"] = declarations

        response = await self.client.chat.completions.create(**kwargs)
        return response.choices[0]

    async def _run_tool(self, directive: ToolCallDirective) -> DialogueTurn:
        """Validate arguments, run the tool and wrap its result as a turn."""
        tool = self.tools.get(directive.name)
        arguments = tool.parse_arguments(directive.arguments)
        logger.info(f"[TOOL] Invoking {tool.name} with {arguments.model_dump()}")

        result = await asyncio.to_thread(tool.invoke, arguments)
        logger.debug(f"[TOOL] {tool.name} returned: {result[:200]}")
        return DialogueTurn.tool_result(directive, result)
