"""Application context built once at startup and shared by all handlers."""
import logging
from dataclasses import dataclass
from typing import List, Optional

from app.core.config import ConfigurationError, Settings
from app.services.call_session.controller import CallSessionController
from app.services.call_session.recognition import RecognitionSessionManager
from app.services.call_session.registry import SessionRegistry
from app.services.dialogue.profile import DialogueProfile, load_profile
from app.services.llm.client import DialogueClient, create_openai_client
from app.services.telephony.acs import AcsCallAutomationClient
from app.services.telephony.base import CallAutomationClient
from app.services.tools.base import ToolDefinition, ToolRegistry
from app.services.tools.document_search import (
    DOCUMENT_SEARCH_TOOL_NAME,
    DocumentSearchClient,
    build_document_search_tool,
)
from app.services.tools.weather import build_weather_tool

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Long-lived collaborators of the service."""

    settings: Settings
    profile: DialogueProfile
    tools: ToolRegistry
    telephony: CallAutomationClient
    dialogue: DialogueClient
    sessions: SessionRegistry
    controller: CallSessionController
    search_client: Optional[DocumentSearchClient] = None

    async def aclose(self) -> None:
        await self.telephony.close()
        if self.search_client is not None:
            self.search_client.close()


def build_tool_registry(search_client: Optional[DocumentSearchClient] = None) -> ToolRegistry:
    """Every tool the service can offer; profiles pick a subset."""
    tools: List[ToolDefinition] = [build_weather_tool()]
    if search_client is not None:
        tools.append(build_document_search_tool(search_client))
    return ToolRegistry(tools)


def build_controller(
    settings: Settings,
    profile: DialogueProfile,
    telephony: CallAutomationClient,
    dialogue: DialogueClient,
    sessions: Optional[SessionRegistry] = None,
) -> CallSessionController:
    """Wire the recognition manager and controller around collaborators."""
    return CallSessionController(
        telephony=telephony,
        recognition=RecognitionSessionManager(telephony, profile),
        dialogue=dialogue,
        profile=profile,
        sessions=sessions if sessions is not None else SessionRegistry(),
        callback_base_url=settings.callback_base_url,
        cognitive_services_endpoint=settings.cognitive_service_endpoint,
        max_silence_retries=settings.max_silence_retries,
    )


def build_context(settings: Settings) -> AppContext:
    """Construct the application context from settings."""
    profile = load_profile(settings.dialogue_profile, settings.profiles_file)
    search_client = None
    if settings.document_search_endpoint:
        search_client = DocumentSearchClient(
            settings.document_search_endpoint,
            api_key=settings.document_search_api_key,
            entity_types=settings.document_search_entity_types,
        )
    elif DOCUMENT_SEARCH_TOOL_NAME in profile.tools:
        raise ConfigurationError(
            f"Dialogue profile '{profile.name}' uses {DOCUMENT_SEARCH_TOOL_NAME} "
            f"but DOCUMENT_SEARCH_ENDPOINT is not set"
        )
    all_tools = build_tool_registry(search_client)
    tools = all_tools.subset(profile.tools)
    logger.info(
        f"[STARTUP] Dialogue profile '{profile.name}' with tools: {tools.names or 'none'}"
    )

    telephony = AcsCallAutomationClient(settings.acs_connection_string)
    dialogue = DialogueClient(
        client=create_openai_client(settings),
        model=settings.openai_model,
        profile=profile,
        tools=tools,
        max_tool_rounds=settings.max_tool_rounds,
    )
    sessions = SessionRegistry()
    controller = build_controller(settings, profile, telephony, dialogue, sessions)

    return AppContext(
        settings=settings,
        profile=profile,
        tools=tools,
        telephony=telephony,
        dialogue=dialogue,
        sessions=sessions,
        controller=controller,
        search_client=search_client,
    )
