"""Shared test fixtures and configuration."""
import pytest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from fastapi.testclient import TestClient

from app.main import app
from app.core.config import Settings
from app.core.context import AppContext, build_controller, build_tool_registry
from app.core.dependencies import get_context
from app.services.call_session.models import CallSession, CallState
from app.services.call_session.registry import SessionRegistry
from app.services.dialogue.profile import load_profile
from app.services.llm.client import DialogueClient
from app.services.telephony.base import CallAutomationClient

TEST_CONNECTION_STRING = (
    "endpoint=https://test-acs.communication.azure.com/;accesskey=dGVzdC1hY2Nlc3Mta2V5"
)
CALLER_ID = "4:+819012345678"
CONNECTION_ID = "conn-1234"


@pytest.fixture
def test_settings():
    """Settings for testing."""
    return Settings(
        acs_connection_string=TEST_CONNECTION_STRING,
        cognitive_service_endpoint="https://test-cognitive.cognitiveservices.azure.com/",
        callback_base_url="https://test-tunnel.example.com",
        openai_api_key="test-key",
        openai_model="gpt-test",
        dialogue_profile="weather",
        max_silence_retries=2,
        max_tool_rounds=5,
    )


@pytest.fixture
def profile():
    """The default Japanese weather assistant profile."""
    return load_profile("weather")


@pytest.fixture
def tool_registry():
    """Registry with the weather tool only."""
    return build_tool_registry()


@pytest.fixture
def telephony():
    """Mock call automation client."""
    client = AsyncMock(spec=CallAutomationClient)
    client.answer_call.return_value = CONNECTION_ID
    return client


def make_completion(content=None, finish_reason="stop", tool_calls=None):
    """Build an object shaped like a chat completion response."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(finish_reason=finish_reason, message=message)]
    )


def make_tool_call(name, arguments, call_id="call_1"):
    """Build an object shaped like a chat completion tool call."""
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


@pytest.fixture
def mock_openai():
    """Mock OpenAI API client answering with a plain sentence."""
    mock_client = Mock()
    mock_client.chat.completions.create = AsyncMock(
        return_value=make_completion(content="こんにちは。")
    )
    return mock_client


@pytest.fixture
def dialogue_client(mock_openai, profile, tool_registry):
    """Dialogue client over the mocked OpenAI client."""
    return DialogueClient(
        client=mock_openai,
        model="gpt-test",
        profile=profile,
        tools=tool_registry.subset(profile.tools),
        max_tool_rounds=5,
    )


@pytest.fixture
def sessions():
    return SessionRegistry()


@pytest.fixture
def controller(test_settings, profile, telephony, dialogue_client, sessions):
    """Call session controller over mocked collaborators."""
    return build_controller(test_settings, profile, telephony, dialogue_client, sessions)


@pytest.fixture
def connected_session(sessions):
    """A session whose call is connected and waiting for the caller."""
    session = CallSession(
        correlation_id="corr-1",
        caller_id=CALLER_ID,
        connection_id=CONNECTION_ID,
        retries_remaining=2,
        state=CallState.AWAITING_RECOGNITION,
        recognition_pending=True,
    )
    sessions.add(session)
    return session


def make_call_event(event_type, connection_id=CONNECTION_ID, **data):
    """Build a Call Automation CloudEvent payload."""
    return {
        "id": f"evt-{event_type}",
        "source": f"calling/callConnections/{connection_id}",
        "type": f"Microsoft.Communication.{event_type}",
        "specversion": "1.0",
        "data": {"callConnectionId": connection_id, **data},
    }


@pytest.fixture
def app_context(test_settings, profile, tool_registry, telephony, dialogue_client, sessions, controller):
    return AppContext(
        settings=test_settings,
        profile=profile,
        tools=tool_registry,
        telephony=telephony,
        dialogue=dialogue_client,
        sessions=sessions,
        controller=controller,
    )


@pytest.fixture
def test_client(app_context):
    """Create FastAPI test client with the context overridden."""
    app.dependency_overrides[get_context] = lambda: app_context

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def profiles_file(tmp_path) -> Path:
    """A profiles YAML file with a single minimal profile."""
    path = tmp_path / "profiles.yaml"
    path.write_text(
        """profiles:
  minimal:
    system_prompt: You are a test assistant.
    greeting: Hello.
    retry_prompt: Are you there?
    farewell: Goodbye.
    apology: Sorry.
""",
        encoding="utf-8",
    )
    return path
