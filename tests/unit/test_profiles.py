"""Unit tests for dialogue profiles and event parsing."""
import pytest

from app.services.dialogue.profile import (
    EmptyUtterancePolicy,
    ProfileNotFoundError,
    load_profile,
    load_profiles,
)
from app.services.telephony.events import CallEvent, CallEventType, EventGridEvent


class TestProfiles:
    """Test loading dialogue profiles from YAML."""

    def test_bundled_profiles(self):
        profiles = load_profiles()

        assert set(profiles) == {"weather", "documents"}
        assert profiles["weather"].tools == ["get_current_weather"]
        assert profiles["documents"].tools == ["search_documents"]

    def test_weather_profile(self):
        profile = load_profile("weather")

        assert profile.language == "ja-JP"
        assert profile.voice == "ja-JP-DaichiNeural"
        assert profile.empty_utterance_policy == EmptyUtterancePolicy.DROP
        assert profile.greeting == "お電話ありがとうございます。何をお手伝いしましょう？"

    def test_documents_profile_reprompts(self):
        assert load_profile("documents").empty_utterance_policy == EmptyUtterancePolicy.REPROMPT

    def test_render_user_prompt(self):
        rendered = load_profile("weather").render_user_prompt("東京の天気は")
        assert rendered.endswith(": 東京の天気は?")

    def test_defaults_from_custom_file(self, profiles_file):
        profile = load_profile("minimal", profiles_file)

        assert profile.name == "minimal"
        assert profile.tools == []
        assert profile.user_prompt_template == "{utterance}"
        assert profile.render_user_prompt("hi") == "hi"

    def test_unknown_profile(self, profiles_file):
        with pytest.raises(ProfileNotFoundError):
            load_profile("weather", profiles_file)


class TestEvents:
    """Test webhook event parsing."""

    def test_incoming_call_fields(self):
        event = EventGridEvent.model_validate(
            {
                "id": "1",
                "eventType": "Microsoft.Communication.IncomingCall",
                "data": {"from": {"rawId": "4:+81"}, "incomingCallContext": "ctx"},
            }
        )

        assert event.is_incoming_call
        assert not event.is_subscription_validation
        assert event.caller_id == "4:+81"
        assert event.incoming_call_context == "ctx"

    def test_call_event_type(self):
        event = CallEvent.model_validate(
            {
                "id": "1",
                "type": "Microsoft.Communication.RecognizeFailed",
                "data": {
                    "callConnectionId": "c",
                    "operationContext": "GetFreeFormText",
                    "resultInformation": {"code": 400, "subCode": 8510, "message": "silence"},
                },
            }
        )

        assert event.event_type == CallEventType.RECOGNIZE_FAILED
        assert event.connection_id == "c"
        assert event.operation_context == "GetFreeFormText"
        assert event.result_information.sub_code == 8510

    def test_unknown_event_type(self):
        event = CallEvent.model_validate({"id": "1", "type": "Microsoft.Communication.Other"})
        assert event.event_type is None
