"""Dialogue profiles: prompt wording, tool set and voice for one assistant."""
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel


class EmptyUtterancePolicy(str, Enum):
    """What to do when recognition succeeds with blank text."""

    DROP = "drop"  # Ignore; the call waits for the next event
    REPROMPT = "reprompt"  # Ask again without spending retry budget

    def __str__(self) -> str:
        return self.value


class DialogueProfile(BaseModel):
    """Everything that differs between assistant variants."""

    name: str
    system_prompt: str
    user_prompt_template: str = "{utterance}"
    tools: List[str] = []
    max_tokens: int = 1000
    language: str = "ja-JP"
    voice: str = "ja-JP-DaichiNeural"
    greeting: str
    retry_prompt: str
    farewell: str
    apology: str
    empty_utterance_policy: EmptyUtterancePolicy = EmptyUtterancePolicy.DROP

    def render_user_prompt(self, utterance: str) -> str:
        """Fill the user prompt template with the caller's utterance."""
        return self.user_prompt_template.format(utterance=utterance)


class ProfileNotFoundError(KeyError):
    """Raised when a requested profile is not defined."""


DEFAULT_PROFILES_FILE = Path(__file__).parent / "data" / "profiles.yaml"


def load_profiles(profiles_file: Optional[Union[str, Path]] = None) -> Dict[str, DialogueProfile]:
    """Load all profiles from a YAML file keyed by profile name."""
    path = Path(profiles_file) if profiles_file else DEFAULT_PROFILES_FILE
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    profiles = {}
    for name, fields in (data.get("profiles") or {}).items():
        profiles[name] = DialogueProfile(name=name, **fields)
    return profiles


def load_profile(name: str, profiles_file: Optional[Union[str, Path]] = None) -> DialogueProfile:
    """Load one named profile."""
    profiles = load_profiles(profiles_file)
    if name not in profiles:
        raise ProfileNotFoundError(
            f"Dialogue profile {name!r} not found (available: {', '.join(sorted(profiles))})"
        )
    return profiles[name]
