"""Weather lookup tool."""
from typing import Literal

from pydantic import BaseModel

from app.services.tools.base import ToolDefinition

WEATHER_TOOL_NAME = "get_current_weather"

# Demo tool: no weather backend is wired up, every location reports this
FIXED_TEMPERATURE = 59


class WeatherInput(BaseModel):
    """Arguments for the weather lookup."""

    location: str
    unit: Literal["Celsius", "Fahrenheit"] = "Celsius"


class Weather(BaseModel):
    """Weather lookup result."""

    temperature: int
    unit: str = "Celsius"


def get_weather(arguments: WeatherInput) -> Weather:
    """Return the current weather for a location."""
    return Weather(temperature=FIXED_TEMPERATURE, unit=arguments.unit)


def build_weather_tool() -> ToolDefinition:
    """Create the weather tool definition."""
    return ToolDefinition(
        name=WEATHER_TOOL_NAME,
        description="Get the current weather in a given location",
        parameters={
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": "The city and state, e.g. San Francisco, CA",
                },
                "unit": {
                    "type": "string",
                    "enum": ["Celsius", "Fahrenheit"],
                },
            },
            "required": ["location"],
        },
        arguments_model=WeatherInput,
        handler=get_weather,
    )
