"""Document search tool backed by an external search endpoint."""
import logging
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel

from app.services.tools.base import ToolDefinition

logger = logging.getLogger(__name__)

DOCUMENT_SEARCH_TOOL_NAME = "search_documents"


class DocumentSearchInput(BaseModel):
    """Arguments for a document search."""

    query: str


class DocumentSearchClient:
    """Synchronous client for the document search endpoint.

    Tool handlers are synchronous, so this uses ``httpx.Client`` rather
    than the async client used elsewhere in the service.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        entity_types: Optional[List[str]] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.entity_types = entity_types or ["document"]
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["api-key"] = api_key
        self._client = httpx.Client(headers=headers, timeout=timeout, transport=transport)

    def search(self, arguments: DocumentSearchInput) -> Any:
        """POST the query and return the JSON body verbatim."""
        payload = {"entityTypes": self.entity_types, "query": arguments.query}
        logger.info(f"[TOOL] Document search - Query: '{arguments.query[:100]}'")

        response = self._client.post(self.endpoint, json=payload)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self._client.close()


def build_document_search_tool(client: DocumentSearchClient) -> ToolDefinition:
    """Create the document search tool definition around a client."""
    return ToolDefinition(
        name=DOCUMENT_SEARCH_TOOL_NAME,
        description=(
            "Search the organisation's documents and return matching passages "
            "relevant to the caller's question"
        ),
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search keywords taken from the caller's question",
                },
            },
            "required": ["query"],
        },
        arguments_model=DocumentSearchInput,
        handler=client.search,
    )
