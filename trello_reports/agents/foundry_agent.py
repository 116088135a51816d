import logging
from typing import List, Optional

import httpx

from trello_reports.agents.base import Message, NarrativeGenerator
from trello_reports.core.config import settings
from trello_reports.core.errors import ConfigurationError, GenerationError

logger = logging.getLogger(__name__)


class FoundryAgent(NarrativeGenerator):
    """
    OpenAI-compatible chat completions endpoint as exposed by Azure AI Foundry.
    Authenticates with an `api-key` header.
    """

    name = "foundry"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        api_version: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 60.0,
    ):
        self.api_key = api_key or settings.FOUNDRY_API_KEY
        self.base_url = (base_url or settings.FOUNDRY_API_URL).rstrip("/")
        if not self.api_key or not self.base_url:
            raise ConfigurationError("FOUNDRY_API_KEY and FOUNDRY_API_URL must be set")
        self.model = model or settings.FOUNDRY_MODEL
        self.api_version = api_version or settings.FOUNDRY_API_VERSION
        self.transport = transport
        self.timeout = timeout

    def _complete(self, messages: List[Message], temperature: float, max_tokens: int) -> str:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    f"{self.base_url}/chat/completions",
                    params={"api-version": self.api_version},
                    headers={"api-key": self.api_key, "Content-Type": "application/json"},
                    json={
                        "model": self.model,
                        "messages": messages,
                        "temperature": temperature,
                        "max_tokens": max_tokens,
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Foundry API returned status {e.response.status_code}")
            raise GenerationError(f"Text generation failed with status {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"Foundry network error: {e}")
            raise GenerationError("Could not reach text generation service") from e
        except ValueError as e:
            raise GenerationError("Invalid response from text generation service") from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or not isinstance(choices, list):
            raise GenerationError("No response from model")

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise GenerationError("Malformed choice in model response")

        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise GenerationError("Model returned an empty message")
        return content.strip()
