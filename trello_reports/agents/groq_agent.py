import logging
from typing import List, Optional

import groq
from groq import Groq

from trello_reports.agents.base import Message, NarrativeGenerator
from trello_reports.core.config import settings
from trello_reports.core.errors import ConfigurationError, GenerationError

logger = logging.getLogger(__name__)


class GroqAgent(NarrativeGenerator):
    """
    Generates board reports and chat replies through Groq's chat completions API.
    """

    name = "groq"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client=None):
        self.model = model or settings.GROQ_MODEL
        if client is not None:
            self.client = client
            return

        api_key = api_key or settings.GROQ_API_KEY
        if not api_key:
            raise ConfigurationError("Missing GROQ_API_KEY in environment variables.")
        self.client = Groq(api_key=api_key)

    def _complete(self, messages: List[Message], temperature: float, max_tokens: int) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except groq.APIError as e:
            logger.error(f"Groq request failed: {e}")
            raise GenerationError("Text generation request failed") from e

        if not response.choices:
            raise GenerationError("No response from model")

        content = response.choices[0].message.content
        if not content:
            raise GenerationError("Model returned an empty message")
        return content.strip()
