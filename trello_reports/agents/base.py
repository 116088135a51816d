import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from trello_reports.agents.prompts import (
    CHAT_MAX_TOKENS,
    CHAT_SYSTEM_PROMPT,
    CHAT_TEMPERATURE,
    REPORT_TEMPERATURE,
    format_board_digest,
    get_report_system_prompt,
    get_report_token_budget,
)
from trello_reports.models.board import BoardSnapshot

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class NarrativeGenerator(ABC):
    """
    Text-generation backend used by the report agent.
    Subclasses only implement `_complete`; prompt assembly is shared.
    """

    name = "base"

    def send_simple_message(self, text: str) -> str:
        """Single-turn chat used by the diagnostic chat endpoint."""
        messages = [
            {"role": "system", "content": CHAT_SYSTEM_PROMPT},
            {"role": "user", "content": text},
        ]
        return self._complete(messages, temperature=CHAT_TEMPERATURE, max_tokens=CHAT_MAX_TOKENS)

    def generate_narrative(self, snapshot: BoardSnapshot, report_type: str) -> str:
        """Summarize a board snapshot into a Markdown report of the given type."""
        report_type = getattr(report_type, "value", report_type)
        messages = [
            {"role": "system", "content": get_report_system_prompt(report_type)},
            {"role": "user", "content": format_board_digest(snapshot)},
        ]
        logger.info(f"Requesting {report_type} narrative for board {snapshot.board.name!r} from {self.name}")
        return self._complete(
            messages,
            temperature=REPORT_TEMPERATURE,
            max_tokens=get_report_token_budget(report_type),
        )

    @abstractmethod
    def _complete(self, messages: List[Message], temperature: float, max_tokens: int) -> str:
        """Send one chat-completion request and return the first choice's text."""
