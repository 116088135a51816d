from typing import Callable, Dict, Optional

from trello_reports.agents.base import NarrativeGenerator
from trello_reports.agents.foundry_agent import FoundryAgent
from trello_reports.agents.groq_agent import GroqAgent
from trello_reports.core.config import Settings, settings as default_settings
from trello_reports.core.errors import ConfigurationError


def _build_groq(settings: Settings) -> NarrativeGenerator:
    return GroqAgent(api_key=settings.GROQ_API_KEY, model=settings.GROQ_MODEL)


def _build_foundry(settings: Settings) -> NarrativeGenerator:
    return FoundryAgent(
        api_key=settings.FOUNDRY_API_KEY,
        base_url=settings.FOUNDRY_API_URL,
        model=settings.FOUNDRY_MODEL,
        api_version=settings.FOUNDRY_API_VERSION,
    )


PROVIDERS: Dict[str, Callable[[Settings], NarrativeGenerator]] = {
    "groq": _build_groq,
    "foundry": _build_foundry,
}


def get_narrative_generator(settings: Optional[Settings] = None) -> NarrativeGenerator:
    """Build the text-generation backend selected by LLM_PROVIDER."""
    settings = settings or default_settings
    build = PROVIDERS.get(settings.LLM_PROVIDER.lower())
    if build is None:
        raise ConfigurationError(
            f"Unknown LLM_PROVIDER {settings.LLM_PROVIDER!r}; expected one of: {', '.join(PROVIDERS)}"
        )
    return build(settings)
