"""Request-scoped dependencies shared by the routers."""

import logging
from typing import Tuple

from fastapi import Depends, HTTPException, Request

from trello_reports.agents.base import NarrativeGenerator
from trello_reports.agents.factory import get_narrative_generator
from trello_reports.core.errors import ConfigurationError
from trello_reports.core.scheduler import ReportAgent
from trello_reports.integrations.trello_integration import TrelloIntegration

logger = logging.getLogger(__name__)


def get_session_credentials(request: Request) -> Tuple[str, str]:
    access_token = request.session.get("access_token")
    access_secret = request.session.get("access_secret")
    if not access_token or not access_secret:
        raise HTTPException(status_code=401, detail="Not authenticated with Trello")
    return access_token, access_secret


def get_report_agent(
    request: Request,
    credentials: Tuple[str, str] = Depends(get_session_credentials),
) -> ReportAgent:
    try:
        return request.app.state.agent_provider.get(*credentials)
    except ConfigurationError as e:
        logger.error(f"Error creating agent: {e}")
        raise HTTPException(status_code=500, detail="Error creating report agent")


def get_trello_client(
    credentials: Tuple[str, str] = Depends(get_session_credentials),
) -> TrelloIntegration:
    return TrelloIntegration(*credentials)


def get_chat_backend() -> NarrativeGenerator:
    try:
        return get_narrative_generator()
    except ConfigurationError as e:
        logger.error(f"Text generation backend unavailable: {e}")
        raise HTTPException(status_code=503, detail="Text generation backend not configured")
