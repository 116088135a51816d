import logging
import threading
from typing import Callable, Optional

from trello_reports.core.config import Settings
from trello_reports.core.scheduler import ReportAgent, ReportSchedule

logger = logging.getLogger(__name__)


class AgentProvider:
    """
    Holds the single report agent of the process.

    The agent needs a user's Trello credentials, so it is built on the first
    authenticated report request and kept until application shutdown.
    """

    def __init__(self, settings: Settings, factory: Callable[..., ReportAgent] = ReportAgent):
        self.settings = settings
        self.factory = factory
        self._agent: Optional[ReportAgent] = None
        self._lock = threading.Lock()

    @property
    def agent(self) -> Optional[ReportAgent]:
        return self._agent

    def get(self, access_token: str, access_secret: str) -> ReportAgent:
        with self._lock:
            if self._agent is None:
                agent = self.factory(
                    access_token,
                    access_secret,
                    ReportSchedule(
                        weekly=self.settings.REPORT_WEEKLY,
                        monthly=self.settings.REPORT_MONTHLY,
                    ),
                    storage_path=self.settings.REPORTS_DIR,
                )
                if self.settings.AGENT_AUTOSTART:
                    agent.start()
                self._agent = agent
                logger.info("Report agent created")
            return self._agent

    def shutdown(self) -> None:
        with self._lock:
            if self._agent is not None and self._agent.is_running:
                self._agent.stop()
