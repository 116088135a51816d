import logging
import threading
from calendar import monthrange
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple, Union

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from trello_reports.agents.base import NarrativeGenerator
from trello_reports.agents.factory import get_narrative_generator
from trello_reports.core.config import settings
from trello_reports.core.errors import (
    AgentStateError,
    ConfigurationError,
    RemoteAPIError,
    ReportAgentError,
    StorageError,
)
from trello_reports.db.report_store import ReportStore
from trello_reports.integrations.trello_integration import TrelloIntegration
from trello_reports.models.report import Report, ReportType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSchedule:
    """Which periodic reports the agent produces."""

    weekly: bool = True
    monthly: bool = True


def subtract_month(moment: datetime) -> datetime:
    """Same day one calendar month earlier, clamped to the shorter month's end."""
    if moment.month == 1:
        year, month = moment.year - 1, 12
    else:
        year, month = moment.year, moment.month - 1
    day = min(moment.day, monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def report_window(report_type: Union[ReportType, str], end_date: datetime) -> Tuple[datetime, datetime]:
    if ReportType(report_type) == ReportType.WEEKLY:
        return end_date - timedelta(days=7), end_date
    return subtract_month(end_date), end_date


class ReportAgent:
    """
    Generates board reports on a schedule and on demand.

    While running, a background scheduler performs a due-check right away and
    then once per `check_interval`: weekly reports are due on Mondays, monthly
    reports on the first day of the month. Every accessible board is then
    processed one after another; a failure on one board is logged and the
    next board is still processed.
    """

    JOB_ID = "report_due_check"

    def __init__(
        self,
        access_token: str,
        access_secret: str,
        schedule: Optional[ReportSchedule] = None,
        *,
        store: Optional[ReportStore] = None,
        trello: Optional[TrelloIntegration] = None,
        generator: Optional[NarrativeGenerator] = None,
        storage_path: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
        check_interval: Optional[timedelta] = None,
    ):
        self.schedule = schedule or ReportSchedule()

        if store is None:
            try:
                store = ReportStore(storage_path or settings.REPORTS_DIR)
            except StorageError as e:
                raise ConfigurationError(f"Error creating report store: {e}") from e
        self.store = store

        self.trello = trello or TrelloIntegration(access_token, access_secret)
        self.generator = generator or get_narrative_generator()
        self.clock = clock
        self.check_interval = check_interval or timedelta(hours=settings.AGENT_CHECK_INTERVAL_HOURS)

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._scheduler: Optional[BackgroundScheduler] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the background due-check loop."""
        with self._lock:
            if self._running:
                raise AgentStateError("agent is already running")

            self._stop_event.clear()
            scheduler = BackgroundScheduler()
            scheduler.add_job(
                self._run_due_check,
                trigger=IntervalTrigger(seconds=self.check_interval.total_seconds()),
                id=self.JOB_ID,
                name="Check for due board reports",
                next_run_time=datetime.now(),
                max_instances=1,
                coalesce=True,
                misfire_grace_time=None,
            )
            scheduler.start()
            self._scheduler = scheduler
            self._running = True

        logger.info(f"Report agent started (weekly={self.schedule.weekly}, monthly={self.schedule.monthly})")

    def stop(self) -> None:
        """Stop the loop, waiting for an in-flight due-check to finish."""
        with self._lock:
            if not self._running:
                raise AgentStateError("agent is not running")

            self._stop_event.set()
            self._scheduler.shutdown(wait=True)
            self._scheduler = None
            self._running = False

        logger.info("Report agent stopped")

    def due_report_types(self, now: datetime) -> List[ReportType]:
        due = []
        if self.schedule.weekly and now.weekday() == 0:
            due.append(ReportType.WEEKLY)
        if self.schedule.monthly and now.day == 1:
            due.append(ReportType.MONTHLY)
        return due

    def check_and_generate_reports(self) -> List[Report]:
        """Run one due-check cycle and return the reports it produced."""
        now = self.clock()
        generated: List[Report] = []

        for report_type in self.due_report_types(now):
            if self._stop_event.is_set():
                break
            generated.extend(self._generate_scheduled_reports(report_type, now))

        return generated

    def generate_on_demand(self, board_id: str, report_type: Union[ReportType, str]) -> Report:
        """
        Generate and store a report for one board right now.
        The window ends at the current instant. Errors propagate and nothing
        is stored when any step fails.
        """
        report_type = ReportType(report_type)
        board = self.trello.get_board_details(board_id)

        now = self.clock()
        start_date, end_date = report_window(report_type, now)
        return self._generate_report(board_id, board.name, report_type, start_date, end_date, now)

    def get_report(self, report_id: str) -> Report:
        return self.store.get_by_id(report_id)

    def get_reports_by_board(self, board_id: str) -> List[Report]:
        return self.store.get_by_board(board_id)

    def get_reports_by_type(self, report_type: Union[ReportType, str]) -> List[Report]:
        return self.store.get_by_type(report_type)

    def delete_report(self, report_id: str) -> None:
        self.store.delete(report_id)

    def _run_due_check(self) -> None:
        logger.info("Running scheduled report due-check")
        try:
            reports = self.check_and_generate_reports()
        except Exception:
            logger.exception("Scheduled report due-check failed")
            return
        logger.info(f"Due-check finished, {len(reports)} report(s) generated")

    def _generate_scheduled_reports(self, report_type: ReportType, now: datetime) -> List[Report]:
        end_date = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_date, end_date = report_window(report_type, end_date)

        try:
            boards = self.trello.list_boards()
        except RemoteAPIError as e:
            logger.error(f"Error getting boards for {report_type.value} reports: {e}")
            return []

        reports = []
        for board in boards:
            if self._stop_event.is_set():
                logger.info(f"Stop requested, skipping remaining {report_type.value} reports")
                break
            try:
                report = self._generate_report(
                    board.id, board.name, report_type, start_date, end_date, self.clock()
                )
            except ReportAgentError as e:
                logger.error(f"Error generating {report_type.value} report for board {board.name} ({board.id}): {e}")
                continue
            except Exception:
                logger.exception(f"Unexpected error generating {report_type.value} report for board {board.name} ({board.id})")
                continue
            reports.append(report)

        return reports

    def _generate_report(
        self,
        board_id: str,
        board_name: str,
        report_type: ReportType,
        start_date: datetime,
        end_date: datetime,
        generated_at: datetime,
    ) -> Report:
        logger.info(f"Generating {report_type.value} report for board {board_name} ({board_id})")

        snapshot = self.trello.get_board_snapshot(board_id, since=start_date)
        content = self.generator.generate_narrative(snapshot, report_type.value)

        report = Report.create(
            board_id=board_id,
            board_name=board_name,
            report_type=report_type,
            content=content,
            generated_at=generated_at,
            start_date=start_date,
            end_date=end_date,
        )
        self.store.save(report)

        logger.info(f"Saved {report_type.value} report {report.id}")
        return report
