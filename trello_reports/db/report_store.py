import glob
import logging
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from trello_reports.core.errors import NotFoundError, StorageError
from trello_reports.models.report import Report, ReportType

logger = logging.getLogger(__name__)


def _is_safe_key(value: str) -> bool:
    """True when an id used in a file name or glob cannot reach outside the storage directory."""
    return bool(value) and "/" not in value and "\\" not in value and ".." not in value


class ReportStore:
    """
    Flat JSON-file storage for generated reports.
    One file per report, named `{board_id}_{type}_{YYYY-MM-DD}.json`, so a
    report regenerated on the same day replaces the earlier file.
    """

    def __init__(self, storage_path: Union[str, Path]):
        self.storage_path = Path(storage_path)
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create storage directory {self.storage_path}: {e}") from e

    def save(self, report: Report) -> Path:
        if not _is_safe_key(report.board_id):
            raise StorageError(f"Refusing to store report with board id {report.board_id!r}")
        path = self.storage_path / report.filename
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
            path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Error writing report file {path.name}: {e}") from e
        logger.debug(f"Saved report {report.id} to {path}")
        return path

    def get_by_board(self, board_id: str) -> List[Report]:
        if not _is_safe_key(board_id):
            raise NotFoundError(f"Invalid board id {board_id!r}")
        return self._load_matching(f"{glob.escape(board_id)}_*.json")

    def get_by_type(self, report_type: Union[ReportType, str]) -> List[Report]:
        report_type = ReportType(report_type)
        return self._load_matching(f"*_{report_type.value}_*.json")

    def get_by_id(self, report_id: str) -> Report:
        """
        Scan the directory for a file whose embedded id matches.
        Files that cannot be read or parsed as reports are skipped.
        """
        try:
            candidates = sorted(p for p in self.storage_path.iterdir() if p.is_file())
        except OSError as e:
            raise StorageError(f"Error reading storage directory: {e}") from e

        for path in candidates:
            try:
                report = Report.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, ValidationError):
                continue
            if report.id == report_id:
                return report

        raise NotFoundError(f"Report {report_id!r} not found")

    def delete(self, report_id: str) -> None:
        if not _is_safe_key(report_id):
            raise NotFoundError(f"Report {report_id!r} not found")
        matches = sorted(self.storage_path.glob(f"*{glob.escape(report_id)}*.json"))
        if not matches:
            raise NotFoundError(f"Report {report_id!r} not found")
        try:
            matches[0].unlink()
        except OSError as e:
            raise StorageError(f"Error deleting report file {matches[0].name}: {e}") from e
        logger.info(f"Deleted report file {matches[0].name}")

    def _load_matching(self, pattern: str) -> List[Report]:
        # A single unreadable file fails the whole listing.
        reports = []
        for path in sorted(self.storage_path.glob(pattern)):
            try:
                reports.append(Report.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError) as e:
                raise StorageError(f"Error reading report file {path.name}: {e}") from e
            except ValidationError as e:
                raise StorageError(f"Error parsing report file {path.name}: {e}") from e
        return reports
