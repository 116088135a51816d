from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


# Trello ids are alphanumeric; report ids add the `_` and `-` of the type and date.
BOARD_ID_PATTERN = r"^[A-Za-z0-9]+$"
REPORT_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


class ReportType(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def build_report_id(board_id: str, report_type: ReportType, day: date) -> str:
    """Report ids are reproducible from (board, type, calendar day)."""
    return f"{board_id}_{ReportType(report_type).value}_{day.isoformat()}"


class Report(BaseModel):
    """
    A generated board report.
    The board name is captured at generation time and never re-fetched.
    """

    id: str
    board_id: str
    board_name: str
    type: ReportType
    content: str
    generated_at: datetime
    start_date: datetime
    end_date: datetime

    @classmethod
    def create(
        cls,
        board_id: str,
        board_name: str,
        report_type: ReportType,
        content: str,
        generated_at: datetime,
        start_date: datetime,
        end_date: datetime,
    ) -> "Report":
        return cls(
            id=build_report_id(board_id, report_type, generated_at.date()),
            board_id=board_id,
            board_name=board_name,
            type=report_type,
            content=content,
            generated_at=generated_at,
            start_date=start_date,
            end_date=end_date,
        )

    @property
    def filename(self) -> str:
        return f"{build_report_id(self.board_id, self.type, self.generated_at.date())}.json"


class GenerateReportRequest(BaseModel):
    board_id: str = Field(..., min_length=1, pattern=BOARD_ID_PATTERN)
    report_type: str
