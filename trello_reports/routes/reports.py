import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import Response

from trello_reports.core.errors import NotFoundError, ReportAgentError
from trello_reports.core.scheduler import ReportAgent
from trello_reports.models.report import (
    BOARD_ID_PATTERN,
    REPORT_ID_PATTERN,
    GenerateReportRequest,
    Report,
    ReportType,
)
from trello_reports.routes.deps import get_report_agent
from trello_reports.utils.pdf_generator import generate_report_pdf

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_ERROR = "Something went wrong, please try again."
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9 ._-]")


def _report_to_dict(report: Report) -> dict:
    return report.model_dump(mode="json")


def _parse_report_type(value: str) -> ReportType:
    try:
        return ReportType(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid report type")


def pdf_filename(report: Report) -> str:
    board_name = _UNSAFE_FILENAME_CHARS.sub("_", report.board_name) or report.board_id
    return f"{board_name}_{report.type.value}_report_{report.generated_at:%Y-%m-%d}.pdf"


@router.get("/reports")
def list_reports(
    board_id: Optional[str] = Query(None, pattern=BOARD_ID_PATTERN, description="Board to list reports for"),
    report_type: Optional[str] = Query(None, description="weekly or monthly"),
    agent: ReportAgent = Depends(get_report_agent),
):
    """
    Returns stored reports for a board, or all reports of one type,
    most recent first.
    """
    if not board_id and not report_type:
        raise HTTPException(status_code=400, detail="board_id or report_type is required")

    try:
        if board_id:
            reports = agent.get_reports_by_board(board_id)
        else:
            reports = agent.get_reports_by_type(_parse_report_type(report_type))
    except ReportAgentError as e:
        logger.error(f"Error getting reports: {e}")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)

    reports.sort(key=lambda r: r.generated_at, reverse=True)
    return {"reports": [_report_to_dict(r) for r in reports]}


@router.post("/generate-report")
def generate_report(req: GenerateReportRequest, agent: ReportAgent = Depends(get_report_agent)):
    """Generate a report for one board right away and store it."""
    report_type = _parse_report_type(req.report_type)

    try:
        report = agent.generate_on_demand(req.board_id, report_type)
    except ReportAgentError as e:
        logger.error(f"Error generating report for board {req.board_id}: {e}")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)

    return {
        "report": _report_to_dict(report),
        "view_url": f"/view-report?id={report.id}",
    }


@router.get("/view-report")
def view_report(
    id: str = Query(..., pattern=REPORT_ID_PATTERN, description="Report id"),
    agent: ReportAgent = Depends(get_report_agent),
):
    try:
        report = agent.get_report(id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Report not found")
    except ReportAgentError as e:
        logger.error(f"Error getting report {id}: {e}")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)

    return {
        "title": f"{report.type.value.title()} Report - {report.board_name}",
        "report": _report_to_dict(report),
    }


@router.get("/download-report-pdf")
def download_report_pdf(
    id: str = Query(..., pattern=REPORT_ID_PATTERN, description="Report id"),
    agent: ReportAgent = Depends(get_report_agent),
):
    """Render a stored report as a PDF attachment."""
    try:
        report = agent.get_report(id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Report not found")
    except ReportAgentError as e:
        logger.error(f"Error getting report {id}: {e}")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)

    pdf_bytes = generate_report_pdf(
        report.content,
        report.board_name,
        report.type.value,
        report.start_date,
        report.end_date,
    )

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(report)}"'},
    )


@router.delete("/reports/{report_id}")
def delete_report(
    report_id: str = Path(..., pattern=REPORT_ID_PATTERN),
    agent: ReportAgent = Depends(get_report_agent),
):
    try:
        agent.delete_report(report_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Report not found")
    except ReportAgentError as e:
        logger.error(f"Error deleting report {report_id}: {e}")
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)

    return {"status": "deleted", "report_id": report_id}


@router.get("/agent/status")
def agent_status(agent: ReportAgent = Depends(get_report_agent)):
    return {
        "running": agent.is_running,
        "schedule": {"weekly": agent.schedule.weekly, "monthly": agent.schedule.monthly},
    }
