"""
Report Controller – API route definitions.

Defines endpoints for health check and survey report generation.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from app.models.schemas import ReportRequest
from app.repository.file_repository import FileRepository
from app.services.export_service import PdfExportService
from app.services.pdf_service import ReportPreconditionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["reports"])


# ---------------------------------------------------------------------------
# Dependency injection helpers
# ---------------------------------------------------------------------------

def _get_file_repo() -> FileRepository:
    return FileRepository()


def _get_export_service() -> PdfExportService:
    return PdfExportService()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/health")
async def health():
    """Health-check endpoint."""
    return {"status": "ok", "service": "Survey Report Engine"}


@router.post("/reports")
def create_report(
    request: ReportRequest,
    repo: FileRepository = Depends(_get_file_repo),
    export_svc: PdfExportService = Depends(_get_export_service),
):
    """
    Lay out a survey report and stream it back as a PDF download.

    ``layout="three_per_page"`` (default) puts the basic information on
    page 1 and three photo + comment blocks on each following page;
    ``layout="standard"`` produces cover page, info section and a
    single-column photo list.
    """
    session_dir = repo.create_session_dir()

    try:
        pdf_bytes = export_svc.export(request)
        filename = export_svc.default_filename(request.survey)
        pdf_path = repo.save_bytes(pdf_bytes, session_dir, "report.pdf")
    except ReportPreconditionError as e:
        repo.cleanup(session_dir)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        repo.cleanup(session_dir)
        logger.exception("Report generation failed")
        raise HTTPException(status_code=500, detail=f"Report generation failed: {str(e)}")

    def _stream():
        yield from repo.iter_file(pdf_path)
        # Cleanup after streaming
        repo.cleanup(session_dir)

    return StreamingResponse(
        _stream(),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}",
        },
    )
