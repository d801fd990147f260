"""
Export Service – turns a report request into PDF bytes.

Creates a fresh ``ReportLabDocument`` per call, runs the matching
layout (standard or three-per-page) and serialises the result.
"""

from __future__ import annotations

import logging
import re

from app.models.schemas import ReportRequest, SurveyDetail
from app.services.document_adapter import ReportLabDocument
from app.services.pdf_service import PdfReportService

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
_ISO_DATE = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})")


class PdfExportService:
    """Generates downloadable survey report PDFs."""

    def __init__(self, report_service: PdfReportService | None = None):
        self._report = report_service or PdfReportService()

    def export(self, request: ReportRequest) -> bytes:
        doc = ReportLabDocument(title=request.survey.name)

        if request.layout == "standard":
            self._report.generate_report(doc, request.survey, request.images, request.options)
        else:
            self._report.generate_survey_report(
                doc, request.survey, request.images, request.options
            )

        pdf_bytes = doc.output()
        logger.info(
            "Exported %s report for %r (%d bytes)",
            request.layout, request.survey.name, len(pdf_bytes),
        )
        return pdf_bytes

    @staticmethod
    def default_filename(survey: SurveyDetail) -> str:
        """``<survey name>_<YYYYMMDD>.pdf`` with path-unsafe characters replaced."""
        name = _UNSAFE_FILENAME_CHARS.sub("_", survey.name).strip() or "report"
        match = _ISO_DATE.match(survey.survey_date or "")
        if match is None:
            return f"{name}.pdf"
        return f"{name}_{''.join(match.groups())}.pdf"
