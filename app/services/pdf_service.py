"""
PDF Service – lays out the site survey report.

Produces, on a ``DocumentAdapter``:
  - Cover page with survey name, project, dates and memo
  - Basic information section (memo wrapped to the content width)
  - Photo list, either one image per row (standard report) or three
    photo + comment row-blocks per page
  - Page numbers, stamped in a separate final pass once the total
    page count is known
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Union

from app.models.schemas import (
    AnnotatedImage,
    AnnotatedImageWithComment,
    GenerateOptions,
    SurveyDetail,
)
from app.services.document_adapter import DocumentAdapter
from app.services.font_service import resolve_font_family
from app.services.layout_service import (
    PDF_REPORT_LAYOUT,
    PDF_REPORT_LAYOUT_V2,
    ImageDimensions,
    ReportLayout,
    ReportLayoutV2,
    calculate_image_dimensions,
)
from app.services.text_flow import format_date_for_pdf, truncate_comment_lines

logger = logging.getLogger(__name__)

IMAGE_LOAD_FAILED_TEXT = "画像を読み込めませんでした"
REPORT_TITLE = "現場調査報告書"

_TEXT_DARK = (30, 30, 30)
_TEXT_LABEL = (80, 80, 80)
_TEXT_MUTED = (120, 120, 120)
_PLACEHOLDER_BORDER = (200, 200, 200)
_PLACEHOLDER_FILL = (240, 240, 240)
_PLACEHOLDER_TEXT = (150, 150, 150)

_COVER_MEMO_MAX_LINES = 5
_COVER_MEMO_PITCH = 6
_COVER_ROW_PITCH = 15

_DOT_LENGTH = 0.5
_DOT_GAP = 1.5


class ReportPreconditionError(ValueError):
    """Raised before any drawing when a required input is missing."""


@dataclass(frozen=True)
class Placed:
    dims: ImageDimensions


@dataclass(frozen=True)
class Failed:
    dims: ImageDimensions
    error: Exception


PlacementResult = Union[Placed, Failed]


class PdfReportService:
    """Lays out survey reports onto a document; holds configuration only."""

    def __init__(
        self,
        layout: ReportLayout = PDF_REPORT_LAYOUT,
        layout_v2: ReportLayoutV2 = PDF_REPORT_LAYOUT_V2,
        font_family: str | None = None,
    ):
        self._layout = layout
        self._layout_v2 = layout_v2
        self._font_family = font_family

    @property
    def font_family(self) -> str:
        if self._font_family is None:
            self._font_family = resolve_font_family()
        return self._font_family

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def generate_report(
        self,
        doc: DocumentAdapter,
        survey: SurveyDetail,
        images: Sequence[AnnotatedImage],
        options: GenerateOptions | None = None,
    ) -> DocumentAdapter:
        """Build the standard report: cover, info, image list, page numbers."""
        self._check_preconditions(doc, survey)
        opts = options or GenerateOptions()
        doc.set_font(self.font_family)

        current_y = self._layout.PAGE_MARGIN

        if opts.include_cover_page:
            self.render_cover_page(doc, survey)
            doc.add_page()
            current_y = self._layout.PAGE_MARGIN + 10

        if opts.include_info_section:
            current_y = self.render_info_section(doc, survey, current_y)

        if opts.include_images:
            self.render_images_section(doc, images, current_y)

        if opts.include_page_numbers:
            self.render_page_numbers(doc)

        logger.info(
            "Standard report laid out: %r, %d image(s), %d page(s)",
            survey.name, len(images), doc.get_number_of_pages(),
        )
        return doc

    def generate_survey_report(
        self,
        doc: DocumentAdapter,
        survey: SurveyDetail,
        images: Sequence[AnnotatedImageWithComment],
        options: GenerateOptions | None = None,
    ) -> DocumentAdapter:
        """Build the photo report: info on page 1, three photo rows per page after."""
        self._check_preconditions(doc, survey)
        opts = options or GenerateOptions()
        doc.set_font(self.font_family)

        if opts.include_info_section:
            self.render_info_section(doc, survey, self._layout_v2.content_top)

        if opts.include_images and images:
            doc.add_page()
            self.render_images_section_3_per_page(
                doc, images, self._layout_v2.content_top
            )

        if opts.include_page_numbers:
            self.render_page_numbers(doc)

        logger.info(
            "Survey report laid out: %r, %d image(s), %d page(s)",
            survey.name, len(images), doc.get_number_of_pages(),
        )
        return doc

    @staticmethod
    def _check_preconditions(doc, survey) -> None:
        if doc is None:
            raise ReportPreconditionError("Document instance is required")
        if survey is None:
            raise ReportPreconditionError("Survey detail is required")

    # ------------------------------------------------------------------
    # Cover page
    # ------------------------------------------------------------------

    def render_cover_page(
        self,
        doc: DocumentAdapter,
        survey: SurveyDetail,
        output_image_count: int | None = None,
    ) -> None:
        layout = self._layout
        page_width = doc.get_page_width()
        center_x = page_width / 2

        doc.set_font_size(layout.TITLE_FONT_SIZE)
        doc.set_text_color(*_TEXT_DARK)
        doc.text(REPORT_TITLE, center_x, 55, align="center")

        doc.set_font_size(layout.SUBTITLE_FONT_SIZE + 4)
        doc.text(survey.name, center_x, 85, align="center")

        doc.set_draw_color(80, 80, 80)
        doc.set_line_width(0.5)
        doc.line(layout.PAGE_MARGIN + 30, 105, page_width - layout.PAGE_MARGIN - 30, 105)

        doc.set_font_size(layout.HEADER_FONT_SIZE)
        label_x = layout.PAGE_MARGIN + 25
        value_x = label_x + doc.get_text_width("工事名：") + 3

        if output_image_count is not None:
            image_count = output_image_count
        elif survey.image_count is not None:
            image_count = survey.image_count
        else:
            image_count = 0
        created_date = (survey.created_at or "").split("T")[0]

        rows = [
            ("工事名：", survey.project.name),
            ("調査日：", format_date_for_pdf(survey.survey_date)),
            ("画像数：", f"{image_count}枚"),
            ("作成日：", format_date_for_pdf(created_date)),
        ]
        y = 135
        for label, value in rows:
            self._draw_label_value(doc, label, value, label_x, value_x, y)
            y += _COVER_ROW_PITCH

        doc.set_text_color(*_TEXT_LABEL)
        doc.text("メモ：", label_x, y)
        if survey.memo and survey.memo.strip():
            doc.set_text_color(*_TEXT_DARK)
            memo_width = page_width - value_x - layout.PAGE_MARGIN
            memo_lines = doc.split_text_to_size(survey.memo, memo_width)
            for line in memo_lines[:_COVER_MEMO_MAX_LINES]:
                doc.text(line, value_x, y)
                y += _COVER_MEMO_PITCH
            if len(memo_lines) > _COVER_MEMO_MAX_LINES:
                doc.text("...", value_x, y)
        else:
            doc.set_text_color(*_TEXT_MUTED)
            doc.text("（なし）", value_x, y)

    @staticmethod
    def _draw_label_value(doc, label, value, label_x, value_x, y) -> None:
        doc.set_text_color(*_TEXT_LABEL)
        doc.text(label, label_x, y)
        doc.set_text_color(*_TEXT_DARK)
        doc.text(value, value_x, y)

    # ------------------------------------------------------------------
    # Info section
    # ------------------------------------------------------------------

    def render_info_section(
        self, doc: DocumentAdapter, survey: SurveyDetail, start_y: float
    ) -> float:
        """Draw the basic information block; return the cursor below it."""
        layout = self._layout
        margin = layout.PAGE_MARGIN
        page_width = doc.get_page_width()
        content_width = page_width - margin * 2
        line_height = layout.body_line_height
        current_y = start_y

        current_y = self._render_section_header(doc, "基本情報", current_y)

        doc.set_font_size(layout.BODY_FONT_SIZE)
        value_x = margin + doc.get_text_width("調査名：") + 3
        rows = [
            ("調査名：", survey.name),
            ("工事名：", survey.project.name),
            ("調査日：", format_date_for_pdf(survey.survey_date)),
        ]
        for label, value in rows:
            self._draw_label_value(doc, label, value, margin, value_x, current_y)
            current_y += line_height + 2

        doc.set_text_color(*_TEXT_LABEL)
        doc.text("メモ：", margin, current_y)
        current_y += line_height

        if survey.memo is not None:
            doc.set_text_color(*_TEXT_DARK)
            for line in doc.split_text_to_size(survey.memo, content_width - 5):
                doc.text(line, margin + 5, current_y)
                current_y += line_height

        return current_y + layout.SECTION_MARGIN

    def _render_section_header(self, doc: DocumentAdapter, title: str, y: float) -> float:
        layout = self._layout
        doc.set_font_size(layout.HEADER_FONT_SIZE)
        doc.set_text_color(*_TEXT_DARK)
        doc.text(title, layout.PAGE_MARGIN, y)
        y += 8

        doc.set_draw_color(100, 100, 100)
        doc.set_line_width(0.3)
        doc.line(layout.PAGE_MARGIN, y, doc.get_page_width() - layout.PAGE_MARGIN, y)
        return y + 8

    # ------------------------------------------------------------------
    # Images – standard single column
    # ------------------------------------------------------------------

    def render_images_section(
        self, doc: DocumentAdapter, images: Sequence[AnnotatedImage], start_y: float
    ) -> float:
        if not images:
            return start_y

        layout = self._layout
        margin = layout.PAGE_MARGIN
        page_width = doc.get_page_width()
        page_height = doc.get_page_height()
        content_width = page_width - margin * 2
        max_w = content_width * layout.IMAGE_MAX_WIDTH_RATIO
        max_h = (page_height - margin * 2) * layout.IMAGE_MAX_HEIGHT_RATIO
        bottom_limit = page_height - margin - 20

        current_y = self._render_section_header(doc, "画像一覧", start_y) + 2

        for index, image in enumerate(images, start=1):
            dims = calculate_image_dimensions(
                image.image_info.width, image.image_info.height, max_w, max_h
            )
            # image + caption
            if current_y + dims.height + 20 > bottom_limit:
                doc.add_page()
                current_y = margin + 10

            image_x = margin + (content_width - dims.width) / 2
            self._place_image(doc, image, image_x, current_y, dims)
            current_y += dims.height + 5

            doc.set_font_size(layout.SMALL_FONT_SIZE)
            doc.set_text_color(*_TEXT_LABEL)
            caption = f"図{index}: {image.image_info.file_name}"
            doc.text(caption, page_width / 2, current_y, align="center")
            current_y += layout.IMAGE_MARGIN + 10

        return current_y

    # ------------------------------------------------------------------
    # Images – three row-blocks per page
    # ------------------------------------------------------------------

    def render_images_section_3_per_page(
        self,
        doc: DocumentAdapter,
        images: Sequence[AnnotatedImageWithComment],
        start_y: float,
    ) -> float:
        """
        Place photo/comment row-blocks, ``IMAGES_PER_PAGE`` per page.

        The photo sits left-aligned at the page margin, the comment column
        to its right. A new page is started only when the current one is
        full, so N items add ``ceil(N / IMAGES_PER_PAGE) - 1`` pages.
        """
        if not images:
            return start_y

        v2 = self._layout_v2
        row_width = doc.get_page_width() - v2.PAGE_MARGIN * 2
        image_column_width = row_width * v2.IMAGE_WIDTH_RATIO
        comment_width = row_width * v2.COMMENT_WIDTH_RATIO
        image_x = v2.PAGE_MARGIN
        image_column_end = image_x + image_column_width + v2.COLUMN_GAP

        current_y = start_y
        images_on_current_page = 0

        for serial, image in enumerate(images, start=1):
            if images_on_current_page == v2.IMAGES_PER_PAGE:
                doc.add_page()
                current_y = v2.content_top
                images_on_current_page = 0

            dims = calculate_image_dimensions(
                image.image_info.width, image.image_info.height,
                image_column_width, v2.ROW_HEIGHT,
            )
            self._place_image(doc, image, image_x, current_y, dims)

            self._render_comment_column(
                doc, serial, image.comment, image_column_end, current_y, comment_width
            )

            current_y += v2.ROW_HEIGHT + v2.ROW_GAP
            images_on_current_page += 1

        return current_y

    def _render_comment_column(
        self,
        doc: DocumentAdapter,
        serial: int,
        comment: str | None,
        x: float,
        y: float,
        width: float,
    ) -> None:
        v2 = self._layout_v2
        rule_end = x + width

        doc.set_font_size(v2.SERIAL_FONT_SIZE)
        doc.set_text_color(*_TEXT_DARK)
        doc.text(f"No.{serial}", x, y + 4)

        y += 6
        doc.set_draw_color(*_TEXT_DARK)
        doc.set_line_width(0.5)
        doc.line(x, y, rule_end, y)

        first_baseline = y + 10
        pitch = v2.comment_line_pitch
        doc.set_draw_color(100, 100, 100)
        doc.set_line_width(0.2)
        for slot in range(v2.COMMENT_MAX_LINES):
            rule_y = first_baseline + slot * pitch + 1
            self._draw_dotted_line(doc, x, rule_y, rule_end, rule_y)

        self.render_comment(doc, comment, x, first_baseline, width)

    def render_comment(
        self,
        doc: DocumentAdapter,
        comment: str | None,
        x: float,
        y: float,
        max_width: float,
    ) -> None:
        """Wrap and draw a comment, at most ``COMMENT_MAX_LINES`` lines."""
        if not comment or not comment.strip():
            return

        v2 = self._layout_v2
        doc.set_font_size(v2.COMMENT_FONT_SIZE)
        doc.set_text_color(*_TEXT_DARK)

        lines = truncate_comment_lines(
            doc.split_text_to_size(comment, max_width), v2.COMMENT_MAX_LINES
        )
        for line in lines:
            doc.text(line, x, y)
            y += v2.comment_line_pitch

    @staticmethod
    def _draw_dotted_line(doc: DocumentAdapter, x1: float, y1: float, x2: float, y2: float) -> None:
        total = ((x2 - x1) ** 2 + (y2 - y1) ** 2) ** 0.5
        if total == 0:
            return
        dx = (x2 - x1) / total
        dy = (y2 - y1) / total
        pos = 0.0
        while pos < total:
            end = min(pos + _DOT_LENGTH, total)
            doc.line(x1 + dx * pos, y1 + dy * pos, x1 + dx * end, y1 + dy * end)
            pos += _DOT_LENGTH + _DOT_GAP

    # ------------------------------------------------------------------
    # Image placement
    # ------------------------------------------------------------------

    def _place_image(
        self,
        doc: DocumentAdapter,
        image: AnnotatedImage,
        x: float,
        y: float,
        dims: ImageDimensions,
    ) -> PlacementResult:
        result = self._try_add_image(doc, image, x, y, dims)
        if isinstance(result, Failed):
            logger.warning(
                "Image %r could not be embedded, drawing placeholder: %s",
                image.image_info.file_name, result.error,
            )
            self._draw_placeholder(doc, x, y, dims)
        return result

    @staticmethod
    def _try_add_image(doc, image, x, y, dims) -> PlacementResult:
        try:
            doc.add_image(image.data_url, "JPEG", x, y, dims.width, dims.height)
        except Exception as e:
            return Failed(dims=dims, error=e)
        return Placed(dims=dims)

    def _draw_placeholder(self, doc: DocumentAdapter, x: float, y: float, dims: ImageDimensions) -> None:
        doc.set_draw_color(*_PLACEHOLDER_BORDER)
        doc.set_fill_color(*_PLACEHOLDER_FILL)
        doc.rect(x, y, dims.width, dims.height, "FD")
        doc.set_font_size(self._layout.BODY_FONT_SIZE)
        doc.set_text_color(*_PLACEHOLDER_TEXT)
        doc.text(
            IMAGE_LOAD_FAILED_TEXT,
            x + dims.width / 2,
            y + dims.height / 2,
            align="center",
        )

    # ------------------------------------------------------------------
    # Page numbers
    # ------------------------------------------------------------------

    def render_page_numbers(self, doc: DocumentAdapter) -> None:
        """Stamp ``i / total`` on every page; run after all content is placed."""
        total = doc.get_number_of_pages()
        page_width = doc.get_page_width()
        page_height = doc.get_page_height()

        for i in range(1, total + 1):
            doc.set_page(i)
            doc.set_font_size(self._layout.SMALL_FONT_SIZE)
            doc.set_text_color(*_TEXT_MUTED)
            doc.text(f"{i} / {total}", page_width / 2, page_height - 10, align="center")


# ---------------------------------------------------------------------------
# Module-level entry points
# ---------------------------------------------------------------------------

_default_service: PdfReportService | None = None


def get_default_service() -> PdfReportService:
    global _default_service
    if _default_service is None:
        _default_service = PdfReportService()
    return _default_service


def reset_pdf_report_service() -> None:
    global _default_service
    _default_service = None


def generate_report(
    doc: DocumentAdapter,
    survey: SurveyDetail,
    images: Sequence[AnnotatedImage],
    options: GenerateOptions | None = None,
) -> DocumentAdapter:
    return get_default_service().generate_report(doc, survey, images, options)


def generate_survey_report(
    doc: DocumentAdapter,
    survey: SurveyDetail,
    images: Sequence[AnnotatedImageWithComment],
    options: GenerateOptions | None = None,
) -> DocumentAdapter:
    return get_default_service().generate_survey_report(doc, survey, images, options)
