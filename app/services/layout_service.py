"""
Layout Service – page geometry for the survey PDF report.

Holds the two immutable layout configurations (the single-column
``standard`` report and the three-photos-per-page report) and the
contain-fit calculation used to size photos inside their slots.

All lengths are millimetres; font sizes are points.
"""

from __future__ import annotations

from dataclasses import dataclass

# 1 pt = 25.4 / 72 mm
PT_TO_MM = 0.352778

_MIN_MARGIN = 10.0
_MAX_MARGIN = 30.0


def _check_margin(margin: float) -> None:
    if not _MIN_MARGIN <= margin <= _MAX_MARGIN:
        raise ValueError(
            f"PAGE_MARGIN must be between {_MIN_MARGIN:g} and {_MAX_MARGIN:g} mm, got {margin}"
        )


def _check_ratio(name: str, value: float) -> None:
    if not 0 < value <= 1:
        raise ValueError(f"{name} must be in (0, 1], got {value}")


@dataclass(frozen=True)
class ReportLayout:
    """Geometry of the single-column report (cover, info, image list)."""
    PAGE_MARGIN: float = 15
    TITLE_FONT_SIZE: float = 24
    SUBTITLE_FONT_SIZE: float = 14
    HEADER_FONT_SIZE: float = 12
    BODY_FONT_SIZE: float = 10
    SMALL_FONT_SIZE: float = 8   # page numbers, captions
    LINE_HEIGHT: float = 1.4
    SECTION_MARGIN: float = 10
    IMAGE_MARGIN: float = 5
    IMAGE_MAX_WIDTH_RATIO: float = 0.9   # of content width
    IMAGE_MAX_HEIGHT_RATIO: float = 0.6  # of usable page height

    def __post_init__(self) -> None:
        _check_margin(self.PAGE_MARGIN)
        _check_ratio("IMAGE_MAX_WIDTH_RATIO", self.IMAGE_MAX_WIDTH_RATIO)
        _check_ratio("IMAGE_MAX_HEIGHT_RATIO", self.IMAGE_MAX_HEIGHT_RATIO)

    @property
    def body_line_height(self) -> float:
        """Baseline-to-baseline distance for body text, in mm."""
        return self.BODY_FONT_SIZE * self.LINE_HEIGHT * PT_TO_MM


@dataclass(frozen=True)
class ReportLayoutV2:
    """Geometry of the three-row-blocks-per-page photo report."""
    PAGE_MARGIN: float = 15
    HEADER_HEIGHT: float = 5
    FOOTER_HEIGHT: float = 15
    IMAGES_PER_PAGE: int = 3
    ROW_HEIGHT: float = 75
    ROW_GAP: float = 5
    IMAGE_WIDTH_RATIO: float = 0.45    # of row width
    COMMENT_WIDTH_RATIO: float = 0.45  # of row width
    COLUMN_GAP: float = 10
    SERIAL_FONT_SIZE: float = 11
    COMMENT_FONT_SIZE: float = 10
    COMMENT_LINE_HEIGHT: float = 1.4
    COMMENT_MAX_LINES: int = 5

    def __post_init__(self) -> None:
        _check_margin(self.PAGE_MARGIN)
        _check_ratio("IMAGE_WIDTH_RATIO", self.IMAGE_WIDTH_RATIO)
        _check_ratio("COMMENT_WIDTH_RATIO", self.COMMENT_WIDTH_RATIO)
        if self.IMAGES_PER_PAGE < 1:
            raise ValueError("IMAGES_PER_PAGE must be at least 1")
        if self.COMMENT_MAX_LINES < 1:
            raise ValueError("COMMENT_MAX_LINES must be at least 1")

    @property
    def content_top(self) -> float:
        return self.PAGE_MARGIN + self.HEADER_HEIGHT

    @property
    def comment_line_pitch(self) -> float:
        """Distance between consecutive comment baselines, in mm."""
        return self.COMMENT_FONT_SIZE * self.COMMENT_LINE_HEIGHT * PT_TO_MM


PDF_REPORT_LAYOUT = ReportLayout()
PDF_REPORT_LAYOUT_V2 = ReportLayoutV2()


@dataclass(frozen=True)
class ImageDimensions:
    width: float
    height: float


def calculate_image_dimensions(
    img_width: float,
    img_height: float,
    max_width: float,
    max_height: float,
) -> ImageDimensions:
    """
    Contain-fit an ``img_width`` x ``img_height`` image inside the box.

    The image is scaled (up or down) by the largest factor that keeps
    both sides within bounds, so the aspect ratio is preserved.
    """
    if min(img_width, img_height, max_width, max_height) <= 0:
        raise ValueError("image and bounding box dimensions must be positive")

    scale = min(max_width / img_width, max_height / img_height)
    return ImageDimensions(width=img_width * scale, height=img_height * scale)
