"""
Tests for the layout constants and contain-fit image sizing.
"""

import pytest

from app.services.layout_service import (
    PDF_REPORT_LAYOUT,
    PDF_REPORT_LAYOUT_V2,
    PT_TO_MM,
    ReportLayout,
    ReportLayoutV2,
    calculate_image_dimensions,
)


class TestReportLayout:
    def test_defaults(self):
        assert PDF_REPORT_LAYOUT.PAGE_MARGIN == 15
        assert PDF_REPORT_LAYOUT.TITLE_FONT_SIZE == 24
        assert PDF_REPORT_LAYOUT.BODY_FONT_SIZE == 10
        assert PDF_REPORT_LAYOUT.HEADER_FONT_SIZE == 12

    def test_margin_in_range(self):
        assert 10 <= PDF_REPORT_LAYOUT.PAGE_MARGIN <= 30
        assert 10 <= PDF_REPORT_LAYOUT_V2.PAGE_MARGIN <= 30

    @pytest.mark.parametrize("margin", [5, 9.9, 30.1, 50])
    def test_margin_out_of_range_rejected(self, margin):
        with pytest.raises(ValueError, match="PAGE_MARGIN"):
            ReportLayout(PAGE_MARGIN=margin)
        with pytest.raises(ValueError, match="PAGE_MARGIN"):
            ReportLayoutV2(PAGE_MARGIN=margin)

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            PDF_REPORT_LAYOUT.PAGE_MARGIN = 20

    def test_body_line_height_in_mm(self):
        assert PDF_REPORT_LAYOUT.body_line_height == pytest.approx(10 * 1.4 * PT_TO_MM)


class TestReportLayoutV2:
    def test_three_per_page(self):
        assert PDF_REPORT_LAYOUT_V2.IMAGES_PER_PAGE == 3

    def test_row_settings(self):
        assert PDF_REPORT_LAYOUT_V2.ROW_HEIGHT > 0
        assert PDF_REPORT_LAYOUT_V2.ROW_GAP >= 0
        assert 0 < PDF_REPORT_LAYOUT_V2.IMAGE_WIDTH_RATIO <= 1

    def test_comment_settings(self):
        assert PDF_REPORT_LAYOUT_V2.COMMENT_FONT_SIZE == 10
        assert PDF_REPORT_LAYOUT_V2.COMMENT_MAX_LINES == 5
        assert PDF_REPORT_LAYOUT_V2.comment_line_pitch == pytest.approx(10 * 1.4 * PT_TO_MM)

    def test_three_rows_fit_above_footer(self):
        v2 = PDF_REPORT_LAYOUT_V2
        bottom = v2.content_top + v2.IMAGES_PER_PAGE * (v2.ROW_HEIGHT + v2.ROW_GAP)
        assert bottom <= 297 - v2.FOOTER_HEIGHT

    @pytest.mark.parametrize("ratio", [0, -0.1, 1.5])
    def test_invalid_width_ratio_rejected(self, ratio):
        with pytest.raises(ValueError, match="IMAGE_WIDTH_RATIO"):
            ReportLayoutV2(IMAGE_WIDTH_RATIO=ratio)

    def test_invalid_counts_rejected(self):
        with pytest.raises(ValueError):
            ReportLayoutV2(IMAGES_PER_PAGE=0)
        with pytest.raises(ValueError):
            ReportLayoutV2(COMMENT_MAX_LINES=0)


class TestCalculateImageDimensions:
    def test_landscape_limited_by_width(self):
        dims = calculate_image_dimensions(1920, 1080, 180, 150)
        assert dims.width == pytest.approx(180)
        assert dims.height == pytest.approx(101.25)

    def test_portrait_limited_by_height(self):
        dims = calculate_image_dimensions(1080, 1920, 180, 150)
        assert dims.height == pytest.approx(150)
        assert dims.width == pytest.approx(84.375)

    def test_small_image_scaled_up(self):
        dims = calculate_image_dimensions(10, 10, 50, 80)
        assert dims.width == pytest.approx(50)
        assert dims.height == pytest.approx(50)

    @pytest.mark.parametrize(
        "img_w, img_h, max_w, max_h",
        [
            (1920, 1080, 81, 75),
            (3840, 2160, 162, 160.2),
            (1080, 1920, 81, 75),
            (1, 5000, 100, 100),
            (5000, 1, 100, 100),
            (640, 480, 0.5, 0.5),
        ],
    )
    def test_within_bounds_and_keeps_aspect(self, img_w, img_h, max_w, max_h):
        dims = calculate_image_dimensions(img_w, img_h, max_w, max_h)
        assert dims.width <= max_w + 1e-9
        assert dims.height <= max_h + 1e-9
        assert abs(img_w / img_h - dims.width / dims.height) < 0.01

    @pytest.mark.parametrize("args", [(0, 10, 10, 10), (10, 10, -1, 10)])
    def test_non_positive_rejected(self, args):
        with pytest.raises(ValueError):
            calculate_image_dimensions(*args)
