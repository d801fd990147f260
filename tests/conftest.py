"""
Shared fixtures: a recording ``DocumentAdapter`` fake and survey data builders.
"""

from __future__ import annotations

import base64
import io

import pytest
from PIL import Image as PILImage

from app.models.schemas import (
    AnnotatedImage,
    AnnotatedImageWithComment,
    ProjectSummary,
    SurveyDetail,
    SurveyImage,
)


class FakeDocument:
    """
    In-memory stand-in for a PDF document.

    Records every call as ``(name, args)``; ``add_image`` raises for data
    URLs containing ``"broken"``. ``split_text_to_size`` returns the text
    as a single line unless a ``split`` callable is given.
    """

    def __init__(self, page_width=210.0, page_height=297.0, split=None, pages=1):
        self.page_width = page_width
        self.page_height = page_height
        self.pages = pages
        self.current_page = 1
        self.calls: list[tuple[str, tuple]] = []
        self.texts: list[tuple[int, str, float, float]] = []
        self._split = split or (lambda text, width: [text])

    def _log(self, name, *args):
        self.calls.append((name, args))

    def calls_named(self, name):
        return [args for call, args in self.calls if call == name]

    def text_contents(self):
        return [content for _, content, _, _ in self.texts]

    def set_font(self, family):
        self._log("set_font", family)

    def set_font_size(self, size):
        self._log("set_font_size", size)

    def set_text_color(self, r, g, b):
        self._log("set_text_color", r, g, b)

    def set_draw_color(self, r, g, b):
        self._log("set_draw_color", r, g, b)

    def set_fill_color(self, r, g, b):
        self._log("set_fill_color", r, g, b)

    def set_line_width(self, width):
        self._log("set_line_width", width)

    def text(self, content, x, y, align="left"):
        self._log("text", content, x, y, align)
        self.texts.append((self.current_page, content, x, y))

    def line(self, x1, y1, x2, y2):
        self._log("line", x1, y1, x2, y2)

    def rect(self, x, y, w, h, style="S"):
        self._log("rect", x, y, w, h, style)

    def add_image(self, data_url, fmt, x, y, w, h):
        self._log("add_image", data_url, fmt, x, y, w, h)
        if "broken" in data_url:
            raise ValueError("corrupt image data")

    def add_page(self):
        self._log("add_page")
        self.pages += 1
        self.current_page = self.pages

    def get_number_of_pages(self):
        return self.pages

    def set_page(self, page):
        self._log("set_page", page)
        self.current_page = page

    def split_text_to_size(self, text, max_width):
        self._log("split_text_to_size", text, max_width)
        return list(self._split(text, max_width))

    def get_text_width(self, text):
        return len(text) * 4.0

    def get_page_width(self):
        return self.page_width

    def get_page_height(self):
        return self.page_height


def jpeg_data_url(width: int = 64, height: int = 36, color=(90, 140, 200)) -> str:
    buf = io.BytesIO()
    PILImage.new("RGB", (width, height), color).save(buf, format="JPEG")
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def make_survey(**overrides) -> SurveyDetail:
    fields = dict(
        id="survey-123",
        name="第一工区現場調査",
        survey_date="2025-12-15",
        memo="テストメモです。\n改行を含む長いメモの内容がここに入ります。",
        project=ProjectSummary(id="project-456", name="テストプロジェクトA"),
        created_at="2025-12-15T10:00:00Z",
        image_count=3,
    )
    fields.update(overrides)
    return SurveyDetail(**fields)


def make_image_info(index: int, width: int = 1920, height: int = 1080) -> SurveyImage:
    return SurveyImage(
        id=f"img-{index}",
        file_name=f"photo{index}.jpg",
        width=width,
        height=height,
        display_order=index,
    )


def make_images(count: int = 3, data_url: str | None = None) -> list[AnnotatedImage]:
    return [
        AnnotatedImage(
            image_info=make_image_info(i),
            data_url=data_url or f"data:image/jpeg;base64,/9j/test-image-{i}",
        )
        for i in range(1, count + 1)
    ]


def make_images_with_comments(
    count: int = 3, comment: str | None = "テストコメント", data_url: str | None = None
) -> list[AnnotatedImageWithComment]:
    return [
        AnnotatedImageWithComment(
            image_info=make_image_info(i),
            data_url=data_url or f"data:image/jpeg;base64,/9j/test-image-{i}",
            comment=f"{comment}{i}" if comment else comment,
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def fake_doc():
    return FakeDocument()


@pytest.fixture
def survey():
    return make_survey()
