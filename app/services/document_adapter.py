"""
Document Adapter – the drawing surface the report engine talks to.

``DocumentAdapter`` is the protocol the layout engine is written
against: a stateful page surface with a top-left origin, millimetre
coordinates and point font sizes. ``ReportLabDocument`` implements it
on top of reportlab.

reportlab's canvas can only draw on the current page, while the page
numbering pass has to go back to every page once the total is known.
``ReportLabDocument`` therefore records each draw call (together with
the style in effect) against its page and only replays them onto a
canvas in :meth:`ReportLabDocument.output`.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Literal, Protocol

from PIL import Image as PILImage
from PIL import UnidentifiedImageError
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

Align = Literal["left", "center", "right"]
RectStyle = Literal["S", "F", "FD", "DF"]
Color = tuple[int, int, int]


class DocumentAdapter(Protocol):
    """Stateful page surface consumed by ``PdfReportService``."""

    def set_font(self, family: str) -> None: ...

    def set_font_size(self, size: float) -> None: ...

    def set_text_color(self, r: int, g: int, b: int) -> None: ...

    def set_draw_color(self, r: int, g: int, b: int) -> None: ...

    def set_fill_color(self, r: int, g: int, b: int) -> None: ...

    def set_line_width(self, width: float) -> None: ...

    def text(self, content: str, x: float, y: float, align: Align = "left") -> None: ...

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def rect(self, x: float, y: float, w: float, h: float, style: RectStyle = "S") -> None: ...

    def add_image(
        self, data_url: str, fmt: str, x: float, y: float, w: float, h: float
    ) -> None: ...

    def add_page(self) -> None: ...

    def get_number_of_pages(self) -> int: ...

    def set_page(self, page: int) -> None: ...

    def split_text_to_size(self, text: str, max_width: float) -> list[str]: ...

    def get_text_width(self, text: str) -> float: ...

    def get_page_width(self) -> float: ...

    def get_page_height(self) -> float: ...


class ImageEmbedError(ValueError):
    """Raised when image data cannot be decoded for embedding."""


@dataclass(frozen=True)
class _Style:
    font: str = "Helvetica"
    font_size: float = 16
    text_color: Color = (0, 0, 0)
    draw_color: Color = (0, 0, 0)
    fill_color: Color = (0, 0, 0)
    line_width: float = 0.2  # mm


_Op = Callable[[canvas.Canvas], None]

_DATA_URL = re.compile(r"^data:image/[\w.+-]+;base64,(?P<payload>.*)$", re.DOTALL)

# ASCII words, whitespace runs, or any other single character (CJK breaks anywhere)
_WRAP_TOKEN = re.compile(r"[!-~]+|\s+|.", re.DOTALL)


def _rgb(color: Color) -> tuple[float, float, float]:
    return color[0] / 255, color[1] / 255, color[2] / 255


def decode_data_url(data_url: str) -> PILImage.Image:
    """Decode a ``data:image/...;base64,`` URL into a loaded Pillow image."""
    match = _DATA_URL.match(data_url or "")
    if match is None:
        raise ImageEmbedError("not a base64 image data URL")
    try:
        raw = base64.b64decode(match.group("payload"), validate=True)
        img = PILImage.open(io.BytesIO(raw))
        img.load()
    except (binascii.Error, UnidentifiedImageError, OSError) as e:
        raise ImageEmbedError(f"undecodable image data: {e}") from e
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    return img


class ReportLabDocument:
    """
    ``DocumentAdapter`` backed by reportlab.

    Coordinates are millimetres from the top-left corner of the page;
    ``text`` positions the baseline, ``rect`` and ``add_image`` the
    top-left corner.
    """

    def __init__(
        self,
        pagesize: tuple[float, float] = A4,
        title: str | None = None,
    ) -> None:
        self._page_w_pt, self._page_h_pt = pagesize
        self._title = title
        self._style = _Style()
        self._pages: list[list[_Op]] = [[]]
        self._current = 0

    # ------------------------------------------------------------------
    # Style state
    # ------------------------------------------------------------------

    def set_font(self, family: str) -> None:
        self._style = replace(self._style, font=family)

    def set_font_size(self, size: float) -> None:
        self._style = replace(self._style, font_size=size)

    def set_text_color(self, r: int, g: int, b: int) -> None:
        self._style = replace(self._style, text_color=(r, g, b))

    def set_draw_color(self, r: int, g: int, b: int) -> None:
        self._style = replace(self._style, draw_color=(r, g, b))

    def set_fill_color(self, r: int, g: int, b: int) -> None:
        self._style = replace(self._style, fill_color=(r, g, b))

    def set_line_width(self, width: float) -> None:
        self._style = replace(self._style, line_width=width)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def text(self, content: str, x: float, y: float, align: Align = "left") -> None:
        style = self._style
        px, py = self._to_pt(x, y)

        def op(c: canvas.Canvas) -> None:
            c.setFont(style.font, style.font_size)
            c.setFillColorRGB(*_rgb(style.text_color))
            if align == "center":
                c.drawCentredString(px, py, content)
            elif align == "right":
                c.drawRightString(px, py, content)
            else:
                c.drawString(px, py, content)

        self._record(op)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        style = self._style
        p1 = self._to_pt(x1, y1)
        p2 = self._to_pt(x2, y2)

        def op(c: canvas.Canvas) -> None:
            c.setStrokeColorRGB(*_rgb(style.draw_color))
            c.setLineWidth(style.line_width * mm)
            c.line(p1[0], p1[1], p2[0], p2[1])

        self._record(op)

    def rect(self, x: float, y: float, w: float, h: float, style: RectStyle = "S") -> None:
        current = self._style
        px, py = self._to_pt(x, y + h)
        stroke = 1 if "D" in style or style == "S" else 0
        fill = 1 if "F" in style else 0

        def op(c: canvas.Canvas) -> None:
            c.setStrokeColorRGB(*_rgb(current.draw_color))
            c.setFillColorRGB(*_rgb(current.fill_color))
            c.setLineWidth(current.line_width * mm)
            c.rect(px, py, w * mm, h * mm, stroke=stroke, fill=fill)

        self._record(op)

    def add_image(
        self, data_url: str, fmt: str, x: float, y: float, w: float, h: float
    ) -> None:
        """
        Place an image given as a data URL.

        ``fmt`` is a hint only; the encoding is sniffed by Pillow. The
        data is decoded immediately so that bad input raises
        ``ImageEmbedError`` at the call site, not at ``output()``.
        """
        reader = ImageReader(decode_data_url(data_url))
        px, py = self._to_pt(x, y + h)
        logger.debug("Image (%s) placed on page %d", fmt, self._current + 1)

        def op(c: canvas.Canvas) -> None:
            c.drawImage(reader, px, py, width=w * mm, height=h * mm)

        self._record(op)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def add_page(self) -> None:
        self._pages.append([])
        self._current = len(self._pages) - 1

    def get_number_of_pages(self) -> int:
        return len(self._pages)

    def set_page(self, page: int) -> None:
        if not 1 <= page <= len(self._pages):
            raise ValueError(f"page {page} out of range 1..{len(self._pages)}")
        self._current = page - 1

    def get_page_width(self) -> float:
        return self._page_w_pt / mm

    def get_page_height(self) -> float:
        return self._page_h_pt / mm

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def get_text_width(self, text: str) -> float:
        """Width of *text* in mm with the current font and size."""
        return pdfmetrics.stringWidth(text, self._style.font, self._style.font_size) / mm

    def split_text_to_size(self, text: str, max_width: float) -> list[str]:
        """
        Wrap *text* into lines no wider than *max_width* mm.

        Explicit newlines are kept. Latin words break at spaces, other
        scripts between any two characters; a word wider than the
        column is split by character.
        """
        lines: list[str] = []
        for paragraph in text.replace("\r\n", "\n").split("\n"):
            lines.extend(self._wrap_paragraph(paragraph, max_width))
        return lines

    def _wrap_paragraph(self, paragraph: str, max_width: float) -> list[str]:
        lines: list[str] = []
        current = ""
        for token in _WRAP_TOKEN.findall(paragraph):
            if current and self.get_text_width(current + token) > max_width:
                lines.append(current.rstrip())
                current = token.lstrip()
            else:
                current += token
            while len(current) > 1 and self.get_text_width(current) > max_width:
                head = self._longest_fitting_prefix(current, max_width)
                lines.append(head)
                current = current[len(head):]
        if current.strip() or not lines:
            lines.append(current.rstrip())
        return lines

    def _longest_fitting_prefix(self, text: str, max_width: float) -> str:
        end = 1
        while end < len(text) and self.get_text_width(text[: end + 1]) <= max_width:
            end += 1
        return text[:end]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def output(self) -> bytes:
        """Replay all recorded pages onto a reportlab canvas and return PDF bytes."""
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=(self._page_w_pt, self._page_h_pt))
        if self._title:
            c.setTitle(self._title)
        for ops in self._pages:
            for op in ops:
                op(c)
            c.showPage()
        c.save()
        logger.info("PDF serialised: %d page(s)", len(self._pages))
        return buf.getvalue()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(self, op: _Op) -> None:
        self._pages[self._current].append(op)

    def _to_pt(self, x: float, y: float) -> tuple[float, float]:
        return x * mm, self._page_h_pt - y * mm
