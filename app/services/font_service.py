"""
Font Service – resolves the font family used for report text.

Report text is mostly Japanese, so the preferred family is one of
reportlab's built-in CID fonts. Registration problems are logged and
answered with a core PDF font; callers always get a usable family.
"""

from __future__ import annotations

import logging
import os

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont

logger = logging.getLogger(__name__)

DEFAULT_CJK_FONT = "HeiseiKakuGo-W5"
FALLBACK_FONT = "Helvetica"

_resolved: str | None = None


def _register(font_name: str) -> str:
    if font_name in pdfmetrics.getRegisteredFontNames():
        return font_name
    pdfmetrics.registerFont(UnicodeCIDFont(font_name))
    return font_name


def resolve_font_family() -> str:
    """Return the report font family, registering it on first use."""
    global _resolved
    if _resolved is not None:
        return _resolved

    font_name = os.getenv("REPORT_FONT_FAMILY", DEFAULT_CJK_FONT)
    try:
        _resolved = _register(font_name)
        logger.info("Report font registered: %s", _resolved)
    except Exception as e:
        logger.warning(
            "Could not register font %r, falling back to %s: %s",
            font_name, FALLBACK_FONT, e,
        )
        _resolved = FALLBACK_FONT
    return _resolved


def reset_font_cache() -> None:
    """Forget the resolved family (tests, env changes)."""
    global _resolved
    _resolved = None
