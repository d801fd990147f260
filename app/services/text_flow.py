"""Text helpers for the report: Japanese date labels and comment overflow."""

from __future__ import annotations

import re

_ISO_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")

ELLIPSIS = "..."


def format_date_for_pdf(iso_date: str) -> str:
    """
    Format ``YYYY-MM-DD`` as ``YYYY年M月D日`` (no zero padding).

    Empty input gives an empty string; anything that is not an exact
    ``YYYY-MM-DD`` string is returned unchanged.
    """
    if not iso_date:
        return ""
    match = _ISO_DATE.fullmatch(iso_date)
    if match is None:
        return iso_date
    year, month, day = match.groups()
    return f"{year}年{int(month)}月{int(day)}日"


def truncate_comment_lines(lines: list[str], max_lines: int) -> list[str]:
    """Keep at most ``max_lines`` wrapped lines, marking the cut on the last one."""
    if max_lines < 1:
        raise ValueError("max_lines must be at least 1")
    if len(lines) <= max_lines:
        return list(lines)

    truncated = list(lines[:max_lines])
    truncated[-1] = truncated[-1] + ELLIPSIS
    return truncated
