"""
File Repository – abstracts all file I/O operations.

Handles writing generated reports to per-request temp storage,
streaming them back, and cleanup.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Iterator


# Base temp directory for generated reports
_TMP_ROOT = Path(
    os.getenv("SURVEY_REPORT_TMP", os.path.join(tempfile.gettempdir(), "survey-report"))
)

_CHUNK_SIZE = 8192


class FileRepository:
    """Stateless helper for file system operations."""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root or _TMP_ROOT
        self._root.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_session_dir(self) -> Path:
        """Create a unique temp directory for one request."""
        session_dir = self._root / str(uuid.uuid4())
        session_dir.mkdir(parents=True, exist_ok=True)
        return session_dir

    @staticmethod
    def save_bytes(data: bytes, directory: Path, filename: str) -> Path:
        """Write raw bytes to *directory/filename* and return the path."""
        path = directory / filename
        path.write_bytes(data)
        return path

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @staticmethod
    def iter_file(path: Path) -> Iterator[bytes]:
        with open(path, "rb") as f:
            yield from iter(lambda: f.read(_CHUNK_SIZE), b"")

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    @staticmethod
    def cleanup(directory: Path) -> None:
        """Remove a session directory and all contents."""
        if directory.exists():
            shutil.rmtree(directory, ignore_errors=True)
