"""
Holding areas: the four directories a submitted file moves through.

- uploads: files as received, before a verdict
- corrected: files whose batch was accepted
- invalid_records: files whose batch was rejected
- excel_exports: annotated correction sheets and exports
"""

import re
import shutil
import time
import uuid
from pathlib import Path
from typing import Any

from army_records.config import DEFAULT_MAX_FILE_SIZE
from army_records.core.errors import ExportNotFoundError, UploadRejectedError
from army_records.observability.logger import get_logger, log_stage
from army_records.utils.validation import validate_export_name

from .readers import detect_kind

logger = get_logger(__name__)

UPLOADS = "uploads"
CORRECTED = "corrected"
INVALID_RECORDS = "invalid_records"
EXCEL_EXPORTS = "excel_exports"
AREAS = (UPLOADS, CORRECTED, INVALID_RECORDS, EXCEL_EXPORTS)


def unique_filename(original_filename: str) -> str:
    """
    Derive a collision-free stored name from a submitted file name.

    The original extension is kept; the stem is reduced to safe
    characters and prefixed with a millisecond timestamp and a random
    token.
    """
    path = Path(original_filename)
    stem = re.sub(r"[^A-Za-z0-9_\-]+", "_", path.stem).strip("_") or "upload"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{stem}{path.suffix.lower()}"


class HoldingAreas:
    """
    Named directories under one base directory.

    Args:
        base_dir: Directory holding the four areas
        max_file_size: Largest accepted upload in bytes
    """

    def __init__(self, base_dir: str | Path, max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        self.base_dir = Path(base_dir)
        self.max_file_size = max_file_size

    def path(self, area: str) -> Path:
        if area not in AREAS:
            raise ValueError(f"Unknown holding area: {area}")
        return self.base_dir / area

    def ensure(self) -> None:
        """Create every area directory if missing."""
        for area in AREAS:
            self.path(area).mkdir(parents=True, exist_ok=True)

    def _check_upload(self, original_filename: str, size: int) -> None:
        if not original_filename:
            raise UploadRejectedError("No file uploaded")
        try:
            detect_kind(original_filename)
        except ValueError as e:
            raise UploadRejectedError(str(e)) from e
        if size > self.max_file_size:
            raise UploadRejectedError(
                f"File too large: {size} bytes (maximum {self.max_file_size} bytes)"
            )

    def receive(self, payload: bytes, original_filename: str) -> Path:
        """
        Store an uploaded payload in the uploads area under a unique name.

        Args:
            payload: Raw file content
            original_filename: Name the file was submitted with

        Returns:
            Path of the stored upload

        Raises:
            UploadRejectedError: On an unsupported extension or oversized payload
        """
        self._check_upload(original_filename, len(payload))
        self.ensure()

        target = self.path(UPLOADS) / unique_filename(original_filename)
        target.write_bytes(payload)

        log_stage(
            logger, "received", f"Received {original_filename} as {target.name}",
            original_filename=original_filename, stored_as=target.name, size_bytes=len(payload)
        )
        return target

    def receive_file(self, source: str | Path, original_filename: str | None = None) -> Path:
        """
        Copy a local file into the uploads area under a unique name.

        The size limit is checked against the file on disk before it is
        copied.
        """
        source = Path(source)
        original_filename = original_filename or source.name
        self._check_upload(original_filename, source.stat().st_size)
        self.ensure()

        target = self.path(UPLOADS) / unique_filename(original_filename)
        shutil.copyfile(source, target)

        log_stage(
            logger, "received", f"Received {original_filename} as {target.name}",
            original_filename=original_filename, stored_as=target.name
        )
        return target

    def move(self, name: str, source_area: str, target_area: str) -> Path:
        """
        Move a file between areas.

        Returns:
            New path of the file
        """
        self.path(target_area).mkdir(parents=True, exist_ok=True)
        target = self.path(target_area) / name
        shutil.move(str(self.path(source_area) / name), str(target))
        return target

    def exists(self, area: str, name: str) -> bool:
        return (self.path(area) / name).is_file()

    def list(self, area: str) -> list[str]:
        """Names of the files in an area, sorted."""
        directory = self.path(area)
        if not directory.is_dir():
            return []
        return sorted(p.name for p in directory.iterdir() if p.is_file())

    def resolve_download(self, name: str, area: str = EXCEL_EXPORTS) -> Path:
        """
        Resolve a downloadable file by name.

        Raises:
            InputValidationError: If the name is not a bare .xlsx file name
            ExportNotFoundError: If no such file exists in the area
        """
        name = validate_export_name(name)
        directory = self.path(area).resolve()
        candidate = (directory / name).resolve()

        if candidate.parent != directory or not candidate.is_file():
            raise ExportNotFoundError(name)
        return candidate

    def summary(self) -> dict[str, Any]:
        """
        File names and counts per area.

        Returns:
            {"areas": {area: {"files": [...], "count": n}}, "total_files": n}
        """
        areas = {}
        for area in AREAS:
            files = self.list(area)
            areas[area] = {"files": files, "count": len(files)}
        return {
            "areas": areas,
            "total_files": sum(a["count"] for a in areas.values()),
        }
