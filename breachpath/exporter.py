from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal
import math
from pathlib import Path
from typing import Protocol

from .errors import NoResultToExport
from .logging_utils import get_logger, log_event
from .models import SolveResult
from .presenter import format_number


EXPORT_FILENAME = "optimal-path-result.txt"
EXPORT_MIME_TYPE = "text/plain"

logger = get_logger()


class FileExporter(Protocol):
    def save(self, data: bytes, filename: str, mime_type: str) -> None: ...


class DirectoryExporter:
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.last_path: Path | None = None

    def save(self, data: bytes, filename: str, mime_type: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / filename
        target.write_bytes(data)
        self.last_path = target


class DownloadExporter:
    """Holds the artifact in memory so an HTTP handler can send it as an attachment."""

    def __init__(self) -> None:
        self.data = b""
        self.filename = ""
        self.mime_type = ""

    def save(self, data: bytes, filename: str, mime_type: str) -> None:
        self.data = data
        self.filename = filename
        self.mime_type = mime_type


def _whole_milliseconds(value: float) -> str:
    if not math.isfinite(value):
        return f"{format_number(value)} ms"
    # Enough digits for any finite float, so quantize never overflows the context.
    rounded = Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP, context=Context(prec=400))
    return f"{rounded} ms"


def format_result(result: SolveResult) -> str:
    lines = [
        format_number(result.max_reward),
        " ".join(result.sequences_result),
        *(f"{row}, {col}" for row, col in result.coordinates),
        "",
        _whole_milliseconds(result.execution_time),
    ]
    return "\n".join(lines)


def export_result(result: SolveResult, exporter: FileExporter) -> str:
    if not result.found:
        log_event(logger, "WARN", "export.refused", reason="no_result")
        raise NoResultToExport()

    content = format_result(result)
    exporter.save(content.encode("utf-8"), EXPORT_FILENAME, EXPORT_MIME_TYPE)
    log_event(logger, "INFO", "export.done", filename=EXPORT_FILENAME, bytes=len(content))
    return content
