from __future__ import annotations

from dataclasses import dataclass
import mimetypes
from pathlib import Path

from .errors import EmptyProblem, NoFileSelected, UnsupportedFileType
from .logging_utils import get_logger, log_event
from .models import ProblemInput


PLAIN_TEXT = "text/plain"
logger = get_logger()


@dataclass(frozen=True)
class SelectedFile:
    filename: str
    content_type: str | None
    data: bytes


def selected_file_from_path(path: str | Path) -> SelectedFile:
    """Read a local file, declaring its media type from the extension."""
    file_path = Path(path)
    content_type, _ = mimetypes.guess_type(file_path.name)
    return SelectedFile(filename=file_path.name, content_type=content_type, data=file_path.read_bytes())


def _media_type(content_type: str | None) -> str:
    # "text/plain; charset=utf-8" declares plain text too.
    return (content_type or "").split(";", 1)[0].strip().lower()


def validate_submission(selected: SelectedFile | None) -> SelectedFile:
    if selected is None:
        log_event(logger, "WARN", "submission.rejected", reason="no_file_selected")
        raise NoFileSelected()

    if _media_type(selected.content_type) != PLAIN_TEXT:
        log_event(
            logger,
            "WARN",
            "submission.rejected",
            reason="unsupported_file_type",
            filename=selected.filename,
            content_type=selected.content_type,
        )
        raise UnsupportedFileType(selected.content_type)

    return selected


def validate_solvable(problem: ProblemInput) -> None:
    if problem.is_empty():
        log_event(
            logger,
            "WARN",
            "solve.refused",
            reason="empty_problem",
            rows=len(problem.matrix),
            sequences=len(problem.sequences),
        )
        raise EmptyProblem()
