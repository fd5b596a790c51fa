"""Request/response lifecycle: idle -> loaded -> solving -> solved.

`advance` is the pure transition function; `Workflow` is the only place that
talks to the remote service and it does so strictly through `advance`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from .errors import InvalidTransition, RemoteRejection, TransportFailure, WorkflowBusy
from .exporter import FileExporter, export_result
from .logging_utils import get_logger, log_event
from .models import ProblemInput, SolveResult
from .presenter import ResultPresenter
from .services.solver_proxy import SolverProxy
from .validation import SelectedFile, validate_solvable, validate_submission


GENERIC_UPLOAD_FAILURE = "An error occurred while uploading the file."
GENERIC_SOLVE_FAILURE = "An error occurred while solving."

logger = get_logger()


class Phase(str, Enum):
    IDLE = "idle"
    LOADED = "loaded"
    SOLVING = "solving"
    SOLVED = "solved"


@dataclass(frozen=True)
class WorkflowState:
    phase: Phase = Phase.IDLE
    selected_file: SelectedFile | None = None
    problem: ProblemInput = field(default_factory=ProblemInput)
    result: SolveResult = field(default_factory=SolveResult)
    total_rewards: float = 0
    uploading: bool = False
    resume_phase: Phase | None = None
    notice: str | None = None

    @property
    def solving(self) -> bool:
        return self.phase is Phase.SOLVING


@dataclass(frozen=True)
class FileSelected:
    selected: SelectedFile | None


@dataclass(frozen=True)
class UploadStarted:
    pass


@dataclass(frozen=True)
class UploadSucceeded:
    problem: ProblemInput


@dataclass(frozen=True)
class UploadFailed:
    notice: str


@dataclass(frozen=True)
class SolveRequested:
    pass


@dataclass(frozen=True)
class SolveSucceeded:
    result: SolveResult


@dataclass(frozen=True)
class SolveFailed:
    notice: str


Event = FileSelected | UploadStarted | UploadSucceeded | UploadFailed | SolveRequested | SolveSucceeded | SolveFailed


def _refuse(state: WorkflowState, event: Event) -> InvalidTransition:
    return InvalidTransition(state.phase.value, type(event).__name__)


def advance(state: WorkflowState, event: Event) -> WorkflowState:
    """Return the state that follows `event`; never mutates `state`."""
    if isinstance(event, FileSelected):
        if state.uploading:
            raise WorkflowBusy("upload")
        if state.solving:
            raise WorkflowBusy("solve")
        return WorkflowState(selected_file=event.selected)

    if isinstance(event, UploadStarted):
        if state.uploading:
            raise WorkflowBusy("upload")
        if state.solving:
            raise WorkflowBusy("solve")
        return replace(state, uploading=True)

    if isinstance(event, UploadSucceeded):
        if not state.uploading:
            raise _refuse(state, event)
        return replace(
            state,
            phase=Phase.LOADED,
            problem=event.problem,
            result=SolveResult(),
            total_rewards=event.problem.total_rewards(),
            uploading=False,
            notice=None,
        )

    if isinstance(event, UploadFailed):
        if not state.uploading:
            raise _refuse(state, event)
        return replace(state, uploading=False, notice=event.notice)

    if isinstance(event, SolveRequested):
        if state.solving:
            raise WorkflowBusy("solve")
        if state.uploading:
            raise WorkflowBusy("upload")
        validate_solvable(state.problem)
        if state.phase not in (Phase.LOADED, Phase.SOLVED):
            raise _refuse(state, event)
        return replace(state, phase=Phase.SOLVING, resume_phase=state.phase, notice=None)

    if isinstance(event, SolveSucceeded):
        if not state.solving:
            raise _refuse(state, event)
        return replace(state, phase=Phase.SOLVED, result=event.result, resume_phase=None)

    if isinstance(event, SolveFailed):
        if not state.solving:
            raise _refuse(state, event)
        return replace(
            state,
            phase=state.resume_phase or Phase.LOADED,
            resume_phase=None,
            notice=event.notice,
        )

    raise TypeError(f"Unknown workflow event: {event!r}")


class Workflow:
    def __init__(self, proxy: SolverProxy, presenter: ResultPresenter | None = None) -> None:
        self._proxy = proxy
        self.presenter = presenter or ResultPresenter()
        self.state = WorkflowState()

    def _dispatch(self, event: Event) -> WorkflowState:
        previous = self.state
        following = advance(previous, event)
        # Log before committing so a logging failure leaves the guards untouched.
        log_event(
            logger,
            "DEBUG",
            "workflow.transition",
            event_type=type(event).__name__,
            from_phase=previous.phase.value,
            to_phase=following.phase.value,
            uploading=following.uploading,
        )
        self.state = following
        return self.state

    def snapshot(self) -> dict:
        state = self.state
        return {
            "phase": state.phase.value,
            "selected_file": state.selected_file.filename if state.selected_file else None,
            "uploading": state.uploading,
            "solving": state.solving,
            "total_rewards": state.total_rewards,
            "notice": state.notice,
            **self.presenter.view(state.problem, state.result, state.total_rewards, solving=state.solving),
        }

    def open_result(self) -> bool:
        return self.presenter.open(self.state.result, solving=self.state.solving)

    def toggle_result(self) -> bool:
        return self.presenter.toggle(self.state.result, solving=self.state.solving)

    def close_result(self) -> None:
        self.presenter.close()

    def export(self, exporter: FileExporter) -> str:
        if self.state.solving:
            raise WorkflowBusy("solve")
        return export_result(self.state.result, exporter)

    def select_file(self, selected: SelectedFile | None) -> WorkflowState:
        state = self._dispatch(FileSelected(selected))
        self.presenter.close()
        return state

    async def upload(self) -> ProblemInput:
        selected = validate_submission(self.state.selected_file)
        self._dispatch(UploadStarted())
        notice = GENERIC_UPLOAD_FAILURE
        try:
            problem = await self._proxy.upload(selected)
        except RemoteRejection as exc:
            notice = exc.message
            raise
        except TransportFailure as exc:
            log_event(logger, "ERROR", "workflow.upload.failed", filename=selected.filename, error=str(exc))
            raise
        else:
            self._dispatch(UploadSucceeded(problem))
            self.presenter.close()
            log_event(
                logger,
                "INFO",
                "workflow.upload.done",
                filename=selected.filename,
                rows=len(problem.matrix),
                sequences=len(problem.sequences),
                total_rewards=self.state.total_rewards,
            )
            return problem
        finally:
            if self.state.uploading:
                self._dispatch(UploadFailed(notice))

    async def solve(self) -> SolveResult:
        self._dispatch(SolveRequested())
        self.presenter.close()
        problem = self.state.problem
        notice = GENERIC_SOLVE_FAILURE
        try:
            result = await self._proxy.solve(problem)
        except RemoteRejection as exc:
            notice = exc.message
            raise
        except TransportFailure as exc:
            log_event(logger, "ERROR", "workflow.solve.failed", error=str(exc))
            raise
        else:
            self._dispatch(SolveSucceeded(result))
            log_event(
                logger,
                "INFO",
                "workflow.solve.done",
                max_reward=result.max_reward,
                total_rewards=self.state.total_rewards,
                execution_time_ms=result.execution_time,
            )
            return result
        finally:
            if self.state.solving:
                self._dispatch(SolveFailed(notice))
