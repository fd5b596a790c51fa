from __future__ import annotations

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from .db import make_session_factory
from .errors import (
    InvalidTransition,
    NoResultToExport,
    RemoteRejection,
    TransportFailure,
    UnsupportedFileType,
    ValidationError,
    WorkflowBusy,
)
from .exporter import DirectoryExporter, DownloadExporter
from .logging_utils import configure_logging, log_event
from .presenter import classify
from .services.jobs import list_solve_jobs, record_solve_job
from .services.solver_proxy import SolverProxy
from .settings import Settings, load_settings
from .validation import SelectedFile
from .workflow import Workflow


def get_workflow(request: Request) -> Workflow:
    return request.app.state.workflow


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def create_app(settings: Settings | None = None, proxy: SolverProxy | None = None) -> FastAPI:
    active_settings = settings or load_settings()
    logger = configure_logging(active_settings.log_level)

    app = FastAPI(title="breachpath client")
    app.state.settings = active_settings
    app.state.workflow = Workflow(proxy or SolverProxy(active_settings))
    app.state.session_factory = make_session_factory(active_settings.database_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(UnsupportedFileType)
    async def handle_unsupported(_: Request, exc: UnsupportedFileType) -> JSONResponse:
        return JSONResponse(status_code=415, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def handle_validation(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(WorkflowBusy)
    @app.exception_handler(InvalidTransition)
    @app.exception_handler(NoResultToExport)
    async def handle_conflict(_: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(RemoteRejection)
    async def handle_rejection(_: Request, exc: RemoteRejection) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.message, "upstream_status": exc.status_code})

    @app.exception_handler(TransportFailure)
    async def handle_transport(request: Request, _: TransportFailure) -> JSONResponse:
        notice = get_workflow(request).state.notice or "Remote service unavailable."
        return JSONResponse(status_code=502, content={"detail": notice})

    @app.get("/health")
    def health():
        return {"status": "ok", "solver_url": active_settings.solver_url}

    @app.get("/workflow")
    async def read_workflow(workflow: Workflow = Depends(get_workflow)):
        return workflow.snapshot()

    @app.post("/workflow/file")
    async def select_file(file: UploadFile = File(...), workflow: Workflow = Depends(get_workflow)):
        selected = SelectedFile(filename=file.filename or "upload.txt", content_type=file.content_type, data=await file.read())
        workflow.select_file(selected)
        return workflow.snapshot()

    @app.delete("/workflow/file")
    async def clear_file(workflow: Workflow = Depends(get_workflow)):
        workflow.select_file(None)
        return workflow.snapshot()

    @app.post("/workflow/upload")
    async def upload(workflow: Workflow = Depends(get_workflow)):
        await workflow.upload()
        return workflow.snapshot()

    @app.post("/workflow/solve")
    async def solve(workflow: Workflow = Depends(get_workflow), db: Session = Depends(get_db)):
        file_name = workflow.state.selected_file.filename if workflow.state.selected_file else None
        try:
            result = await workflow.solve()
        except (RemoteRejection, TransportFailure):
            record_solve_job(db, file_name=file_name, status="failed", total_rewards=workflow.state.total_rewards)
            raise
        row = record_solve_job(
            db,
            file_name=file_name,
            status="solved",
            total_rewards=workflow.state.total_rewards,
            outcome=classify(result, workflow.state.total_rewards).value,
            max_reward=result.max_reward,
            execution_time_ms=result.execution_time,
        )
        log_event(logger, "INFO", "jobs.recorded", job_id=row.id, outcome=row.outcome)
        return workflow.snapshot()

    @app.post("/workflow/result/open")
    async def open_result(workflow: Workflow = Depends(get_workflow)):
        workflow.open_result()
        return workflow.snapshot()

    @app.post("/workflow/result/close")
    async def close_result(workflow: Workflow = Depends(get_workflow)):
        workflow.close_result()
        return workflow.snapshot()

    @app.post("/workflow/result/toggle")
    async def toggle_result(workflow: Workflow = Depends(get_workflow)):
        workflow.toggle_result()
        return workflow.snapshot()

    @app.get("/workflow/export")
    async def download_result(workflow: Workflow = Depends(get_workflow)):
        download = DownloadExporter()
        workflow.export(download)
        return Response(
            content=download.data,
            media_type=download.mime_type,
            headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
        )

    @app.post("/workflow/export")
    async def save_result(workflow: Workflow = Depends(get_workflow)):
        exporter = DirectoryExporter(active_settings.export_dir)
        workflow.export(exporter)
        return {"ok": True, "path": str(exporter.last_path)}

    @app.get("/jobs")
    def list_jobs(db: Session = Depends(get_db)):
        return list_solve_jobs(db)

    return app
