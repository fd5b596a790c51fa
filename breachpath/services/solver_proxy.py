from __future__ import annotations

import time
from typing import Any
from uuid import uuid4

import httpx
import pydantic

from ..errors import MalformedResponse, RemoteRejection, TransportFailure
from ..logging_utils import get_logger, log_event
from ..models import ProblemInput, SolveResponse, SolveResult
from ..settings import Settings
from ..validation import SelectedFile


logger = get_logger()


def _rejection_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.text or fallback


class SolverProxy:
    """Talks to the remote parsing/solving service.

    One instance is bound to one base address; every call opens its own
    `httpx.AsyncClient` so no connection outlives the request that needed it.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._settings.solver_url

    async def _post(
        self,
        path: str,
        timeout_seconds: float,
        rejected_fallback: str,
        **request_kwargs: Any,
    ) -> Any:
        started_at = time.perf_counter()
        request_id = uuid4().hex[:8]
        log_event(
            logger,
            "INFO",
            "solver_proxy.forward.start",
            request_id=request_id,
            path=path,
            timeout_seconds=timeout_seconds,
        )
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.post(path, headers={"X-Request-Id": request_id}, **request_kwargs)
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                message = _rejection_message(exc.response, rejected_fallback)
                log_event(
                    logger,
                    "WARN",
                    "solver_proxy.forward.rejected",
                    request_id=request_id,
                    path=path,
                    status_code=exc.response.status_code,
                    elapsed_us=int((time.perf_counter() - started_at) * 1_000_000),
                    detail=message,
                )
                raise RemoteRejection(exc.response.status_code, message) from exc
            except httpx.HTTPError as exc:
                log_event(
                    logger,
                    "ERROR",
                    "solver_proxy.forward.error",
                    request_id=request_id,
                    path=path,
                    elapsed_us=int((time.perf_counter() - started_at) * 1_000_000),
                    error=str(exc) or type(exc).__name__,
                )
                raise TransportFailure(f"Solver unavailable: {exc}") from exc

        log_event(
            logger,
            "INFO",
            "solver_proxy.forward.done",
            request_id=request_id,
            path=path,
            status_code=resp.status_code,
            elapsed_us=int((time.perf_counter() - started_at) * 1_000_000),
        )
        try:
            return resp.json()
        except ValueError as exc:
            log_event(logger, "ERROR", "solver_proxy.response.malformed", request_id=request_id, path=path)
            raise MalformedResponse(f"{path} returned a non-JSON body.") from exc

    async def upload(self, selected: SelectedFile) -> ProblemInput:
        body = await self._post(
            "/upload",
            timeout_seconds=self._settings.upload_timeout_seconds,
            rejected_fallback="File upload failed",
            files={"file": (selected.filename, selected.data, selected.content_type or "text/plain")},
        )
        try:
            return ProblemInput.model_validate(body)
        except pydantic.ValidationError as exc:
            log_event(logger, "ERROR", "solver_proxy.response.malformed", path="/upload", errors=exc.error_count())
            raise MalformedResponse("Upload response does not describe a problem.") from exc

    async def solve(self, problem: ProblemInput) -> SolveResult:
        body = await self._post(
            "/solve",
            timeout_seconds=self._settings.solve_timeout_seconds,
            rejected_fallback="Solver rejected request.",
            json=problem.to_solve_payload(),
        )
        try:
            return SolveResult.from_response(SolveResponse.model_validate(body))
        except pydantic.ValidationError as exc:
            log_event(logger, "ERROR", "solver_proxy.response.malformed", path="/solve", errors=exc.error_count())
            raise MalformedResponse("Solve response does not describe a path.") from exc
