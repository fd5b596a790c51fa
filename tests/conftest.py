from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from breachpath.services.solver_proxy import SolverProxy
from breachpath.settings import Settings
from breachpath.validation import SelectedFile


UPLOAD_BODY = {
    "bufferSize": 2,
    "matrix": [["A", "B"], ["C", "D"]],
    "sequences": [
        {"tokens": ["A", "C"], "reward": 5},
        {"tokens": ["B", "D"], "reward": 3},
    ],
}

SOLVE_BODY = {
    "maxReward": 8,
    "optimalPath": ["A", "C"],
    "coordinates": [[0, 0], [1, 0]],
    "executionTime": 12,
}


class FakeSolverService:
    """Answers /upload and /solve from per-path (status, body) pairs or exceptions."""

    def __init__(self) -> None:
        self.responses: dict[str, object] = {
            "/upload": (200, UPLOAD_BODY),
            "/solve": (200, SOLVE_BODY),
        }
        self.requests: list[httpx.Request] = []
        self.on_request = None

    def calls(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.path == path)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        if self.on_request is not None:
            await self.on_request(request)
        answer = self.responses[request.url.path]
        if isinstance(answer, Exception):
            raise answer
        status, body = answer
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        solver_url="http://solver.test",
        upload_timeout_seconds=5.0,
        solve_timeout_seconds=5.0,
        database_url=f"sqlite:///{tmp_path / 'data' / 'jobs.db'}",
        export_dir=str(tmp_path / "exports"),
        log_level="DEBUG",
    )


@pytest.fixture
def fake_service() -> FakeSolverService:
    return FakeSolverService()


@pytest.fixture
def proxy(settings: Settings, fake_service: FakeSolverService) -> SolverProxy:
    return SolverProxy(settings, transport=httpx.MockTransport(fake_service))


@pytest.fixture
def text_file() -> SelectedFile:
    return SelectedFile(filename="grid.txt", content_type="text/plain", data=b"2\n2 2\nA B\nC D\n")
