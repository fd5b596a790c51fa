import asyncio
import json

import httpx
import pytest

from breachpath.errors import MalformedResponse, RemoteRejection, TransportFailure
from breachpath.models import ProblemInput
from breachpath.services.solver_proxy import SolverProxy
from conftest import UPLOAD_BODY


def test_upload_posts_multipart_file_field(proxy: SolverProxy, fake_service, text_file) -> None:
    problem = asyncio.run(proxy.upload(text_file))

    assert fake_service.calls("/upload") == 1
    request = fake_service.requests[0]
    assert str(request.url) == "http://solver.test/upload"
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="file"' in request.content
    assert b'filename="grid.txt"' in request.content
    assert text_file.data in request.content
    assert request.headers["X-Request-Id"]
    assert problem.matrix == [["A", "B"], ["C", "D"]]
    assert problem.total_rewards() == 8


def test_solve_posts_full_problem_as_json(proxy: SolverProxy, fake_service) -> None:
    problem = ProblemInput.model_validate(UPLOAD_BODY)

    result = asyncio.run(proxy.solve(problem))

    request = fake_service.requests[0]
    assert request.url.path == "/solve"
    assert json.loads(request.content) == {
        "matrix": [["A", "B"], ["C", "D"]],
        "sequences": [{"tokens": ["A", "C"], "reward": 5}, {"tokens": ["B", "D"], "reward": 3}],
        "bufferSize": 2,
    }
    assert result.found is True
    assert result.max_reward == 8
    assert result.sequences_result == ["A", "C"]
    assert result.coordinates == [(0, 0), (1, 0)]
    assert result.execution_time == 12


def test_structured_rejection_message_is_kept(proxy: SolverProxy, fake_service, text_file) -> None:
    fake_service.responses["/upload"] = (400, {"message": "Matrix row 2 has 3 tokens, expected 2."})

    with pytest.raises(RemoteRejection) as excinfo:
        asyncio.run(proxy.upload(text_file))

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Matrix row 2 has 3 tokens, expected 2."


def test_unstructured_rejection_falls_back_to_body_text(proxy: SolverProxy, fake_service) -> None:
    fake_service.responses["/solve"] = (500, "Internal Server Error")

    with pytest.raises(RemoteRejection) as excinfo:
        asyncio.run(proxy.solve(ProblemInput.model_validate(UPLOAD_BODY)))

    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Internal Server Error"


def test_network_failure_becomes_transport_failure(proxy: SolverProxy, fake_service, text_file) -> None:
    fake_service.responses["/upload"] = httpx.ConnectError("connection refused")

    with pytest.raises(TransportFailure) as excinfo:
        asyncio.run(proxy.upload(text_file))

    assert not isinstance(excinfo.value, MalformedResponse)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.parametrize(
    "body",
    [
        b"<html>not json</html>",
        {"optimalPath": ["A"]},
        {"maxReward": 3, "coordinates": [[0]]},
    ],
)
def test_malformed_solve_response(proxy: SolverProxy, fake_service, body) -> None:
    fake_service.responses["/solve"] = (200, body)

    with pytest.raises(MalformedResponse):
        asyncio.run(proxy.solve(ProblemInput.model_validate(UPLOAD_BODY)))


def test_malformed_upload_response(proxy: SolverProxy, fake_service, text_file) -> None:
    fake_service.responses["/upload"] = (200, {"bufferSize": 1, "matrix": [["A", "B"], ["C"]], "sequences": []})

    with pytest.raises(MalformedResponse):
        asyncio.run(proxy.upload(text_file))


def test_base_url_comes_from_settings(settings, fake_service, text_file) -> None:
    other = SolverProxy(
        settings.__class__(solver_url="http://10.0.0.5:8080"),
        transport=httpx.MockTransport(fake_service),
    )

    asyncio.run(other.upload(text_file))

    assert str(fake_service.requests[0].url) == "http://10.0.0.5:8080/upload"


def test_non_finite_numbers_in_solve_response_are_malformed(proxy: SolverProxy, fake_service) -> None:
    fake_service.responses["/solve"] = (
        200,
        b'{"maxReward": 8, "optimalPath": ["A"], "coordinates": [[0, 0]], "executionTime": Infinity}',
    )

    with pytest.raises(MalformedResponse):
        asyncio.run(proxy.solve(ProblemInput.model_validate(UPLOAD_BODY)))
