import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from core.backend_client import BackendClient
from model.job import Job
from repository.job_repository import JobRepository

BASE_URL = "http://backend.test"

Route = Callable[[httpx.Request], Any]


class FakeBackend:
    """In-process stand-in for the job-execution backend."""

    def __init__(self) -> None:
        self.routes: Dict[str, Route] = {}
        self.requests: List[httpx.Request] = []
        self.gate: Optional[asyncio.Event] = None

    def reply(self, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[path] = lambda _req: httpx.Response(status, json=body)

    def reply_raw(self, path: str, content: bytes, status: int = 200) -> None:
        self.routes[path] = lambda _req: httpx.Response(status, content=content)

    def fail_transport(self, path: str) -> None:
        def _raise(req: httpx.Request):
            raise httpx.ConnectError("connection refused", request=req)

        self.routes[path] = _raise

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(200, json=[])
        return route(request)


def make_job(job_id: str, status: str = "Completed", **fields: Any) -> Job:
    return Job.model_validate({"id": job_id, "status": status, **fields})


def make_rows(n: int, status: str = "Completed", prefix: str = "job") -> List[dict]:
    return [
        {
            "id": f"{prefix}-{i}",
            "status": status,
            "startDate": f"2024-05-01T10:{i // 60 % 60:02d}:{i % 60:02d}Z",
        }
        for i in range(n)
    ]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend: FakeBackend) -> BackendClient:
    return BackendClient(BASE_URL, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def repository(client: BackendClient) -> JobRepository:
    return JobRepository(client)
