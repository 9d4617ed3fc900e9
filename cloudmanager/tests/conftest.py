"""Shared fixtures: a routed httpx mock transport and HAL payloads."""

import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from cloudmanager.src.config import Settings
from cloudmanager.src.constants import Rel
from cloudmanager.src.services.client import CloudManagerClient

BASE = "https://cm.test"
STORAGE = "https://storage.test"

class ChunkedStream(httpx.AsyncByteStream):
    """Body handed out in small chunks, the way a network response arrives."""

    def __init__(self, content: bytes, chunk_size: int = 7):
        self.content = content
        self.chunk_size = chunk_size

    async def __aiter__(self):
        for start in range(0, len(self.content), self.chunk_size):
            yield self.content[start:start + self.chunk_size]

class Router:
    """
    Maps (method, url) to queued responses. The last queued response
    for a route keeps answering once the others are used up.
    """

    def __init__(self):
        self.routes: Dict[tuple, List[Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, url: str, status: int = 200, json_body: Any = None,
            content: Optional[bytes] = None, headers: Optional[Dict[str, str]] = None):
        self.routes.setdefault((method, url), []).append({
            "status": status,
            "json": json_body,
            "content": content,
            "headers": headers or {},
        })

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url))
        queue = self.routes.get(key)
        if not queue:
            raise AssertionError(f"Unrouted request {key}")
        entry = queue.pop(0) if len(queue) > 1 else queue[0]

        if entry["json"] is not None:
            return httpx.Response(entry["status"], json=entry["json"], headers=entry["headers"])
        content = entry["content"] or b""
        headers = {"content-length": str(len(content)), **entry["headers"]}
        return httpx.Response(entry["status"], stream=ChunkedStream(content), headers=headers)

    def sent(self, method: str, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and str(r.url) == url]

    def body(self, method: str, url: str) -> Any:
        return json.loads(self.sent(method, url)[-1].content)

def hal_link(href: str, templated: bool = False) -> Dict[str, Any]:
    link = {"href": href}
    if templated:
        link["templated"] = True
    return link

def step_state(action: str, status: str = "NOT_STARTED", environment_type: Optional[str] = None,
               links: Optional[Dict[str, Any]] = None, **extra) -> Dict[str, Any]:
    step = {"action": action, "status": status, **extra}
    if environment_type:
        step["environmentType"] = environment_type
    step["_links"] = links or {}
    return step

def execution_body(*steps: Dict[str, Any], execution_id: str = "100") -> Dict[str, Any]:
    return {"id": execution_id, "status": "RUNNING", "_embedded": {"stepStates": list(steps)}}

PROGRAMS = {
    "_embedded": {
        "programs": [
            {"id": "1", "name": "Program One", "_links": {Rel.SELF.value: hal_link("/api/program/1")}},
            {"id": "2", "name": "Program Two", "_links": {Rel.SELF.value: hal_link("/api/program/2")}},
        ]
    }
}

PROGRAM = {
    "id": "1",
    "name": "Program One",
    "_links": {
        Rel.SELF.value: hal_link("/api/program/1"),
        Rel.PIPELINES.value: hal_link("/api/program/1/pipelines"),
        Rel.ENVIRONMENTS.value: hal_link("/api/program/1/environments"),
    },
}

PIPELINES = {
    "_embedded": {
        "pipelines": [
            {
                "id": "10",
                "name": "Main",
                "status": "BUSY",
                "phases": [
                    {"type": "VALIDATE", "name": "validation"},
                    {"type": "BUILD", "name": "build", "branch": "main", "repositoryId": "5"},
                ],
                "_links": {
                    Rel.SELF.value: hal_link("/api/program/1/pipeline/10"),
                    Rel.EXECUTION.value: hal_link("/api/program/1/pipeline/10/execution"),
                    Rel.EXECUTION_ID.value: hal_link(
                        "/api/program/1/pipeline/10/execution/{executionId}", templated=True
                    ),
                },
            },
            {
                "id": "11",
                "name": "Idle",
                "status": "IDLE",
                "phases": [{"type": "VALIDATE", "name": "validation"}],
                "_links": {Rel.SELF.value: hal_link("/api/program/1/pipeline/11")},
            },
        ]
    }
}

ENVIRONMENTS = {
    "_embedded": {
        "environments": [
            {
                "id": "20",
                "name": "dev",
                "type": "dev",
                "programId": "1",
                "namespace": "ns-20",
                "cluster": "cluster-a",
                "availableLogOptions": [{"service": "author", "name": "aemerror"}],
                "_links": {
                    Rel.LOGS.value: hal_link(
                        "/api/program/1/environment/20/logs{?service,name,days}", templated=True
                    ),
                },
            },
            {
                "id": "21",
                "name": "stage",
                "type": "stage",
                "programId": "1",
                "_links": {Rel.DEVELOPER_CONSOLE.value: hal_link("https://console.test/21")},
            },
            {"id": "22", "name": "prod", "type": "prod", "programId": "1", "_links": {}},
        ]
    }
}

def logs_url(days: int) -> str:
    return f"{BASE}/api/program/1/environment/20/logs?service=author&name=aemerror&days={days}"

@pytest.fixture
def settings():
    return Settings(
        base_url=BASE,
        ims_org_id="org@AdobeOrg",
        api_key="api-key",
        access_token="token",
        tail_backoff_seconds=0,
        rollover_window_minutes=5,
    )

@pytest.fixture
def router():
    router = Router()
    router.add("GET", f"{BASE}/api/programs", json_body=PROGRAMS)
    router.add("GET", f"{BASE}/api/program/1", json_body=PROGRAM)
    router.add("GET", f"{BASE}/api/program/1/pipelines", json_body=PIPELINES)
    router.add("GET", f"{BASE}/api/program/1/environments", json_body=ENVIRONMENTS)
    return router

@pytest.fixture
def client(settings, router):
    client = CloudManagerClient(settings, transport=httpx.MockTransport(router))
    yield client
    asyncio.run(client.aclose())
