"""
Shared pytest fixtures for the MISP client test suite.

Every HTTP exchange goes through ``httpx.MockTransport`` backed by a
``FakeMisp`` route table, so no test touches the network:
  - ``misp``   -> the fake server (register routes, inspect requests)
  - ``client`` -> a MispClient wired to it
  - ``base_url`` / ``api_key`` -> the connection settings of ``client``
  - ``event_payload`` / ``sample_descriptor`` -> response body builders
"""

import json
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from misp_client import MispClient

BASE_URL = "https://misp.test"
API_KEY = "s3cr3t-automation-key"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeMisp:
    """Route table answering requests by (method, path)."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200,
            json_data: Any = None, content: bytes = b"") -> None:
        if json_data is not None:
            content = json.dumps(json_data).encode()
        self.routes[(method, path)] = lambda request: httpx.Response(status, content=content)

    def add_handler(self, method: str, path: str, handler: Callable) -> None:
        self.routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        return route(request)

    # -- helpers for assertions ------------------------------------------

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None

    def paths(self) -> List[Tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]


@pytest.fixture
def misp():
    return FakeMisp()


@pytest.fixture
def transport(misp):
    return httpx.MockTransport(misp.handle)


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def api_key():
    return API_KEY


@pytest.fixture
def client(transport, base_url, api_key):
    return MispClient(base_url, api_key, transport=transport)


@pytest.fixture
def event_payload():
    return _event_payload


@pytest.fixture
def sample_descriptor():
    return _sample_descriptor


def _event_payload(event_id="42", n_attributes=3, **extra) -> Dict[str, Any]:
    """Build a minimal ``{"Event": {...}}`` body."""
    event = {
        "id": event_id,
        "uuid": "5a0c6f0e-1b2c-4d3e-8f90-a1b2c3d4e5f6",
        "info": "Phishing wave targeting finance",
        "date": "2024-06-01",
        "Attribute": [
            {
                "id": str(100 + i),
                "uuid": f"attr-uuid-{i}",
                "event_id": event_id,
                "type": "ip-dst",
                "category": "Network activity",
                "value": f"198.51.100.{i}",
                "to_ids": True,
            }
            for i in range(n_attributes)
        ],
        "Tag": [{"id": "1", "name": "tlp:amber", "colour": "#FFC000", "exportable": True}],
        "Object": [],
        "Org": {"id": "1", "name": "CIRCL", "uuid": "org-uuid"},
        "Orgc": {"id": "2", "name": "CERT-EU", "uuid": "orgc-uuid"},
    }
    event.update(extra)
    return {"Event": event}


def _sample_descriptor(attribute_id="501", md5="d41d8cd98f00b204e9800998ecf8427e",
                       filename="dropper.exe") -> Dict[str, Any]:
    return {
        "md5": md5,
        "base64": "TVqQAAMAAAAEAAAA",
        "filename": filename,
        "attribute_id": attribute_id,
        "event_id": "42",
        "event_info": "Phishing wave targeting finance",
    }
