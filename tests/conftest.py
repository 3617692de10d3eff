"""Pytest fixtures for testing"""

import json
from typing import Any, Callable, Dict, Generator, List, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from loans_api.client import LoansApiClient
from mocks.loans_server.main import AGENT_LOGIN, AGENT_PASSWORD, app

BASE_URL = "https://backend.example.test/api/loans/v1"
API_PREFIX = "/api/loans/v1/"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class StubApi:
    """Canned loans API: replies per (method, endpoint) and records every request"""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, endpoint: str, response: Route) -> None:
        self.routes[(method.upper(), endpoint)] = response

    def json_reply(self, method: str, endpoint: str, body: Any, status_code: int = 200) -> None:
        self.on(method, endpoint, httpx.Response(status_code, json=body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.removeprefix(API_PREFIX)
        route = self.routes.get((request.method, endpoint))
        if route is None:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        if callable(route):
            return route(request)
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, request: httpx.Request | None = None) -> Any:
        request = request or self.last_request
        return json.loads(request.content)


@pytest.fixture
def stub_api() -> StubApi:
    return StubApi()


@pytest.fixture
def make_client(stub_api: StubApi) -> Generator[Callable[..., LoansApiClient], None, None]:
    """Factory for clients wired to the stub API"""
    http_client = httpx.Client(transport=httpx.MockTransport(stub_api.handler))

    def _make(**options: Any) -> LoansApiClient:
        options.setdefault("base_url", BASE_URL)
        return LoansApiClient(http_client=http_client, **options)

    yield _make
    http_client.close()


@pytest.fixture
def client(make_client: Callable[..., LoansApiClient]) -> LoansApiClient:
    """Authenticated client for a point-of-sale terminal"""
    return make_client(session_token="some-token", application_source="pos-terminal")


@pytest.fixture
def mock_server_client() -> Generator[LoansApiClient, None, None]:
    """Client talking to the in-process mock loans server"""
    with TestClient(app) as http_client:
        yield LoansApiClient(
            base_url="http://testserver/api/loans/v1",
            login=AGENT_LOGIN,
            password=AGENT_PASSWORD,
            application_source="pos-terminal",
            http_client=http_client,
        )
