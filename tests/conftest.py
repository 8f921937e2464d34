"""Shared test fixtures for vvcode-auth.

Provides an in-memory VVCode API served through httpx.MockTransport, a
StateManager rooted in a temporary directory and a fully wired auth service.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from config.endpoints import AuthEndpoints
from remote_config import clear_config_cache
from utils.storage import StateManager
from vv_auth import VVAuthProvider, VVAuthService, reset_auth_service


API_BASE = "https://vv.test/api"
AUTH_PAGE = "https://vv.test/oauth/vscode/login"
DEV_BASE = "http://127.0.0.1:3000"

ACCESS_TOKEN = "tok-123"
USER_ID = 42


def make_groups() -> list[dict[str, Any]]:
    return [
        {
            "type": "discount",
            "name": "Discount",
            "apiKey": "sk-discount-0001",
            "defaultModelId": "claude-sonnet-4-5",
            "apiBaseUrl": "https://discount.vv.test",
            "isDefault": False,
        },
        {
            "type": "daily",
            "name": "Daily",
            "apiKey": "sk-daily-0002",
            "defaultModelId": "claude-haiku-4-5",
            "apiBaseUrl": "https://daily.vv.test",
            "isDefault": True,
        },
        {
            "type": "performance",
            "name": "Performance",
            "apiKey": "sk-perf-0003",
            "defaultModelId": "claude-opus-4-1",
            "apiBaseUrl": "https://perf.vv.test",
            "isDefault": False,
        },
        {
            "type": "trial",
            "name": "Trial",
            "apiKey": "",
            "defaultModelId": "claude-haiku-4-5",
            "apiBaseUrl": "https://trial.vv.test",
            "isDefault": False,
        },
    ]


class FakeBackend:
    """In-memory VVCode API.

    Paths listed in ``failing`` answer 500. ``token_status`` controls the
    token endpoint's status code.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.failing: set[str] = set()
        self.user_info: dict[str, Any] = {"id": USER_ID, "username": "alice", "email": "alice@example.com"}
        self.user_config: dict[str, Any] = {"language": "en"}
        self.groups = make_groups()

    def count(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == f"/api{path}")

    def last(self, path: str) -> httpx.Request:
        return [r for r in self.requests if r.url.path == f"/api{path}"][-1]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")

        if path in self.failing:
            return httpx.Response(500, text="internal error")

        if path == "/oauth/vscode/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, text="slow down")
            return httpx.Response(
                200,
                json={"success": True, "data": {"access_token": ACCESS_TOKEN, "user_id": USER_ID}},
            )
        if path == "/user/self":
            return httpx.Response(200, json={"success": True, "data": self.user_info})
        if path == "/user/config":
            return httpx.Response(200, json={"success": True, "data": self.user_config})
        if path == "/user/group-tokens":
            return httpx.Response(200, json={"success": True, "data": self.groups})
        if path == "/oauth/vscode/logout":
            return httpx.Response(200, json={"success": True})

        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def query_of(url: str) -> dict[str, str]:
    """Single-valued query parameters of a URL."""
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


def read_state_file(state_manager: StateManager, name: str = "state.json") -> dict[str, Any]:
    path = state_manager.state_dir / name
    if not path.exists():
        return {}
    return json.loads(path.read_text())


# ---------------------------------------------------------------------------
# Global state resets
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals() -> None:
    """Forget the process-wide auth service and remote config cache."""
    yield
    reset_auth_service()
    clear_config_cache()


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def state_manager(tmp_path) -> StateManager:
    return StateManager(str(tmp_path / "state"))


@pytest.fixture
def endpoints() -> AuthEndpoints:
    return AuthEndpoints(api_base_url=API_BASE, auth_page_url=AUTH_PAGE, dev_mode=False, dev_base_url=DEV_BASE)


@pytest.fixture
def provider(backend: FakeBackend) -> VVAuthProvider:
    return VVAuthProvider(API_BASE, transport=backend.transport())


@pytest.fixture
def opened_urls() -> list[str]:
    return []


@pytest.fixture
def service(
    state_manager: StateManager,
    provider: VVAuthProvider,
    endpoints: AuthEndpoints,
    opened_urls: list[str],
) -> VVAuthService:
    return VVAuthService(
        state_manager,
        provider=provider,
        endpoints=endpoints,
        open_external=opened_urls.append,
    )


async def login(service: VVAuthService, code: str = "abc") -> str:
    """Run a full login and return the state token used."""
    url = await service.create_auth_request()
    state = query_of(url)["state"]
    await service.handle_auth_callback(code, state)
    return state
