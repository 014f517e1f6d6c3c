"""
Pytest configuration and shared fixtures for Kite gateway tests.
"""
import json
from typing import Any, Dict, List, Optional, Tuple, Union

from unittest.mock import MagicMock

import httpx
import pytest
from kiteconnect import KiteConnect

from core.config.settings import Settings
from services.auth.models import Credential

CONFIG_ENV_KEYS = (
    "API_KEY", "API_SECRET", "ACCESS_TOKEN", "BASE_URL", "LOGIN_URL",
    "REQUEST_TIMEOUT", "VALIDATION_TIMEOUT", "ENV_FILE",
)

Responder = Union[httpx.Response, Exception]


class FakeKiteAPI:
    """In-process stand-in for api.kite.trade, recording every request."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Responder] = {}

    def add(self, method: str, path: str, status_code: int = 200,
            json_body: Optional[Any] = None, text: Optional[str] = None) -> None:
        if json_body is not None:
            response = httpx.Response(status_code, json=json_body)
        else:
            response = httpx.Response(status_code, text=text or "")
        self._routes[(method, path)] = response

    def add_error(self, method: str, path: str, exc: Exception) -> None:
        self._routes[(method, path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        responder = self._routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"status": "error", "message": "Route not found"})
        if isinstance(responder, Exception):
            raise responder
        return httpx.Response(
            responder.status_code,
            headers=responder.headers,
            content=responder.content,
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport())

    def calls(self, method: str, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and (path is None or r.url.path == path)
        ]

    @staticmethod
    def form(request: httpx.Request) -> str:
        return request.content.decode("utf-8")

    @staticmethod
    def body(request: httpx.Request) -> Dict[str, Any]:
        return json.loads(request.content)


@pytest.fixture
def kite_api():
    """Fake Kite HTTP API with no routes registered."""
    return FakeKiteAPI()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep real credentials and the developer's .env out of tests."""
    for key in CONFIG_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def test_settings(tmp_path):
    """Test settings configuration."""
    return Settings(
        _env_file=None,
        api_key="test_key",
        api_secret="test_secret",
        access_token=None,
        env_file=str(tmp_path / ".env"),
    )


@pytest.fixture
def credential():
    return Credential(api_key="abc", api_secret="xyz")


@pytest.fixture
def profile_success():
    return {
        "status": "success",
        "data": {
            "user_id": "AB1234",
            "user_name": "Test Trader",
            "user_shortname": "Trader",
            "email": "trader@example.com",
            "broker": "ZERODHA",
        },
    }


@pytest.fixture
def session_success():
    return {
        "status": "success",
        "data": {
            "user_id": "AB1234",
            "user_name": "Test Trader",
            "access_token": "newAccessToken",
            "public_token": "publicTok",
            "login_time": "2024-01-15 09:05:00",
        },
    }


@pytest.fixture
def kite(profile_success):
    """KiteConnect double for the gateway; the profile call succeeds by default."""
    mock_kite = MagicMock(spec=KiteConnect)
    mock_kite.reqsession = MagicMock()
    mock_kite.profile.return_value = profile_success["data"]
    return mock_kite
