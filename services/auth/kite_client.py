# services/auth/kite_client.py

"""Kite Connect session endpoints: login URL, checksum, token exchange and token probe."""

import hashlib
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from core.logging import get_logger
from .exceptions import ExchangeError
from .models import SessionResult, SUCCESS_STATUS

logger = get_logger(__name__, component="auth")

DEFAULT_BASE_URL = "https://api.kite.trade"
DEFAULT_LOGIN_URL = "https://kite.zerodha.com/connect/login"
KITE_VERSION = "3"


def login_url(api_key: str, login_endpoint: str = DEFAULT_LOGIN_URL) -> str:
    """Browser URL that starts the Kite login; pure, no network."""
    return f"{login_endpoint}?{urlencode({'api_key': api_key})}"


def generate_checksum(api_key: str, request_token: str, api_secret: str) -> str:
    """SHA-256 hex digest of api_key + request_token + api_secret, in that order."""
    return hashlib.sha256((api_key + request_token + api_secret).encode("utf-8")).hexdigest()


def _json_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


class KiteAuthClient:
    """Talks to the two unauthenticated-session endpoints of Kite Connect."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = DEFAULT_BASE_URL,
        login_endpoint: str = DEFAULT_LOGIN_URL,
        timeout: float = 30.0,
        validation_timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self._api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.login_endpoint = login_endpoint
        self.timeout = timeout
        self.validation_timeout = validation_timeout
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client()

    def get_login_url(self) -> str:
        return login_url(self.api_key, self.login_endpoint)

    def generate_session(self, request_token: str) -> SessionResult:
        """Exchange a single-use request token for an access token.

        Raises:
            ExchangeError: the broker answered with a non-success status, the
                response was unusable, or the request never completed.
        """
        form = {
            "api_key": self.api_key,
            "request_token": request_token,
            "checksum": generate_checksum(self.api_key, request_token, self._api_secret),
        }

        try:
            response = self._http.post(
                f"{self.base_url}/session/token",
                data=form,
                headers={"X-Kite-Version": KITE_VERSION},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.error("Token exchange request failed", error=str(e), error_type=type(e).__name__)
            raise ExchangeError(f"Failed to generate access token: {e}") from e

        payload = _json_body(response)
        if payload is None:
            raise ExchangeError(
                f"Failed to generate access token: unexpected response (HTTP {response.status_code})"
            )

        if payload.get("status") != SUCCESS_STATUS:
            message = payload.get("message") or f"HTTP {response.status_code}"
            logger.error("Token exchange rejected", http_status=response.status_code,
                         error_type=payload.get("error_type"))
            raise ExchangeError(message, error_type=payload.get("error_type"))

        data = payload.get("data")
        if not isinstance(data, dict) or not data.get("access_token"):
            raise ExchangeError("Failed to generate access token: response did not include an access token")

        session = SessionResult.from_kite_response(data)
        logger.info("Access token generated", user_id=session.user_id, login_time=session.login_time)
        return session

    def validate_access_token(self, access_token: str) -> bool:
        """Ask /user/profile whether the token is accepted. Never raises.

        Timeouts and connection errors count as invalid: a transient outage is
        indistinguishable from an expired token here.
        """
        try:
            response = self._http.get(
                f"{self.base_url}/user/profile",
                headers={
                    "X-Kite-Version": KITE_VERSION,
                    "Authorization": f"token {self.api_key}:{access_token}",
                },
                timeout=self.validation_timeout,
            )
            payload = _json_body(response)
        except Exception as e:
            logger.warning("Access token probe failed", error_type=type(e).__name__)
            return False

        is_valid = payload is not None and payload.get("status") == SUCCESS_STATUS
        logger.debug("Access token probe finished", http_status=response.status_code, valid=is_valid)
        return is_valid

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "KiteAuthClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def validate_access_token(
    api_key: str,
    access_token: str,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 10.0,
    http_client: Optional[httpx.Client] = None,
) -> bool:
    """Standalone token probe for callers without a KiteAuthClient."""
    with KiteAuthClient(api_key, "", base_url=base_url, validation_timeout=timeout,
                        http_client=http_client) as client:
        return client.validate_access_token(access_token)
