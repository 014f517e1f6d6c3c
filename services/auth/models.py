"""Authentication models for the Kite request-token / access-token handshake."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import PersistenceWarning

# Value written to fresh .env templates; never treated as a real token
PLACEHOLDER_ACCESS_TOKEN = "your_access_token"

SUCCESS_STATUS = "success"


class AuthStatus(Enum):
    """Authentication status enumeration."""
    UNAUTHENTICATED = "unauthenticated"
    VALIDATING = "validating"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


class TokenSource(Enum):
    """Where the resolved access token came from."""
    EXISTING = "existing"
    EXCHANGED = "exchanged"


@dataclass(frozen=True)
class Credential:
    """API key and secret for the process, plus the bearer token if one is known."""
    api_key: str
    api_secret: str = field(repr=False)
    access_token: Optional[str] = field(default=None, repr=False)

    def has_usable_token(self) -> bool:
        """True when access_token holds something other than blank or the placeholder."""
        token = (self.access_token or "").strip()
        return bool(token) and token != PLACEHOLDER_ACCESS_TOKEN

    def with_access_token(self, access_token: str) -> "Credential":
        return replace(self, access_token=access_token)

    @property
    def authorization_header(self) -> str:
        return f"token {self.api_key}:{self.access_token}"


@dataclass
class SessionResult:
    """Payload of a successful /session/token exchange."""
    access_token: str = field(repr=False)
    public_token: str = field(default="", repr=False)
    login_time: str = ""
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    @classmethod
    def from_kite_response(cls, data: Dict[str, Any]) -> "SessionResult":
        """Create from the `data` object of the exchange envelope."""
        login_time = data.get("login_time") or ""
        return cls(
            access_token=data["access_token"],
            public_token=data.get("public_token") or "",
            login_time=str(login_time),
            user_id=data.get("user_id"),
            user_name=data.get("user_name"),
        )


@dataclass
class UserProfile:
    """User profile structure from Zerodha API."""
    user_id: str
    user_name: str
    user_shortname: str
    email: str
    broker: str

    @classmethod
    def from_kite_response(cls, data: Dict[str, Any]) -> "UserProfile":
        return cls(
            user_id=data.get("user_id", ""),
            user_name=data.get("user_name", ""),
            user_shortname=data.get("user_shortname", ""),
            email=data.get("email", ""),
            broker=data.get("broker", "ZERODHA"),
        )


@dataclass
class ResolvedCredential:
    """Outcome of credential resolution.

    Fatal failures are raised instead of returned, so an instance always holds
    a usable token. Advisory problems (the token could not be saved) travel in
    ``warnings``.
    """
    credential: Credential
    source: TokenSource
    session: Optional[SessionResult] = None
    warnings: List[PersistenceWarning] = field(default_factory=list)

    @property
    def access_token(self) -> str:
        return self.credential.access_token
