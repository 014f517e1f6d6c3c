"""Kite access-token lifecycle: probe, interactive exchange and persistence."""

from .service import AuthService
from .auth_manager import AuthManager
from .kite_client import KiteAuthClient, generate_checksum, login_url, validate_access_token
from .prompt import ConsoleRequestTokenProvider, RequestTokenProvider, StaticRequestTokenProvider
from .token_store import (
    EnvFileTokenStore,
    InMemoryTokenStore,
    TokenStore,
    persist_access_token,
    upsert_env_value,
)
from .models import (
    PLACEHOLDER_ACCESS_TOKEN,
    AuthStatus,
    Credential,
    ResolvedCredential,
    SessionResult,
    TokenSource,
    UserProfile,
)
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ExchangeError,
    InputError,
    PersistenceWarning,
)

__all__ = [
    "AuthService",
    "AuthManager",
    "KiteAuthClient",
    "generate_checksum",
    "login_url",
    "validate_access_token",
    "ConsoleRequestTokenProvider",
    "RequestTokenProvider",
    "StaticRequestTokenProvider",
    "EnvFileTokenStore",
    "InMemoryTokenStore",
    "TokenStore",
    "persist_access_token",
    "upsert_env_value",
    "PLACEHOLDER_ACCESS_TOKEN",
    "AuthStatus",
    "Credential",
    "ResolvedCredential",
    "SessionResult",
    "TokenSource",
    "UserProfile",
    "AuthenticationError",
    "ConfigurationError",
    "ExchangeError",
    "InputError",
    "PersistenceWarning",
]
