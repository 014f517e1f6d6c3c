"""Best-effort persistence of the access token into a key=value store (.env)."""

import re
from pathlib import Path
from typing import Optional, Protocol, Union

from core.logging import get_logger
from .exceptions import PersistenceWarning

logger = get_logger(__name__, component="auth")

DEFAULT_ACCESS_TOKEN_KEY = "ACCESS_TOKEN"

ENV_TEMPLATE = """# Zerodha Kite Connect configuration
API_KEY=your_api_key
API_SECRET=your_api_secret
ACCESS_TOKEN=your_access_token

# Optional: Request timeout in milliseconds
REQUEST_TIMEOUT=30000

# Optional: Base URL for the Kite Connect API
BASE_URL=https://api.kite.trade
"""


class TokenStore(Protocol):
    """Whole-document key=value store."""

    def read(self) -> Optional[str]:
        """Return the full content, or None if the store does not exist yet."""
        ...

    def write(self, content: str) -> None:
        ...


class EnvFileTokenStore:
    """The .env file at a path relative to the working directory."""

    def __init__(self, path: Union[str, Path] = ".env"):
        self.path = Path(path)

    def read(self) -> Optional[str]:
        try:
            # newline="" keeps \r\n endings intact
            with self.path.open("r", encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def write(self, content: str) -> None:
        with self.path.open("w", encoding="utf-8", newline="") as f:
            f.write(content)

    def __repr__(self) -> str:
        return f"EnvFileTokenStore({str(self.path)!r})"


class InMemoryTokenStore:
    """Store backed by a string; used by tests and dry runs."""

    def __init__(self, content: Optional[str] = None):
        self.content = content
        self.writes = 0

    def read(self) -> Optional[str]:
        return self.content

    def write(self, content: str) -> None:
        self.content = content
        self.writes += 1


def upsert_env_value(content: str, key: str, value: str) -> str:
    """Set ``key=value`` in env-file text, leaving every other line untouched.

    Each line whose key is exactly ``key`` is rewritten with its original line
    ending. When no such line exists the assignment is appended.
    """
    key_line = re.compile(rf"^{re.escape(key)}\s*=")
    lines = content.splitlines(keepends=True)
    replaced = False

    for i, line in enumerate(lines):
        if key_line.match(line):
            body = line.rstrip("\r\n")
            lines[i] = f"{key}={value}" + line[len(body):]
            replaced = True

    if not replaced:
        if lines and not lines[-1].endswith(("\n", "\r")):
            lines.append("\n")
        lines.append(f"{key}={value}\n")

    return "".join(lines)


def persist_access_token(
    store: TokenStore,
    access_token: str,
    key: str = DEFAULT_ACCESS_TOKEN_KEY,
) -> Optional[PersistenceWarning]:
    """Save the access token so the next start can skip the login flow.

    Returns a PersistenceWarning instead of raising when the store cannot be
    read or written; the in-memory token stays valid for this run.
    """
    try:
        content = store.read()
        if content is None:
            logger.info("Token store not found, creating it from template", store=repr(store))
            content = ENV_TEMPLATE.replace("ACCESS_TOKEN=", f"{key}=", 1)
        store.write(upsert_env_value(content, key, access_token))
    except (OSError, UnicodeError) as e:
        warning = PersistenceWarning(
            f"Could not update token store {store!r}: {e}",
            token_key=key,
            access_token=access_token,
        )
        logger.warning("Access token not persisted", store=repr(store), error=str(e))
        return warning

    logger.info("Access token saved", store=repr(store), key=key)
    return None
