# services/auth/service.py

from typing import Optional

import httpx

from core.config.settings import Settings
from core.logging import get_logger
from .auth_manager import AuthManager
from .kite_client import KiteAuthClient
from .models import Credential, ResolvedCredential
from .prompt import ConsoleRequestTokenProvider, RequestTokenProvider
from .token_store import EnvFileTokenStore, TokenStore

logger = get_logger(__name__, component="auth")


class AuthService:
    """Wires the credential resolver from application settings."""

    def __init__(
        self,
        settings: Settings,
        token_provider: Optional[RequestTokenProvider] = None,
        token_store: Optional[TokenStore] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.settings = settings
        self.kite_client = KiteAuthClient(
            api_key=settings.api_key,
            api_secret=settings.api_secret,
            base_url=settings.base_url,
            login_endpoint=settings.login_url,
            timeout=settings.request_timeout_seconds,
            validation_timeout=settings.validation_timeout,
            http_client=http_client,
        )
        self.auth_manager = AuthManager(
            credential=self.credential_from_settings(settings),
            kite_client=self.kite_client,
            token_provider=token_provider or ConsoleRequestTokenProvider(),
            token_store=token_store or EnvFileTokenStore(settings.env_file),
        )

    @staticmethod
    def credential_from_settings(settings: Settings) -> Credential:
        return Credential(
            api_key=settings.api_key,
            api_secret=settings.api_secret,
            access_token=settings.access_token,
        )

    def get_login_url(self) -> str:
        return self.kite_client.get_login_url()

    def resolve(self) -> ResolvedCredential:
        """Run the resolver once; the HTTP client is released afterwards."""
        try:
            resolved = self.auth_manager.resolve()
        finally:
            self.kite_client.close()
        logger.info("AuthService resolved access token", source=resolved.source.value,
                    status=self.auth_manager.status.value)
        return resolved
