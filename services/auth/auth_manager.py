# services/auth/auth_manager.py

"""Resolves exactly one usable Kite access token for the process."""

from core.logging import get_logger
from .exceptions import ConfigurationError, InputError
from .kite_client import KiteAuthClient
from .models import AuthStatus, Credential, ResolvedCredential, SessionResult, TokenSource
from .prompt import RequestTokenProvider
from .token_store import DEFAULT_ACCESS_TOKEN_KEY, TokenStore, persist_access_token

logger = get_logger(__name__, component="auth")


class AuthManager:
    """Validates a stored access token or runs the interactive exchange.

    Collaborators are injected so the flow can run against fake HTTP, a fixed
    request token and an in-memory store.
    """

    def __init__(
        self,
        credential: Credential,
        kite_client: KiteAuthClient,
        token_provider: RequestTokenProvider,
        token_store: TokenStore,
        access_token_key: str = DEFAULT_ACCESS_TOKEN_KEY,
    ):
        self.credential = credential
        self.kite_client = kite_client
        self.token_provider = token_provider
        self.token_store = token_store
        self.access_token_key = access_token_key
        self._status = AuthStatus.UNAUTHENTICATED

    @property
    def status(self) -> AuthStatus:
        return self._status

    def resolve(self) -> ResolvedCredential:
        """Return a credential carrying a token the broker accepts.

        Raises:
            ConfigurationError: API key or secret is missing.
            InputError: no request token was entered.
            ExchangeError: the request token could not be exchanged.
        """
        if not self.credential.api_key or not self.credential.api_secret:
            self._status = AuthStatus.ERROR
            raise ConfigurationError(
                "Missing required Zerodha configuration. Please set API_KEY and API_SECRET "
                "in your environment variables or .env file."
            )

        if self.credential.has_usable_token():
            logger.info("🔍 Validating existing access token...")
            self._status = AuthStatus.VALIDATING
            if self.kite_client.validate_access_token(self.credential.access_token):
                logger.info("✅ Existing access token is valid")
                self._status = AuthStatus.AUTHENTICATED
                return ResolvedCredential(credential=self.credential, source=TokenSource.EXISTING)
            logger.warning("❌ Existing access token is invalid or expired")

        logger.info("🔄 Access token required. Starting authentication flow...")
        try:
            session = self._interactive_authentication()
        except Exception:
            self._status = AuthStatus.ERROR
            raise

        resolved = ResolvedCredential(
            credential=self.credential.with_access_token(session.access_token),
            source=TokenSource.EXCHANGED,
            session=session,
        )

        warning = persist_access_token(self.token_store, session.access_token, self.access_token_key)
        if warning is not None:
            resolved.warnings.append(warning)

        self._status = AuthStatus.AUTHENTICATED
        return resolved

    def _interactive_authentication(self) -> SessionResult:
        self._status = AuthStatus.AUTHENTICATING
        request_token = self.token_provider(self.kite_client.get_login_url())

        request_token = (request_token or "").strip()
        if not request_token:
            raise InputError("Request token is required")

        logger.info("🔄 Generating access token...")
        session = self.kite_client.generate_session(request_token)
        logger.info("✅ Access token generated successfully!")
        return session
