# app/main.py

import sys
from typing import Optional

import click
import httpx
from kiteconnect import KiteConnect

from core.config.settings import Settings
from core.logging import configure_logging, get_logger
from services.auth import AuthService, AuthenticationError, ResolvedCredential, UserProfile
from services.auth.prompt import RequestTokenProvider
from services.auth.token_store import TokenStore
from services.gateway import KiteAPIError, KiteGateway


class ApplicationOrchestrator:
    """Resolves the access token, then builds and checks the API gateway.

    Nothing downstream is constructed until credential resolution has
    finished; any credential failure ends startup.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token_provider: Optional[RequestTokenProvider] = None,
        token_store: Optional[TokenStore] = None,
        auth_http_client: Optional[httpx.Client] = None,
        gateway_kite: Optional[KiteConnect] = None,
    ):
        self.settings = settings or Settings.load()
        configure_logging(self.settings)
        self.logger = get_logger("kite_gateway.main", component="application")

        self.auth_service = AuthService(
            self.settings,
            token_provider=token_provider,
            token_store=token_store,
            http_client=auth_http_client,
        )
        self._gateway_kite = gateway_kite
        self.resolved: Optional[ResolvedCredential] = None
        self.gateway: Optional[KiteGateway] = None
        self.profile: Optional[UserProfile] = None

    def startup(self) -> KiteGateway:
        """Run credential resolution and connect the gateway.

        Raises:
            AuthenticationError: no usable access token could be obtained.
            KiteAPIError: the connection test against /user/profile failed.
        """
        self.logger.info(f"🚀 Initializing {self.settings.app_name}...", version=self.settings.version)

        self.resolved = self.auth_service.resolve()
        for warning in self.resolved.warnings:
            click.echo(f"⚠️  {warning}", err=True)
            click.echo(f"📝 {warning.manual_instruction}", err=True)

        self.gateway = KiteGateway.from_settings(
            self.settings, self.resolved.credential, kite=self._gateway_kite
        )

        self.logger.info("🔍 Testing Zerodha API connection...")
        try:
            self.profile = UserProfile.from_kite_response(self.gateway.get_profile() or {})
        except KiteAPIError:
            self.gateway.close()
            self.gateway = None
            raise

        self.logger.info("✅ Successfully connected to Zerodha API",
                         user=self.profile.user_name, email=self.profile.email,
                         broker=self.profile.broker)
        return self.gateway

    def shutdown(self) -> None:
        if self.gateway is not None:
            self.gateway.close()
            self.gateway = None


def main(settings: Optional[Settings] = None, **collaborators) -> KiteGateway:
    """Start the application or exit the process with status 1."""
    try:
        app = ApplicationOrchestrator(settings, **collaborators)
    except Exception as e:
        # Settings validation errors land here before logging is configured
        click.echo(f"❌ Invalid configuration: {e}", err=True)
        sys.exit(1)

    try:
        gateway = app.startup()
    except AuthenticationError as e:
        click.echo(f"❌ Authentication failed: {e}", err=True)
        sys.exit(1)
    except KiteAPIError as e:
        click.echo(f"❌ Failed to initialize Zerodha client: {e}", err=True)
        sys.exit(1)

    click.echo(f"👤 User: {app.profile.user_name} ({app.profile.email})", err=True)
    click.echo(f"🏢 Broker: {app.profile.broker}", err=True)
    return gateway


if __name__ == "__main__":
    main()
