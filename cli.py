# Simple CLI for the Kite gateway
import json

import click

from app.main import main as run_app
from core.config.settings import Settings
from services.gateway import KiteAPIError

# Read-only endpoints reachable through `call`
READ_ENDPOINTS = {
    "profile": "get_profile",
    "margins": "get_margins",
    "positions": "get_positions",
    "holdings": "get_holdings",
    "orders": "get_orders",
    "trades": "get_trades",
}


@click.group()
def cli():
    """Kite Gateway CLI"""
    pass


@cli.command()
def run():
    """Authenticate and verify the connection to Kite"""
    click.echo("🔥 Starting Kite gateway...", err=True)
    gateway = run_app()
    gateway.close()


@cli.command("login-url")
def login_url():
    """Print the Kite login URL for the configured API key"""
    from services.auth import login_url as build_login_url

    settings = Settings.load()
    if not settings.api_key:
        raise click.ClickException("API_KEY is not configured")
    click.echo(build_login_url(settings.api_key, settings.login_url))


@cli.command()
@click.argument("name", type=click.Choice(sorted(READ_ENDPOINTS)))
def call(name):
    """Authenticate, then print the JSON result of a read-only endpoint"""
    gateway = run_app()
    try:
        data = getattr(gateway, READ_ENDPOINTS[name])()
    except KiteAPIError as e:
        raise click.ClickException(str(e))
    finally:
        gateway.close()
    click.echo(json.dumps(data, indent=2, default=str))


if __name__ == "__main__":
    cli()
