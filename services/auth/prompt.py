"""Ways of obtaining the request token a human copies from the Kite redirect."""

from typing import Protocol

import click

from .exceptions import InputError


class RequestTokenProvider(Protocol):
    def __call__(self, login_url: str) -> str:
        """Show ``login_url`` to a human and return whatever they paste back."""
        ...


class ConsoleRequestTokenProvider:
    """Blocks on the terminal until a request token is pasted.

    There is no timeout; closing stdin aborts the login.
    """

    def __call__(self, login_url: str) -> str:
        click.echo("", err=True)
        click.echo("🔐 Zerodha Authentication Required", err=True)
        click.echo("=====================================", err=True)
        click.echo("1. Open this URL in your browser:", err=True)
        click.echo(f"   {login_url}", err=True)
        click.echo("2. Complete the login process", err=True)
        click.echo("3. Copy the request_token from the redirect URL", err=True)
        click.echo(
            "4. The URL will look like: "
            "https://your-redirect-url?request_token=XXXXXX&action=login&status=success",
            err=True,
        )
        click.echo("", err=True)

        try:
            return click.prompt(
                "Please paste the request_token here",
                default="",
                show_default=False,
                err=True,
            )
        except click.Abort as e:
            raise InputError("Input closed before a request token was entered") from e


class StaticRequestTokenProvider:
    """Returns a fixed request token, e.g. one passed on the command line."""

    def __init__(self, request_token: str):
        self.request_token = request_token
        self.calls = 0

    def __call__(self, login_url: str) -> str:
        self.calls += 1
        return self.request_token
