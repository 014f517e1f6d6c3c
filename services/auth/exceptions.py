"""Authentication exceptions for the Kite session lifecycle."""

class AuthenticationError(Exception):
    """Base authentication error."""
    pass

class ConfigurationError(AuthenticationError):
    """API key or secret missing; no exchange is attempted."""
    pass

class InputError(AuthenticationError):
    """The request token could not be read from the operator."""
    pass

class ExchangeError(AuthenticationError):
    """Request token exchange was rejected or could not reach the broker."""

    def __init__(self, message: str, error_type: str | None = None):
        super().__init__(message)
        self.error_type = error_type


class PersistenceWarning(UserWarning):
    """The access token could not be saved; it must be set by hand."""

    def __init__(self, message: str, token_key: str, access_token: str):
        super().__init__(message)
        self.token_key = token_key
        self.access_token = access_token

    @property
    def manual_instruction(self) -> str:
        return f"Please manually update your .env file with: {self.token_key}={self.access_token}"
