import hashlib
from unittest.mock import MagicMock

import httpx
import pytest

from services.auth.auth_manager import AuthManager
from services.auth.exceptions import ConfigurationError, ExchangeError, InputError
from services.auth.kite_client import KiteAuthClient
from services.auth.models import AuthStatus, Credential, TokenSource
from services.auth.prompt import StaticRequestTokenProvider
from services.auth.token_store import InMemoryTokenStore


def build_manager(kite_api, access_token=None, request_token="tok123", store=None):
    provider = StaticRequestTokenProvider(request_token)
    store = store if store is not None else InMemoryTokenStore("ACCESS_TOKEN=old\n")
    manager = AuthManager(
        credential=Credential(api_key="abc", api_secret="xyz", access_token=access_token),
        kite_client=KiteAuthClient("abc", "xyz", http_client=kite_api.client()),
        token_provider=provider,
        token_store=store,
    )
    return manager, provider, store


def test_valid_existing_token_is_returned_without_exchange(kite_api, profile_success):
    kite_api.add("GET", "/user/profile", json_body=profile_success)
    manager, provider, store = build_manager(kite_api, access_token="validTok")

    resolved = manager.resolve()

    assert resolved.access_token == "validTok"
    assert resolved.source is TokenSource.EXISTING
    assert resolved.warnings == []
    assert kite_api.calls("POST") == []
    assert len(kite_api.calls("GET", "/user/profile")) == 1
    assert provider.calls == 0
    assert store.writes == 0
    assert manager.status is AuthStatus.AUTHENTICATED


@pytest.mark.parametrize("existing", [None, "", "   ", "your_access_token"])
def test_absent_or_placeholder_token_skips_probe(kite_api, session_success, existing):
    kite_api.add("POST", "/session/token", json_body=session_success)
    manager, provider, store = build_manager(kite_api, access_token=existing)

    resolved = manager.resolve()

    assert resolved.access_token == "newAccessToken"
    assert resolved.source is TokenSource.EXCHANGED
    assert kite_api.calls("GET", "/user/profile") == []
    assert provider.calls == 1


def test_probe_is_not_called_for_placeholder():
    kite_client = MagicMock(spec=KiteAuthClient)
    kite_client.get_login_url.return_value = "https://kite.zerodha.com/connect/login?api_key=abc"
    kite_client.generate_session.return_value = MagicMock(access_token="newAccessToken")
    manager = AuthManager(
        credential=Credential("abc", "xyz", "your_access_token"),
        kite_client=kite_client,
        token_provider=StaticRequestTokenProvider("tok123"),
        token_store=InMemoryTokenStore(),
    )

    manager.resolve()

    kite_client.validate_access_token.assert_not_called()
    kite_client.generate_session.assert_called_once_with("tok123")


def test_invalid_token_triggers_one_exchange_and_one_persist(kite_api, session_success):
    kite_api.add("GET", "/user/profile", status_code=403,
                 json_body={"status": "error", "message": "Invalid token"})
    kite_api.add("POST", "/session/token", json_body=session_success)
    manager, provider, store = build_manager(kite_api, access_token="expiredTok")

    resolved = manager.resolve()

    assert resolved.access_token == "newAccessToken"
    assert resolved.session.public_token == "publicTok"
    assert len(kite_api.calls("POST", "/session/token")) == 1
    assert store.writes == 1
    assert store.content == "ACCESS_TOKEN=newAccessToken\n"


def test_unreachable_probe_falls_back_to_exchange(kite_api, session_success):
    kite_api.add_error("GET", "/user/profile", httpx.ConnectError("offline"))
    kite_api.add("POST", "/session/token", json_body=session_success)
    manager, _, _ = build_manager(kite_api, access_token="maybeValid")

    assert manager.resolve().source is TokenSource.EXCHANGED


def test_end_to_end_exchange_body(kite_api, session_success):
    kite_api.add("POST", "/session/token", json_body=session_success)
    manager, _, _ = build_manager(kite_api, request_token="  tok123\n")

    manager.resolve()

    (request,) = kite_api.calls("POST", "/session/token")
    digest = hashlib.sha256(("abc" + "tok123" + "xyz").encode()).hexdigest()
    assert kite_api.form(request) == f"api_key=abc&request_token=tok123&checksum={digest}"


@pytest.mark.parametrize("pasted", ["", "   ", "\t\n"])
def test_blank_request_token_fails_before_any_http_call(kite_api, pasted):
    manager, _, store = build_manager(kite_api, request_token=pasted)

    with pytest.raises(InputError):
        manager.resolve()

    assert kite_api.requests == []
    assert store.writes == 0
    assert manager.status is AuthStatus.ERROR


@pytest.mark.parametrize("api_key,api_secret", [("", "xyz"), ("abc", "")])
def test_missing_api_credentials_is_configuration_error(kite_api, api_key, api_secret):
    provider = StaticRequestTokenProvider("tok123")
    manager = AuthManager(
        credential=Credential(api_key=api_key, api_secret=api_secret),
        kite_client=KiteAuthClient(api_key, api_secret, http_client=kite_api.client()),
        token_provider=provider,
        token_store=InMemoryTokenStore(),
    )

    with pytest.raises(ConfigurationError):
        manager.resolve()

    assert kite_api.requests == []
    assert provider.calls == 0


def test_rejected_exchange_is_fatal_and_not_persisted(kite_api):
    kite_api.add("POST", "/session/token", status_code=403, json_body={
        "status": "error", "message": "Invalid `checksum`.", "error_type": "TokenException",
    })
    manager, _, store = build_manager(kite_api)

    with pytest.raises(ExchangeError, match="Invalid `checksum`."):
        manager.resolve()

    assert len(kite_api.calls("POST", "/session/token")) == 1
    assert store.writes == 0


class _ReadOnlyStore(InMemoryTokenStore):
    def write(self, content):
        raise PermissionError(13, "Permission denied", ".env")


def test_persistence_failure_is_reported_as_warning(kite_api, session_success):
    kite_api.add("POST", "/session/token", json_body=session_success)
    manager, _, _ = build_manager(kite_api, store=_ReadOnlyStore("ACCESS_TOKEN=old\n"))

    resolved = manager.resolve()

    assert resolved.access_token == "newAccessToken"
    assert len(resolved.warnings) == 1
    assert "ACCESS_TOKEN=newAccessToken" in resolved.warnings[0].manual_instruction
    assert manager.status is AuthStatus.AUTHENTICATED


def test_original_credential_is_not_mutated(kite_api, session_success):
    kite_api.add("POST", "/session/token", json_body=session_success)
    manager, _, _ = build_manager(kite_api)
    original = manager.credential

    resolved = manager.resolve()

    assert original.access_token is None
    assert resolved.credential.api_key == original.api_key
    assert resolved.credential.api_secret == original.api_secret
