from __future__ import annotations

import base64
import json
import logging
import threading

import httpx
import pytest
import respx
from fake_api import BASE_URL, FakeBunkerWebAPI

from bunkerweb import AuthenticationError, BunkerWeb, DecodeError, ValidationError
from bunkerweb.clients.auth import Credentials, basic_authorization


def _basic(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


# =============================================================================
# Static modes
# =============================================================================


def test_token_takes_priority_over_basic_credentials(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.get("https://bw.example/api/ping").mock(
        return_value=httpx.Response(200, json={"status": "ok", "data": {}})
    )
    with BunkerWeb(
        base_url="https://bw.example/api", api_token="tok", username="u", password="p"
    ) as client:
        client.ping()
        assert client.auth_mode == "bearer"
    assert route.calls.last.request.headers["Authorization"] == "Bearer tok"


def test_basic_auth_when_only_username_and_password(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.get("https://bw.example/api/ping").mock(
        return_value=httpx.Response(200, json={"status": "ok", "data": {}})
    )
    with BunkerWeb(base_url="https://bw.example/api", username="admin", password="secret") as client:
        client.ping()
        assert client.auth_mode == "basic"
    assert route.calls.last.request.headers["Authorization"] == _basic("admin", "secret")


def test_no_authorization_header_without_credentials(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.get("https://bw.example/api/health").mock(
        return_value=httpx.Response(200, json={"status": "ok", "data": {"status": "healthy"}})
    )
    with BunkerWeb(base_url="https://bw.example/api", username="admin") as client:
        client.health()
        assert client.auth_mode == "none"
    assert "Authorization" not in route.calls.last.request.headers


def test_basic_authorization_encoding() -> None:
    assert basic_authorization("admin", "s3:cr3t") == _basic("admin", "s3:cr3t")


def test_credentials_token_swap_is_visible_to_other_threads() -> None:
    creds = Credentials(username="admin", password="secret")
    assert creds.mode == "basic"

    worker = threading.Thread(target=creds.set_token, args=("new-token",))
    worker.start()
    worker.join()

    assert creds.mode == "bearer"
    assert creds.authorization() == "Bearer new-token"


# =============================================================================
# Login
# =============================================================================


def test_login_with_wrong_password_is_authentication_error(api: FakeBunkerWebAPI) -> None:
    with BunkerWeb(base_url=BASE_URL, transport=api.transport) as client:
        with pytest.raises(AuthenticationError) as exc:
            client.login("admin", "wrong")
        assert exc.value.status_code == 401
        assert exc.value.message == "invalid credentials"
        assert client.auth_mode == "none"


def test_login_switches_client_to_bearer_auth(api: FakeBunkerWebAPI) -> None:
    with BunkerWeb(
        base_url=BASE_URL, username="viewer", password="viewer-pass", transport=api.transport
    ) as client:
        token = client.login("admin", "secret")
        assert token == "token-admin"

        login_request = api.last_request
        assert login_request.headers["Authorization"] == _basic("admin", "secret")
        assert json.loads(login_request.content) == {"username": "admin", "password": "secret"}

        client.services.list()
        assert api.last_request.headers["Authorization"] == "Bearer token-admin"
        assert client.auth_mode == "bearer"


def test_login_overrides_configured_token_for_the_login_call_only(api: FakeBunkerWebAPI) -> None:
    with BunkerWeb(base_url=BASE_URL, api_token="old", transport=api.transport) as client:
        client.login("admin", "secret")
        assert api.last_request.headers["Authorization"] == _basic("admin", "secret")
        client.ping()
        assert api.last_request.headers["Authorization"] == "Bearer token-admin"


@pytest.mark.parametrize(("username", "password"), [("", "secret"), ("admin", "  ")])
def test_login_rejects_blank_credentials_without_network(
    username: str, password: str, api: FakeBunkerWebAPI
) -> None:
    with BunkerWeb(base_url=BASE_URL, transport=api.transport) as client:
        with pytest.raises(ValidationError):
            client.login(username, password)
    assert api.requests == []


def test_login_without_token_in_response_is_decode_error(respx_mock: respx.MockRouter) -> None:
    respx_mock.post("https://bw.example/api/auth").mock(
        return_value=httpx.Response(200, json={"status": "ok", "data": {}})
    )
    with BunkerWeb(base_url="https://bw.example/api") as client:
        with pytest.raises(DecodeError):
            client.login("admin", "secret")
        assert client.auth_mode == "none"


def test_credentials_are_never_logged(api: FakeBunkerWebAPI, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="bunkerweb")
    with BunkerWeb(
        base_url=BASE_URL, api_token="super-secret", log_requests=True, transport=api.transport
    ) as client:
        client.ping()
        client.login("admin", "secret")

    assert "bunkerweb api request: GET" in caplog.text
    assert "super-secret" not in caplog.text
    assert _basic("admin", "secret") not in caplog.text
    assert "[REDACTED]" in caplog.text
