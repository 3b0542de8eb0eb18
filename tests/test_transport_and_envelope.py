from __future__ import annotations

import httpx
import pytest

from bunkerweb import (
    APIError,
    AuthorizationError,
    BadRequestError,
    BunkerWeb,
    ConflictError,
    DecodeError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
    TransportError,
    ValidationError,
)
from bunkerweb.clients.http import ClientConfig, HTTPClient, build_path, normalize_base_url
from bunkerweb.exceptions import error_from_response, is_not_found
from bunkerweb.models.entities import ServicePayload


def _http(handler, **kwargs) -> HTTPClient:
    return HTTPClient(
        ClientConfig(
            base_url="https://bw.example/api",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
    )


# =============================================================================
# URL handling
# =============================================================================


@pytest.mark.parametrize(
    ("endpoint", "expected"),
    [
        ("https://bw.example/api", "https://bw.example/api/"),
        ("https://bw.example/api///", "https://bw.example/api/"),
        ("bw.example:5000/api", "https://bw.example:5000/api/"),
        ("http://bw.example", "http://bw.example/"),
    ],
)
def test_normalize_base_url_ends_with_one_separator(endpoint: str, expected: str) -> None:
    assert normalize_base_url(endpoint) == expected


def test_normalize_base_url_rejects_blank() -> None:
    with pytest.raises(ValidationError):
        normalize_base_url("   ")


def test_build_path_encodes_each_segment() -> None:
    assert build_path("configs", "app", "http", "a/b?.conf") == "configs/app/http/a%2Fb%3F.conf"


def test_build_path_does_not_rewrite_segments() -> None:
    assert build_path("configs", "app", "http", " a.conf") == "configs/app/http/%20a.conf"


@pytest.mark.parametrize("segment", ["", "  ", ".", ".."])
def test_build_path_rejects_segments_that_escape_the_root(segment: str) -> None:
    with pytest.raises(ValidationError):
        build_path("services", segment)


def test_relative_paths_resolve_below_base_url() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"status": "ok", "data": {}})

    http = _http(handler)
    try:
        http.get("/ping")
        http.get("services")
    finally:
        http.close()
    assert seen == ["https://bw.example/api/ping", "https://bw.example/api/services"]


# =============================================================================
# Envelope decoding
# =============================================================================


def test_success_envelope_decodes_data_into_shape() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "status": "success",
                "data": {"service": {"id": "app", "server_name": "app.example"}},
            },
        )

    http = _http(handler)
    payload = http.get("services/app", shape=ServicePayload)
    assert payload.service.id == "app"
    assert payload.service.variables == {}


def test_status_is_compared_case_insensitively() -> None:
    http = _http(lambda request: httpx.Response(200, json={"status": "OK", "data": {"a": 1}}))
    assert http.get("x") == {"a": 1}


def test_empty_2xx_body_is_success_without_payload() -> None:
    http = _http(lambda request: httpx.Response(204))
    assert http.delete("services/app") is None


@pytest.mark.parametrize("body", [{"status": "ok"}, {"status": "ok", "data": None}])
def test_missing_or_null_data_returns_none(body: dict) -> None:
    http = _http(lambda request: httpx.Response(200, json=body))
    assert http.get("services/app", shape=ServicePayload) is None


@pytest.mark.parametrize(
    "content", [b"<html>oops</html>", b"[1, 2]", b'{"status": 5, "message": "x"}']
)
def test_non_envelope_body_on_2xx_is_decode_error(content: bytes) -> None:
    http = _http(lambda request: httpx.Response(200, content=content))
    with pytest.raises(DecodeError):
        http.get("ping")


def test_2xx_with_error_envelope_is_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "error", "message": "nope", "data": None})

    http = _http(handler)
    with pytest.raises(APIError) as exc:
        http.get("ping")
    assert exc.value.status_code == 200
    assert exc.value.message == "nope"
    assert str(exc.value) == "bunkerweb api error (200): nope"


def test_error_envelope_without_message_falls_back_to_body() -> None:
    http = _http(lambda request: httpx.Response(409, content=b'{"status":"error"}'))
    with pytest.raises(ConflictError) as exc:
        http.post("services", json={})
    assert exc.value.message == '{"status":"error"}'


def test_payload_shape_mismatch_is_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "ok", "data": {"service": {"is_draft": "x"}}})

    http = _http(handler)
    with pytest.raises(DecodeError):
        http.get("services/app", shape=ServicePayload)


@pytest.mark.parametrize("method", ["GET", "POST", "PATCH", "DELETE"])
@pytest.mark.parametrize("content", [b"", b"   ", b"upstream exploded", b"{not json"])
def test_non_2xx_with_unparsable_body_always_has_a_message(method: str, content: bytes) -> None:
    http = _http(lambda request: httpx.Response(502, content=content))
    with pytest.raises(ServerError) as exc:
        http.request(method, "anything")
    assert exc.value.status_code == 502
    assert exc.value.message
    if not content.strip():
        assert exc.value.message == "502 Bad Gateway"
    else:
        assert exc.value.message == content.decode().strip()


@pytest.mark.parametrize(
    ("status", "error_cls"),
    [
        (400, BadRequestError),
        (403, AuthorizationError),
        (404, NotFoundError),
        (409, ConflictError),
        (422, BadRequestError),
        (500, ServerError),
        (418, APIError),
    ],
)
def test_error_from_response_picks_subclass(status: int, error_cls: type[APIError]) -> None:
    err = error_from_response(status, "msg")
    assert type(err) is error_cls
    assert err.status_code == status
    assert is_not_found(err) is (status == 404)


def test_is_not_found_ignores_local_errors() -> None:
    assert is_not_found(ValidationError("bad")) is False


# =============================================================================
# Transport failures
# =============================================================================


def test_timeout_is_wrapped_and_not_retried() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("timed out", request=request)

    http = _http(handler)
    with pytest.raises(RequestTimeoutError) as exc:
        http.get("ping")
    assert calls == 1
    assert isinstance(exc.value.__cause__, httpx.ReadTimeout)
    assert exc.value.method == "GET"


def test_connection_error_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    http = _http(handler)
    with pytest.raises(TransportError) as exc:
        http.get("ping")
    assert not isinstance(exc.value, RequestTimeoutError)


def test_server_errors_are_not_retried() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503, json={"status": "error", "message": "busy"})

    http = _http(handler)
    with pytest.raises(ServerError):
        http.post("instances/reload")
    assert calls == 1


# =============================================================================
# Request building
# =============================================================================


def test_json_body_and_params_are_encoded() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "ok"})

    http = _http(handler)
    http.post("x", params={"a": True, "b": None, "c": 3}, json={"k": "v"})
    request = seen[0]
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Accept"] == "application/json"
    assert dict(request.url.params) == {"a": "true", "c": "3"}
    assert request.content == b'{"k": "v"}'


def test_json_and_raw_body_are_mutually_exclusive() -> None:
    from bunkerweb.clients.multipart import EncodedMultipart

    http = _http(lambda request: httpx.Response(200))
    with pytest.raises(ValidationError):
        http.post("x", json={}, body=EncodedMultipart(b"", "multipart/form-data; boundary=b"))


def test_ping_and_health_return_bare_objects(client: BunkerWeb) -> None:
    assert client.ping()["pong"] is True
    assert client.health() == {"status": "healthy", "uptime_seconds": 1234}


def test_ping_with_empty_body_returns_empty_dict() -> None:
    client = BunkerWeb(
        base_url="https://bw.example/api",
        transport=httpx.MockTransport(lambda request: httpx.Response(200)),
    )
    with client:
        assert client.ping() == {}
