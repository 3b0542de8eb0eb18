"""
HTTP transport core.

`HTTPClient` turns (method, relative path, optional body) into either a decoded
payload or a classified error:

- paths are resolved against a base URL that always ends with exactly one `/`
- bodies are JSON, or a pre-encoded payload with an explicit content type
- every response body is expected to be a `{status, message, data}` envelope
- there are no retries: each call is sent exactly once
"""

from __future__ import annotations

import json as jsonlib
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .._version import __version__
from ..exceptions import (
    DecodeError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
    WriteNotAllowedError,
    error_from_response,
)
from ..models.types import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, SUCCESS_STATUSES
from ..policies import Policies
from .auth import Credentials, auth_middleware
from .multipart import EncodedMultipart
from .pipeline import Middleware, Pipeline, SDKRequest, SDKResponse, compose, redact_headers

logger = logging.getLogger(__name__)

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class Envelope(BaseModel):
    """The `{status, message, data}` wrapper around every response body."""

    status: str | None = None
    message: str | None = None
    data: Any = None

    @property
    def is_success(self) -> bool:
        return (self.status or "").lower() in SUCCESS_STATUSES


@dataclass
class ClientConfig:
    """Connection, authentication and behavior settings for one client."""

    base_url: str = DEFAULT_BASE_URL
    api_token: str | None = None
    username: str | None = None
    password: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    verify: bool = True
    user_agent: str = f"bunkerweb-sdk/{__version__}"
    log_requests: bool = False
    policies: Policies = field(default_factory=Policies)
    transport: httpx.BaseTransport | None = None


def normalize_base_url(endpoint: str) -> str:
    """
    Normalise the configured API endpoint.

    A missing scheme defaults to https, and the path is forced to end with a
    single `/` so relative paths always resolve below it.
    """
    endpoint = endpoint.strip()
    if not endpoint:
        raise ValidationError("API endpoint must be provided", field="base_url")
    if "://" not in endpoint:
        endpoint = f"https://{endpoint}"
    parts = urlsplit(endpoint)
    if not parts.netloc:
        raise ValidationError(f"Invalid API endpoint: {endpoint!r}", field="base_url")
    path = parts.path.rstrip("/") + "/"
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def build_path(*segments: str) -> str:
    """
    Join caller-supplied values into a relative API path.

    Each segment is percent-encoded on its own and otherwise sent as given, so
    a value containing `/`, `?` or `#` cannot change the addressed resource.
    Blank, `.` and `..` segments are rejected.
    """
    encoded: list[str] = []
    for segment in segments:
        value = str(segment)
        if not value.strip():
            raise ValidationError("Path segment must not be empty")
        if value in {".", ".."}:
            raise ValidationError(f"Invalid path segment: {value!r}")
        encoded.append(quote(value, safe=""))
    return "/".join(encoded)


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


def _normalize_params(
    params: Mapping[str, Any] | Iterable[tuple[str, Any]] | None,
) -> list[tuple[str, str]] | None:
    if params is None:
        return None
    items = params.items() if isinstance(params, Mapping) else params
    out: list[tuple[str, str]] = []
    for key, value in items:
        if value is None:
            continue
        if isinstance(value, bool):
            out.append((key, _bool_param(value)))
        else:
            out.append((key, str(value)))
    return out or None


def _write_policy_middleware(policies: Policies) -> Middleware:
    def _middleware(req: SDKRequest, next: Pipeline) -> SDKResponse:
        if policies.blocks(req.write_intent):
            raise WriteNotAllowedError(
                f"Cannot {req.method} while writes are disabled by policy",
                method=req.method,
                url=req.url,
            )
        return next(req)

    return _middleware


def _logging_middleware(req: SDKRequest, next: Pipeline) -> SDKResponse:
    logger.debug(
        "bunkerweb api request: %s %s headers=%s",
        req.method,
        req.url,
        redact_headers(req.headers),
    )
    response = next(req)
    logger.debug(
        "bunkerweb api response: %s %s -> %s (%.3fs)",
        req.method,
        req.url,
        response.status_code,
        response.context.get("elapsed_seconds", 0.0),
    )
    return response


class HTTPClient:
    """
    Synchronous HTTP client for the BunkerWeb API.

    Holds one pooled `httpx.Client` and the mutable credentials. Every public
    method performs a single request/response cycle on the caller's thread.
    """

    def __init__(self, config: ClientConfig):
        self._config = config
        self._base_url = normalize_base_url(config.base_url)
        self.credentials = Credentials(
            token=config.api_token,
            username=config.username,
            password=config.password,
        )
        self._client = httpx.Client(
            timeout=config.timeout,
            verify=config.verify,
            transport=config.transport,
            headers={"User-Agent": config.user_agent, "Accept": "application/json"},
        )

        middlewares: list[Middleware] = [_write_policy_middleware(config.policies)]
        if config.log_requests:
            middlewares.append(_logging_middleware)
        middlewares.append(auth_middleware(self.credentials))
        self._pipeline = compose(middlewares, self._send)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HTTPClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # URL handling
    # =========================================================================

    def url_for(self, path: str) -> str:
        """Resolve a relative API path against the base URL."""
        return self._base_url + path.lstrip("/")

    # =========================================================================
    # Transport
    # =========================================================================

    def _send(self, req: SDKRequest) -> SDKResponse:
        timeout = req.context.get("timeout_seconds")
        started = time.monotonic()
        try:
            response = self._client.request(
                req.method,
                req.url,
                params=req.params,
                content=req.content,
                headers=req.headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"Request timed out: {req.method} {req.url}", method=req.method, url=req.url
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"Request failed: {req.method} {req.url}: {e}", method=req.method, url=req.url
            ) from e

        return SDKResponse(
            status_code=response.status_code,
            headers=list(response.headers.items()),
            content=response.content,
            context={
                "elapsed_seconds": time.monotonic() - started,
                "reason_phrase": response.reason_phrase,
            },
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
        json: Any | None = None,
        body: EncodedMultipart | None = None,
        shape: Any | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        skip_auth: bool = False,
        write: bool | None = None,
    ) -> Any:
        """
        Send one request and decode the response envelope.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            params: Query parameters; `None` values are dropped, bools become "true"/"false"
            json: JSON-encodable request body
            body: Pre-encoded multipart body (mutually exclusive with `json`)
            shape: Type to validate the envelope `data` into; `None` returns the raw value
            headers: Extra headers (an explicit `Authorization` overrides the client's)
            timeout: Per-call timeout in seconds
            skip_auth: Send without the client's `Authorization` header
            write: Override write detection (defaults to "any non-GET/HEAD/OPTIONS method")

        Returns:
            The decoded `data`, or `None` when the response carries none.
        """
        if json is not None and body is not None:
            raise ValidationError("Provide either a JSON body or a raw body, not both")

        method = method.upper()
        req = SDKRequest(
            method=method,
            url=self.url_for(path),
            params=_normalize_params(params),
            write_intent=method not in _SAFE_METHODS if write is None else write,
        )
        if headers:
            for key, value in headers.items():
                req.set_header(key, value)
        if json is not None:
            try:
                encoded = jsonlib.dumps(json, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Request body is not valid JSON: {e}") from e
            req.content = encoded.encode("utf-8")
            req.set_header("Content-Type", "application/json")
        elif body is not None:
            req.content = body.content
            req.set_header("Content-Type", body.content_type)
        if timeout is not None:
            req.context["timeout_seconds"] = timeout
        if skip_auth:
            req.context["skip_auth"] = True

        response = self._pipeline(req)
        return decode_response(response, shape=shape)

    # Convenience verbs -------------------------------------------------------

    def get(self, path: str, *, shape: Any | None = None, **kwargs: Any) -> Any:
        return self.request("GET", path, shape=shape, **kwargs)

    def post(self, path: str, *, shape: Any | None = None, **kwargs: Any) -> Any:
        return self.request("POST", path, shape=shape, **kwargs)

    def patch(self, path: str, *, shape: Any | None = None, **kwargs: Any) -> Any:
        return self.request("PATCH", path, shape=shape, **kwargs)

    def delete(self, path: str, *, shape: Any | None = None, **kwargs: Any) -> Any:
        return self.request("DELETE", path, shape=shape, **kwargs)


# =============================================================================
# Envelope decoding
# =============================================================================


def _parse_envelope(content: bytes) -> Envelope | None:
    """Parse `content` as an envelope; `None` when it is not one."""
    try:
        raw = jsonlib.loads(content)
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return None
    try:
        return Envelope.model_validate(raw)
    except PydanticValidationError:
        return None


def _body_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace").strip()


def decode_data(data: Any, shape: Any) -> Any:
    """Validate envelope `data` into `shape` (a pydantic model or any TypeAdapter type)."""
    try:
        if isinstance(shape, type) and issubclass(shape, BaseModel):
            return shape.model_validate(data)
        return TypeAdapter(shape).validate_python(data)
    except PydanticValidationError as e:
        raise DecodeError(f"decode response payload: {e}") from e


def decode_response(response: SDKResponse, *, shape: Any | None = None) -> Any:
    """
    Apply the envelope contract to a response.

    - 2xx with an empty body: success without payload
    - body that is not an envelope: `DecodeError` on 2xx, otherwise an
      `APIError` built from the body text (or the status line)
    - envelope: success needs both a 2xx status and an ok/success `status`
    """
    content = response.content
    success_status = response.is_success

    if not content.strip():
        if success_status:
            return None
        raise error_from_response(response.status_code, response.status_line)

    envelope = _parse_envelope(content)
    if envelope is None:
        text = _body_text(content)
        if success_status:
            raise DecodeError("decode response envelope: body is not a valid envelope", body=text)
        raise error_from_response(response.status_code, text or response.status_line)

    if not success_status or not envelope.is_success:
        message = envelope.message or _body_text(content) or response.status_line
        raise error_from_response(
            response.status_code,
            message,
            response_body=envelope.model_dump(),
        )

    if envelope.data is None:
        return None
    if shape is None:
        return envelope.data
    return decode_data(envelope.data, shape)
