"""
Internal request pipeline primitives.

Requests and responses are modelled independently of `httpx` so that
cross-cutting behavior (write policy, authentication, request logging) is
implemented as middleware around a single terminal transport call.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeAlias, TypedDict, cast

Header: TypeAlias = tuple[str, str]


class RequestContext(TypedDict, total=False):
    timeout_seconds: float
    skip_auth: bool


class ResponseContext(TypedDict, total=False):
    elapsed_seconds: float
    reason_phrase: str


@dataclass(slots=True)
class SDKRequest:
    method: str
    url: str
    headers: list[Header] = field(default_factory=list)
    params: Sequence[tuple[str, str]] | None = None
    content: bytes | None = None
    write_intent: bool = False
    context: RequestContext = field(default_factory=lambda: cast(RequestContext, {}))

    def has_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(key.lower() == lowered for key, _ in self.headers)

    def set_header(self, name: str, value: str) -> None:
        lowered = name.lower()
        self.headers = [(k, v) for k, v in self.headers if k.lower() != lowered]
        self.headers.append((name, value))


@dataclass(slots=True)
class SDKResponse:
    status_code: int
    headers: list[Header]
    content: bytes
    context: ResponseContext = field(default_factory=lambda: cast(ResponseContext, {}))

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def status_line(self) -> str:
        reason = self.context.get("reason_phrase", "")
        return f"{self.status_code} {reason}".strip()


Pipeline: TypeAlias = Callable[[SDKRequest], SDKResponse]


class Middleware(Protocol):
    def __call__(self, req: SDKRequest, next: Pipeline) -> SDKResponse: ...


def compose(middlewares: Sequence[Middleware], terminal: Pipeline) -> Pipeline:
    """Wrap `terminal` so the first middleware in the list runs outermost."""
    pipeline = terminal
    for middleware in reversed(middlewares):
        next_pipeline = pipeline

        def _wrapped(
            req: SDKRequest, *, _mw: Middleware = middleware, _n: Pipeline = next_pipeline
        ) -> SDKResponse:
            return _mw(req, _n)

        pipeline = _wrapped
    return pipeline


_REDACTED_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


def redact_headers(headers: Sequence[Header] | Mapping[str, str]) -> dict[str, str]:
    """Copy of `headers` with credential-bearing values replaced, for logging."""
    items = headers.items() if isinstance(headers, Mapping) else headers
    return {
        key: ("[REDACTED]" if key.lower() in _REDACTED_HEADERS else value) for key, value in items
    }
