"""
Transfer options.

Options are resolved once per request from client-level defaults and
per-request overrides, validated, and frozen. Environment variables
provide the defaults for the transport-level settings.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from contextlib import suppress
from typing import TYPE_CHECKING, Any, NamedTuple

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from multi_http._features import HAS_HTTP2, require_extra
from multi_http.errors import ValidationError

if TYPE_CHECKING:
    from typing import TypeAlias

    from multi_http.errors import TransferError

    TransferCallback: TypeAlias = Callable[
        [httpx.Request, httpx.Response | None, TransferError | None], None
    ]

# Default timeouts
_DEFAULT_TIMEOUT = 30.0


def _noop_callback(
    request: httpx.Request,
    response: httpx.Response | None,
    error: TransferError | None,
) -> None:
    return None


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("MULTI_HTTP_TRUST_ENV", "0") == "1"


def _env_timeout() -> float:
    env_timeout = os.getenv("MULTI_HTTP_TIMEOUT_SECS")
    if env_timeout:
        with suppress(ValueError):
            return float(env_timeout)
    return _DEFAULT_TIMEOUT


def _env_proxy() -> str | None:
    if _trust_env_enabled():
        return os.getenv("MULTI_HTTP_PROXY_URL")
    return None


class ClientKey(NamedTuple):
    """Connection-level settings that need a dedicated httpx client."""

    verify: bool
    proxy: str | None
    http2: bool
    max_redirects: int
    trust_env: bool


class TransferOptions(BaseModel):
    """Validated, immutable options for one transfer."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    callback: Callable[..., Any] = Field(
        default=_noop_callback,
        description="Called as callback(request, response, error) when the transfer completes",
    )
    allow_redirects: bool = Field(default=False, description="Follow redirects")
    max_redirects: int = Field(default=5, ge=0, description="Redirect limit")
    timeout: float | None = Field(
        default_factory=_env_timeout,
        description="Timeout in seconds; 0 or None disables it",
    )
    verify: bool = Field(default=True, description="Verify TLS certificates")
    proxy: str | None = Field(default_factory=_env_proxy, description="Proxy URL")
    http2: bool = Field(default=False, description="Negotiate HTTP/2")
    trust_env: bool = Field(
        default_factory=_trust_env_enabled,
        description="Honour proxy and certificate environment variables",
    )

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float | None) -> float | None:
        if value is not None and value < 0:
            raise ValueError("timeout must be >= 0")
        return value

    @field_validator("http2")
    @classmethod
    def _check_http2(cls, value: bool) -> bool:
        if value and not HAS_HTTP2:
            try:
                require_extra("http2", "h2")
            except ImportError as e:
                raise ValueError(str(e)) from e
        return value

    def add(self, **changes: Any) -> TransferOptions:
        """Return a validated copy with the given options replaced."""
        return resolve_options(changes, defaults=self)

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Convert to httpx Timeout."""
        return httpx.Timeout(self.timeout or None)

    def client_key(self) -> ClientKey:
        """Settings that must be fixed on the httpx client rather than per request."""
        return ClientKey(
            verify=self.verify,
            proxy=self.proxy,
            http2=self.http2,
            max_redirects=self.max_redirects,
            trust_env=self.trust_env,
        )


def _as_dict(options: TransferOptions | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(options, TransferOptions):
        return {name: getattr(options, name) for name in options.model_fields_set}
    return dict(options)


def resolve_options(
    options: TransferOptions | Mapping[str, Any] | None = None,
    defaults: TransferOptions | Mapping[str, Any] | None = None,
) -> TransferOptions:
    """Validate options, layering per-request values over client defaults.

    Args:
        options: Per-request options
        defaults: Client-level default options

    Returns:
        Frozen TransferOptions

    Raises:
        ValidationError: On unknown or invalid options
    """
    if isinstance(options, TransferOptions) and defaults is None:
        return options

    merged: dict[str, Any] = {}
    if defaults is not None:
        merged.update(_as_dict(defaults))
    if options is not None:
        merged.update(_as_dict(options))

    try:
        return TransferOptions.model_validate(merged)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid transfer option: {first['msg']}",
            field=field,
            actual=first.get("input"),
        ) from e
