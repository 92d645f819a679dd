"""Environment-driven configuration for the summary server."""

import os
from dataclasses import dataclass

import httpx
from dotenv import load_dotenv

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"", "0", "false", "no", "off"})


def _env(name: str) -> str:
    return os.getenv(name, "").strip()


def _read_positive_float(name: str, default: float) -> float:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a numeric value.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero.")
    return value


def _read_port(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer.") from exc
    if not 0 < value < 65536:
        raise ValueError(f"{name} must be between 1 and 65535.")
    return value


def _read_flag(name: str) -> bool:
    raw = _env(name).lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (true/false).")


def _read_api_url(name: str) -> str:
    raw = _env(name)
    if not raw:
        raise ValueError(f"{name} is required but was not provided.")
    url = httpx.URL(raw)
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"{name} must be an absolute http(s) URL, got {raw!r}.")
    return raw.rstrip("/")


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Runtime configuration.

    ``cf_api_url`` is the control-plane API root (the same value ``cf api``
    targets). ``skip_ssl_validation`` mirrors the CLI flag of the same name
    and is meant for lab foundations with self-signed certificates.
    """

    cf_api_url: str
    api_timeout: float = 30.0
    mcp_sse_port: int = 8000
    skip_ssl_validation: bool = False

    @classmethod
    def load(cls) -> "Settings":
        """Read CF_API_URL, API_TIMEOUT, MCP_SSE_PORT and CF_SKIP_SSL_VALIDATION, honouring a local .env."""
        load_dotenv()
        return cls(
            cf_api_url=_read_api_url("CF_API_URL"),
            api_timeout=_read_positive_float("API_TIMEOUT", 30.0),
            mcp_sse_port=_read_port("MCP_SSE_PORT", 8000),
            skip_ssl_validation=_read_flag("CF_SKIP_SSL_VALIDATION"),
        )
