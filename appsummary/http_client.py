"""HTTP transport for the control-plane API."""

import logging

import httpx

from appsummary.settings import Settings

USER_AGENT = "appsummary-mcp-server/0.1.0"

logger = logging.getLogger(__name__)


def create_control_plane_client(settings: Settings) -> httpx.AsyncClient:
    """
    Build the AsyncClient shared by every control-plane call.

    The v2 API answers with JSON only; retries and token handling stay with
    whoever owns the transport.
    """
    if settings.skip_ssl_validation:
        logger.warning(
            "TLS certificate validation is disabled for the control-plane API",
            extra={"cf_api_url": settings.cf_api_url},
        )
    return httpx.AsyncClient(
        base_url=settings.cf_api_url,
        timeout=httpx.Timeout(settings.api_timeout, connect=min(settings.api_timeout, 10.0)),
        verify=not settings.skip_ssl_validation,
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
    )
