"""
Best-effort forwarding of request logs and metrics to an external monitoring service.

Uses Settings:
- OBS_ENABLED: turn forwarding on or off
- OBS_ENDPOINT (filled from OBS_BASE_URL): monitoring service base URL
- OBS_API_KEY: optional bearer token
- OBS_SERVICE_NAME, ENVIRONMENT, SERVICE_VERSION: metadata on every payload

Endpoints:
- POST {OBS_ENDPOINT}/logs/ingest
- POST {OBS_ENDPOINT}/metrics/ingest

Nothing here raises: delivery failures are logged locally at debug level.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from setlist.core.config import get_settings
from setlist.core.logging import get_correlation_id, get_logger

logger = get_logger("setlist.observability")

TIMEOUT_SECONDS = 3.0


def _headers() -> Dict[str, str]:
    settings = get_settings()
    headers: Dict[str, str] = {"Content-Type": "application/json"}
    if settings.OBS_API_KEY:
        headers["Authorization"] = f"Bearer {settings.OBS_API_KEY}"
    return headers


def _metadata(extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    settings = get_settings()
    metadata: Dict[str, Any] = {
        "environment": settings.ENVIRONMENT,
        "version": settings.SERVICE_VERSION,
    }
    if extra:
        metadata.update(extra)
    cid = get_correlation_id()
    if cid:
        metadata["correlation_id"] = cid
    return metadata


# PUBLIC_INTERFACE
def forwarding_enabled() -> bool:
    settings = get_settings()
    return bool(settings.OBS_ENABLED and settings.OBS_ENDPOINT)


async def _post(path: str, payload: Dict[str, Any]) -> None:
    url = get_settings().OBS_ENDPOINT.rstrip("/") + path
    try:
        async with httpx.AsyncClient(timeout=TIMEOUT_SECONDS) as client:
            response = await client.post(url, headers=_headers(), json=payload)
            response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.debug("failed to forward to observability service", extra={"url": url, "error": str(exc)})


# PUBLIC_INTERFACE
async def send_log(level: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Forward one log entry when forwarding is configured."""
    if not forwarding_enabled():
        return
    await _post(
        "/logs/ingest",
        {
            "source": get_settings().OBS_SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "message": message,
            "metadata": _metadata(metadata),
        },
    )


# PUBLIC_INTERFACE
async def send_metric(name: str, metrics: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> None:
    """Forward one metrics sample when forwarding is configured."""
    if not forwarding_enabled():
        return
    await _post(
        "/metrics/ingest",
        {
            "source": get_settings().OBS_SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "metrics": {"name": name, **metrics},
            "metadata": _metadata(metadata),
        },
    )
