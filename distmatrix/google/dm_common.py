# distmatrix/google/dm_common.py
# -*- coding: utf-8 -*-
"""
Common pieces for the distance-matrix client stack:
- Error classes
- Small helpers for log previews and HTTP error extraction
- GoogleDMConfig (credentials, endpoint, timeouts, retries, optional params)

This module does not perform HTTP calls; that lives in
distmatrix/google/dm_client.py. Keep it side-effect free (no init_logging
here); entry points call init_logging().
"""

from __future__ import annotations

import os
import json
from typing import Any, Optional, Tuple

from distmatrix.infra.logging import get_logger

# ────────────────────────────────────────────────────────────────────────────────
# Errors
# ────────────────────────────────────────────────────────────────────────────────

class DistanceMatrixError(Exception):
    """Base class for every error raised by distmatrix."""
    ...

class CapacityExceeded(DistanceMatrixError):
    """Raised when a single call would exceed the provider's element ceiling."""
    ...

class InvalidMode(DistanceMatrixError):
    """Raised when UNKNOWN is used as a request mode."""
    ...

class ShapeMismatch(DistanceMatrixError):
    """Raised when the response grid does not line up with the submitted pairs."""
    ...

class ProviderError(DistanceMatrixError):
    """Raised when the provider rejects a whole request (top-level status)."""

    def __init__(self, status: str, message: str = "") -> None:
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}" if message else status)

class RateLimited(ProviderError):
    """Raised when the provider reports a query quota was exhausted."""
    ...


# Top-level statuses that mean "quota", not "bad request".
RATE_LIMIT_STATUSES = frozenset({"OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT"})


# ────────────────────────────────────────────────────────────────────────────────
# Logging helpers
# ────────────────────────────────────────────────────────────────────────────────

_log = get_logger(__name__)

def _short(v: Any, maxlen: int = 420) -> str:
    """
    Safe, concise preview of a Python object. Useful in logs.
    """
    try:
        s = json.dumps(v, ensure_ascii=False, sort_keys=True, default=str)
    except (TypeError, ValueError):
        s = str(v)
    return s if len(s) <= maxlen else (s[:maxlen] + " …")

def _extract_error_text(resp) -> str:
    """
    Best-effort extraction of a human-friendly error from a HTTP response.
    """
    try:
        j = resp.json()
    except ValueError:
        return (getattr(resp, "text", "") or "")[:500]
    if isinstance(j, dict):
        return _short(j.get("error_message") or j)
    return str(j)

def _redact(params: dict) -> dict:
    """Copy of `params` with the API key masked, for logging."""
    out = dict(params)
    if out.get("key"):
        out["key"] = "***"
    return out


# ────────────────────────────────────────────────────────────────────────────────
# Config
# ────────────────────────────────────────────────────────────────────────────────

class GoogleDMConfig:
    """
    Configuration bundle for the distance-matrix client.

    Parameters
    ----------
    api_key : str | None
        If None, reads from env GOOGLE_DM_API_KEY.
    client : str | None
        Premium-plan client id (env GOOGLE_DM_CLIENT).
    channel : str | None
        Usage-reporting channel (env GOOGLE_DM_CHANNEL).
    base_url : str
        Endpoint base URL (no trailing slash); "/json" is appended.
    connect_timeout_s : float
        TCP connect timeout (seconds).
    read_timeout_s : float
        Response/read timeout (seconds).
    max_retries : int
        Max HTTP retries for transient 5xx failures.
    backoff_s : float
        Base backoff (seconds) for retry scheduling.
    user_agent : str
        Sent as User-Agent.
    language, units, region, avoid : str | None
        Optional provider parameters forwarded verbatim when set.
    """
    def __init__(
        self,
        api_key: str | None = None,
        client: str | None = None,
        channel: str | None = None,
        base_url: str = "https://maps.googleapis.com/maps/api/distancematrix",
        connect_timeout_s: float = 8.0,
        read_timeout_s: float = 30.0,
        max_retries: int = 2,
        backoff_s: float = 0.5,
        user_agent: str = "distmatrix/1.0",
        language: str | None = None,
        units: str | None = None,
        region: str | None = None,
        avoid: str | None = None,
    ) -> None:
        self.api_key = (api_key or os.getenv("GOOGLE_DM_API_KEY", "")).strip()
        self.client = client if client is not None else os.getenv("GOOGLE_DM_CLIENT")
        self.channel = channel if channel is not None else os.getenv("GOOGLE_DM_CHANNEL")
        self.base_url = base_url.rstrip("/")
        self.connect_timeout_s = float(connect_timeout_s)
        self.read_timeout_s = float(read_timeout_s)
        self.max_retries = int(max_retries)
        self.backoff_s = float(backoff_s)
        self.user_agent = str(user_agent)
        self.language = language
        self.units = units
        self.region = region
        self.avoid = avoid

        if not self.api_key:
            _log.error("GoogleDMConfig init: GOOGLE_DM_API_KEY not set")
            raise RuntimeError(
                "GOOGLE_DM_API_KEY not set. Export GOOGLE_DM_API_KEY or pass api_key= to GoogleDMConfig()."
            )

        # Non-sensitive summary only
        _log.info(
            "GoogleDMConfig init: base_url=%s timeouts=(%.1f,%.1f)s retries=%s backoff=%.2fs "
            "client=%s channel=%s ua=%s",
            self.base_url,
            self.connect_timeout_s,
            self.read_timeout_s,
            self.max_retries,
            self.backoff_s,
            self.client,
            self.channel,
            self.user_agent,
        )

    @property
    def timeouts(self) -> Tuple[float, float]:
        """Return (connect_timeout_s, read_timeout_s) for requests."""
        return (self.connect_timeout_s, self.read_timeout_s)

    @property
    def extra_params(self) -> dict:
        """Optional provider parameters that are actually set."""
        extras = {
              "language": self.language
            , "units": self.units
            , "region": self.region
            , "avoid": self.avoid
        }
        return {k: v for k, v in extras.items() if v}


def status_error(status: Optional[str], message: str = "") -> ProviderError:
    """Map a non-OK top-level status to the matching exception instance."""
    status = status or "MISSING_STATUS"
    if status in RATE_LIMIT_STATUSES:
        return RateLimited(status, message)
    return ProviderError(status, message)
