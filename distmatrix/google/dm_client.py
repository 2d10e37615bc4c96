# distmatrix/google/dm_client.py
# -*- coding: utf-8 -*-
"""
Concrete distance-matrix HTTP client:
- Centralizes HTTP (session, retries, headers)
- Maps provider-level failures to domain exceptions
- Emits standardized, high-signal logs for observability

Notes
-----
• Infra knobs live in GoogleDMConfig (timeouts, retries, UA).
• fetch() sends one already-built MatrixRequest; it neither batches nor
  caches. Batching happens in distmatrix.matrix.service.
• The provider answers HTTP 200 even for rejected requests; the top-level
  "status" field decides success. Per-element statuses are left for the
  reconciler.
• Entry points should call init_logging(); this module only fetches the logger.
"""

from __future__ import annotations

import time as _time
from typing import Any as _Any, Dict as _Dict

import requests as _req
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from distmatrix.core.models import MatrixRequest
from distmatrix.infra.logging import get_logger
from .dm_common import (
      _extract_error_text
    , _redact
    , _short
    , GoogleDMConfig
    , ProviderError
    , status_error
)

_log = get_logger(__name__)


class GoogleMatrixClient:
    """
    Prefer: GoogleMatrixClient(cfg=GoogleDMConfig(...))
    Also ok: GoogleMatrixClient(api_key="...")
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        cfg: GoogleDMConfig | None = None,
        session: _req.Session | None = None,
    ):
        self.cfg = cfg or GoogleDMConfig(api_key=api_key)
        self.url = f"{self.cfg.base_url}/json"

        # ────────────────────────────────────────────────────────────────────
        # HTTP session with retries (status-based; timeouts are per-request)
        # ────────────────────────────────────────────────────────────────────
        self._sess = session or _req.Session()
        retries = Retry(
              total=self.cfg.max_retries
            , connect=self.cfg.max_retries
            , read=min(1, self.cfg.max_retries)  # at most one re-read
            , backoff_factor=self.cfg.backoff_s
            , status_forcelist=(500, 502, 503, 504)
            , allowed_methods=frozenset(["GET"])
            , raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retries)
        self._sess.mount("https://", adapter)
        self._sess.mount("http://", adapter)
        self._sess.headers.update(
            {
                  "User-Agent": self.cfg.user_agent
                , "Accept": "application/json"
            }
        )

        _log.debug(
            "GoogleMatrixClient ready url=%s ct=%.1fs rt=%.1fs retries=%s",
              self.url
            , self.cfg.connect_timeout_s
            , self.cfg.read_timeout_s
            , self.cfg.max_retries
        )

    # ────────────────────────────────────────────────────────────────────────
    # Lifecycle helpers
    # ────────────────────────────────────────────────────────────────────────
    @classmethod
    def from_env(cls) -> "GoogleMatrixClient":
        """Convenience ctor that pulls GOOGLE_DM_* settings from env."""
        return cls(cfg=GoogleDMConfig())

    def close(self) -> None:
        """Explicitly close the underlying HTTP session."""
        self._sess.close()

    def __enter__(self) -> "GoogleMatrixClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ────────────────────────────────────────────────────────────────────────
    # Core HTTP layer
    # ────────────────────────────────────────────────────────────────────────
    def fetch(self, request: MatrixRequest) -> _Dict[str, _Any]:
        """
        Send one matrix request and return the parsed JSON body.

        Raises
        ------
        RateLimited
            Top-level OVER_QUERY_LIMIT / OVER_DAILY_LIMIT.
        ProviderError
            Any other non-OK top-level status, or a body that is not JSON.
        requests.HTTPError / requests.RequestException
            Transport failures after the retry adapter gave up.
        """
        params = dict(request.params)
        _log.info(
            "MATRIX %s n_origins=%s n_destinations=%s",
              request.mode.value
            , len(request.origins)
            , len(request.destinations)
        )
        _log.debug("MATRIX params=%s", _short(_redact(params)))

        t0 = _time.time()
        try:
            resp = self._sess.get(self.url, params=params, timeout=self.cfg.timeouts)
        except _req.RequestException as e:
            dt_ms = (_time.time() - t0) * 1000.0
            _log.error(
                "HTTP GET %s — request exception %s after %.0f ms",
                  self.url
                , type(e).__name__
                , dt_ms
            )
            raise

        dt_ms = (_time.time() - t0) * 1000.0

        if not (200 <= resp.status_code < 300):
            msg = _extract_error_text(resp)
            _log.error(
                "HTTP GET %s — %s (%.0f ms) body=%s",
                  self.url
                , resp.status_code
                , dt_ms
                , msg
            )
            resp.raise_for_status()

        try:
            data = resp.json()
        except ValueError:
            txt = (resp.text or "")[:200]
            _log.error("HTTP GET %s — invalid JSON (%.0f ms): %s", self.url, dt_ms, txt)
            raise ProviderError("INVALID_JSON", txt)

        if not isinstance(data, dict):
            raise ProviderError("INVALID_JSON", _short(data))

        status = data.get("status")
        if status != "OK":
            err = status_error(status, data.get("error_message", ""))
            _log.warning(
                "MATRIX rejected status=%s (%.0f ms) msg=%s",
                  err.status
                , dt_ms
                , err.message
            )
            raise err

        rows = data.get("rows") or []
        _log.info(
            "HTTP GET %s — %s (%.0f ms, rows=%s)",
              self.url
            , resp.status_code
            , dt_ms
            , len(rows)
        )
        return data


__all__ = ["GoogleMatrixClient", "GoogleDMConfig"]
