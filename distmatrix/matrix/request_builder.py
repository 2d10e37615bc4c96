# distmatrix/matrix/request_builder.py
# -*- coding: utf-8 -*-

"""
Build the parameter set for one distance-matrix call.

Rules
-----
• Empty origins or destinations → no request (None).
• TransportationMode.UNKNOWN → InvalidMode.
• origins × destinations above the ceiling → CapacityExceeded, raised
  before anything reaches the network.
• DRIVING / WALKING / BICYCLING / TRANSIT set `mode`; ALL leaves it to the
  provider default.
• TRANSIT also sets `departure_time` (epoch seconds, UTC). Without an
  explicit instant it is the next Monday at 15:00 local time, never today.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional, Sequence

from distmatrix.core.config import MatrixDefaults, get_matrix_defaults
from distmatrix.core.models import MatrixRequest, TransportationMode
from distmatrix.google.dm_common import (
      CapacityExceeded
    , GoogleDMConfig
    , InvalidMode
)
from distmatrix.infra.logging import get_logger

_log = get_logger(__name__)

# Modes that map one-to-one onto the provider's `mode` parameter.
_MODE_PARAMS = {
      TransportationMode.DRIVING: "driving"
    , TransportationMode.WALKING: "walking"
    , TransportationMode.BICYCLING: "bicycling"
    , TransportationMode.TRANSIT: "transit"
}


# ────────────────────────────────────────────────────────────────────────────────
# Date helpers
# ────────────────────────────────────────────────────────────────────────────────

def next_weekday_at(
      today: date
    , weekday: int = 0
    , hour: int = 15
) -> datetime:
    """
    Naive local datetime of the next `weekday` strictly after `today`, at
    `hour`:00. Monday=0; if `today` already is that weekday the result is
    seven days later.
    """
    days_ahead = (weekday - today.weekday()) % 7 or 7
    return datetime.combine(today + timedelta(days=days_ahead), time(hour=hour))


def to_epoch_seconds(dt: datetime) -> int:
    """Seconds since 1970-01-01 UTC. Naive datetimes are read as local time."""
    return int(dt.timestamp())


def default_transit_departure(
      today: Optional[date] = None
    , defaults: Optional[MatrixDefaults] = None
) -> datetime:
    defaults = defaults or get_matrix_defaults()
    return next_weekday_at(
          today or date.today()
        , weekday=defaults.transit_weekday
        , hour=defaults.transit_hour
    )


# ────────────────────────────────────────────────────────────────────────────────
# Validation
# ────────────────────────────────────────────────────────────────────────────────

def ensure_valid_mode(mode: TransportationMode) -> TransportationMode:
    if mode is TransportationMode.UNKNOWN:
        raise InvalidMode("Transportation mode unknown")
    return mode


def ensure_capacity(n_origins: int, n_destinations: int, max_elements: int) -> None:
    n = n_origins * n_destinations
    if n > max_elements:
        raise CapacityExceeded(
            f"{n_origins} origins x {n_destinations} destinations = {n} pairs; "
            f"the provider allows at most {max_elements} per request"
        )


# ────────────────────────────────────────────────────────────────────────────────
# Builder
# ────────────────────────────────────────────────────────────────────────────────

def build_request(
      origins: Sequence[str]
    , destinations: Sequence[str]
    , mode: TransportationMode
    , transit_date: Optional[datetime] = None
    , *
    , cfg: GoogleDMConfig
    , defaults: Optional[MatrixDefaults] = None
) -> Optional[MatrixRequest]:
    """
    Return the MatrixRequest for one call, or None when there is nothing
    to ask for.

    Raises
    ------
    InvalidMode
        mode is UNKNOWN.
    CapacityExceeded
        More than `defaults.max_elements` pairs.
    """
    defaults = defaults or get_matrix_defaults()

    if not origins or not destinations:
        _log.debug(
            "build_request: nothing to do (origins=%s destinations=%s)",
            len(origins or ()), len(destinations or ()),
        )
        return None

    ensure_valid_mode(mode)
    ensure_capacity(len(origins), len(destinations), defaults.max_elements)

    params: Dict[str, Any] = {
          "key": cfg.api_key
        , "client": cfg.client
        , "channel": cfg.channel
        , "origins": "|".join(origins)
        , "destinations": "|".join(destinations)
    }

    mode_param = _MODE_PARAMS.get(mode)
    if mode_param is not None:
        params["mode"] = mode_param

    if mode is TransportationMode.TRANSIT:
        departure = transit_date or default_transit_departure(defaults=defaults)
        params["departure_time"] = to_epoch_seconds(departure)
        _log.debug("build_request: transit departure=%s", departure.isoformat())

    params.update(cfg.extra_params)

    return MatrixRequest(
          origins=tuple(origins)
        , destinations=tuple(destinations)
        , mode=mode
        , params=params
    )
