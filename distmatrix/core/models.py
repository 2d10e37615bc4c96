# distmatrix/core/models.py
# -*- coding: utf-8 -*-

"""
Core domain models (pure dataclasses and enums).

    - TransportationMode: provider travel modes (+ ALL / UNKNOWN sentinels)
    - Address: normalized (display string, optional id) pair
    - MatrixRequest: the parameter set of a single provider call
    - DistanceMatrixResult: one output record per (origin, destination) pair

No HTTP imports here; safe to import from anywhere.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple


# ────────────────────────────────────────────────────────────────────────────────
# Transportation mode
# ────────────────────────────────────────────────────────────────────────────────

class TransportationMode(enum.Enum):
    """
    Travel modes understood by the routing-matrix provider.

    UNKNOWN is an error state: it is stamped on failed results and is
    rejected as a request mode. ALL places no mode restriction on the call.
    """

    ALL = "all"
    UNKNOWN = "unknown"
    DRIVING = "driving"
    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"

    @classmethod
    def parse(cls, value: "str | TransportationMode") -> "TransportationMode":
        """Accept an enum member or its (case-insensitive) name/value."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown transportation mode: {value!r}")


# ────────────────────────────────────────────────────────────────────────────────
# Addresses
# ────────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Address:
    """
    A location as submitted to the provider.

    Attributes
    ----------
    address : str
        Free-text address sent verbatim (not validated).
    id : Optional[int]
        Identifier of the persisted entity the address came from; None for
        raw strings.
    """

    address: str
    id: Optional[int] = None


# ────────────────────────────────────────────────────────────────────────────────
# Request descriptor
# ────────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MatrixRequest:
    """
    Everything needed for one provider call.

    `params` is the query string mapping; values left as None are dropped
    by `requests` when the call is sent.
    """

    origins: Tuple[str, ...]
    destinations: Tuple[str, ...]
    mode: TransportationMode
    params: Mapping[str, Any] = field(default_factory=dict)

    @property
    def n_elements(self) -> int:
        return len(self.origins) * len(self.destinations)


# ────────────────────────────────────────────────────────────────────────────────
# Output record
# ────────────────────────────────────────────────────────────────────────────────

@dataclass
class DistanceMatrixResult:
    """
    Outcome for a single (origin, destination) pair.

    Exactly one of the two shapes is populated:
        - success: `distance_km` and `duration` set, `error_code` None,
          `mode` the requested mode
        - failure: `error_code` set (raw provider status or a local code),
          `distance_km`/`duration` None, `mode` UNKNOWN

    Attributes
    ----------
    origin_address, destination_address : str
        Display strings exactly as submitted.
    origin_address_id, destination_address_id : Optional[int]
        Entity ids carried through from the input (None for raw strings).
    mode : TransportationMode
    error_code : Optional[str]
    distance_km : Optional[Decimal]
        Provider meters / 1000, kept as Decimal.
    duration : Optional[timedelta]
    """

    origin_address: str
    destination_address: str
    mode: TransportationMode
    origin_address_id: Optional[int] = None
    destination_address_id: Optional[int] = None
    error_code: Optional[str] = None
    distance_km: Optional[Decimal] = None
    duration: Optional[timedelta] = None

    @property
    def succeeded(self) -> bool:
        return self.error_code is None

    @classmethod
    def success(
          cls
        , origin: Address
        , destination: Address
        , mode: TransportationMode
        , distance_m: int
        , duration_s: int
    ) -> "DistanceMatrixResult":
        return cls(
              origin_address=origin.address
            , origin_address_id=origin.id
            , destination_address=destination.address
            , destination_address_id=destination.id
            , mode=mode
            , distance_km=Decimal(int(distance_m)) / Decimal(1000)
            , duration=timedelta(seconds=int(duration_s))
        )

    @classmethod
    def failure(
          cls
        , origin: Address
        , destination: Address
        , error_code: str
    ) -> "DistanceMatrixResult":
        return cls(
              origin_address=origin.address
            , origin_address_id=origin.id
            , destination_address=destination.address
            , destination_address_id=destination.id
            , mode=TransportationMode.UNKNOWN
            , error_code=error_code
        )

    def as_dict(self) -> Dict[str, Any]:
        """Flat, JSON/CSV friendly view (distance as float, duration in seconds)."""
        return {
              "origin_address": self.origin_address
            , "origin_address_id": self.origin_address_id
            , "destination_address": self.destination_address
            , "destination_address_id": self.destination_address_id
            , "mode": self.mode.value
            , "error_code": self.error_code
            , "distance_km": float(self.distance_km) if self.distance_km is not None else None
            , "duration_s": int(self.duration.total_seconds()) if self.duration is not None else None
        }
