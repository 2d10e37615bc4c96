# distmatrix/matrix/service.py
# -*- coding: utf-8 -*-

"""
Distance-matrix orchestration.

One method does the work, `DistanceMatrixService.calculate()`, on
normalized `Address` lists:

    build_request → client.fetch → reconcile        (single call)
    plan_batches → (build_request → fetch → reconcile_into)* → flatten
                                                     (many-to-many)

The public entry points only adapt their input shape:

    distances_from_addresses   many origins (str)    → one destination (str)
    distance_between           one origin (str)      → one destination (str)
    distances_from_entities    many origins (entity) → one destination (str)
    distances_to_entity        many origins (entity) → one destination (entity)
    distance_matrix            many origins (entity) → many destinations (entity)

Output is always one DistanceMatrixResult per pair, origin-major. Batched
results are written into an index grid, so the order never depends on the
order calls complete in.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from distmatrix.core.config import MatrixDefaults, get_matrix_defaults
from distmatrix.core.models import (
      Address
    , DistanceMatrixResult
    , MatrixRequest
    , TransportationMode
)
from distmatrix.core.types import HasFullAddress
from distmatrix.google.dm_common import GoogleDMConfig
from distmatrix.infra.logging import get_logger
from .batching import Batch, plan_batches
from .reconciler import Grid, flatten, reconcile, reconcile_into
from .request_builder import build_request, default_transit_departure, ensure_valid_mode

_log = get_logger(__name__)


class MatrixClient(Protocol):
    """Anything that can send a MatrixRequest and return the parsed body."""

    def fetch(self, request: MatrixRequest) -> Mapping[str, Any]:
        ...


# ────────────────────────────────────────────────────────────────────────────────
# Input adapters
# ────────────────────────────────────────────────────────────────────────────────

def from_string(address: str) -> Address:
    return Address(address=address)


def from_entity(entity: HasFullAddress) -> Address:
    return Address(address=entity.full_address, id=entity.id)


# ────────────────────────────────────────────────────────────────────────────────
# Service
# ────────────────────────────────────────────────────────────────────────────────

class DistanceMatrixService:
    """
    Stateless apart from its collaborators: every call is independent.

    Parameters
    ----------
    client : MatrixClient
        Transport; GoogleMatrixClient in production, a fake in tests.
    cfg : GoogleDMConfig | None
        Credentials used in request params; defaults to `client.cfg`.
    defaults : MatrixDefaults | None
        Ceilings, batch sizes and `max_workers`.
    """

    def __init__(
        self,
        client: MatrixClient,
        cfg: GoogleDMConfig | None = None,
        defaults: MatrixDefaults | None = None,
    ) -> None:
        self.client = client
        self.cfg = cfg or getattr(client, "cfg", None)
        if self.cfg is None:
            raise ValueError("DistanceMatrixService needs a GoogleDMConfig (cfg=...)")
        self.defaults = defaults or get_matrix_defaults()

    @classmethod
    def from_env(cls, defaults: MatrixDefaults | None = None) -> "DistanceMatrixService":
        from distmatrix.google.dm_client import GoogleMatrixClient

        return cls(GoogleMatrixClient.from_env(), defaults=defaults)

    # ────────────────────────────────────────────────────────────────────────
    # Orchestration
    # ────────────────────────────────────────────────────────────────────────
    def calculate(
        self,
        origins: Sequence[Address],
        destinations: Sequence[Address],
        mode: TransportationMode,
        transit_date: Optional[datetime] = None,
        *,
        batched: bool = False,
    ) -> List[DistanceMatrixResult]:
        """
        Measure every (origin, destination) pair.

        With batched=False everything goes out in one call, and more than
        `max_elements` pairs raises CapacityExceeded. With batched=True the
        grid is split by plan_batches() first.
        """
        ensure_valid_mode(mode)

        if not origins or not destinations:
            _log.info(
                "calculate: empty input (origins=%s destinations=%s), no call issued",
                len(origins), len(destinations),
            )
            return []

        # one departure for every batch of the matrix
        if mode is TransportationMode.TRANSIT and transit_date is None:
            transit_date = default_transit_departure(defaults=self.defaults)

        if not batched:
            return self._single(origins, destinations, mode, transit_date)
        return self._batched(origins, destinations, mode, transit_date)

    def _fetch(
        self,
        origins: Sequence[Address],
        destinations: Sequence[Address],
        mode: TransportationMode,
        transit_date: Optional[datetime],
    ) -> Optional[Mapping[str, Any]]:
        request = build_request(
              [o.address for o in origins]
            , [d.address for d in destinations]
            , mode
            , transit_date
            , cfg=self.cfg
            , defaults=self.defaults
        )
        if request is None:
            return None
        return self.client.fetch(request)

    def _single(self, origins, destinations, mode, transit_date) -> List[DistanceMatrixResult]:
        response = self._fetch(origins, destinations, mode, transit_date) or {}
        results = reconcile(origins, destinations, mode, response)
        _log.info(
            "calculate: %s origins x %s destinations → %s results (%s failed)",
            len(origins), len(destinations), len(results),
            sum(1 for r in results if not r.succeeded),
        )
        return results

    def _batched(self, origins, destinations, mode, transit_date) -> List[DistanceMatrixResult]:
        batches = plan_batches(
              len(origins)
            , len(destinations)
            , max_elements=self.defaults.max_elements
            , max_destinations=self.defaults.max_destinations
            , max_origins=self.defaults.max_origins
        )
        grid: Grid = [[None] * len(destinations) for _ in origins]

        def run(batch: Batch) -> Mapping[str, Any]:
            return self._fetch(
                  origins[batch.origin_slice]
                , destinations[batch.destination_slice]
                , mode
                , transit_date
            ) or {}

        workers = max(1, int(self.defaults.max_workers))
        _log.info(
            "calculate: %s origins x %s destinations in %s batches (workers=%s)",
            len(origins), len(destinations), len(batches), workers,
        )

        if workers == 1:
            responses = (run(b) for b in batches)
            failures = self._fill(grid, batches, responses, origins, destinations, mode)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields in submission order; the first error re-raises here
                responses = executor.map(run, batches)
                failures = self._fill(grid, batches, responses, origins, destinations, mode)

        results = flatten(grid)
        _log.info("calculate: %s results (%s failed)", len(results), failures)
        return results

    @staticmethod
    def _fill(grid, batches, responses, origins, destinations, mode) -> int:
        failures = 0
        for batch, response in zip(batches, responses):
            failures += reconcile_into(
                  grid
                , origins[batch.origin_slice]
                , destinations[batch.destination_slice]
                , mode
                , response
                , origin_offset=batch.origin_start
                , destination_offset=batch.destination_start
            )
        return failures

    # ────────────────────────────────────────────────────────────────────────
    # Public call shapes
    # ────────────────────────────────────────────────────────────────────────
    def distances_from_addresses(
        self,
        origin_addresses: Sequence[str],
        destination_address: str,
        mode: TransportationMode,
        transit_date: Optional[datetime] = None,
    ) -> List[DistanceMatrixResult]:
        """Many origins → one destination, plain strings."""
        return self.calculate(
              [from_string(o) for o in origin_addresses]
            , [from_string(destination_address)]
            , mode
            , transit_date
        )

    def distance_between(
        self,
        origin_address: str,
        destination_address: str,
        mode: TransportationMode,
        transit_date: Optional[datetime] = None,
    ) -> List[DistanceMatrixResult]:
        """One origin → one destination. Still returns a (one-item) list."""
        return self.calculate(
              [from_string(origin_address)]
            , [from_string(destination_address)]
            , mode
            , transit_date
        )

    def distances_from_entities(
        self,
        origin_addresses: Sequence[HasFullAddress],
        destination_address: str,
        mode: TransportationMode,
        transit_date: Optional[datetime] = None,
    ) -> List[DistanceMatrixResult]:
        """Many origin entities → one destination string; origin ids carried."""
        return self.calculate(
              [from_entity(o) for o in origin_addresses]
            , [from_string(destination_address)]
            , mode
            , transit_date
        )

    def distances_to_entity(
        self,
        origin_addresses: Sequence[HasFullAddress],
        destination_address: HasFullAddress,
        mode: TransportationMode,
        transit_date: Optional[datetime] = None,
    ) -> List[DistanceMatrixResult]:
        """Many origin entities → one destination entity; both ids carried."""
        return self.calculate(
              [from_entity(o) for o in origin_addresses]
            , [from_entity(destination_address)]
            , mode
            , transit_date
        )

    def distance_matrix(
        self,
        origin_addresses: Sequence[HasFullAddress],
        destination_addresses: Sequence[HasFullAddress],
        mode: TransportationMode,
        transit_date: Optional[datetime] = None,
    ) -> List[DistanceMatrixResult]:
        """
        Many origin entities → many destination entities, batched so no
        call exceeds the provider ceiling. No destinations → [] and no call.
        """
        return self.calculate(
              [from_entity(o) for o in origin_addresses]
            , [from_entity(d) for d in destination_addresses]
            , mode
            , transit_date
            , batched=True
        )
