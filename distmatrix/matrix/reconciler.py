# distmatrix/matrix/reconciler.py
# -*- coding: utf-8 -*-

"""
Turn a parsed provider response back into one result per submitted pair.

The response is a positional grid: rows follow the submitted origin order,
each row's elements follow the submitted destination order. Nothing in the
payload names the pair a cell belongs to, so the grid is checked against
the submission before it is read:

    - row count must equal the origin count            → else ShapeMismatch
    - a row may not hold more elements than destinations → else ShapeMismatch
    - a row holding fewer elements yields MISSING_ELEMENT failures for the
      absent cells

Per-cell failures never raise; they become failure records.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from distmatrix.core.models import Address, DistanceMatrixResult, TransportationMode
from distmatrix.core.types import AnyMapping
from distmatrix.google.dm_common import ShapeMismatch
from distmatrix.infra.logging import get_logger

_log = get_logger(__name__)

STATUS_OK = "OK"
MISSING_ELEMENT = "MISSING_ELEMENT"
MISSING_VALUE = "MISSING_VALUE"
MISSING_STATUS = "MISSING_STATUS"

Grid = List[List[Optional[DistanceMatrixResult]]]


def _value(cell: Mapping[str, Any], key: str) -> Optional[int]:
    part = cell.get(key)
    if not isinstance(part, Mapping):
        return None
    try:
        return int(part["value"])
    except (KeyError, TypeError, ValueError):
        return None


def reconcile_cell(
      origin: Address
    , destination: Address
    , mode: TransportationMode
    , cell: Optional[Mapping[str, Any]]
) -> DistanceMatrixResult:
    """Result record for a single cell (None = the provider sent no cell)."""
    if cell is None:
        return DistanceMatrixResult.failure(origin, destination, MISSING_ELEMENT)

    status = cell.get("status")
    if status is None:
        return DistanceMatrixResult.failure(origin, destination, MISSING_STATUS)
    if status != STATUS_OK:
        return DistanceMatrixResult.failure(origin, destination, str(status))

    distance_m = _value(cell, "distance")
    duration_s = _value(cell, "duration")
    if distance_m is None or duration_s is None:
        return DistanceMatrixResult.failure(origin, destination, MISSING_VALUE)

    return DistanceMatrixResult.success(origin, destination, mode, distance_m, duration_s)


def _checked_rows(
      response: AnyMapping
    , n_origins: int
    , n_destinations: int
) -> List[List[Mapping[str, Any]]]:
    rows = response.get("rows") or []
    if len(rows) != n_origins:
        raise ShapeMismatch(
            f"expected {n_origins} rows, provider returned {len(rows)}"
        )

    out: List[List[Mapping[str, Any]]] = []
    for i, row in enumerate(rows):
        elements = list((row or {}).get("elements") or [])
        if len(elements) > n_destinations:
            raise ShapeMismatch(
                f"row {i}: expected {n_destinations} elements, provider returned {len(elements)}"
            )
        if len(elements) < n_destinations:
            _log.warning(
                "row %s: %s of %s elements missing",
                i, n_destinations - len(elements), n_destinations,
            )
        out.append(elements)
    return out


def reconcile_into(
      grid: Grid
    , origins: Sequence[Address]
    , destinations: Sequence[Address]
    , mode: TransportationMode
    , response: AnyMapping
    , *
    , origin_offset: int = 0
    , destination_offset: int = 0
) -> int:
    """
    Write the cells of one block response into `grid` at the given offsets.

    `grid` is the caller's full origins × destinations table; the offsets
    locate this block inside it. Returns the number of failure records.
    """
    if not origins or not destinations:
        return 0

    rows = _checked_rows(response, len(origins), len(destinations))

    failures = 0
    for i, origin in enumerate(origins):
        elements = rows[i]
        for j, destination in enumerate(destinations):
            cell = elements[j] if j < len(elements) else None
            result = reconcile_cell(origin, destination, mode, cell)
            if not result.succeeded:
                failures += 1
            grid[origin_offset + i][destination_offset + j] = result
    return failures


def reconcile(
      origins: Sequence[Address]
    , destinations: Sequence[Address]
    , mode: TransportationMode
    , response: AnyMapping
) -> List[DistanceMatrixResult]:
    """
    Flat result list, origin-major then destination-minor, one per pair.
    """
    grid: Grid = [[None] * len(destinations) for _ in origins]
    failures = reconcile_into(grid, origins, destinations, mode, response)
    _log.debug(
        "reconcile: %s pairs, %s failed",
        len(origins) * len(destinations), failures,
    )
    return flatten(grid)


def flatten(grid: Grid) -> List[DistanceMatrixResult]:
    """Row-major flatten; every cell must have been filled."""
    out: List[DistanceMatrixResult] = []
    for i, row in enumerate(grid):
        for j, result in enumerate(row):
            if result is None:
                raise ShapeMismatch(f"pair ({i}, {j}) was never reconciled")
            out.append(result)
    return out
