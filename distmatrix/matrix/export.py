# distmatrix/matrix/export.py
# -*- coding: utf-8 -*-

"""
pandas bridges for bulk runs: address tables in, result tables out.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

from distmatrix.core.models import Address, DistanceMatrixResult

RESULT_COLUMNS = [
      "origin_address"
    , "origin_address_id"
    , "destination_address"
    , "destination_address_id"
    , "mode"
    , "error_code"
    , "distance_km"
    , "duration_s"
]


def results_to_frame(results: Iterable[DistanceMatrixResult]) -> pd.DataFrame:
    """One row per pair, in input order; ids and measurements as nullable ints/floats."""
    df = pd.DataFrame([r.as_dict() for r in results], columns=RESULT_COLUMNS)
    for col in ("origin_address_id", "destination_address_id", "duration_s"):
        df[col] = df[col].astype("Int64")
    df["distance_km"] = df["distance_km"].astype("float64")
    return df


def frame_to_addresses(
      df: pd.DataFrame
    , *
    , address_col: str = "address"
    , id_col: Optional[str] = "id"
) -> List[Address]:
    """
    Read an address table (e.g. a CSV export of persisted addresses).

    Rows with a blank address are dropped; `id_col` is optional and may hold
    blanks.
    """
    if address_col not in df.columns:
        raise KeyError(f"address column {address_col!r} not found; columns={list(df.columns)}")

    has_ids = id_col is not None and id_col in df.columns
    out: List[Address] = []
    for row in df.itertuples(index=False):
        raw = getattr(row, address_col)
        if pd.isna(raw) or not str(raw).strip():
            continue
        ident = getattr(row, id_col) if has_ids else None
        out.append(
            Address(
                  address=str(raw).strip()
                , id=None if ident is None or pd.isna(ident) else int(ident)
            )
        )
    return out
