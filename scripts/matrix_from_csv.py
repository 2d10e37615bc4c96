#!/usr/bin/env python3
# scripts/matrix_from_csv.py
# -*- coding: utf-8 -*-

"""
Bulk distance matrix from two CSV files.

Given:
  - an origins CSV      (column `address`, optional column `id`)
  - a destinations CSV  (same layout)

This script will:

  1. Load both tables (blank addresses are skipped).
  2. Measure every origin × destination pair, batched so that no provider
     call exceeds its element ceiling.
  3. Write one CSV row per pair (failed pairs keep their error_code).
  4. Exit 2 on a provider quota error (RateLimited), nothing written.

Example
-------
    python scripts/matrix_from_csv.py \
        --origins data/origins.csv --destinations data/stores.csv \
        --mode driving --out out/matrix.csv
"""

from __future__ import annotations

# ───────────────────── path bootstrap (must be first) ─────────────────────
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]  # repo root (one level above /scripts)
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
# ──────────────────────────────────────────────────────────────────────────

import argparse
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

import pandas as pd

from distmatrix.core.config import get_matrix_defaults
from distmatrix.core.models import TransportationMode
from distmatrix.google.dm_client import GoogleMatrixClient
from distmatrix.google.dm_common import RateLimited
from distmatrix.infra.logging import get_current_log_path, get_logger, init_logging, log_banner
from distmatrix.matrix.export import frame_to_addresses, results_to_frame
from distmatrix.matrix.service import DistanceMatrixService

log = get_logger(__name__)

_MODES = [m.value for m in TransportationMode if m is not TransportationMode.UNKNOWN]


# ───────────────────────────────── parser / CLI ────────────────────────────
def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute a distance/duration matrix between two CSV address lists."
    )

    parser.add_argument(
        "--origins"
        , type=Path
        , required=True
        , help="CSV with origin addresses (column 'address', optional 'id')."
    )
    parser.add_argument(
        "--destinations"
        , type=Path
        , required=True
        , help="CSV with destination addresses (column 'address', optional 'id')."
    )
    parser.add_argument(
        "--out"
        , type=Path
        , required=True
        , help="Output CSV path (parent directories are created)."
    )
    parser.add_argument(
        "--mode"
        , default="driving"
        , choices=_MODES
        , help="Transportation mode. Default: driving."
    )
    parser.add_argument(
        "--departure"
        , type=datetime.fromisoformat
        , default=None
        , help="Transit departure, ISO format (local time if naive). "
               "Default: next Monday 15:00."
    )
    parser.add_argument(
        "--max-workers"
        , type=int
        , default=None
        , help="Provider calls in flight. Default: 1 (sequential)."
    )
    parser.add_argument(
        "--log-level"
        , default="INFO"
        , choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    parser.add_argument(
        "--write-log"
        , action="store_true"
        , help="Also write logs to logs/<script>__<timestamp>.log."
    )
    return parser


# ───────────────────────────────── main ────────────────────────────────────
def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    init_logging(level=args.log_level, write_output=args.write_log)
    log_banner(log, "matrix_from_csv")

    origins = frame_to_addresses(pd.read_csv(args.origins))
    destinations = frame_to_addresses(pd.read_csv(args.destinations))
    mode = TransportationMode.parse(args.mode)
    log.info(
        "Loaded %s origins from %s and %s destinations from %s (mode=%s)",
        len(origins), args.origins, len(destinations), args.destinations, mode.value,
    )

    defaults = get_matrix_defaults()
    if args.max_workers is not None:
        defaults = replace(defaults, max_workers=args.max_workers)

    with GoogleMatrixClient.from_env() as client:
        service = DistanceMatrixService(client, defaults=defaults)
        try:
            results = service.calculate(
                  origins
                , destinations
                , mode
                , args.departure
                , batched=True
            )
        except RateLimited as exc:
            log.error("Provider quota reached (%s) — aborting, nothing written.", exc.status)
            return 2

    df = results_to_frame(results)
    args.out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(args.out, index=False, encoding="utf-8")

    n_failed = int(df["error_code"].notna().sum())
    log.info("Wrote %s rows (%s failed) → %s", len(df), n_failed, args.out)
    log_path = get_current_log_path()
    if log_path is not None:
        log.info("Log file → %s", log_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
