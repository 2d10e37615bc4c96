# distmatrix/core/config.py
# -*- coding: utf-8 -*-

"""
Core configuration models and globals.

Pure structures, independent of the HTTP client and of any provider
credentials (those live in distmatrix.google.dm_common.GoogleDMConfig).
Safe to import from anywhere.

Current contents
----------------
- MatrixDefaults: provider ceilings, transit defaults and batch concurrency
"""

from __future__ import annotations

from dataclasses import dataclass


# ────────────────────────────────────────────────────────────────────────────────
# Matrix defaults
# ────────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MatrixDefaults:
    """
    Limits and defaults for distance-matrix requests.

    Attributes
    ----------
    max_elements : int
        Hard ceiling of origins × destinations per provider call.
    max_destinations : int
        Destinations per call in the many-to-many path (batch size).
    max_origins : int
        Origins per call in the many-to-many path.
    transit_weekday : int
        Weekday (Monday=0) used for the default transit departure.
    transit_hour : int
        Local hour of the default transit departure.
    max_workers : int
        Provider calls in flight for batched requests. 1 = strictly
        sequential.
    """

    max_elements: int = 100
    max_destinations: int = 25
    max_origins: int = 25
    transit_weekday: int = 0
    transit_hour: int = 15
    max_workers: int = 1


# ────────────────────────────────────────────────────────────────────────────────
# Singleton-style instance
# ────────────────────────────────────────────────────────────────────────────────

MATRIX_DEFAULTS = MatrixDefaults()


def get_matrix_defaults() -> MatrixDefaults:
    """
    Return the global matrix defaults.

    A function rather than a bare constant so it can later be loaded from
    the environment without changing call sites.
    """
    return MATRIX_DEFAULTS
