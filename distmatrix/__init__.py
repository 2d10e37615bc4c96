from __future__ import annotations

# ── models ──────────────────────────────────────────────────────────────────────
from .core.config import MatrixDefaults, get_matrix_defaults
from .core.models import (
      Address
    , DistanceMatrixResult
    , MatrixRequest
    , TransportationMode
)

# ── provider ────────────────────────────────────────────────────────────────────
from .google.dm_common import (
      CapacityExceeded
    , DistanceMatrixError
    , GoogleDMConfig
    , InvalidMode
    , ProviderError
    , RateLimited
    , ShapeMismatch
)
from .google.dm_client import GoogleMatrixClient

# ── matrix (public API) ─────────────────────────────────────────────────────────
from .matrix.batching import Batch, chunked, plan_batches
from .matrix.request_builder import build_request, next_weekday_at
from .matrix.reconciler import reconcile
from .matrix.service import DistanceMatrixService

__all__ = [
    # models
      "Address", "DistanceMatrixResult", "MatrixRequest", "TransportationMode",
      "MatrixDefaults", "get_matrix_defaults",
    # provider
      "GoogleDMConfig", "GoogleMatrixClient",
      "DistanceMatrixError", "CapacityExceeded", "InvalidMode",
      "ShapeMismatch", "ProviderError", "RateLimited",
    # matrix
      "Batch", "chunked", "plan_batches",
      "build_request", "next_weekday_at",
      "reconcile", "DistanceMatrixService",
]

__version__ = "1.0.0"
