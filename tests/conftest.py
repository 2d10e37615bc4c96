from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest

from distmatrix.core.models import MatrixRequest
from distmatrix.google.dm_common import GoogleDMConfig


def ok_cell(distance_m: int, duration_s: int) -> Dict[str, Any]:
    return {
        "status": "OK",
        "distance": {"value": distance_m, "text": f"{distance_m / 1000:.1f} km"},
        "duration": {"value": duration_s, "text": f"{duration_s // 60} mins"},
    }


def matrix_response(rows: List[List[Dict[str, Any]]]) -> Dict[str, Any]:
    return {
        "status": "OK",
        "origin_addresses": [],
        "destination_addresses": [],
        "rows": [{"elements": elements} for elements in rows],
    }


def _default_cell(origin: str, destination: str) -> Dict[str, Any]:
    # distance encodes the pair so ordering mistakes show up in assertions
    return ok_cell(1000 + len(origin) * 10 + len(destination), 60)


class FakeMatrixClient:
    """In-memory provider: answers each request from `cell_for(origin, destination)`."""

    def __init__(self, cell_for: Callable[[str, str], Dict[str, Any]] = _default_cell):
        self.cell_for = cell_for
        self.requests: List[MatrixRequest] = []

    def fetch(self, request: MatrixRequest) -> Dict[str, Any]:
        self.requests.append(request)
        return matrix_response(
            [[self.cell_for(o, d) for d in request.destinations] for o in request.origins]
        )


@dataclass
class MailingAddress:
    full_address: str
    id: Optional[int]


@pytest.fixture
def cfg() -> GoogleDMConfig:
    return GoogleDMConfig(api_key="test-key", client="gme-test", channel="unit")


@pytest.fixture
def fake_client() -> FakeMatrixClient:
    return FakeMatrixClient()
