# distmatrix/core/types.py
# -*- coding: utf-8 -*-

"""
Shared type aliases and lightweight protocols.

Contents
--------
- AnyMapping: parsed provider responses
- HasFullAddress: duck-typed persisted address entities
"""

from __future__ import annotations

from typing import (
      Any
    , Mapping
    , Optional
    , Protocol
    , runtime_checkable
)


AnyMapping = Mapping[str, Any]
"""Parsed provider response (rows × elements grid)."""


@runtime_checkable
class HasFullAddress(Protocol):
    """
    Protocol for persisted address entities.

    Only the display string and the numeric identifier are read; anything
    else the entity carries is ignored.
    """

    full_address: str
    id: Optional[int]
