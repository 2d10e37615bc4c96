# distmatrix/matrix/batching.py
# -*- coding: utf-8 -*-

"""
Split address lists into provider-sized blocks.

- chunked(): contiguous, order-preserving chunks of one list
- plan_batches(): origin × destination blocks that each respect the
  per-call element ceiling

Pure functions, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int = 25) -> List[List[T]]:
    """
    Split `items` into ceil(len/size) contiguous chunks.

    Every chunk but the last has exactly `size` items; an empty input gives
    an empty list.
    """
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


@dataclass(frozen=True)
class Batch:
    """
    One provider call worth of pairs, as half-open index ranges into the
    caller's origin and destination lists.
    """

    origin_start: int
    origin_stop: int
    destination_start: int
    destination_stop: int

    @property
    def origin_slice(self) -> slice:
        return slice(self.origin_start, self.origin_stop)

    @property
    def destination_slice(self) -> slice:
        return slice(self.destination_start, self.destination_stop)

    @property
    def n_elements(self) -> int:
        return (self.origin_stop - self.origin_start) * (self.destination_stop - self.destination_start)


def plan_batches(
      n_origins: int
    , n_destinations: int
    , *
    , max_elements: int = 100
    , max_destinations: int = 25
    , max_origins: int = 25
) -> List[Batch]:
    """
    Cover the n_origins × n_destinations grid with blocks.

    Destinations are cut every `max_destinations`; origins are cut so that
    no block exceeds `max_elements`. Blocks are listed origin-block-major,
    which is also the order calls are issued in.
    """
    if n_origins <= 0 or n_destinations <= 0:
        return []

    dest_size = min(max_destinations, n_destinations, max_elements)
    origin_size = max(1, min(max_origins, max_elements // dest_size))

    origin_chunks = chunked(range(n_origins), origin_size)
    destination_chunks = chunked(range(n_destinations), dest_size)

    batches: List[Batch] = []
    for o_chunk in origin_chunks:
        for d_chunk in destination_chunks:
            batches.append(
                Batch(
                      origin_start=o_chunk[0]
                    , origin_stop=o_chunk[-1] + 1
                    , destination_start=d_chunk[0]
                    , destination_stop=d_chunk[-1] + 1
                )
            )
    return batches
