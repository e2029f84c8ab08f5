"""Deterministic token-cost estimation."""

from __future__ import annotations

from typing import Iterable

# Roughly four bytes of source text per model token.
BYTES_PER_TOKEN = 4


def estimate_cost(size: int) -> int:
    """Return the estimated token cost of ``size`` bytes.

    Rounds up so every nonempty file costs at least one unit; the result never
    decreases as ``size`` grows.
    """
    if size <= 0:
        return 0
    return -(-size // BYTES_PER_TOKEN)


def estimate_bytes_cost(data: bytes) -> int:
    """Return the estimated cost of an in-memory buffer."""
    return estimate_cost(len(data))


def aggregate_cost(costs: Iterable[int]) -> int:
    return sum(costs)


__all__ = ["BYTES_PER_TOKEN", "aggregate_cost", "estimate_bytes_cost", "estimate_cost"]
