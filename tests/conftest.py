"""
Shared pytest fixtures for the proof-ledger test suite.

This module provides fixtures that are automatically available to all test files:
- A deterministic clock so timestamps (and therefore digests) are reproducible
- Low-difficulty ledgers that seal in a handful of attempts
- A small populated ledger for tamper and linkage tests

Difficulty 1 is used almost everywhere: it exercises the same search loop as
production (expected 16 attempts instead of 256) and keeps the suite fast.
"""

import itertools
from collections.abc import Callable

import pytest

from proof_ledger.ledger import Ledger

# Fixed epoch for deterministic timestamps (2023-11-14T22:13:20Z).
BASE_TIMESTAMP = 1_700_000_000

# ============================================================================
# CLOCK FIXTURES
# ============================================================================


@pytest.fixture
def counting_clock() -> Callable[[], int]:
    """
    Clock that returns BASE_TIMESTAMP, BASE_TIMESTAMP + 1, ... on each call.

    Two ledgers built with fresh counting clocks and the same payloads
    produce byte-identical records.
    """
    counter = itertools.count(BASE_TIMESTAMP)
    return lambda: next(counter)


# ============================================================================
# LEDGER FIXTURES
# ============================================================================


@pytest.fixture
def ledger(counting_clock: Callable[[], int]) -> Ledger:
    """Fresh difficulty-1 ledger holding only genesis."""
    return Ledger(difficulty=1, clock=counting_clock)


@pytest.fixture
def populated_ledger(ledger: Ledger) -> Ledger:
    """Difficulty-1 ledger with genesis plus five sensor-style payloads."""
    for i in range(5):
        ledger.append(f"temp={20 + i}.5 humidity={40 + i}")
    return ledger
