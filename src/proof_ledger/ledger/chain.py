"""The append-only ledger: genesis, append, and whole-chain verification.

Overview
--------
:class:`Ledger` owns an ordered list of sealed
:class:`~proof_ledger.ledger.record.Record` objects.  It is created once (which
seals the genesis record), grows only through :meth:`Ledger.append`, and is
read through non-mutating accessors.  There is no delete, truncate, or
reorder operation.

Invariants after every successful append:

1. The ledger is non-empty (genesis is always present).
2. ``records[i].previous_digest == records[i - 1].digest`` for ``i >= 1``.
3. ``records[i].index == records[i - 1].index + 1`` and ``records[0].index == 0``.
4. Every digest matches its recomputation and meets the ledger difficulty.

Time source
-----------
Timestamps come from an injected ``clock`` callable returning whole seconds
since the Unix epoch.  :func:`system_clock` is the default.  Tests pass a
fixed or counting clock so digests are reproducible.

Concurrency
-----------
The ledger is designed for a single owner.  :meth:`append` still holds a
``threading.Lock`` for the whole read-tail / seal / append cycle, so at most
one seal is in flight and two callers can never link to the same tail.
:meth:`verify` and the accessors copy the list under the same lock and work
on that snapshot.

Verification
------------
:meth:`Ledger.verify` never raises for a tampered chain.  It returns a
:class:`VerifyResult` naming the first failing position and the check that
failed, and leaves the policy (reject, alert, halt) to the caller::

    result = ledger.verify()
    if not result:
        logger.error("Ledger broken at #%s: %s", result.failed_index, result.status)
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Literal

from proof_ledger.ledger.record import (
    GENESIS_PREVIOUS_DIGEST,
    Record,
    check_difficulty,
    meets_difficulty,
    validate_payload,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

VerifyStatus = Literal[
    "ok",
    "digest_mismatch",
    "link_mismatch",
    "insufficient_work",
    "index_mismatch",
]


def system_clock() -> int:
    """Wall-clock seconds since the Unix epoch."""
    return int(time.time())


# ── Result type ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of :meth:`Ledger.verify`.

    Truthy only when the whole chain is valid, so ``if ledger.verify():``
    reads naturally.

    Attributes:
        status: One of:
            - ``"ok"``: every record passed every check.
            - ``"digest_mismatch"``: a stored digest does not match the
              recomputation over the record's fields.
            - ``"link_mismatch"``: a record's ``previous_digest`` is not
              its predecessor's digest.
            - ``"insufficient_work"``: a digest does not meet the difficulty.
            - ``"index_mismatch"``: indices are not ``0, 1, 2, ...``.
        failed_index: Chain position of the first failing record, or ``None``.
        error_detail: Human-readable description of the failure, or ``None``.
        checked:      Number of records examined, including the failing one.
    """

    status: VerifyStatus
    failed_index: int | None
    error_detail: str | None
    checked: int

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def __bool__(self) -> bool:
        return self.ok


# ── Ledger ────────────────────────────────────────────────────────────────────


class Ledger:
    """Ordered, append-only chain of sealed records.

    Args:
        difficulty:        Leading hex zeros required of every digest.
                           Defaults to ``ledger.difficulty`` from the config.
        max_attempts:      Optional bound on each proof-of-work search.
                           Defaults to ``ledger.max_attempts`` from the config
                           (``0`` there means unbounded).
        clock:             Callable returning seconds since the epoch.
                           Defaults to :func:`system_clock`.
        genesis_timestamp: Explicit timestamp for the genesis record.  When
                           omitted, the clock is read once.
        genesis_payload:   Payload of the genesis record.  Defaults to
                           ``ledger.genesis_payload`` from the config.

    Raises:
        SealingExhausted: If ``max_attempts`` is set and genesis cannot be sealed.
    """

    def __init__(
        self,
        *,
        difficulty: int | None = None,
        max_attempts: int | None = None,
        clock: Clock | None = None,
        genesis_timestamp: int | None = None,
        genesis_payload: str | None = None,
    ) -> None:
        self._configure(difficulty, max_attempts, clock)
        if genesis_payload is None:
            genesis_payload = self._settings().genesis_payload
        timestamp = genesis_timestamp if genesis_timestamp is not None else self._clock()

        genesis = Record.create(
            0,
            timestamp,
            genesis_payload,
            GENESIS_PREVIOUS_DIGEST,
            difficulty=self._difficulty,
            max_attempts=self._max_attempts,
        )
        self._records: list[Record] = [genesis]
        logger.info(
            "ledger: created at difficulty %d, genesis digest %s",
            self._difficulty,
            genesis.digest,
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[Record],
        *,
        difficulty: int | None = None,
        max_attempts: int | None = None,
        clock: Clock | None = None,
    ) -> Ledger:
        """Wrap an existing sequence of records without resealing them.

        Used when importing a snapshot.  Nothing is validated here; call
        :meth:`verify` before trusting the result.

        Raises:
            ValueError: If ``records`` is empty.
        """
        records = list(records)
        if not records:
            raise ValueError("from_records: a ledger needs at least a genesis record.")

        ledger = cls.__new__(cls)
        ledger._configure(difficulty, max_attempts, clock)
        ledger._records = records
        return ledger

    def _configure(
        self,
        difficulty: int | None,
        max_attempts: int | None,
        clock: Clock | None,
    ) -> None:
        settings = self._settings()
        self._difficulty = difficulty if difficulty is not None else settings.difficulty
        check_difficulty(self._difficulty)
        self._max_attempts = (
            max_attempts if max_attempts is not None else settings.max_attempts_or_none
        )
        self._clock: Clock = clock or system_clock
        self._lock = threading.Lock()

    @staticmethod
    def _settings():
        # Imported lazily; proof_ledger.config imports the record constants.
        from proof_ledger.config import get_config

        return get_config().ledger

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, payload: str) -> Record:
        """Seal ``payload`` into a new record linked to the current tail.

        The caller's thread pays the full proof-of-work cost before this
        returns.  The chain is unchanged if sealing fails.

        Args:
            payload: Opaque text.  Must be encodable as UTF-8.

        Returns:
            The newly appended record.  Records are frozen, so the reference
            cannot be used to alter the ledger.

        Raises:
            InvalidPayloadError: If ``payload`` is not UTF-8 text.
            SealingExhausted:    If a ``max_attempts`` bound was exhausted.
        """
        validate_payload(payload)
        with self._lock:
            tail = self._records[-1]
            record = Record.create(
                tail.index + 1,
                self._clock(),
                payload,
                tail.digest,
                difficulty=self._difficulty,
                max_attempts=self._max_attempts,
            )
            self._records.append(record)
        return record

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(self) -> VerifyResult:
        """Check every record's digest, linkage, work, and index.

        Genesis is checked first (digest, ``index == 0``, work).  Then, for
        each adjacent pair ``(previous, current)`` from position 1:

        1. ``current.digest`` equals the recomputed digest (``digest_mismatch``).
        2. ``current.previous_digest`` equals ``previous.digest`` (``link_mismatch``).
        3. ``current.digest`` meets the difficulty (``insufficient_work``).
        4. ``current.index == previous.index + 1`` (``index_mismatch``).

        Stops at the first failure.  Calling this repeatedly without
        appending returns equal results.
        """
        records = self.records
        genesis = records[0]

        failure = self._check_record(genesis, 0)
        if failure is None and genesis.index != 0:
            failure = ("index_mismatch", f"genesis index is {genesis.index}, expected 0")
        if failure is not None:
            return self._failed(0, *failure)

        for position in range(1, len(records)):
            previous = records[position - 1]
            current = records[position]

            failure = self._check_record(current, position, previous)
            if failure is not None:
                return self._failed(position, *failure)

        return VerifyResult(status="ok", failed_index=None, error_detail=None, checked=len(records))

    def is_valid(self) -> bool:
        """Return ``True`` if :meth:`verify` finds no problem."""
        return self.verify().ok

    def _check_record(
        self,
        current: Record,
        position: int,
        previous: Record | None = None,
    ) -> tuple[VerifyStatus, str] | None:
        expected = current.recompute_digest()
        if current.digest != expected:
            return (
                "digest_mismatch",
                f"stored digest {current.digest!r} != recomputed {expected!r}",
            )
        if previous is not None and current.previous_digest != previous.digest:
            return (
                "link_mismatch",
                f"previous_digest {current.previous_digest!r} != "
                f"digest of #{position - 1} {previous.digest!r}",
            )
        if not meets_difficulty(current.digest, self._difficulty):
            return (
                "insufficient_work",
                f"digest {current.digest!r} has fewer than {self._difficulty} leading zero(s)",
            )
        if previous is not None and current.index != previous.index + 1:
            return (
                "index_mismatch",
                f"index {current.index} does not follow {previous.index}",
            )
        return None

    def _failed(self, position: int, status: VerifyStatus, detail: str) -> VerifyResult:
        logger.warning("ledger: verification failed at #%d (%s): %s", position, status, detail)
        return VerifyResult(
            status=status,
            failed_index=position,
            error_detail=detail,
            checked=position + 1,
        )

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[Record, ...]:
        """Point-in-time snapshot of every record, genesis first."""
        with self._lock:
            return tuple(self._records)

    @property
    def genesis(self) -> Record:
        return self._records[0]

    @property
    def last(self) -> Record:
        with self._lock:
            return self._records[-1]

    @property
    def difficulty(self) -> int:
        return self._difficulty

    def payloads(self) -> list[str]:
        """Payloads in chain order, genesis included."""
        return [record.payload for record in self.records]

    def to_dicts(self) -> list[dict]:
        return [record.to_dict() for record in self.records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __getitem__(self, position: int) -> Record:
        return self.records[position]

    def __repr__(self) -> str:
        return f"Ledger(length={len(self)}, difficulty={self._difficulty})"
