"""Ledger package: append-only, proof-of-work sealed record chain.

Each record is bound to its predecessor by a SHA-256 digest and sealed by a
nonce search.  Any change to a stored field, or any reordering of records,
is caught by :meth:`Ledger.verify`.

Public surface
--------------
- :class:`Ledger`: genesis, :meth:`~Ledger.append`, :meth:`~Ledger.verify`.
- :class:`Record`: one sealed, immutable record.
- :class:`VerifyResult`: outcome of a verification pass.
- :func:`seal`: pure proof-of-work search.
- :func:`compute_digest`: canonical digest of a record's fields.
- :func:`dump_jsonl` / :func:`load_jsonl`: JSONL snapshots.
- :exc:`InvalidPayloadError`: payload is not UTF-8 text.
- :exc:`SealingExhausted`: bounded search ran out of attempts.
- :exc:`SnapshotError`: snapshot I/O or schema failure.

Usage example
-------------
::

    from proof_ledger.ledger import Ledger

    ledger = Ledger(difficulty=2)
    ledger.append("temp=21.4 humidity=40")
    ledger.append("ANALYSIS: readings nominal")

    result = ledger.verify()
    if not result:
        logger.critical("Ledger tampered at #%s: %s", result.failed_index, result.status)

Design notes
------------
- Single owner, in-memory.  The ledger never writes to disk on its own.
- Appends block for the full proof-of-work search.  There is no background
  mining and no timeout unless ``max_attempts`` is configured.
- Verification failure is a normal result, never an exception.
"""

from proof_ledger.ledger.chain import Clock, Ledger, VerifyResult, system_clock
from proof_ledger.ledger.export import RecordModel, SnapshotError, dump_jsonl, load_jsonl
from proof_ledger.ledger.record import (
    DEFAULT_DIFFICULTY,
    ENCODING_VERSION,
    GENESIS_PAYLOAD,
    GENESIS_PREVIOUS_DIGEST,
    InvalidPayloadError,
    Record,
    SealingExhausted,
    SealResult,
    canonical_bytes,
    check_difficulty,
    compute_digest,
    meets_difficulty,
    seal,
    validate_payload,
)

__all__ = [
    "Clock",
    "DEFAULT_DIFFICULTY",
    "ENCODING_VERSION",
    "GENESIS_PAYLOAD",
    "GENESIS_PREVIOUS_DIGEST",
    "InvalidPayloadError",
    "Ledger",
    "Record",
    "RecordModel",
    "SealResult",
    "SealingExhausted",
    "SnapshotError",
    "VerifyResult",
    "canonical_bytes",
    "check_difficulty",
    "compute_digest",
    "dump_jsonl",
    "load_jsonl",
    "meets_difficulty",
    "seal",
    "system_clock",
    "validate_payload",
]
