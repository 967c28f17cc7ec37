"""Sealed ledger records and the proof-of-work search that seals them.

Overview
--------
A :class:`Record` is one link in the chain.  It holds an index, a timestamp,
an opaque text payload, the digest of the record before it, its own digest,
and the nonce that produced that digest.  Records are frozen dataclasses:
once :meth:`Record.create` returns, nothing about the record can change.

Canonical encoding
------------------
The digest is SHA-256 over a versioned, compact JSON array::

    [ENCODING_VERSION, index, timestamp, payload, previous_digest, nonce]

serialised with ``ensure_ascii=False, separators=(",", ":")`` and encoded as
UTF-8.  For example, genesis at timestamp ``1700000000`` with nonce ``42``
hashes the bytes::

    [1,0,1700000000,"Genesis Record","0",42]

The field order is fixed.  JSON integers are always base-10 with no grouping,
so the layout does not depend on locale.  The array framing keeps field
boundaries unambiguous (``"ab" + "c"`` and ``"a" + "bc"`` hash differently).
Any change to this layout must bump :data:`ENCODING_VERSION`; every
historical digest depends on it.

Sealing
-------
:func:`seal` is a pure linear search from nonce ``0`` upward until the hex
digest starts with ``difficulty`` zero characters.  With the default
difficulty of 2 the expected number of attempts is 256, but there is no upper
bound.  Pass ``max_attempts`` to turn a runaway search into
:exc:`SealingExhausted`.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)

# ── Format contract ───────────────────────────────────────────────────────────
# Increment when the canonical hash input layout changes.
ENCODING_VERSION = 1

# Leading hex zero characters required of a sealed digest.
DEFAULT_DIFFICULTY = 2

# SHA-256 hex digests are 64 characters; a difficulty above that is unsatisfiable.
_DIGEST_HEX_LENGTH = 64

GENESIS_PAYLOAD = "Genesis Record"
GENESIS_PREVIOUS_DIGEST = "0"

# Payload characters shown by Record.summary() before truncation.
_SUMMARY_PAYLOAD_WIDTH = 50


# ── Exceptions ────────────────────────────────────────────────────────────────


class InvalidPayloadError(ValueError):
    """Raised when a payload cannot be represented in the canonical encoding.

    Payloads must be ``str`` values that encode cleanly as UTF-8.  A lone
    surrogate (``"\\ud800"``) or a ``bytes`` object is rejected here rather
    than being silently mangled into the hash input.
    """


class SealingExhausted(Exception):
    """Raised when a bounded proof-of-work search runs out of attempts.

    Attributes:
        attempts:   Number of nonces tried (``0`` through ``attempts - 1``).
        difficulty: The difficulty that could not be met.
    """

    def __init__(self, attempts: int, difficulty: int) -> None:
        self.attempts = attempts
        self.difficulty = difficulty
        super().__init__(
            f"No digest with {difficulty} leading zero(s) found after {attempts} attempt(s)."
        )


# ── Pure functions ────────────────────────────────────────────────────────────


def validate_payload(payload: object) -> str:
    """Return ``payload`` unchanged if it is text that encodes as UTF-8.

    Raises:
        InvalidPayloadError: If ``payload`` is not a ``str`` or contains
            code points that UTF-8 cannot represent.
    """
    if not isinstance(payload, str):
        raise InvalidPayloadError(
            f"Payload must be str, got {type(payload).__name__}."
        )
    try:
        payload.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidPayloadError(
            f"Payload is not representable as UTF-8 at position {exc.start}: {exc.reason}."
        ) from exc
    return payload


def canonical_bytes(
    index: int,
    timestamp: int,
    payload: str,
    previous_digest: str,
    nonce: int,
) -> bytes:
    """Serialise the hashed fields into the version 1 canonical layout.

    See the module docstring for the exact format.
    """
    fields = [ENCODING_VERSION, index, timestamp, payload, previous_digest, nonce]
    return json.dumps(fields, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def compute_digest(
    index: int,
    timestamp: int,
    payload: str,
    previous_digest: str,
    nonce: int,
) -> str:
    """Return the 64-character lowercase SHA-256 hex digest of a record's fields."""
    data = canonical_bytes(index, timestamp, payload, previous_digest, nonce)
    return hashlib.sha256(data).hexdigest()


def meets_difficulty(digest: str, difficulty: int) -> bool:
    """Return ``True`` if ``digest`` begins with ``difficulty`` ``"0"`` characters."""
    check_difficulty(difficulty)
    return digest.startswith("0" * difficulty)


@dataclass(frozen=True)
class SealResult:
    """Outcome of a successful :func:`seal` search.

    Attributes:
        digest:   The winning digest.
        nonce:    The nonce that produced it.
        attempts: How many nonces were hashed, including the winning one.
    """

    digest: str
    nonce: int
    attempts: int


def seal(
    index: int,
    timestamp: int,
    payload: str,
    previous_digest: str,
    difficulty: int,
    max_attempts: int | None = None,
) -> SealResult:
    """Search for the first nonce whose digest meets ``difficulty``.

    The search starts at nonce ``0`` and increments by one.  It has no side
    effects, so the same inputs always yield the same :class:`SealResult`.

    Args:
        index, timestamp, payload, previous_digest: The record fields being
            sealed.  They are hashed exactly as :func:`compute_digest` does.
        difficulty:   Required count of leading hex zeros, ``0..64``.
        max_attempts: Optional bound on the number of nonces tried.  ``None``
            searches without limit.

    Returns:
        The winning digest and nonce.

    Raises:
        ValueError:       If ``difficulty`` is out of range or
                          ``max_attempts`` is not positive.
        SealingExhausted: If ``max_attempts`` nonces were tried without
                          success.
    """
    check_difficulty(difficulty)
    if max_attempts is not None and max_attempts <= 0:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}.")

    target = "0" * difficulty
    nonce = 0
    while max_attempts is None or nonce < max_attempts:
        digest = compute_digest(index, timestamp, payload, previous_digest, nonce)
        if digest.startswith(target):
            return SealResult(digest=digest, nonce=nonce, attempts=nonce + 1)
        nonce += 1

    raise SealingExhausted(attempts=nonce, difficulty=difficulty)


def check_difficulty(difficulty: int) -> None:
    """Raise ``ValueError`` unless ``difficulty`` is between 0 and 64."""
    if not 0 <= difficulty <= _DIGEST_HEX_LENGTH:
        raise ValueError(
            f"difficulty must be between 0 and {_DIGEST_HEX_LENGTH}, got {difficulty}."
        )


def _check_unsigned(name: str, value: int) -> None:
    # bool is an int subclass; True as an index is a caller bug.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}.")


# ── Record ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Record:
    """One sealed, linked unit of the ledger.

    Build records with :meth:`create`, which seals before returning.  The
    plain constructor stores fields as given and is used when rebuilding
    records from a snapshot; such records are only trustworthy after
    :meth:`~proof_ledger.ledger.chain.Ledger.verify`.

    Attributes:
        index:           Position in the ledger.  ``0`` for genesis.
        timestamp:       Seconds since the Unix epoch, fixed at creation.
        payload:         Opaque text.  Not interpreted by the ledger.
        previous_digest: Digest of the preceding record, or ``"0"`` for genesis.
        digest:          SHA-256 hex over the canonical encoding.
        nonce:           The proof-of-work counter that produced ``digest``.
    """

    index: int
    timestamp: int
    payload: str
    previous_digest: str
    digest: str
    nonce: int

    @classmethod
    def create(
        cls,
        index: int,
        timestamp: int,
        payload: str,
        previous_digest: str,
        *,
        difficulty: int = DEFAULT_DIFFICULTY,
        max_attempts: int | None = None,
    ) -> Record:
        """Validate the fields, run the proof-of-work search, return a sealed record.

        Raises:
            ValueError:          On a negative or non-integer index/timestamp.
            InvalidPayloadError: If the payload is not UTF-8 text.
            SealingExhausted:    If ``max_attempts`` is set and exhausted.
        """
        _check_unsigned("index", index)
        _check_unsigned("timestamp", timestamp)
        validate_payload(payload)

        result = seal(index, timestamp, payload, previous_digest, difficulty, max_attempts)
        logger.debug(
            "ledger: sealed record #%d after %d attempt(s), nonce=%d digest=%s",
            index,
            result.attempts,
            result.nonce,
            result.digest,
        )
        return cls(
            index=index,
            timestamp=timestamp,
            payload=payload,
            previous_digest=previous_digest,
            digest=result.digest,
            nonce=result.nonce,
        )

    def recompute_digest(self) -> str:
        """Hash the stored fields again; equals :attr:`digest` for an untampered record."""
        return compute_digest(
            self.index, self.timestamp, self.payload, self.previous_digest, self.nonce
        )

    def is_sealed(self, difficulty: int = DEFAULT_DIFFICULTY) -> bool:
        """Return ``True`` if the stored digest is correct and meets ``difficulty``."""
        return self.digest == self.recompute_digest() and meets_difficulty(
            self.digest, difficulty
        )

    def summary(self, width: int = _SUMMARY_PAYLOAD_WIDTH) -> str:
        """One-line display form with a shortened digest and truncated payload."""
        payload = self.payload
        if len(payload) > width:
            payload = f"{payload[:width]}..."
        return f"Record #{self.index} [digest: {self.digest[:10]}...] - payload: {payload}"

    def to_dict(self) -> dict:
        """Return the fields as a plain dict, in declaration order."""
        return asdict(self)

    def __str__(self) -> str:
        return self.summary()
