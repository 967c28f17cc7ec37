"""JSONL snapshots of a ledger.

The ledger keeps its records in memory only.  An integrating system that
wants to keep or ship a chain writes a snapshot with :func:`dump_jsonl` and
re-checks it later with :func:`load_jsonl` followed by
:meth:`~proof_ledger.ledger.chain.Ledger.verify`.

Line format
-----------
One record per line, serialised with ``ensure_ascii=False, sort_keys=True``:

.. code-block:: json

    {"digest": "00a3f9...", "index": 1, "nonce": 117,
     "payload": "temp=21.4", "previous_digest": "004be1...",
     "timestamp": 1700000005}

The snapshot is a transport format, not the hash input.  Digests are always
recomputed from the canonical encoding in
:mod:`proof_ledger.ledger.record`, so key order here does not matter.

Loading validates the *shape* of every line with pydantic and raises
:exc:`SnapshotError` on the first bad line.  It does not validate the
*chain*: a tampered but well-formed snapshot loads fine and is reported by
``verify()``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from proof_ledger.ledger.chain import Ledger
from proof_ledger.ledger.record import Record

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a snapshot cannot be written, read, or parsed.

    The message names the file and, for parse failures, the 1-based line
    number.
    """


class RecordModel(BaseModel):
    """Schema of one snapshot line.

    Attributes:
        index:           Non-negative chain position.
        timestamp:       Non-negative seconds since the epoch.
        payload:         Opaque text.
        previous_digest: Predecessor digest (``"0"`` for genesis).
        digest:          Stored digest.
        nonce:           Non-negative proof-of-work counter.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    index: int = Field(ge=0)
    timestamp: int = Field(ge=0)
    payload: str
    previous_digest: str
    digest: str
    nonce: int = Field(ge=0)

    def to_record(self) -> Record:
        return Record(**self.model_dump())


def dump_jsonl(ledger: Ledger, path: Path | str) -> Path:
    """Write every record of ``ledger`` to ``path`` as JSONL.

    Parent directories are created.  An existing file is replaced.

    Returns:
        The path written.

    Raises:
        SnapshotError: If the filesystem write fails.
    """
    path = Path(path)
    lines = [json.dumps(r.to_dict(), ensure_ascii=False, sort_keys=True) for r in ledger]
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as exc:
        raise SnapshotError(f"Failed to write snapshot to {path}: {exc}") from exc

    logger.info("ledger: wrote %d record(s) to %s", len(lines), path)
    return path


def load_jsonl(
    path: Path | str,
    *,
    difficulty: int | None = None,
) -> Ledger:
    """Read a snapshot written by :func:`dump_jsonl` into a :class:`Ledger`.

    Blank lines are ignored.  Records are taken as stored; nothing is
    resealed.

    Args:
        path:       Snapshot file.
        difficulty: Difficulty to verify against.  Defaults to the config.

    Raises:
        SnapshotError: If the file cannot be read, is empty, or any line is
                       not valid JSON matching :class:`RecordModel`.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SnapshotError(f"Failed to read snapshot {path}: {exc}") from exc

    records: list[Record] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            model = RecordModel.model_validate_json(line)
        except ValidationError as exc:
            raise SnapshotError(
                f"{path}:{lineno}: invalid record: {exc.errors()[0]['msg']}"
            ) from exc
        records.append(model.to_record())

    if not records:
        raise SnapshotError(f"Snapshot {path} contains no records.")

    logger.info("ledger: loaded %d record(s) from %s", len(records), path)
    return Ledger.from_records(records, difficulty=difficulty)
