"""proof-ledger: an append-only, tamper-evident record chain.

Records are linked by SHA-256 digests and sealed by a proof-of-work nonce
search.  See :mod:`proof_ledger.ledger` for the public API.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ---------------------------------------------------------------------------
# Package version: read from pyproject.toml via importlib.metadata.
#
# If the package is imported without being installed (running straight from
# a checkout), fall back to the current release string.
# ---------------------------------------------------------------------------
try:
    __version__: str = version("proof-ledger")
except PackageNotFoundError:
    __version__ = "0.1.0"
