"""Tests for dynamic version management.

``proof_ledger.__version__`` is resolved from the installed package metadata
(``pyproject.toml``) and surfaced by ``proof-ledger --version``.  These tests
ensure the two agree.
"""

from __future__ import annotations

import re

import pytest

import proof_ledger
from proof_ledger import cli

# Matches major.minor.patch with an optional pre-release suffix.
_SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+(-[A-Za-z0-9]+(\.[A-Za-z0-9]+)*)?$")


@pytest.mark.unit
class TestVersionAttribute:
    """Verify the ``proof_ledger.__version__`` package attribute."""

    def test_version_is_semver(self) -> None:
        assert _SEMVER_RE.match(proof_ledger.__version__)

    def test_cli_reports_package_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            cli.main(["--version"])

        assert capsys.readouterr().out.strip() == f"proof-ledger {proof_ledger.__version__}"
