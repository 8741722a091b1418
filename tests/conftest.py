"""Shared fixtures for tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from helpers import NOW

from dspam_teach.models import TeachConfig


@pytest.fixture
def maildirs(tmp_path: Path) -> tuple[Path, Path]:
    spam = tmp_path / "spam"
    innocent = tmp_path / "innocent"
    spam.mkdir()
    innocent.mkdir()
    return spam, innocent


@pytest.fixture
def config(tmp_path: Path, maildirs: tuple[Path, Path]) -> TeachConfig:
    spam, innocent = maildirs
    return TeachConfig(
        spam_dir=spam,
        innocent_dir=innocent,
        age_days=30,
        db_path=tmp_path / "ledger.db",
        now=NOW,
    )


def _make_fake_dspam(tmp_path: Path, exit_code: int) -> tuple[Path, Path]:
    log = tmp_path / f"dspam-calls-{exit_code}.jsonl"
    script = tmp_path / f"fake-dspam-{exit_code}"
    script.write_text(
        f"#!{sys.executable}\n"
        "import json, sys\n"
        f"with open({str(log)!r}, 'a') as f:\n"
        "    f.write(json.dumps({'argv': sys.argv[1:], 'stdin': sys.stdin.read()}) + '\\n')\n"
        f"sys.exit({exit_code})\n"
    )
    script.chmod(0o755)
    return script, log


@pytest.fixture
def fake_dspam(tmp_path: Path) -> tuple[Path, Path]:
    """An executable that records its argv and stdin, then exits 0."""
    return _make_fake_dspam(tmp_path, 0)


@pytest.fixture
def failing_dspam(tmp_path: Path) -> tuple[Path, Path]:
    """An executable that records its call, then exits 1."""
    return _make_fake_dspam(tmp_path, 1)
