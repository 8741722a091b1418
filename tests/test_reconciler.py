"""Tests for the reconciler."""

import logging
from pathlib import Path

import pytest

from dspam_teach.constants import INNOCENT, SPAM
from dspam_teach.ledger import Ledger
from dspam_teach.maildir import parse_filename
from dspam_teach.models import Action, ClassifierError, Message
from dspam_teach.reconciler import decide_action, reconcile


class RecordingClassifier:
    """Stands in for DspamClassifier and records what it was asked to teach."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self.fail_for = fail_for or set()
        self.dry_run = False

    def teach(self, filepath: Path, label: str, source: str) -> bool:
        if filepath.name in self.fail_for:
            raise ClassifierError("boom", ["dspam"])
        self.calls.append((filepath.name, label, source))
        return True


def _message(filename: str, dir_type: str, dspam_type: str | None, subject: str = "Hi") -> Message:
    return Message(
        name=parse_filename(filename),
        filepath=Path("/mail") / filename,
        dir_type=dir_type,
        dspam_type=dspam_type,
        subject=subject,
    )


@pytest.mark.parametrize(
    "dspam_type, dir_type, expected",
    [
        (None, INNOCENT, (Action.CLASSIFY, "corpus")),
        (None, SPAM, (Action.CLASSIFY, "inoculation")),
        (SPAM, INNOCENT, (Action.RECLASSIFY, "error")),
        (INNOCENT, SPAM, (Action.RECLASSIFY, "error")),
        (SPAM, SPAM, (Action.NOOP, None)),
        (INNOCENT, INNOCENT, (Action.NOOP, None)),
        ("quarantined", SPAM, (Action.SKIP, None)),
    ],
)
def test_decide_action(dspam_type, dir_type, expected):
    msg = _message("1700000000.a.b,u=1,", dir_type, dspam_type)
    assert decide_action(msg) == expected


def test_reconcile_teaches_and_records(tmp_path, caplog):
    messages = [
        _message("1700000000.a.b,u=1,", INNOCENT, None, subject="New"),
        _message("1700000000.c.d,u=2,", SPAM, INNOCENT, subject="Missed"),
        _message("1700000000.e.f,u=3,", SPAM, SPAM, subject="Caught"),
    ]
    classifier = RecordingClassifier()

    with Ledger(db_path=tmp_path / "ledger.db") as ledger, caplog.at_level(logging.INFO, logger="dspam_teach"):
        summary = reconcile(messages, ledger, classifier)
        labels = dict(ledger.items())

    assert classifier.calls == [
        ("1700000000.a.b,u=1,", INNOCENT, "corpus"),
        ("1700000000.c.d,u=2,", SPAM, "error"),
    ]
    assert labels == {
        "1700000000.a.b": INNOCENT,
        "1700000000.c.d": SPAM,
        "1700000000.e.f": SPAM,
    }
    assert (summary.processed, summary.classified, summary.reclassified, summary.unchanged) == (3, 1, 1, 1)
    assert summary.exit_code == 0
    assert "classify 'New' as innocent" in caplog.text
    assert "reclassify 'Missed' as spam" in caplog.text
    assert "processed 3 messages" in caplog.text


def test_reconcile_command_failure_leaves_ledger(tmp_path):
    messages = [
        _message("1700000000.a.b,u=1,", SPAM, None),
        _message("1700000000.c.d,u=2,", SPAM, None),
    ]
    classifier = RecordingClassifier(fail_for={"1700000000.a.b,u=1,"})

    with Ledger(db_path=tmp_path / "ledger.db") as ledger:
        summary = reconcile(messages, ledger, classifier)
        assert ledger.get("1700000000.a.b") is None
        assert ledger.get("1700000000.c.d") == SPAM

    assert summary.failed == 1
    assert summary.classified == 1
    assert summary.exit_code == 2


def test_reconcile_unrecognised_result_still_recorded(tmp_path):
    messages = [_message("1700000000.a.b,u=1,", INNOCENT, "quarantined")]
    classifier = RecordingClassifier()

    with Ledger(db_path=tmp_path / "ledger.db") as ledger:
        summary = reconcile(messages, ledger, classifier)
        assert ledger.get("1700000000.a.b") == INNOCENT

    assert classifier.calls == []
    assert summary.unchanged == 1


def test_whitelisted_mail_in_spam_folder_is_reclassified():
    from dspam_teach.headers import normalize_result

    msg = _message("1700000000.a.b,u=1,", SPAM, normalize_result("Whitelisted"))
    assert decide_action(msg) == (Action.RECLASSIFY, "error")
