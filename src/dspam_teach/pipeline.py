"""Teach orchestration - scan folders, filter, inspect headers, reconcile."""

from __future__ import annotations

import asyncio
import logging

from .constants import INNOCENT, SPAM
from .display import console
from .dspam import DspamClassifier
from .headers import inspect_messages
from .ledger import Ledger
from .maildir import scan_folders, select_messages
from .models import Message, TeachConfig, TeachSummary
from .reconciler import reconcile

logger = logging.getLogger(__name__)


def attach_ledger_types(messages: list[Message], ledger: Ledger) -> list[Message]:
    """Fill in db_type and drop messages whose ledger label already matches their folder."""
    pending: list[Message] = []
    for msg in messages:
        msg.db_type = ledger.get(msg.message_id)
        if msg.db_type == msg.dir_type:
            continue
        pending.append(msg)
    return pending


async def collect_messages(config: TeachConfig, ledger: Ledger, summary: TeachSummary) -> list[Message]:
    """Return the messages that need reconciling, with headers inspected."""
    spam_entries, innocent_entries = await scan_folders(config.spam_dir, config.innocent_dir)
    console.print(
        f"  Found [bold]{len(spam_entries)}[/bold] files in spam, "
        f"[bold]{len(innocent_entries)}[/bold] in innocent"
    )

    messages = select_messages(spam_entries, SPAM, config.age_days, config.now, summary.skipped)
    messages += select_messages(innocent_entries, INNOCENT, config.age_days, config.now, summary.skipped)

    pending = attach_ledger_types(messages, ledger)
    if len(pending) < len(messages):
        summary.skip("ledger_current", len(messages) - len(pending))

    if not pending:
        return []

    inspected, failed = await inspect_messages(
        pending,
        header_name=config.header_name,
        max_concurrency=config.max_concurrency,
        timeout=config.header_timeout,
    )
    summary.failed += len(failed)
    return inspected


def run_teach(config: TeachConfig, classifier: DspamClassifier | None = None) -> TeachSummary:
    """Run one full reconciliation pass and return its summary.

    Raises FolderError when either folder cannot be listed and
    ClassifierError when the configured dspam binary is unusable.
    """
    if classifier is None:
        classifier = DspamClassifier(config.dspam_bin, timeout=config.command_timeout)
    classifier.check()

    summary = TeachSummary(dry_run=classifier.dry_run)
    if classifier.dry_run:
        logger.warning("no dspam binary configured, dry run: commands are logged, not run")

    with Ledger(db_path=config.db_path) as ledger:
        console.print("[bold]Step 1/2:[/bold] Scanning mail folders...")
        messages = asyncio.run(collect_messages(config, ledger, summary))

        console.print(f"[bold]Step 2/2:[/bold] Reconciling [bold]{len(messages)}[/bold] messages...")
        reconcile(messages, ledger, classifier, summary)

    return summary
