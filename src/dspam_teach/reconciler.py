"""Reconciliation - decide what dspam needs to learn and teach it."""

from __future__ import annotations

import logging

from .constants import INNOCENT, LABELS, SOURCE_CORPUS, SOURCE_ERROR, SOURCE_INOCULATION, SPAM
from .dspam import DspamClassifier
from .ledger import Ledger
from .models import Action, ClassifierError, Message, TeachSummary

logger = logging.getLogger(__name__)

_FIRST_SOURCE = {INNOCENT: SOURCE_CORPUS, SPAM: SOURCE_INOCULATION}


def decide_action(message: Message) -> tuple[Action, str | None]:
    """Return (action, training source) for a fully inspected message.

    The folder the message sits in is the truth. A message dspam has no
    verdict for is classified; one dspam got wrong is reclassified as an
    error; one dspam got right needs nothing.
    """
    if message.dspam_type is None:
        return Action.CLASSIFY, _FIRST_SOURCE[message.dir_type]
    if message.dspam_type not in LABELS:
        return Action.SKIP, None
    if message.dspam_type != message.dir_type:
        return Action.RECLASSIFY, SOURCE_ERROR
    return Action.NOOP, None


def reconcile(
    messages: list[Message],
    ledger: Ledger,
    classifier: DspamClassifier,
    summary: TeachSummary | None = None,
) -> TeachSummary:
    """Teach dspam every message that needs it and record the folder in the ledger.

    Messages are handled one at a time in order. The ledger is updated
    for every message except those whose dspam call failed, so those are
    retried on the next run.
    """
    if summary is None:
        summary = TeachSummary(dry_run=classifier.dry_run)

    for msg in messages:
        summary.processed += 1
        action, source = decide_action(msg)

        if action is Action.SKIP:
            logger.warning(
                "unrecognised filter result %r on '%s', leaving it alone", msg.dspam_type, msg.subject
            )
            summary.unchanged += 1
        elif action is Action.NOOP:
            logger.debug("'%s' already %s", msg.subject, msg.dir_type)
            summary.unchanged += 1
        else:
            logger.info("%s '%s' as %s", action.value, msg.subject, msg.dir_type)
            try:
                classifier.teach(msg.filepath, msg.dir_type, source)
            except ClassifierError as e:
                logger.error("failed to %s %s: %s", action.value, msg.filename, e)
                summary.failed += 1
                continue
            if action is Action.CLASSIFY:
                summary.classified += 1
            else:
                summary.reclassified += 1

        ledger.set(msg.message_id, msg.dir_type)

    logger.info("processed %d messages", summary.processed)
    return summary
