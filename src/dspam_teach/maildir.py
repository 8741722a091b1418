"""Maildir folder scanning and filename parsing."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Iterator

from .constants import INNOCENT, MIN_COMMA_SEGMENTS, MIN_DOT_SEGMENTS, MS_PER_DAY, SPAM
from .models import FolderError, MaildirName, Message

logger = logging.getLogger(__name__)


def parse_filename(filename: str) -> MaildirName | None:
    """Parse a maildir filename into its id, timestamp and flags.

    Handles names like:
      "1700000000.M1P2.host,S=1234,2,S" -> id "1700000000.M1P2.host", flags "S"
      "1700000000.a.b,u=42,"            -> id "1700000000.a.b", flags ""

    Returns None for anything that does not look like a mail file: fewer
    than three dot-delimited or comma-delimited segments, or a leading
    token that is not a unix timestamp.
    """
    dot_parts = filename.split(".")
    comma_parts = filename.split(",")
    if len(dot_parts) < MIN_DOT_SEGMENTS or len(comma_parts) < MIN_COMMA_SEGMENTS:
        return None

    try:
        timestamp = int(dot_parts[0])
    except ValueError:
        return None

    return MaildirName(
        filename=filename,
        message_id=comma_parts[0],
        timestamp=timestamp,
        flags=comma_parts[-1],
    )


def is_within_age(name: MaildirName, age_days: int, now: float | None = None) -> bool:
    """True when the message is no older than ``age_days`` (boundary included)."""
    if now is None:
        now = time.time()
    age_ms = now * 1000 - name.timestamp * 1000
    return age_ms <= age_days * MS_PER_DAY


def list_folder(folder: Path) -> Iterator[tuple[str, Path]]:
    """Yield (filename, absolute path) for every regular file directly in ``folder``.

    Subdirectories such as ``cur`` and ``new`` are left out, since they can
    never be opened as a message. Filename validity is checked later by
    ``select_messages``. Raises FolderError when the folder is missing or
    unreadable.
    """
    folder = Path(folder).resolve()
    try:
        entries = os.scandir(folder)
    except OSError as e:
        raise FolderError(f"Cannot read mail folder {folder}: {e.strerror or e}") from e

    with entries:
        for entry in entries:
            if entry.is_file():
                yield entry.name, folder / entry.name


async def scan_folders(spam_dir: Path, innocent_dir: Path) -> tuple[list[tuple[str, Path]], list[tuple[str, Path]]]:
    """List both folders concurrently, returning (spam, innocent) entries."""
    spam, innocent = await asyncio.gather(
        asyncio.to_thread(lambda: list(list_folder(spam_dir))),
        asyncio.to_thread(lambda: list(list_folder(innocent_dir))),
    )
    return spam, innocent


def select_messages(
    entries: list[tuple[str, Path]],
    dir_type: str,
    age_days: int,
    now: float | None = None,
    skipped: dict[str, int] | None = None,
) -> list[Message]:
    """Turn folder entries into Messages, dropping anything not worth looking at.

    Drops invalid filenames, seen mail in the innocent folder and mail older
    than ``age_days``. Drop counts are added to ``skipped`` when given.
    """
    if dir_type not in (SPAM, INNOCENT):
        raise ValueError(f"Unknown folder type: {dir_type!r}")

    counts = skipped if skipped is not None else {}
    messages: list[Message] = []

    for filename, filepath in entries:
        name = parse_filename(filename)
        if name is None:
            logger.debug("ignoring %s: not a maildir filename", filename)
            counts["invalid"] = counts.get("invalid", 0) + 1
            continue

        if dir_type == INNOCENT and name.seen:
            counts["seen"] = counts.get("seen", 0) + 1
            continue

        if not is_within_age(name, age_days, now):
            counts["too_old"] = counts.get("too_old", 0) + 1
            continue

        messages.append(Message(name=name, filepath=filepath, dir_type=dir_type))

    return messages
