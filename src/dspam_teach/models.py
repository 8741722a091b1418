"""Data models for dspam-teach."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from .constants import (
    DEFAULT_AGE_DAYS,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_DB_PATH,
    DEFAULT_HEADER_TIMEOUT,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RESULT_HEADER,
    EXIT_OK,
    EXIT_PARTIAL,
    SEEN_FLAG,
)


class TeachError(Exception):
    """Base error for dspam-teach."""


class FolderError(TeachError):
    """A scan folder is missing or unreadable."""


class HeaderError(TeachError):
    """Reading the header block of a message failed."""


class ClassifierError(TeachError):
    """The dspam command could not be run or returned a failure."""

    def __init__(self, message: str, command: list[str]) -> None:
        super().__init__(message)
        self.command = command


class Action(enum.Enum):
    NOOP = "noop"
    CLASSIFY = "classify"
    RECLASSIFY = "reclassify"
    SKIP = "skip"  # filter verdict we do not understand


@dataclass(frozen=True)
class MaildirName:
    """Parsed maildir filename: ``<ts>.<a>.<b>,<...>,<flags>``."""

    filename: str
    message_id: str
    timestamp: int  # seconds since epoch
    flags: str  # final comma-delimited segment

    @property
    def seen(self) -> bool:
        return SEEN_FLAG in self.flags


@dataclass
class Message:
    """A single mail file being reconciled."""

    name: MaildirName
    filepath: Path
    dir_type: str  # ground truth from the containing folder
    db_type: str | None = None  # last label recorded in the ledger
    dspam_type: str | None = None  # label from the filter's own header
    subject: str = ""

    @property
    def filename(self) -> str:
        return self.name.filename

    @property
    def message_id(self) -> str:
        return self.name.message_id


@dataclass
class TeachConfig:
    """Resolved settings for a single run."""

    spam_dir: Path
    innocent_dir: Path
    age_days: int = DEFAULT_AGE_DAYS
    db_path: Path = DEFAULT_DB_PATH
    dspam_bin: Path | None = None
    header_name: str = DEFAULT_RESULT_HEADER
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    header_timeout: float = DEFAULT_HEADER_TIMEOUT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    now: float | None = None  # epoch seconds, None means time.time()

    @property
    def dry_run(self) -> bool:
        return self.dspam_bin is None


@dataclass
class TeachSummary:
    """Counters collected over one run."""

    processed: int = 0
    classified: int = 0
    reclassified: int = 0
    unchanged: int = 0
    failed: int = 0
    skipped: dict[str, int] = field(default_factory=dict)
    dry_run: bool = False

    def skip(self, reason: str, count: int = 1) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + count

    @property
    def exit_code(self) -> int:
        return EXIT_PARTIAL if self.failed else EXIT_OK
