"""Header inspection - reads the filter verdict and subject from each message."""

from __future__ import annotations

import asyncio
import email.errors
import logging
from concurrent.futures import ThreadPoolExecutor
from email import policy
from email.parser import BytesHeaderParser
from pathlib import Path

from .constants import DEFAULT_HEADER_TIMEOUT, DEFAULT_MAX_CONCURRENCY, DEFAULT_RESULT_HEADER, DSPAM_RESULT_ALIASES
from .models import HeaderError, Message

logger = logging.getLogger(__name__)


def _read_header_block(filepath: Path) -> bytes:
    """Read raw bytes up to and including the blank line ending the headers."""
    lines: list[bytes] = []
    with open(filepath, "rb") as f:
        for line in f:
            lines.append(line)
            if line in (b"\n", b"\r\n"):
                break
    return b"".join(lines)


def normalize_result(value: str | None) -> str | None:
    """Map a raw filter result header value onto a label.

    Empty or missing values mean the filter has no verdict (None). Known
    DSPAM results are mapped onto spam/innocent; anything else is returned
    lower-cased so the caller can decide what to do with it.

    The aliases go further than a plain spam/innocent comparison: a
    ``Whitelisted`` message counts as innocent, so one found in the spam
    folder is reclassified as an error, and ``Blacklisted``,
    ``Blocklisted`` or ``Virus`` mail found in the innocent folder is
    reclassified likewise. Without the aliases those verdicts would be
    left alone.
    """
    raw = (value or "").strip().lower()
    if not raw:
        return None
    return DSPAM_RESULT_ALIASES.get(raw, raw)


def read_headers(filepath: Path, header_name: str = DEFAULT_RESULT_HEADER) -> tuple[str | None, str]:
    """Return (dspam_type, subject) for the message at ``filepath``.

    Only the header block is read; the body is never loaded.
    """
    try:
        raw = _read_header_block(filepath)
        headers = BytesHeaderParser(policy=policy.default).parsebytes(raw)
        result = headers.get(header_name)
        subject = headers.get("Subject")
        return normalize_result(str(result) if result is not None else None), str(subject or "")
    except (OSError, ValueError, email.errors.MessageError) as e:
        raise HeaderError(f"Cannot read headers of {filepath}: {e}") from e


async def inspect_messages(
    messages: list[Message],
    header_name: str = DEFAULT_RESULT_HEADER,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    timeout: float | None = DEFAULT_HEADER_TIMEOUT,
) -> tuple[list[Message], list[tuple[Message, Exception]]]:
    """Read headers of all messages concurrently and fill in dspam_type/subject.

    At most ``max_concurrency`` files are open at once. Reads run on a
    dedicated pool of that size, and a slot is only handed back when its
    read has really finished, so a read that timed out still counts
    against the limit until it returns. A message whose headers cannot be
    read is reported in the failure list instead of aborting the batch.
    Both lists keep the input order.
    """
    loop = asyncio.get_running_loop()
    limit = max(1, max_concurrency)
    semaphore = asyncio.Semaphore(limit)
    executor = ThreadPoolExecutor(max_workers=limit, thread_name_prefix="dspam-teach-headers")

    def release(future: asyncio.Future) -> None:
        semaphore.release()
        if not future.cancelled():
            future.exception()  # mark a late failure as retrieved

    async def inspect_one(msg: Message) -> Exception | None:
        await semaphore.acquire()
        future = loop.run_in_executor(executor, read_headers, msg.filepath, header_name)
        future.add_done_callback(release)
        try:
            dspam_type, subject = await asyncio.wait_for(asyncio.shield(future), timeout=timeout)
        except asyncio.TimeoutError:
            return HeaderError(f"Timed out reading headers of {msg.filepath}")
        except HeaderError as e:
            return e
        msg.dspam_type = dspam_type
        msg.subject = subject
        return None

    try:
        outcomes = await asyncio.gather(*(inspect_one(m) for m in messages))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    inspected: list[Message] = []
    failed: list[tuple[Message, Exception]] = []
    for msg, error in zip(messages, outcomes):
        if error is None:
            inspected.append(msg)
        else:
            logger.error("skipping %s: %s", msg.filename, error)
            failed.append((msg, error))

    return inspected, failed
