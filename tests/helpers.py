from __future__ import annotations

import json
from pathlib import Path

# A fixed "now": one day after the timestamp used in most filenames
MAIL_TS = 1700000000
NOW = MAIL_TS + 24 * 60 * 60


def write_mail(folder: Path, filename: str, result: str | None = None, subject: str = "Hello") -> Path:
    """Write a small RFC 5322 message into ``folder`` and return its path."""
    lines = [
        "From: Alice <alice@example.com>",
        "To: bob@example.com",
        f"Subject: {subject}",
    ]
    if result is not None:
        lines.append(f"X-DSPAM-Result: {result}")
    lines.append("")
    lines.append("Body text.")
    path = folder / filename
    path.write_bytes(("\r\n".join(lines) + "\r\n").encode())
    return path


def read_calls(log: Path) -> list[dict]:
    """Return the calls recorded by a fake dspam executable."""
    if not log.exists():
        return []
    return [json.loads(line) for line in log.read_text().splitlines()]
