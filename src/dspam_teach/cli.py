"""CLI entry point for dspam-teach."""

from __future__ import annotations

import sqlite3
import sys
from pathlib import Path

import click

from .constants import (
    DEFAULT_AGE_DAYS,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_DB_PATH,
    DEFAULT_HEADER_TIMEOUT,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RESULT_HEADER,
)
from .display import display_summary, setup_logging
from .models import TeachConfig, TeachError
from .pipeline import run_teach

_PATH = click.Path(path_type=Path)


@click.command()
@click.version_option(version="0.1.0", prog_name="dspam-teach")
@click.option("--spamDir", "--spam-dir", "spam_dir", required=True, type=_PATH, help="Folder holding mail that is spam.")
@click.option(
    "--innocentDir", "--innocent-dir", "innocent_dir", required=True, type=_PATH,
    help="Folder holding mail that is innocent.",
)
@click.option(
    "--age", "age", default=DEFAULT_AGE_DAYS, show_default=True, type=click.IntRange(min=0),
    help="Ignore messages older than this many days.",
)
@click.option(
    "--dbPath", "--db-path", "db_path", default=DEFAULT_DB_PATH, show_default=True, type=_PATH,
    help="Ledger file recording the last folder of each message.",
)
@click.option(
    "--dspamBin", "--dspam-bin", "dspam_bin", default=None, type=_PATH,
    help="dspam executable. Without it nothing is run (dry run).",
)
@click.option("--header", "header_name", default=DEFAULT_RESULT_HEADER, show_default=True, help="Filter result header.")
@click.option(
    "--max-concurrency", default=DEFAULT_MAX_CONCURRENCY, show_default=True, type=click.IntRange(min=1),
    help="Maximum messages read at once.",
)
@click.option(
    "--header-timeout", default=DEFAULT_HEADER_TIMEOUT, show_default=True, type=float,
    help="Seconds allowed to read one message's headers.",
)
@click.option(
    "--command-timeout", default=DEFAULT_COMMAND_TIMEOUT, show_default=True, type=float,
    help="Seconds allowed for one dspam invocation.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every decision, including skips.")
def cli(
    spam_dir: Path,
    innocent_dir: Path,
    age: int,
    db_path: Path,
    dspam_bin: Path | None,
    header_name: str,
    max_concurrency: int,
    header_timeout: float,
    command_timeout: float,
    verbose: bool,
) -> None:
    """Teach dspam from mail sorted into a spam and an innocent folder."""
    setup_logging(verbose)

    config = TeachConfig(
        spam_dir=spam_dir,
        innocent_dir=innocent_dir,
        age_days=age,
        db_path=db_path,
        dspam_bin=dspam_bin,
        header_name=header_name,
        max_concurrency=max_concurrency,
        header_timeout=header_timeout,
        command_timeout=command_timeout,
    )

    try:
        summary = run_teach(config)
    except TeachError as e:
        raise click.ClickException(str(e)) from e
    except (sqlite3.Error, OSError) as e:
        raise click.ClickException(f"Cannot use ledger {db_path}: {e}") from e

    display_summary(summary)
    sys.exit(summary.exit_code)
