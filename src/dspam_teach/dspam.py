"""Invocation of the external dspam binary."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .constants import DEFAULT_COMMAND_TIMEOUT, LABELS, SPAWN_RETRY_ATTEMPTS
from .models import ClassifierError

logger = logging.getLogger(__name__)

_DRY_RUN_PROGRAM = "dspam"


@retry(
    retry=retry_if_exception_type(BlockingIOError),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    stop=stop_after_attempt(SPAWN_RETRY_ATTEMPTS),
    reraise=True,
)
def _run(command: list[str], filepath: Path, timeout: float | None) -> subprocess.CompletedProcess:
    with open(filepath, "rb") as stdin:
        return subprocess.run(
            command,
            stdin=stdin,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            timeout=timeout,
            check=True,
        )


class DspamClassifier:
    """Teaches dspam a label for a message, or logs what it would do.

    Without ``dspam_bin`` the classifier runs in dry-run mode: every call
    logs the command line it would have run and spawns nothing.
    """

    def __init__(self, dspam_bin: Path | str | None = None, timeout: float | None = DEFAULT_COMMAND_TIMEOUT) -> None:
        self.dspam_bin = str(dspam_bin) if dspam_bin is not None else None
        self.timeout = timeout

    @property
    def dry_run(self) -> bool:
        return self.dspam_bin is None

    def check(self) -> None:
        """Raise ClassifierError if the configured binary cannot be executed."""
        if self.dry_run:
            return
        if shutil.which(self.dspam_bin) is None:
            raise ClassifierError(
                f"dspam binary not found or not executable: {self.dspam_bin}",
                [self.dspam_bin],
            )

    def build_command(self, label: str, source: str) -> list[str]:
        if label not in LABELS:
            raise ValueError(f"Unknown label: {label!r}")
        return [
            self.dspam_bin or _DRY_RUN_PROGRAM,
            f"--class={label}",
            f"--source={source}",
            "--stdout",
        ]

    def teach(self, filepath: Path, label: str, source: str) -> bool:
        """Feed the raw message at ``filepath`` to dspam as ``label``.

        Returns True when dspam was run, False in dry-run mode. Raises
        ClassifierError when the command cannot be spawned, times out or
        exits non-zero.
        """
        command = self.build_command(label, source)
        cmdline = f"{shlex.join(command)} < {shlex.quote(str(filepath))}"

        if self.dry_run:
            logger.info("dry run: would run %s", cmdline)
            return False

        logger.debug("running %s", cmdline)
        try:
            _run(command, filepath, self.timeout)
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            detail = f": {stderr}" if stderr else ""
            raise ClassifierError(f"{cmdline} exited with status {e.returncode}{detail}", command) from e
        except subprocess.TimeoutExpired as e:
            raise ClassifierError(f"{cmdline} timed out after {e.timeout}s", command) from e
        except OSError as e:
            raise ClassifierError(f"{cmdline} could not be run: {e}", command) from e
        return True
