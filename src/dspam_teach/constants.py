"""Constants for dspam-teach."""

from pathlib import Path

# --- Labels ---
SPAM = "spam"
INNOCENT = "innocent"
LABELS = (SPAM, INNOCENT)

# --- Training sources passed to dspam --source ---
SOURCE_CORPUS = "corpus"
SOURCE_INOCULATION = "inoculation"
SOURCE_ERROR = "error"

# DSPAM result values that map onto one of our two labels
DSPAM_RESULT_ALIASES = {
    "spam": SPAM,
    "innocent": INNOCENT,
    "whitelisted": INNOCENT,
    "blacklisted": SPAM,
    "blocklisted": SPAM,
    "virus": SPAM,
}

# --- Defaults ---
DEFAULT_DB_PATH = Path("dspam-teach.db")
DEFAULT_AGE_DAYS = 30
DEFAULT_RESULT_HEADER = "X-DSPAM-Result"
DEFAULT_MAX_CONCURRENCY = 32  # header reads in flight
DEFAULT_HEADER_TIMEOUT = 10.0  # seconds per header read
DEFAULT_COMMAND_TIMEOUT = 60.0  # seconds per dspam invocation
SPAWN_RETRY_ATTEMPTS = 3

# --- Maildir filename convention ---
MIN_DOT_SEGMENTS = 3
MIN_COMMA_SEGMENTS = 3
SEEN_FLAG = "S"
MS_PER_DAY = 24 * 60 * 60 * 1000

# --- Exit codes ---
EXIT_OK = 0
EXIT_PARTIAL = 2
