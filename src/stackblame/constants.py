# CLI defaults
DEFAULT_VERBOSITY = 0
DEFAULT_REVISION = "HEAD"
DEFAULT_HIGHLIGHT_COLOR = "blue"
STDIN_PATH = "-"

# Blame
MAX_THREAD_WORKERS = 6
BLAME_CHUNK_SIZE = (
    20  # larger chunks can lead to "too many open files" errors on big dumps
)

# Stack trace formatting
SHORT_ID_LEN = 4
UNKNOWN_ID = "????"
UNKNOWN_DATE = "????-??-??"
DATE_FORMAT = "%Y-%m-%d"
DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
CALL_INDENT = " " * 4
ELIDED_LINE = CALL_INDENT + "(...)"

# Terminal UI
TICK_INTERVAL = 1.0  # seconds
STATUS_TICKS = 5
USAGE_TICKS = -1  # persist
LOADING_TEXT = "Loading..."
