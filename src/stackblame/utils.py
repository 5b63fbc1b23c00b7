import os
import sys
import webbrowser
from logging import getLogger
from pathlib import Path
from typing import Any

from stackblame.constants import STDIN_PATH
from stackblame.typedefs import FileStr

logger = getLogger(__name__)


def log(arg: Any, end: str = "\n", flush: bool = False):
    print(arg, end=end, flush=flush)


def get_version() -> str:
    my_dir = Path(__file__).resolve().parent
    version_file = my_dir / "version.txt"
    with open(version_file, "r", encoding="utf-8") as file:
        version = file.read().strip()
    return version


def open_url(url: str) -> bool:
    if not url:
        return False
    logger.info(f"Opening {url}")
    return webbrowser.open(url)


def read_input(fstr: FileStr) -> bytes:
    if not fstr or fstr == STDIN_PATH:
        return sys.stdin.buffer.read()
    with open(fstr, "rb") as f:
        return f.read()


# When the dump is piped into the program, stdin is not the terminal. Point file
# descriptor 0 to the controlling terminal, so that the terminal UI can read keys.
def reattach_tty_stdin() -> None:
    if sys.stdin.isatty():
        return
    tty_fd = os.open("/dev/tty", os.O_RDONLY)
    os.dup2(tty_fd, sys.stdin.fileno())
    os.close(tty_fd)
