"""
Multiple calls to logging.getLogger("name") with the same "name" string will always
return the same logger instance. If no name is provided, as in logging.getLogger(),
the root logger is returned. This ensures that loggers are singletons and can be
configured centrally.

Do not use the root logger for logging, only use a named (child) logger instead.
Always use logging.getLogger() in the functions in this module instead of a global
root logger variable, so that the handlers of the root logger can be swapped while
the terminal UI owns the terminal.
"""

import logging
from logging import Formatter, Handler, LogRecord, StreamHandler, getLogger
from typing import TYPE_CHECKING

import colorlog

from stackblame.constants import DEFAULT_VERBOSITY

if TYPE_CHECKING:
    from stackblame.tui import StackBlameApp

FORMAT = "%(levelname)s %(name)s %(funcName)s %(lineno)s\n%(message)s\n"
FORMAT_INFO = "%(message)s"
FORMAT_TUI = "%(levelname)s: %(message)s"


def ini_for_cli(verbosity: int = DEFAULT_VERBOSITY) -> StreamHandler:
    set_logging_level_from_verbosity(verbosity)
    handler = add_cli_handler()
    return handler


def set_logging_level_from_verbosity(verbosity: int | None) -> None:
    root_logger = getLogger()
    if verbosity is None:
        verbosity = DEFAULT_VERBOSITY
    match verbosity:
        case 0:
            root_logger.setLevel(logging.WARNING)  # verbosity == 0
        case 1:
            root_logger.setLevel(logging.INFO)  # verbosity == 1
        case 2:
            root_logger.setLevel(logging.DEBUG)  # verbosity == 2
        case _:
            raise ValueError(f"Unknown verbosity level: {verbosity}")


def add_cli_handler() -> StreamHandler:
    cli_handler = StreamHandler()
    cli_handler.setFormatter(get_custom_cli_color_formatter())
    getLogger().addHandler(cli_handler)
    return cli_handler


# The terminal UI draws over stderr, so while it runs, log records are shown in the
# message box of the UI instead of on the command line.
def add_tui_handler(app: "StackBlameApp") -> "TUIOutputHandler":
    tui_handler = TUIOutputHandler(app)
    tui_handler.setLevel(logging.WARNING)
    tui_handler.setFormatter(Formatter(FORMAT_TUI))
    getLogger().addHandler(tui_handler)
    return tui_handler


def remove_handler(handler: Handler) -> None:
    getLogger().removeHandler(handler)


def get_custom_cli_color_formatter() -> "CustomColoredFormatter":
    return CustomColoredFormatter(
        "%(log_color)s" + FORMAT,
        info_fmt="%(log_color)s" + FORMAT_INFO,  # Different format for INFO level
        reset=True,
        log_colors={
            "DEBUG": "cyan",
            "INFO": "white",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
        style="%",
    )


# For the terminal UI
class TUIOutputHandler(Handler):
    def __init__(self, app: "StackBlameApp") -> None:
        super().__init__()
        self.app = app

    def emit(self, record: LogRecord) -> None:
        log_entry = self.format(record)
        self.app.post_status(log_entry)


class CustomColoredFormatter(colorlog.ColoredFormatter):
    def __init__(self, fmt, info_fmt, *args, **kwargs):
        super().__init__(fmt, *args, **kwargs)
        self.default_fmt = fmt
        self.info_fmt = info_fmt

    def format(self, record):
        if record.levelno == logging.INFO:
            original_fmt = self._style._fmt
            self._style._fmt = self.info_fmt
            result = super().format(record)
            self._style._fmt = original_fmt
            return result
        else:
            return super().format(record)
