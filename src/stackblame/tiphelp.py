from dataclasses import dataclass

from stackblame.constants import DEFAULT_HIGHLIGHT_COLOR, DEFAULT_REVISION
from stackblame.trace_format import MESSAGE_FIELDS, URL_FIELDS


def fields_str(names: set[str]) -> str:
    return ", ".join("{" + name + "}" for name in sorted(names))


# Help for CLI
@dataclass
class Help:
    # Is printed using the description attribute of the ArgumentParser at the start of
    # the help output.
    help_doc: str = """
Annotate a Python thread dump or traceback with the commits that last changed each
line of its call stacks, and browse the result in the terminal. The dump is read from
PATH or, when PATH is omitted, from standard input, e.g.:

    kill -ABRT <pid> 2>&1 | stackblame
"""

    # Mutually exclusive settings
    version: str = "Output version information."
    show: str = "Show the settings location and its values."
    save: str = "Save settings file."
    save_as: str = "Save settings file to PATH."
    load: str = "Load settings file from PATH and update its location."
    reset: str = (
        "Reset saved settings and location of settings file to their default values."
    )

    # Input
    input_fstr: str = "Dump file to read, - or omitted for standard input."
    repository: str = """
        Git repository containing the source files of the dump (default: the
        repository of the current directory)."""
    revision: str = f"Revision to blame (default {DEFAULT_REVISION})."

    # Formatting
    commit_url: str = (
        f"URL opened for a commit. Template fields: {fields_str(URL_FIELDS)}."
    )
    file_url: str = (
        f"URL opened for a file. Template fields: {fields_str(URL_FIELDS)}."
    )
    blame_url: str = (
        "URL opened for the blame of a file. Template fields: "
        f"{fields_str(URL_FIELDS)}."
    )
    custom_message: str = (
        "Message copied to the clipboard for a commit. Template fields: "
        f"{fields_str(MESSAGE_FIELDS)}."
    )
    full_path: str = "Show full source file paths instead of file names."
    highlight_color: str = (
        f"Background color of the selected line (default {DEFAULT_HIGHLIGHT_COLOR})."
    )

    # General
    multithread: str = "Run git blame using multiple threads (default on)."
    cli_verbosity: str = "More verbose output for each v, e.g. -vv."
