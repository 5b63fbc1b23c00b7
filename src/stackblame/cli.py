import os
import sys
from argparse import ArgumentParser, RawDescriptionHelpFormatter
from logging import StreamHandler, getLogger

from stackblame import _logging
from stackblame._logging import set_logging_level_from_verbosity
from stackblame.args_settings import Args, CLIArgs, Settings, SettingsFile
from stackblame.blame import BlameResolver, get_git_toplevel
from stackblame.cli_arguments import define_arguments
from stackblame.constants import STDIN_PATH
from stackblame.dump import DumpReader
from stackblame.messages import EMPTY_INPUT_MSG, NO_REPOSITORY_MSG
from stackblame.tiphelp import Help
from stackblame.trace_format import Format
from stackblame.tui import StackBlameApp
from stackblame.typedefs import FileStr
from stackblame.utils import log, read_input, reattach_tty_stdin

# Limit the width of the help text to 90 characters.
os.environ["COLUMNS"] = "90"

logger = getLogger(__name__)


def main() -> None:
    settings: Settings

    parser = ArgumentParser(
        prog="stackblame",
        description=Help.help_doc,
        formatter_class=RawDescriptionHelpFormatter,
    )
    define_arguments(parser)
    namespace = parser.parse_args()
    if namespace.verbosity is not None:
        namespace.verbosity = min(namespace.verbosity, 2)

    cli_handler = _logging.ini_for_cli(namespace.verbosity)

    if namespace.reset:
        settings = SettingsFile.reset()
        log(f"Settings file reset to {SettingsFile.get_location()}.")
        return

    if namespace.load is not None:
        path_str = namespace.load
        settings, error = SettingsFile.load_from(path_str)
        if error:
            logger.error(
                f"--load {path_str}: Error loading settings from {path_str}: {error}"
            )
            return
        SettingsFile.set_location(path_str)
        log(f"Settings loaded from {path_str}.")
        return

    settings = load_settings(namespace.save, namespace.save_as)
    cli_args: CLIArgs = settings.to_cli_args()
    cli_args.update_with_namespace(namespace)
    logger.debug(f"{cli_args = }")

    if namespace.save:
        cli_args.create_settings().save()
        log(f"Settings saved to {SettingsFile.get_location()}.")
        return

    if namespace.save_as is not None:
        path_str = namespace.save_as
        if not path_str.endswith(".json"):
            logger.error(f"--save-as {path_str}: {path_str} should be a JSON file.")
            return
        cli_args.create_settings().save_as(path_str)
        log(f"Settings saved to {path_str}.")
        return

    if namespace.show:
        SettingsFile.show()
        return

    run(cli_args.create_args(), cli_args.input_fstr, cli_handler)


def load_settings(save: bool | None, save_as: str | None) -> Settings:
    settings: Settings
    error: str
    settings, error = SettingsFile.load()
    set_logging_level_from_verbosity(settings.verbosity)
    if error:
        logger.warning("Cannot load settings file, loading default settings.")
        if not save and save_as is None:
            log("Save settings (--save) to avoid this message.")
    return settings


def run(args: Args, input_fstr: FileStr, cli_handler: StreamHandler) -> None:
    if not args.repository:
        args.repository = get_git_toplevel()
    if not args.repository:
        logger.error(NO_REPOSITORY_MSG)
        return

    try:
        fmt = Format(args)
    except ValueError as e:
        logger.error(f"Failed to initialize the UI:\n{e}")
        return

    from_stdin = not input_fstr or input_fstr == STDIN_PATH
    logger.info("Reading dump from " + ("stdin..." if from_stdin else input_fstr))
    try:
        raw = read_input(input_fstr)
    except OSError as e:
        logger.error(f"Cannot read {input_fstr}: {e}")
        return
    if not raw.strip():
        logger.error(EMPTY_INPUT_MSG)
        return
    if from_stdin:
        try:
            reattach_tty_stdin()
        except OSError as e:
            logger.error(f"Cannot open the terminal for keyboard input: {e}")
            return

    resolver = BlameResolver(args.repository, multithread=args.multithread)
    reader = DumpReader(args.repository, args.revision, resolver)
    app = StackBlameApp(fmt, lambda: reader.read(raw), args.highlight_color)

    # The UI owns the terminal, so log records go to its message box meanwhile.
    _logging.remove_handler(cli_handler)
    tui_handler = _logging.add_tui_handler(app)
    try:
        app.run()
    finally:
        _logging.remove_handler(tui_handler)
        getLogger().addHandler(cli_handler)
    if app.return_code:
        sys.exit(app.return_code)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        os._exit(0)
