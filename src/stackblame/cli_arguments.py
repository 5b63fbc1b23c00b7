from argparse import ArgumentParser, BooleanOptionalAction

from stackblame.tiphelp import Help
from stackblame.utils import get_version

hlp = Help()


def define_arguments(parser: ArgumentParser):
    mutex_group_titled = parser.add_argument_group("Mutually exclusive options")
    mutex_group = mutex_group_titled.add_mutually_exclusive_group()
    mutex_group.add_argument(
        "--show",
        action="store_true",
        default=None,
        help=hlp.show,
    )
    mutex_group.add_argument(
        "--save",
        action="store_true",
        default=None,
        help=hlp.save,
    )
    mutex_group.add_argument(
        "--save-as",
        type=str,
        metavar="PATH",
        help=hlp.save_as,
    )
    mutex_group.add_argument(
        "--load",
        type=str,
        metavar="PATH",
        help=hlp.load,
    )
    mutex_group.add_argument(
        "--reset",
        action="store_true",
        default=None,
        help=hlp.reset,
    )
    mutex_group.add_argument(
        "-V",
        "--version",
        action="version",
        version=get_version(),
        help=hlp.version,
    )

    # Input
    group_input = parser.add_argument_group("Input")
    group_input.add_argument(
        "input_fstr",
        nargs="?",
        metavar="PATH",
        help=hlp.input_fstr,
    )
    group_input.add_argument(
        "-r",
        "--repository",
        metavar="PATH",
        help=hlp.repository,
    )
    group_input.add_argument(
        "--revision",
        metavar="REV",
        help=hlp.revision,
    )

    # Output formatting
    group_format = parser.add_argument_group("Output formatting")
    group_format.add_argument(
        "--commit-url",
        metavar="TEMPLATE",
        help=hlp.commit_url,
    )
    group_format.add_argument(
        "--file-url",
        metavar="TEMPLATE",
        help=hlp.file_url,
    )
    group_format.add_argument(
        "--blame-url",
        metavar="TEMPLATE",
        help=hlp.blame_url,
    )
    group_format.add_argument(
        "--custom-message",
        metavar="TEMPLATE",
        help=hlp.custom_message,
    )
    group_format.add_argument(
        "--full-path",
        action=BooleanOptionalAction,
        help=hlp.full_path,
    )
    group_format.add_argument(
        "--highlight-color",
        metavar="COLOR",
        help=hlp.highlight_color,
    )

    # General
    group_general = parser.add_argument_group("General")
    group_general.add_argument(
        "--multithread",
        action=BooleanOptionalAction,
        help=hlp.multithread,
    )
    group_general.add_argument(
        "-v",
        "--verbosity",
        action="count",
        help=hlp.cli_verbosity,
    )
