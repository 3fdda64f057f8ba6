"""
Command-line utility for printing Qt settings and window states in human readable format.

Usage::

    qt-window-state SOURCE --get-value KEY
    qt-window-state SOURCE --decode-state [--strict] [--max-depth N]

`--get-value` prints a single value from a `QSettings` INI file. Binary values are written raw, so a window state blob
can be extracted to a file this way and then decoded with `--decode-state`, which prints it as JSON.
"""

import logging
import sys

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import List, NoReturn, Optional, Text

from .. import __version__, decode_window_state, DEFAULT_MAX_DEPTH
from ..serialize import serialize_state_document
from ..settings_store import get_settings_value, SettingsStoreError

from .console import console
from .errors import fail, pretty_unhandled


PROGRAM_NAME = 'qt-window-state'


@pretty_unhandled
def main(argv: Optional[List[str]] = None) -> int:
    parser = _make_argument_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    actions = []
    if args.get_value is not None:
        actions.append('get-value')
    if args.decode_state:
        actions.append('decode-state')

    if args.source is None:
        fail("Input not specified")
    if len(actions) > 1:
        fail("Can't specify multiple actions.")
    if len(actions) == 0:
        parser.print_help(sys.stderr)
        return 1

    if actions[0] == 'get-value':
        return _get_single_value(args.source, args.get_value)

    return _decode_state(args)


def _get_single_value(source: str, key: str) -> int:
    try:
        value = get_settings_value(source, key)
    except SettingsStoreError as e:
        fail(str(e))

    console.write_output(value if isinstance(value, bytes) else value + '\n')

    return 0


def _decode_state(args: Namespace) -> int:
    path = Path(args.source)

    if not path.is_file():
        fail(f"Input file '{args.source}' does not exist.")

    try:
        data = path.read_bytes()
    except OSError as e:
        fail(f"Could not read input file '{args.source}': {e.strerror}")

    document = decode_window_state(data, max_depth=args.max_depth)

    console.write_output(serialize_state_document(document) + '\n')

    for diagnostic in document.diagnostics:
        console.print_warning(diagnostic)

    console.print_info(f"Decoded {len(document.items)} item(s), status: {document.status.value}")

    if args.strict and not document.is_complete:
        fail(f"Window state was not decoded completely (status: {document.status.value})")

    return 0


def _make_argument_parser() -> ArgumentParser:
    parser = _ArgumentParser(
        prog=PROGRAM_NAME,
        description="Utility for printing Qt settings and window states in human readable format",
    )

    parser.add_argument('source', nargs='?', help="Input file.")
    parser.add_argument('-g', '--get-value', metavar='KEY', help="Get single value with specified key")
    parser.add_argument(
        '-d', '--decode-state', action='store_true',
        help="Decode the input file as a window state saved by QMainWindow::saveState() and print it as JSON"
    )
    parser.add_argument(
        '--strict', action='store_true',
        help="With --decode-state, exit with an error code if the state could not be decoded completely"
    )
    parser.add_argument(
        '--max-depth', type=int, default=DEFAULT_MAX_DEPTH, metavar='N',
        help=f"Maximum nesting depth accepted for dock layouts (default: {DEFAULT_MAX_DEPTH})"
    )
    parser.add_argument('-v', '--verbose', action='store_true', help="Show debugging information")
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    return parser


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        style='{',
        format='[{asctime}] {levelname}: {message}',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    if verbose:
        console.enable_info()


class _ArgumentParser(ArgumentParser):
    def error(self, message: Text) -> NoReturn:
        # Usage errors exit with code 1, like all other failures
        fail(message)
