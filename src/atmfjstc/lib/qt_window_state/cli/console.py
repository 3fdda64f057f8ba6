"""
Console abstraction for the command-line tool.

Messages for the user (warnings, errors, progress) are shown in appropriate colors (where available) on stderr, so
that they never mix with the actual output of the program on stdout, which is often redirected to a file or piped to
another tool. The output itself is written via `write_output`.

A singleton instance is available through the `console` property of this module::

    from atmfjstc.lib.qt_window_state.cli.console import console

    console.print_warning("test")
"""

import sys

from typing import Optional, Tuple, TextIO, Union

import colorama

from termcolor import cprint


class Console:
    """
    An abstraction for communicating with the user via the terminal.

    Don't create your own instances of this.
    """

    _info_enabled: bool = False
    _colors_initialized: bool = False

    def print_info(self, message: str, **kwargs) -> 'Console':
        """
        Print an informational message. Only shown if enabled via `enable_info`.
        """
        return self.print_message('info', message, **kwargs)

    def print_warning(self, message: str, **kwargs) -> 'Console':
        """
        Print a warning message, highlighted in yellow.
        """
        return self.print_message('warning', message, **kwargs)

    def print_error(self, message: str, **kwargs) -> 'Console':
        """
        Print an error message, highlighted in red.
        """
        return self.print_message('error', message, **kwargs)

    def enable_info(self) -> 'Console':
        """
        Enables informational messages, which are suppressed by default.
        """
        self._info_enabled = True
        return self

    def write_output(self, data: Union[str, bytes]) -> 'Console':
        """
        Writes the program's output proper to stdout. Bytes are written raw, without any decoding or added newline.
        """
        if isinstance(data, bytes):
            sys.stdout.flush()
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
        else:
            sys.stdout.write(data)
            sys.stdout.flush()

        return self

    def print_message(self, kind: str, message: str, major: bool = False, minor: bool = False) -> 'Console':
        """
        Prints a message of a programmatically specified type.

        Args:
            kind: Can be 'info', 'warning' or 'error', with the meanings as described by the respective `print_*`
                methods.
            message: The message to print. Can be multiline.
            major: Signals that this message is somehow more important than others of its kind (rendered in bold).
            minor: Signals that this message is somehow less important than others of its kind (not bold).

        Returns:
            The console object (to enable a fluent interface)
        """
        props = _PROPS_BY_MSG_TYPE.get(kind, _PROPS_BY_MSG_TYPE['default'])

        if (kind == 'info') and not self._info_enabled:
            return self

        attrs = props.get('attrs', ())
        if major and ('bold' not in attrs):
            attrs += ('bold',)
        if minor and ('bold' in attrs):
            attrs = tuple(attr for attr in attrs if attr != 'bold')

        self._init_colors()
        _print_maybe_with_color(message, props.get('color'), attrs, sys.stderr)

        return self

    def _init_colors(self):
        if not self._colors_initialized:
            colorama.just_fix_windows_console()
            self._colors_initialized = True


def _print_maybe_with_color(text: str, color: Optional[str], attrs: Tuple[str, ...], channel: TextIO):
    if (color is None) and (len(attrs) == 0):
        print(text, file=channel)
    else:
        cprint(text, color or 'white', attrs=list(attrs), file=channel)


_PROPS_BY_MSG_TYPE = {
    'default': dict(),
    'info': dict(),
    'warning': dict(color='yellow', attrs=('bold',)),
    'error': dict(color='red', attrs=('bold',)),
}


# Singleton
console = Console()
"""The currently active console abstraction."""
