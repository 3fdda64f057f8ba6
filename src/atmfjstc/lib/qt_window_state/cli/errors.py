"""
Utilities for nicely handling errors in the command-line tool.
"""

import sys
import traceback

from typing import NoReturn, Callable
from textwrap import dedent, indent
from functools import wraps

from .console import console


class DescriptiveError(RuntimeError):
    """
    An exception class for errors where it is clear from the message what happened and where, and the traceback is
    redundant.

    `pretty_unhandled` shows just the message for these and exits with the error's `exit_code`.
    """

    exit_code: int

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


def fail(message: str, exit_code: int = 1) -> NoReturn:
    """
    Shortcut for throwing a `DescriptiveError`. See its docs for details.
    """
    raise DescriptiveError(dedent(message).strip(), exit_code=exit_code)


def pretty_print_exception(exception: BaseException):
    """
    Prints an exception on the console in a user-friendly way.

    `KeyboardInterrupt` and `DescriptiveError` get short messages. All other exceptions are assumed to be bugs and
    will show a full stack trace, including their causes.
    """

    if isinstance(exception, KeyboardInterrupt):
        console.print_warning("Stopped by user")
        return

    if isinstance(exception, DescriptiveError):
        console.print_error(str(exception) or exception.__class__.__name__)
        return

    is_first = True
    while exception is not None:
        base_indent = '' if is_first else '  '

        if not is_first:
            console.print_error("Cause:", minor=True)

        console.print_error(indent(_format_exception_head(exception), base_indent))
        console.print_error(base_indent + "Traceback:", minor=True)
        console.print_error(indent(_format_exception_trace(exception), base_indent + '  '), minor=True)

        exception = exception.__cause__
        is_first = False


def pretty_unhandled(main_method: Callable) -> Callable:
    """
    Decorator for a main method that causes unhandled exceptions to be displayed in a pretty way.

    A `DescriptiveError` exits with its own exit code, any other exception with -1. `SystemExit` passes through.
    """

    @wraps(main_method)
    def wrapper(*args, **kwargs):
        try:
            return main_method(*args, **kwargs)
        except SystemExit:
            raise
        except KeyboardInterrupt as e:
            pretty_print_exception(e)
            sys.exit(0)
        except DescriptiveError as e:
            pretty_print_exception(e)
            sys.exit(e.exit_code)
        except BaseException as e:
            pretty_print_exception(e)
            sys.exit(-1)

    return wrapper


def _format_exception_head(exception: BaseException) -> str:
    return ''.join(traceback.format_exception_only(exception.__class__, exception)).rstrip()


def _format_exception_trace(exception: BaseException) -> str:
    return dedent(''.join(traceback.format_list(traceback.extract_tb(exception.__traceback__))).rstrip())
