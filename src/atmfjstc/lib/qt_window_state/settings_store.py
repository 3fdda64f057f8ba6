"""
Read-only access to settings files written by Qt's `QSettings` in INI format.

This is mainly useful for extracting the window state blobs that Qt applications store in their settings, e.g.::

    blob = get_settings_value('~/.config/Vendor/App.conf', 'MainWindow/state')

`QSettings` uses its own conventions on top of the INI format, and these are handled here:

- Keys are hierarchical, with ``/`` as the separator. The first component is stored as the section name (with keys
  in the root group going under ``[General]``) and the rest are joined with backslashes in the key name. Unusual
  characters are escaped as ``%XX`` or ``%UXXXX``.
- Arrays are stored as groups whose elements are numbered starting from 1, with an additional ``size`` key. In key
  paths passed to this module, an element can be selected with the ``name[index]`` syntax, where the index is 0-based
  (just like in `QSettings::setArrayIndex`).
- Values can be quoted, contain C-style escapes, represent string lists (if they contain unquoted commas), or carry
  a type annotation such as ``@ByteArray(...)``.

On Unix-like systems, this format is also what `QSettings` uses for its "native" format, so any file can be read
regardless of extension. Windows registry and OS X property list settings are not supported.
"""

import configparser
import logging
import re

from os import PathLike
from pathlib import Path
from typing import Union, Dict, List, Tuple, Iterable, AnyStr, Optional


LOG = logging.getLogger(__name__)

SettingsValue = Union[str, bytes]

ROOT_SECTION = 'General'

_SIMPLE_ESCAPES = {
    'a': '\a', 'b': '\b', 'f': '\f', 'n': '\n', 'r': '\r', 't': '\t', 'v': '\v',
    "'": "'", '"': '"', '?': '?', '\\': '\\', ';': ';', ',': ',',
}
_HEX_DIGITS = '0123456789abcdefABCDEF'
_OCT_DIGITS = '01234567'
# Escaped values are truncated to a single UTF-16 code unit
_QCHAR_MASK = 0xffff
_KEY_ESCAPE_RE = re.compile(r'%U([0-9A-Fa-f]{4})|%([0-9A-Fa-f]{2})')
_TYPED_VALUE_RE = re.compile(r'^@(\w+)\((.*)\)$', re.DOTALL)
_BINARY_VALUE_TYPES = {'ByteArray', 'Variant'}


class IniSettings:
    """
    The contents of a `QSettings` INI file, loaded in memory.

    Keys are stored in their full, unescaped form (e.g. ``MainWindow/state``). Values are kept raw until they are
    requested, at which point they are decoded as per `decode_settings_value`.
    """

    _path: Optional[Path] = None
    _raw_values: Dict[str, str]

    def __init__(self, raw_values: Dict[str, str], path: Optional[Path] = None):
        self._raw_values = raw_values
        self._path = path

    @staticmethod
    def from_file(path: Union[PathLike, AnyStr]) -> 'IniSettings':
        """
        Loads a settings file.

        Raises:
            SettingsFileNotFoundError: If the file does not exist or is not a regular file.
            BadSettingsFileError: If the file cannot be parsed as an INI file.
        """
        path = Path(path)

        if not path.is_file():
            raise SettingsFileNotFoundError(str(path))

        return IniSettings.from_text(path.read_text(encoding='utf-8', errors='surrogateescape'), path=path)

    @staticmethod
    def from_text(text: str, path: Optional[Path] = None) -> 'IniSettings':
        parser = configparser.RawConfigParser(
            delimiters=('=',),
            comment_prefixes=(';', '#'),
            strict=False,
            empty_lines_in_values=False,
            interpolation=None,
            default_section='\x00',
        )
        parser.optionxform = str

        try:
            parser.read_string(text, source=str(path) if path is not None else '<string>')
        except configparser.Error as e:
            raise BadSettingsFileError(str(path) if path is not None else None) from e

        raw_values = dict()

        for section in parser.sections():
            group = unescape_settings_key(section)

            for key, raw_value in parser.items(section):
                full_key = unescape_settings_key(key) if group == ROOT_SECTION else \
                    group + '/' + unescape_settings_key(key)

                raw_values[_normalize_key(full_key)] = raw_value

        LOG.debug("Loaded %d settings key(s)", len(raw_values))

        return IniSettings(raw_values, path=path)

    def keys(self) -> Iterable[str]:
        return self._raw_values.keys()

    def contains(self, key_path: str) -> bool:
        return resolve_key_path(key_path) in self._raw_values

    def get(self, key_path: str) -> SettingsValue:
        """
        Gets the value at a given key path.

        Args:
            key_path: A slash-separated key path, e.g. ``'MainWindow/state'``. Any component except the last can be an
                array element selector like ``'recentFiles[2]'``.

        Returns:
            A `bytes` object for binary values (``@ByteArray`` and ``@Variant``), a string for anything else.

        Raises:
            BadKeyPathError: If the key path is malformed.
            SettingsKeyNotFoundError: If there is no value at the given path.
        """
        full_key = resolve_key_path(key_path)

        if full_key not in self._raw_values:
            raise SettingsKeyNotFoundError(full_key.rsplit('/', 1)[-1], full_key)

        return decode_settings_value(self._raw_values[full_key])


def get_settings_value(path: Union[PathLike, AnyStr], key_path: str) -> SettingsValue:
    """
    Shortcut for loading a settings file and getting a single value from it. See `IniSettings.get`.
    """
    return IniSettings.from_file(path).get(key_path)


def resolve_key_path(key_path: str) -> str:
    """
    Translates a key path, possibly containing ``name[index]`` array element selectors, into the full key under which
    the value is stored in the file.
    """
    components = [component for component in key_path.split('/') if component != '']

    if (len(components) == 0) or key_path.endswith('/'):
        raise BadKeyPathError(key_path, "key name is empty")

    storage_path = []

    for component in components[:-1]:
        if not component.endswith(']'):
            storage_path.append(component)
            continue

        parts = component.split('[')
        if len(parts) != 2:
            raise BadKeyPathError(key_path, f"malformed array selector '{component}'")

        name, index_text = parts[0], parts[1][:-1]

        try:
            index = int(index_text)
        except ValueError:
            raise BadKeyPathError(key_path, f"array index '{index_text}' is not a number") from None

        if index < 0:
            raise BadKeyPathError(key_path, f"array index {index} is negative")

        storage_path.extend([name, str(index + 1)])

    storage_path.append(components[-1])

    return '/'.join(storage_path)


def unescape_settings_key(raw_key: str) -> str:
    return _KEY_ESCAPE_RE.sub(
        lambda m: chr(int(m.group(1) or m.group(2), 16)),
        raw_key.replace('\\', '/'),
    )


def decode_settings_value(raw_value: str) -> SettingsValue:
    """
    Decodes a raw value as stored by `QSettings` in an INI file.

    Returns:
        A `bytes` object for ``@ByteArray(...)`` and ``@Variant(...)`` values. For string lists, the elements are
        joined with ``', '``. For other typed values (e.g. ``@Rect(0 0 10 10)``), the content of the parentheses is
        returned as-is. All other values are returned as strings.
    """
    items = _unescape_string_list(raw_value)

    if len(items) != 1:
        return ', '.join(items)

    value = items[0]

    if value.startswith('@@'):
        return value[1:]

    match = _TYPED_VALUE_RE.match(value)
    if match is None:
        return value

    type_name, content = match.groups()

    if type_name in _BINARY_VALUE_TYPES:
        return content.encode('latin-1', errors='replace')
    if type_name == 'Invalid':
        return ''

    return content


def _unescape_string_list(raw_value: str) -> List[str]:
    items = []
    current = []
    literal_end = 0
    in_quotes = False
    pos = 0

    while pos < len(raw_value):
        char = raw_value[pos]
        pos += 1

        if char == '"':
            in_quotes = not in_quotes
            literal_end = len(current)
            continue

        if char == '\\' and pos < len(raw_value):
            char, pos = _read_escape(raw_value, pos)
            current.append(char)
            literal_end = len(current)
            continue

        if in_quotes:
            current.append(char)
            literal_end = len(current)
            continue

        if char == ',':
            items.append(_trim_item(current, literal_end))
            current = []
            literal_end = 0
            continue

        if char.isspace() and len(current) == 0:
            continue

        current.append(char)
        if not char.isspace():
            literal_end = len(current)

    items.append(_trim_item(current, literal_end))

    return items


def _trim_item(chars: List[str], literal_end: int) -> str:
    return ''.join(chars[:literal_end])


def _read_escape(text: str, pos: int) -> Tuple[str, int]:
    char = text[pos]
    pos += 1

    if char in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[char], pos

    if char == 'x':
        start = pos
        while (pos < len(text)) and (text[pos] in _HEX_DIGITS):
            pos += 1
        return (chr(int(text[start:pos], 16) & _QCHAR_MASK) if pos > start else 'x'), pos

    if char in _OCT_DIGITS:
        start = pos - 1
        while (pos < len(text)) and (text[pos] in _OCT_DIGITS):
            pos += 1
        return chr(int(text[start:pos], 8) & _QCHAR_MASK), pos

    if char == '\n':
        return '', pos

    return char, pos


def _normalize_key(key: str) -> str:
    return '/'.join(component for component in key.split('/') if component != '')


class SettingsStoreError(Exception):
    """
    Base class for errors raised when looking up settings values.
    """


class SettingsFileNotFoundError(SettingsStoreError):
    path: str

    def __init__(self, path: str):
        self.path = path

        super().__init__(f"Input file '{path}' does not exist.")


class BadSettingsFileError(SettingsStoreError):
    path: Optional[str]

    def __init__(self, path: Optional[str]):
        self.path = path

        super().__init__(f"Could not parse settings file{f' {path}' if path is not None else ''}")


class BadKeyPathError(SettingsStoreError):
    key_path: str
    problem: str

    def __init__(self, key_path: str, problem: str):
        self.key_path = key_path
        self.problem = problem

        super().__init__(f"Bad key path '{key_path}': {problem}")


class SettingsKeyNotFoundError(SettingsStoreError):
    key_name: str
    full_key: str

    def __init__(self, key_name: str, full_key: str):
        self.key_name = key_name
        self.full_key = full_key

        super().__init__(f"Key '{key_name}' not set")
