"""
This module contains the `QDataStreamReader` class, a reader for data serialized in Qt's `QDataStream` convention
(big-endian fixed-size ints, length-prefixed UTF-16 strings, rectangles etc.)

Unlike a general purpose binary reader, this one has a *sticky* fault state: once a read fails, the error is kept and
every subsequent read re-raises it immediately, without consuming any more input. This mirrors the status mechanism
of `QDataStream` itself and means callers can perform a whole group of reads and only deal with the failure once.
"""

import struct

from typing import Union, BinaryIO, Optional, Tuple
from io import IOBase, TextIOBase


NULL_QSTRING_LENGTH = 0xffffffff


class QDataStreamReader:
    """
    This class wraps an in-memory buffer (or a binary file object, which is read fully upon construction) and offers
    functions for extracting `QDataStream`-encoded ints, strings, sizes and rectangles.

    All read functions raise a `QDataStreamReaderFormatError` subclass if the data does not match expectations. The
    first such error puts the reader in a faulted state; see the module docs.
    """

    _data: bytes
    _position: int = 0
    _fault: Optional['QDataStreamReaderFormatError'] = None

    def __init__(self, data_or_fileobj: Union[bytes, BinaryIO]):
        self._data = _parse_main_input_arg(data_or_fileobj)

    def tell(self) -> int:
        return self._position

    def total_size(self) -> int:
        return len(self._data)

    def bytes_remaining(self) -> int:
        return len(self._data) - self._position

    def eof(self) -> bool:
        return self._position >= len(self._data)

    def is_faulted(self) -> bool:
        return self._fault is not None

    @property
    def fault(self) -> Optional['QDataStreamReaderFormatError']:
        """
        The error that put the reader in the faulted state, or None if no read has failed so far.
        """
        return self._fault

    def read_amount(self, n_bytes: int, meaning: Optional[str] = None) -> bytes:
        """
        Reads exactly `n_bytes` from the buffer.

        Args:
            n_bytes: The amount of bytes to read.
            meaning: An indication as to the meaning of the data being read (e.g. "dock count"). It is used in the
                text of any exceptions that may be thrown.

        Returns:
            The data, as a `bytes` object `n_bytes` in length.

        Raises:
            QDataStreamReaderMissingDataError: If we are at the end of the data and no bytes are left at all.
            QDataStreamReaderReadPastEndError: If some bytes are left, but fewer than `n_bytes`. Note that in this case
                the available bytes are NOT consumed.
        """

        self._check_fault()

        if n_bytes < 0:
            raise ValueError("The number of bytes to read cannot be negative")
        if n_bytes == 0:
            return b''

        available = self.bytes_remaining()

        if available == 0:
            self._set_fault(QDataStreamReaderMissingDataError(self._position, n_bytes, meaning))
        if available < n_bytes:
            self._set_fault(QDataStreamReaderReadPastEndError(self._position, n_bytes, available, meaning))

        data = self._data[self._position:self._position + n_bytes]
        self._position += n_bytes

        return data

    def read_struct(self, struct_format: str, meaning: Optional[str] = None) -> tuple:
        """
        Reads structured data from the buffer.

        Args:
            struct_format: The format of the structured data, as per the Python `struct` package. There is no need to
                prepend an endianness specifier, as big-endian (the `QDataStream` default) will be added
                automatically.
            meaning: An indication as to the meaning of the data being read (e.g. "central widget size"). It is used
                in the text of any exceptions that may be thrown.

        Returns:
           The data in the structure, as a tuple.
        """

        if struct_format == '':
            return ()
        if struct_format[0] not in '@=<>!':
            struct_format = '>' + struct_format

        meaning = meaning or f"struct ({struct_format})"

        data = self.read_amount(struct.calcsize(struct_format), meaning)

        return struct.unpack(struct_format, data)

    def read_uint8(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('B', meaning or 'uint8')[0]

    def read_int32(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('i', meaning or 'int32')[0]

    def read_uint32(self, meaning: Optional[str] = None) -> int:
        return self.read_struct('I', meaning or 'uint32')[0]

    def read_size(self, meaning: Optional[str] = None) -> Tuple[int, int]:
        """
        Reads a (width, height) pair, stored as two consecutive int32's.
        """
        return self.read_struct('ii', meaning or 'size')

    def read_rect(self, meaning: Optional[str] = None) -> Tuple[int, int, int, int]:
        """
        Reads four consecutive int32's describing a rectangle, returned as (x, y, w, h).
        """
        return self.read_struct('iiii', meaning or 'rectangle')

    def read_qstring(self, meaning: Optional[str] = None) -> str:
        """
        Reads a string serialized as per Qt's `QString` convention.

        The string is stored as a 32-bit length, in bytes, followed by the UTF-16BE encoded data. A length of
        0xffffffff denotes a null string, which is returned as an empty string.
        If the string is malformed, the position is left at its start, as with any other failed read.

        Args:
            meaning: An indication as to the meaning of the data being read (e.g. "widget name"). It is used in the
                text of any exceptions that may be thrown.

        Raises:
            QDataStreamReaderBadStringError: If the length is odd, exceeds the available data, or the data is not
                valid UTF-16.
            QDataStreamReaderMissingDataError: If we are at the end of the data and no bytes are left at all.
            QDataStreamReaderReadPastEndError: If the data ends in the middle of the length field.
        """

        meaning = meaning or 'string'
        original_pos = self._position

        length = self.read_uint32(f"length of {meaning}")

        if length == NULL_QSTRING_LENGTH:
            return ''

        if length % 2 != 0:
            self._set_fault(QDataStreamReaderBadStringError(
                original_pos, meaning, f"has an odd byte length ({length})"
            ), rewind_to=original_pos)
        if length > self.bytes_remaining():
            self._set_fault(QDataStreamReaderBadStringError(
                original_pos, meaning, f"declares {length} bytes, but only {self.bytes_remaining()} remain"
            ), rewind_to=original_pos)

        raw_data = self.read_amount(length, meaning)

        try:
            return raw_data.decode('utf-16-be')
        except UnicodeDecodeError as e:
            self._set_fault(
                QDataStreamReaderBadStringError(original_pos, meaning, f"is not valid UTF-16 ({e.reason})"),
                rewind_to=original_pos
            )

    def _check_fault(self):
        if self._fault is not None:
            raise self._fault

    def _set_fault(self, fault: 'QDataStreamReaderFormatError', rewind_to: Optional[int] = None):
        if rewind_to is not None:
            self._position = rewind_to

        self._fault = fault
        raise fault


def _parse_main_input_arg(input_: Union[bytes, BinaryIO]) -> bytes:
    if isinstance(input_, (bytes, bytearray, memoryview)):
        return bytes(input_)

    if not isinstance(input_, IOBase):
        raise TypeError("Input to QDataStreamReader must be either bytes or a file object")
    if isinstance(input_, TextIOBase):
        raise TypeError("QDataStreamReader works on binary, not text file objects")

    return input_.read()


class QDataStreamReaderFormatError(Exception):
    """
    This is used by the `QDataStreamReader` specifically to signal situations where the data does not match the
    expected format.
    """
    position: int


class QDataStreamReaderReadPastEndError(QDataStreamReaderFormatError):
    expected_length: int
    actual_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.actual_length = actual_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but only {actual_length} were found"
        )


class QDataStreamReaderMissingDataError(QDataStreamReaderFormatError):
    expected_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but the data ends"
        )


class QDataStreamReaderBadStringError(QDataStreamReaderFormatError):
    meaning: str
    problem: str

    def __init__(self, position: int, meaning: str, problem: str):
        self.position = position
        self.meaning = meaning
        self.problem = problem

        super().__init__(f"At position {position}, {meaning} {problem}")
