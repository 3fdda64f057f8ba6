"""
Decoder for the toolbar area part of a window state.
"""

import logging

from typing import Optional, Tuple

from .QDataStreamReader import QDataStreamReader

from . import ToolBarArea, ToolBarLine, ToolBarItem, ToolBarLinePosition, Rect, ToolBarLinePositionError, \
    IncompleteItemError
from ._dock import FAULT_TYPES


LOG = logging.getLogger(__name__)

GEOMETRY_FLOATING_BIT = 1
GEOMETRY_FIELD_MASK = 0xffff
GEOMETRY_COORD_OFFSET = 0x7fff


def decode_toolbar_area(reader: QDataStreamReader, extended: bool) -> ToolBarArea:
    """
    Decodes a toolbar area record (the part following the toolbar area marker).

    Args:
        reader: The reader, positioned right after the marker.
        extended: Whether this is the extended variant of the record, which carries packed floating geometry for each
            toolbar.

    Raises:
        IncompleteItemError: If a structural fault occurs, including an out-of-range line position. The error carries
            a `ToolBarArea` with the lines that were decoded completely before the fault.
    """
    lines = []

    try:
        n_lines = reader.read_int32('toolbar line count')
        LOG.debug("Decoding %s toolbar area with %d line(s)", 'extended' if extended else 'basic', n_lines)

        for _ in range(n_lines):
            lines.append(_decode_toolbar_line(reader, extended))
    except FAULT_TYPES as e:
        raise IncompleteItemError(ToolBarArea(lines=tuple(lines), extended=extended), e) from e

    return ToolBarArea(lines=tuple(lines), extended=extended)


def _decode_toolbar_line(reader: QDataStreamReader, extended: bool) -> ToolBarLine:
    line_pos = reader.tell()
    position = reader.read_int32('toolbar line position')

    if not (ToolBarLinePosition.LEFT <= position <= ToolBarLinePosition.BOTTOM):
        raise ToolBarLinePositionError(line_pos, position)

    n_items = reader.read_int32('toolbar item count')

    return ToolBarLine(position, tuple(_decode_toolbar_item(reader, extended) for _ in range(n_items)))


def _decode_toolbar_item(reader: QDataStreamReader, extended: bool) -> ToolBarItem:
    name = reader.read_qstring('toolbar name')
    shown = reader.read_uint8('toolbar shown flag')
    position, size, geom0 = reader.read_struct('iii', 'toolbar layout')

    if not extended:
        return ToolBarItem(name=name, shown=shown, position=position, size=size)

    geom1 = reader.read_int32('toolbar floating geometry')
    floating, rect = unpack_toolbar_geometry(geom0, geom1)

    return ToolBarItem(name=name, shown=shown, position=position, size=size, rect=rect, floating=floating)


def unpack_toolbar_geometry(geom0: int, geom1: int) -> Tuple[bool, Optional[Rect]]:
    """
    Unpacks the floating geometry of a toolbar, as stored in the extended toolbar area record.

    Bit 0 of `geom0` is the floating flag. Above it, `geom0` holds the x coordinate (16 bits, offset by 0x7fff)
    followed by the width (16 bits). `geom1` holds the y coordinate (offset by 0x7fff) in its low 16 bits, followed by
    the height.

    Returns:
        A (floating, rect) tuple. The rect is None if the toolbar is not floating.
    """
    floating = (geom0 & GEOMETRY_FLOATING_BIT) != 0
    if not floating:
        return False, None

    geom0 >>= 1

    x = (geom0 & GEOMETRY_FIELD_MASK) - GEOMETRY_COORD_OFFSET
    y = (geom1 & GEOMETRY_FIELD_MASK) - GEOMETRY_COORD_OFFSET

    geom0 >>= 16
    geom1 >>= 16

    return True, Rect(x=x, y=y, w=geom0 & GEOMETRY_FIELD_MASK, h=geom1 & GEOMETRY_FIELD_MASK)
