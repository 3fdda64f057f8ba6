"""
Decoders for the dock area part of a window state (dock widgets, tab groups and splitters).
"""

import logging

from typing import List, Tuple, Type, TypeVar, Union

from .QDataStreamReader import QDataStreamReader, QDataStreamReaderFormatError

from . import DockArea, Dock, DockNode, TabNode, SequenceNode, InvalidDockNode, DockChild, WidgetChild, \
    NestedSequenceChild, WidgetLayout, PlaceholderLayout, FloatingLayout, DockedLayout, Size, Orientation, Corner, \
    DockNodeMarker, DockChildMarker, WindowStateFormatError, DockNestingTooDeepError, DockNestingUnsupportedError, \
    IncompleteItemError


LOG = logging.getLogger(__name__)

WIDGET_FLAG_VISIBLE = 1 << 0
WIDGET_FLAG_FLOATING = 1 << 1

N_CORNERS = 4

FAULT_TYPES = (QDataStreamReaderFormatError, WindowStateFormatError)


def decode_dock_area(reader: QDataStreamReader, mut_warnings: List[str], max_depth: int) -> DockArea:
    """
    Decodes a dock area record (the part following the dock area marker).

    Raises:
        IncompleteItemError: If a structural fault occurs. The error carries a `DockArea` with the docks that were
            decoded completely before the fault.
    """
    docks = []

    try:
        n_docks = reader.read_int32('dock count')
        LOG.debug("Decoding dock area with %d dock(s)", n_docks)

        for _ in range(n_docks):
            position = reader.read_int32('dock position')
            size = Size(*reader.read_size('dock size'))
            tree = decode_dock_node(reader, mut_warnings, depth=1, max_depth=max_depth)

            docks.append(Dock(position, size, tree))

        central_size = Size(*reader.read_size('central widget size'))
        raw_corners = reader.read_struct(f'{N_CORNERS}i', 'corner assignments')
    except FAULT_TYPES as e:
        raise IncompleteItemError(DockArea(docks=tuple(docks), central_size=None, corners=()), e) from e

    corners = tuple(_as_enum(raw_corner, Corner) for raw_corner in raw_corners)

    return DockArea(docks=tuple(docks), central_size=central_size, corners=corners)


def decode_dock_node(reader: QDataStreamReader, mut_warnings: List[str], depth: int, max_depth: int) -> DockNode:
    """
    Decodes a dock layout tree node (a tab group or a sequence/splitter), recursing into its children.

    An unrecognized node marker, or an unrecognized marker for any of the node's children, does not raise an error.
    Instead, an `InvalidDockNode` is returned and a warning is recorded. Note that the data following such a node will
    likely be misinterpreted, as its extent is unknown.

    Raises:
        DockNestingTooDeepError: If the tree is nested more than `max_depth` levels deep.
        DockNestingUnsupportedError: If `max_depth` is set so high that the tree exhausts the recursion limit before
            reaching it.
        QDataStreamReaderFormatError: For reads past the end of the data, etc.
    """
    start_pos = reader.tell()

    try:
        return _decode_dock_node(reader, mut_warnings, depth, max_depth)
    except RecursionError:
        raise DockNestingUnsupportedError(start_pos) from None


def _decode_dock_node(reader: QDataStreamReader, mut_warnings: List[str], depth: int, max_depth: int) -> DockNode:
    if depth > max_depth:
        raise DockNestingTooDeepError(reader.tell(), max_depth)

    node_pos = reader.tell()
    marker = reader.read_uint8('dock node marker')

    if marker == DockNodeMarker.TAB:
        index = reader.read_int32('tab index')
        orientation = _as_enum(reader.read_uint8('tab orientation'), Orientation)

        if not isinstance(orientation, Orientation):
            mut_warnings.append(f"At position {node_pos}, tab group has unrecognized orientation {orientation}")

        make_node = lambda children: TabNode(index, orientation, children)
    elif marker == DockNodeMarker.SEQUENCE:
        position, size, extra1, extra2 = reader.read_struct('iiii', 'sequence layout')

        make_node = lambda children: SequenceNode(position, size, extra1, extra2, children)
    else:
        return _invalid_node(marker, f"unrecognized dock node marker {marker}", node_pos, mut_warnings)

    try:
        children = _decode_children(reader, mut_warnings, depth, max_depth)
    except _UnrecognizedChildError as e:
        return _invalid_node(e.marker, f"unrecognized dock child marker {e.marker}", e.position, mut_warnings)

    return make_node(children)


def _decode_children(
    reader: QDataStreamReader, mut_warnings: List[str], depth: int, max_depth: int
) -> Tuple[DockChild, ...]:
    n_children = reader.read_int32('child count')

    return tuple(_decode_child(reader, mut_warnings, depth, max_depth) for _ in range(n_children))


def _decode_child(reader: QDataStreamReader, mut_warnings: List[str], depth: int, max_depth: int) -> DockChild:
    child_pos = reader.tell()
    marker = reader.read_uint8('dock child marker')

    if marker == DockChildMarker.WIDGET:
        name = reader.read_qstring('widget name')
        flags = reader.read_uint8('widget flags')
        layout = _make_widget_layout(name, flags, *reader.read_struct('iiii', 'widget layout'))

        return WidgetChild(name, flags, layout)

    if marker == DockChildMarker.SEQUENCE:
        position, size, extra1, extra2 = reader.read_struct('iiii', 'nested sequence layout')
        subtree = _decode_dock_node(reader, mut_warnings, depth=depth + 1, max_depth=max_depth)

        return NestedSequenceChild(position, size, extra1, extra2, subtree)

    raise _UnrecognizedChildError(child_pos, marker)


def _make_widget_layout(name: str, flags: int, v1: int, v2: int, v3: int, v4: int) -> WidgetLayout:
    if name == '':
        return PlaceholderLayout(v1, v2, v3, v4)

    visible = (flags & WIDGET_FLAG_VISIBLE) != 0

    if flags & WIDGET_FLAG_FLOATING:
        return FloatingLayout(x=v1, y=v2, w=v3, h=v4, visible=visible)

    return DockedLayout(pos=v1, size=v2, extra1=v3, extra2=v4, visible=visible)


def _invalid_node(marker: int, reason: str, position: int, mut_warnings: List[str]) -> InvalidDockNode:
    mut_warnings.append(f"At position {position}, {reason}; dock node skipped")

    return InvalidDockNode(marker, reason)


class _UnrecognizedChildError(Exception):
    position: int
    marker: int

    def __init__(self, position: int, marker: int):
        self.position = position
        self.marker = marker

        super().__init__(f"Unrecognized dock child marker {marker} at position {position}")


T = TypeVar('T')


def _as_enum(raw_value: int, enum: Type[T]) -> Union[T, int]:
    try:
        return enum(raw_value)
    except ValueError:
        return raw_value
