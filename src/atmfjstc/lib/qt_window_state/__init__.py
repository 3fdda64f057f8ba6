"""
Decoder for the window state blobs saved by Qt's `QMainWindow::saveState()`.

Qt applications commonly persist the arrangement of their dock widgets and toolbars as an opaque binary value (often
found as a ``@ByteArray(...)`` entry in a settings file). This package decodes such a blob into a tree of immutable
records that can be inspected or dumped as JSON::

    from atmfjstc.lib.qt_window_state import decode_window_state

    doc = decode_window_state(raw_bytes)

    for item in doc.items:
        print(item)

Decoding is best-effort. Malformed, truncated or future-version data never causes an exception; instead, the
returned `StateDocument` contains all the items that could be decoded before the problem, along with a `status` and a
list of human-readable `diagnostics`.

There is no encoder; the format is only understood well enough to be read.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Tuple, Union


__version__ = '0.1.0'


DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True)
class Size:
    w: int
    h: int


class Orientation(IntEnum):
    HORIZONTAL = 1
    VERTICAL = 2


class Corner(IntEnum):
    LEFT = 1
    RIGHT = 2
    TOP = 4
    BOTTOM = 8


class ToolBarLinePosition(IntEnum):
    LEFT = 0
    RIGHT = 1
    TOP = 2
    BOTTOM = 3


class TopLevelMarker(IntEnum):
    FLOATING_TAB = 249
    TOOLBAR_AREA_EXTENDED = 252
    DOCK_AREA = 253
    TOOLBAR_AREA = 254


class DockNodeMarker(IntEnum):
    TAB = 250
    SEQUENCE = 252


class DockChildMarker(IntEnum):
    WIDGET = 251
    SEQUENCE = 252


VERSION_MARKER = 0xff


@dataclass(frozen=True)
class WidgetLayout:
    pass


@dataclass(frozen=True)
class PlaceholderLayout(WidgetLayout):
    """
    Layout of a widget entry with no name. The four values are raw layout sentinels, not geometry.
    """
    d1: int
    d2: int
    d3: int
    d4: int


@dataclass(frozen=True)
class FloatingLayout(WidgetLayout):
    x: int
    y: int
    w: int
    h: int
    visible: bool


@dataclass(frozen=True)
class DockedLayout(WidgetLayout):
    """
    Layout of a docked widget. The four numbers are opaque values used internally by Qt's layout engine.
    """
    pos: int
    size: int
    extra1: int
    extra2: int
    visible: bool


@dataclass(frozen=True)
class DockChild:
    pass


@dataclass(frozen=True)
class WidgetChild(DockChild):
    name: str
    flags: int
    layout: WidgetLayout


@dataclass(frozen=True)
class NestedSequenceChild(DockChild):
    position: int
    size: int
    extra1: int
    extra2: int
    subtree: 'DockNode'


@dataclass(frozen=True)
class DockNode:
    pass


@dataclass(frozen=True)
class TabNode(DockNode):
    index: int
    orientation: Union[Orientation, int]
    children: Tuple[DockChild, ...]


@dataclass(frozen=True)
class SequenceNode(DockNode):
    position: int
    size: int
    extra1: int
    extra2: int
    children: Tuple[DockChild, ...]


@dataclass(frozen=True)
class InvalidDockNode(DockNode):
    """
    Stands in for a dock node that could not be decoded because of an unrecognized node or child marker.
    """
    marker: int
    reason: str


@dataclass(frozen=True)
class Dock:
    position: int
    size: Size
    tree: DockNode


@dataclass(frozen=True)
class StateItem:
    pass


@dataclass(frozen=True)
class DockArea(StateItem):
    """
    The docking state of a main window.

    Attributes:
        docks: The top-level docks, in the order they were saved.
        central_size: The size of the central widget. May be None only in a partially decoded area.
        corners: The four corner assignments (top-left, top-right, bottom-left, bottom-right), each a `Corner` enum or
            an int, if unrecognized.
    """
    docks: Tuple[Dock, ...]
    central_size: Optional[Size]
    corners: Tuple[Union[Corner, int], ...]


@dataclass(frozen=True)
class FloatingTab(StateItem):
    geometry: Rect
    tree: DockNode


@dataclass(frozen=True)
class ToolBarItem:
    name: str
    shown: int
    position: int
    size: int
    rect: Optional[Rect] = None
    floating: bool = False


@dataclass(frozen=True)
class ToolBarLine:
    position: int
    items: Tuple[ToolBarItem, ...]


@dataclass(frozen=True)
class ToolBarArea(StateItem):
    lines: Tuple[ToolBarLine, ...]
    extended: bool


class DecodeStatus(Enum):
    COMPLETE = 'complete'
    BAD_HEADER = 'bad_header'
    UNKNOWN_MARKER = 'unknown_marker'
    TRUNCATED = 'truncated'


@dataclass(frozen=True)
class StateDocument:
    """
    The result of decoding a window state blob.

    Attributes:
        marker: The format marker from the header (0xff for valid data), or None if the header could not be read.
        version: The application-defined state version from the header, or None if the header could not be read.
        items: The decoded top-level items, in the order they occur in the data.
        status: A `DecodeStatus` describing whether the data was decoded in its entirety, or why decoding stopped.
        diagnostics: Human-readable messages about anything unusual encountered during decoding.
        partial_item: If decoding stopped due to corrupt data in the middle of an item, this holds whatever could be
            salvaged of that item. It is never included in `items`.
    """
    marker: Optional[int]
    version: Optional[int]
    items: Tuple[StateItem, ...] = ()
    status: DecodeStatus = DecodeStatus.COMPLETE
    diagnostics: Tuple[str, ...] = ()
    partial_item: Optional[StateItem] = None

    @property
    def is_complete(self) -> bool:
        return self.status == DecodeStatus.COMPLETE


def decode_window_state(data, max_depth: int = DEFAULT_MAX_DEPTH) -> StateDocument:
    """
    Decodes a window state blob.

    Args:
        data: The raw blob, as `bytes` or a binary file object (which will be read to the end).
        max_depth: The maximum nesting depth accepted for dock layout trees. Deeper trees are treated as corrupt data.

    Returns:
        A `StateDocument`. This function does not raise exceptions for malformed data.
    """
    from ._decode import decode_window_state as _decode

    return _decode(data, max_depth=max_depth)


class WindowStateFormatError(Exception):
    """
    Base class for decoder-level errors signaling that the data does not match the expected structure.
    """


class DockNestingTooDeepError(WindowStateFormatError):
    position: int
    max_depth: int

    def __init__(self, position: int, max_depth: int):
        self.position = position
        self.max_depth = max_depth

        super().__init__(f"At position {position}, dock layout nesting exceeds the maximum depth of {max_depth}")


class DockNestingUnsupportedError(WindowStateFormatError):
    """
    Raised when a dock layout tree is within the `max_depth` limit, but nested too deeply for the interpreter's
    recursion limit.
    """
    position: int

    def __init__(self, position: int):
        self.position = position

        super().__init__(f"At position {position}, dock layout nesting is too deep to be decoded")


class ToolBarLinePositionError(WindowStateFormatError):
    position: int
    line_position: int

    def __init__(self, position: int, line_position: int):
        self.position = position
        self.line_position = line_position

        super().__init__(
            f"At position {position}, found toolbar line position {line_position}, expected a value between 0 and 3"
        )


class IncompleteItemError(WindowStateFormatError):
    """
    Raised by the item decoders when a fault occurs partway through an item. It carries whatever part of the item was
    decoded successfully; the original fault is available as `__cause__`.
    """
    partial_item: StateItem

    def __init__(self, partial_item: StateItem, cause: Exception):
        self.partial_item = partial_item

        super().__init__(str(cause))
