"""
Top-level decoding loop for window state blobs: header check and dispatch on item markers.
"""

import logging

from typing import List, Optional

from .QDataStreamReader import QDataStreamReader, QDataStreamReaderFormatError

from . import StateDocument, StateItem, FloatingTab, Rect, DecodeStatus, TopLevelMarker, VERSION_MARKER, \
    DEFAULT_MAX_DEPTH, IncompleteItemError
from ._builder import StateDocumentBuilder
from ._dock import decode_dock_area, decode_dock_node, FAULT_TYPES
from ._toolbar import decode_toolbar_area


LOG = logging.getLogger(__name__)


def decode_window_state(data, max_depth: int = DEFAULT_MAX_DEPTH) -> StateDocument:
    reader = QDataStreamReader(data)
    builder = StateDocumentBuilder()

    LOG.debug("Decoding window state blob of %d bytes", reader.total_size())

    try:
        marker, version = reader.read_struct('ii', 'window state header')
    except QDataStreamReaderFormatError as e:
        return builder.stop(DecodeStatus.TRUNCATED, f"Could not read the header: {e}").build()

    builder.set_header(marker, version)

    if marker != VERSION_MARKER:
        return builder.stop(
            DecodeStatus.BAD_HEADER,
            f"Unrecognized format marker 0x{marker & 0xffffffff:x} (expected 0x{VERSION_MARKER:x}), not decoding"
        ).build()

    while not (reader.is_faulted() or reader.eof()):
        item_pos = reader.tell()
        tag = reader.read_uint8('item marker')
        warnings = []

        try:
            item = _decode_item(reader, tag, warnings, max_depth)
        except IncompleteItemError as e:
            builder.add_warnings(warnings).set_partial_item(e.partial_item)
            builder.stop(DecodeStatus.TRUNCATED, f"Item at position {item_pos} is corrupt or truncated: {e}")
            break
        except FAULT_TYPES as e:
            builder.add_warnings(warnings)
            builder.stop(DecodeStatus.TRUNCATED, f"Item at position {item_pos} is corrupt or truncated: {e}")
            break

        builder.add_warnings(warnings)

        if item is None:
            builder.stop(
                DecodeStatus.UNKNOWN_MARKER,
                f"At position {item_pos}, found unrecognized item marker {tag} (0x{tag:02x}), stopping"
            )
            break

        builder.add_item(item)

    return builder.build()


def _decode_item(reader: QDataStreamReader, tag: int, mut_warnings: List[str], max_depth: int) -> Optional[StateItem]:
    if tag == TopLevelMarker.DOCK_AREA:
        return decode_dock_area(reader, mut_warnings, max_depth)
    if tag == TopLevelMarker.FLOATING_TAB:
        return _decode_floating_tab(reader, mut_warnings, max_depth)
    if tag == TopLevelMarker.TOOLBAR_AREA:
        return decode_toolbar_area(reader, extended=False)
    if tag == TopLevelMarker.TOOLBAR_AREA_EXTENDED:
        return decode_toolbar_area(reader, extended=True)

    return None


def _decode_floating_tab(reader: QDataStreamReader, mut_warnings: List[str], max_depth: int) -> FloatingTab:
    geometry = Rect(*reader.read_rect('floating tab geometry'))
    tree = decode_dock_node(reader, mut_warnings, depth=1, max_depth=max_depth)

    return FloatingTab(geometry, tree)
