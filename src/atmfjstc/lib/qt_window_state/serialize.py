"""
Conversion of decoded window states to JSON.

`state_document_to_json_obj` turns a `StateDocument` into a tree of plain dicts and lists; every record carries a
``type`` field identifying its kind. `serialize_state_document` dumps that tree as indented JSON with sorted keys,
suitable for diffing or further processing by other tools.
"""

import json

from enum import IntEnum
from typing import Any, Union, Optional

from . import StateDocument, StateItem, DockArea, FloatingTab, ToolBarArea, ToolBarLine, ToolBarItem, Dock, \
    DockNode, TabNode, SequenceNode, InvalidDockNode, DockChild, WidgetChild, NestedSequenceChild, WidgetLayout, \
    PlaceholderLayout, FloatingLayout, DockedLayout, Rect, Size


JSONObj = dict


def serialize_state_document(document: StateDocument, indent: int = 4) -> str:
    return json.dumps(state_document_to_json_obj(document), indent=indent, sort_keys=True, ensure_ascii=False)


def state_document_to_json_obj(document: StateDocument) -> JSONObj:
    return dict(
        marker=document.marker,
        version=document.version,
        status=document.status.value,
        items=[state_item_to_json_obj(item) for item in document.items],
        diagnostics=list(document.diagnostics),
        partial_item=_maybe(state_item_to_json_obj, document.partial_item),
    )


def state_item_to_json_obj(item: StateItem) -> JSONObj:
    if isinstance(item, DockArea):
        return dict(
            type='dock_area',
            docks=[_dock_to_json_obj(dock) for dock in item.docks],
            central_size=_maybe(_size_to_json_obj, item.central_size),
            corners=[_code_to_json(corner) for corner in item.corners],
        )
    if isinstance(item, FloatingTab):
        return dict(
            type='floating_tab',
            geometry=_rect_to_json_obj(item.geometry),
            tree=dock_node_to_json_obj(item.tree),
        )
    if isinstance(item, ToolBarArea):
        return dict(
            type='toolbar_area',
            extended=item.extended,
            lines=[_toolbar_line_to_json_obj(line) for line in item.lines],
        )

    raise TypeError(f"Unsupported state item type: {item.__class__.__name__}")


def dock_node_to_json_obj(node: DockNode) -> JSONObj:
    if isinstance(node, TabNode):
        return dict(
            type='tab',
            index=node.index,
            orientation=_code_to_json(node.orientation),
            children=[_dock_child_to_json_obj(child) for child in node.children],
        )
    if isinstance(node, SequenceNode):
        return dict(
            type='sequence',
            position=node.position,
            size=node.size,
            extra1=node.extra1,
            extra2=node.extra2,
            children=[_dock_child_to_json_obj(child) for child in node.children],
        )
    if isinstance(node, InvalidDockNode):
        return dict(type='invalid', marker=node.marker, reason=node.reason)

    raise TypeError(f"Unsupported dock node type: {node.__class__.__name__}")


def _dock_to_json_obj(dock: Dock) -> JSONObj:
    return dict(position=dock.position, size=_size_to_json_obj(dock.size), tree=dock_node_to_json_obj(dock.tree))


def _dock_child_to_json_obj(child: DockChild) -> JSONObj:
    if isinstance(child, WidgetChild):
        return dict(
            type='widget',
            name=child.name,
            flags=child.flags,
            layout=_widget_layout_to_json_obj(child.layout),
        )
    if isinstance(child, NestedSequenceChild):
        return dict(
            type='nested_sequence',
            position=child.position,
            size=child.size,
            extra1=child.extra1,
            extra2=child.extra2,
            subtree=dock_node_to_json_obj(child.subtree),
        )

    raise TypeError(f"Unsupported dock child type: {child.__class__.__name__}")


def _widget_layout_to_json_obj(layout: WidgetLayout) -> JSONObj:
    if isinstance(layout, PlaceholderLayout):
        return dict(type='placeholder', d1=layout.d1, d2=layout.d2, d3=layout.d3, d4=layout.d4)
    if isinstance(layout, FloatingLayout):
        return dict(type='floating', x=layout.x, y=layout.y, w=layout.w, h=layout.h, visible=layout.visible)
    if isinstance(layout, DockedLayout):
        return dict(
            type='docked', pos=layout.pos, size=layout.size, extra1=layout.extra1, extra2=layout.extra2,
            visible=layout.visible,
        )

    raise TypeError(f"Unsupported widget layout type: {layout.__class__.__name__}")


def _toolbar_line_to_json_obj(line: ToolBarLine) -> JSONObj:
    return dict(position=line.position, items=[_toolbar_item_to_json_obj(item) for item in line.items])


def _toolbar_item_to_json_obj(item: ToolBarItem) -> JSONObj:
    return dict(
        name=item.name,
        shown=item.shown,
        position=item.position,
        size=item.size,
        rect=_maybe(_rect_to_json_obj, item.rect),
        floating=item.floating,
    )


def _rect_to_json_obj(rect: Rect) -> JSONObj:
    return dict(x=rect.x, y=rect.y, w=rect.w, h=rect.h)


def _size_to_json_obj(size: Size) -> JSONObj:
    return dict(w=size.w, h=size.h)


def _code_to_json(code: Union[IntEnum, int]) -> Union[str, JSONObj]:
    if isinstance(code, IntEnum):
        return code.name.lower()

    return dict(unrecognized=code)


def _maybe(converter, value: Optional[Any]) -> Optional[Any]:
    return converter(value) if value is not None else None
