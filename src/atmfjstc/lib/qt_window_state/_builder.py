"""
Accumulator for the results of a window state decoding pass.
"""

import logging

from typing import List, Optional

from . import StateDocument, StateItem, DecodeStatus


LOG = logging.getLogger(__name__)


class StateDocumentBuilder:
    """
    Accumulates the results of a decoding pass, in input order, and produces the final immutable `StateDocument`.

    Not intended for use outside of a single `decode_window_state` call.
    """

    _marker: Optional[int] = None
    _version: Optional[int] = None
    _items: List[StateItem]
    _diagnostics: List[str]
    _status: DecodeStatus = DecodeStatus.COMPLETE
    _partial_item: Optional[StateItem] = None

    def __init__(self):
        self._items = []
        self._diagnostics = []

    def set_header(self, marker: int, version: int) -> 'StateDocumentBuilder':
        self._marker = marker
        self._version = version
        return self

    def add_item(self, item: StateItem) -> 'StateDocumentBuilder':
        self._items.append(item)
        return self

    def warn(self, message: str) -> 'StateDocumentBuilder':
        LOG.info(message)
        self._diagnostics.append(message)
        return self

    def add_warnings(self, messages: List[str]) -> 'StateDocumentBuilder':
        for message in messages:
            self.warn(message)
        return self

    def stop(self, status: DecodeStatus, message: str) -> 'StateDocumentBuilder':
        """
        Records the reason for which decoding ended prematurely.
        """
        self._status = status
        return self.warn(message)

    def set_partial_item(self, item: StateItem) -> 'StateDocumentBuilder':
        self._partial_item = item
        return self

    def build(self) -> StateDocument:
        return StateDocument(
            marker=self._marker,
            version=self._version,
            items=tuple(self._items),
            status=self._status,
            diagnostics=tuple(self._diagnostics),
            partial_item=self._partial_item,
        )
