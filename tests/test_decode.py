import unittest

from io import BytesIO

from atmfjstc.lib.qt_window_state import decode_window_state, DecodeStatus, DockArea, FloatingTab, ToolBarArea, \
    TabNode, InvalidDockNode, Rect

from tests.state_blobs import state_blob, header, simple_dock_area, dock_area, dock, floating_tab, toolbar_area, \
    toolbar_line, toolbar_item, tab_node, sequence_node, nested_sequence, widget, pack_toolbar_geometry, u8, i32


class DecodeWindowStateTest(unittest.TestCase):
    def test_multiple_dock_areas(self):
        doc = decode_window_state(state_blob(
            simple_dock_area(['a']),
            simple_dock_area(['b', 'c']),
            simple_dock_area(['d']),
            version=3,
        ))

        self.assertEqual(doc.marker, 0xff)
        self.assertEqual(doc.version, 3)
        self.assertEqual(doc.status, DecodeStatus.COMPLETE)
        self.assertTrue(doc.is_complete)
        self.assertEqual(len(doc.items), 3)
        self.assertTrue(all(isinstance(item, DockArea) for item in doc.items))
        self.assertEqual(
            [[child.name for child in item.docks[0].tree.children] for item in doc.items],
            [['a'], ['b', 'c'], ['d']],
        )
        self.assertEqual(doc.diagnostics, ())

    def test_all_item_kinds_kept_in_order(self):
        geom0, geom1 = pack_toolbar_geometry(True, 10, -5, 200, 100)

        doc = decode_window_state(state_blob(
            toolbar_area([toolbar_line(2, [toolbar_item('main', 1, 0, 0, geom0, geom1)])], extended=True),
            simple_dock_area(),
            floating_tab((100, 100, 400, 300), tab_node(0, 1, widget('props', 1, 0, 0, 0, 0))),
            toolbar_area([toolbar_line(0, [toolbar_item('old', 1, 0, 0, 0)])], extended=False),
        ))

        self.assertTrue(doc.is_complete)
        self.assertEqual([type(item) for item in doc.items], [ToolBarArea, DockArea, FloatingTab, ToolBarArea])
        self.assertTrue(doc.items[0].extended)
        self.assertEqual(doc.items[0].lines[0].items[0].rect, Rect(10, -5, 200, 100))
        self.assertEqual(doc.items[2].geometry, Rect(100, 100, 400, 300))
        self.assertIsInstance(doc.items[2].tree, TabNode)
        self.assertFalse(doc.items[3].extended)

    def test_header_only(self):
        doc = decode_window_state(header(version=7))

        self.assertEqual((doc.marker, doc.version), (0xff, 7))
        self.assertEqual(doc.items, ())
        self.assertEqual(doc.status, DecodeStatus.COMPLETE)

    def test_truncated_header(self):
        doc = decode_window_state(header()[:6])

        self.assertIsNone(doc.marker)
        self.assertIsNone(doc.version)
        self.assertEqual(doc.items, ())
        self.assertEqual(doc.status, DecodeStatus.TRUNCATED)
        self.assertEqual(len(doc.diagnostics), 1)

    def test_empty_input(self):
        doc = decode_window_state(b'')

        self.assertEqual(doc.status, DecodeStatus.TRUNCATED)

    def test_bad_header_marker(self):
        doc = decode_window_state(header(marker=0xfe, version=1) + simple_dock_area())

        self.assertEqual((doc.marker, doc.version), (0xfe, 1))
        self.assertEqual(doc.items, ())
        self.assertEqual(doc.status, DecodeStatus.BAD_HEADER)
        self.assertIn('0xfe', doc.diagnostics[0])

    def test_unknown_marker_after_two_items(self):
        doc = decode_window_state(state_blob(
            simple_dock_area(['first']),
            toolbar_area([toolbar_line(1, [])], extended=False),
            u8(0x00),
            simple_dock_area(['never']),
        ))

        self.assertEqual([type(item) for item in doc.items], [DockArea, ToolBarArea])
        self.assertEqual(doc.items[0].docks[0].tree.children[0].name, 'first')
        self.assertEqual(doc.status, DecodeStatus.UNKNOWN_MARKER)
        self.assertEqual(len(doc.diagnostics), 1)
        self.assertIn('marker 0', doc.diagnostics[0])

    def test_bad_toolbar_line_keeps_previous_items(self):
        doc = decode_window_state(state_blob(
            simple_dock_area(),
            toolbar_area([toolbar_line(7, [toolbar_item('x', 1, 0, 0, 0)])], extended=False),
            simple_dock_area(),
        ))

        self.assertEqual([type(item) for item in doc.items], [DockArea])
        self.assertEqual(doc.status, DecodeStatus.TRUNCATED)
        self.assertEqual(doc.partial_item, ToolBarArea(lines=(), extended=False))
        self.assertTrue(any('7' in diagnostic for diagnostic in doc.diagnostics))

    def test_truncated_dock_area_is_not_appended(self):
        tree = tab_node(0, 1, widget('files', 1, 0, 0, 0, 0))
        second = dock_area([dock(1, (10, 10), tree), dock(2, (10, 10), tree)])

        doc = decode_window_state(state_blob(simple_dock_area(), second[:-12]))

        self.assertEqual(len(doc.items), 1)
        self.assertEqual(doc.status, DecodeStatus.TRUNCATED)
        self.assertIsInstance(doc.partial_item, DockArea)
        self.assertEqual(len(doc.partial_item.docks), 2)
        self.assertIsNone(doc.partial_item.central_size)

    def test_truncated_floating_tab(self):
        doc = decode_window_state(state_blob(floating_tab((0, 0, 10, 10), b'')))

        self.assertEqual(doc.items, ())
        self.assertEqual(doc.status, DecodeStatus.TRUNCATED)
        self.assertIsNone(doc.partial_item)

    def test_invalid_dock_node_does_not_stop_decoding(self):
        doc = decode_window_state(state_blob(
            floating_tab((0, 0, 10, 10), u8(0x11)),
            simple_dock_area(),
        ))

        self.assertEqual(len(doc.items), 2)
        self.assertIsInstance(doc.items[0].tree, InvalidDockNode)
        self.assertEqual(doc.status, DecodeStatus.COMPLETE)
        self.assertEqual(len(doc.diagnostics), 1)

    def test_depth_limit(self):
        tree = tab_node(0, 1, widget('leaf', 1, 0, 0, 0, 0))
        for _ in range(10):
            tree = sequence_node(0, 0, 0, 0, nested_sequence(0, 0, 0, 0, tree))

        blob = state_blob(simple_dock_area(), dock_area([dock(1, (10, 10), tree)]))

        self.assertTrue(decode_window_state(blob).is_complete)

        doc = decode_window_state(blob, max_depth=5)
        self.assertEqual(len(doc.items), 1)
        self.assertEqual(doc.status, DecodeStatus.TRUNCATED)
        self.assertIn('maximum depth', doc.diagnostics[-1])

    def test_nesting_beyond_recursion_limit(self):
        tree = tab_node(0, 1, widget('leaf', 1, 0, 0, 0, 0))
        for _ in range(600):
            tree = sequence_node(0, 0, 0, 0, nested_sequence(0, 0, 0, 0, tree))

        doc = decode_window_state(state_blob(simple_dock_area(), dock_area([dock(1, (10, 10), tree)])), max_depth=5000)

        self.assertEqual(len(doc.items), 1)
        self.assertEqual(doc.status, DecodeStatus.TRUNCATED)
        self.assertIsInstance(doc.partial_item, DockArea)
        self.assertEqual(doc.partial_item.docks, ())
        self.assertIn('too deep', doc.diagnostics[-1])

    def test_file_object_input(self):
        doc = decode_window_state(BytesIO(state_blob(simple_dock_area())))

        self.assertEqual(len(doc.items), 1)

    def test_negative_counts_mean_empty(self):
        doc = decode_window_state(state_blob(u8(253) + i32(-1) + i32(1, 1) + i32(1, 2, 4, 8)))

        self.assertTrue(doc.is_complete)
        self.assertEqual(doc.items[0].docks, ())


if __name__ == '__main__':
    unittest.main()
