import json
import os
import unittest

from io import BytesIO, StringIO, TextIOWrapper
from tempfile import TemporaryDirectory
from unittest.mock import patch

from atmfjstc.lib.qt_window_state.cli import main

from tests.state_blobs import state_blob, simple_dock_area, u8


SETTINGS_TEXT = r"""
[General]
title=Main window

[MainWindow]
state=@ByteArray(\0\0\0\xff\0\0\0\x2)

[recentFiles]
1\path=/tmp/a.txt
size=1
"""


class CLITestBase(unittest.TestCase):
    def setUp(self):
        self._temp_dir = TemporaryDirectory()
        self.temp_dir = self._temp_dir.name

    def tearDown(self):
        self._temp_dir.cleanup()

    def write_file(self, name: str, content: bytes) -> str:
        path = os.path.join(self.temp_dir, name)

        with open(path, 'wb') as f:
            f.write(content)

        return path

    def run_main(self, *argv: str):
        """
        Runs the tool and returns a tuple of (exit code, stdout bytes, stderr text).
        """
        stdout_bytes = BytesIO()
        stdout = TextIOWrapper(stdout_bytes, encoding='utf-8', write_through=True)
        stderr = StringIO()

        with patch('sys.stdout', stdout), patch('sys.stderr', stderr):
            try:
                exit_code = main(list(argv))
            except SystemExit as e:
                exit_code = e.code

            stdout.flush()

        return exit_code, stdout_bytes.getvalue(), stderr.getvalue()


class GetValueTest(CLITestBase):
    def setUp(self):
        super().setUp()
        self.settings_path = self.write_file('App.conf', SETTINGS_TEXT.encode('utf-8'))

    def test_text_value(self):
        exit_code, output, _ = self.run_main(self.settings_path, '--get-value', 'title')

        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b'Main window\n')

    def test_array_value(self):
        exit_code, output, _ = self.run_main(self.settings_path, '-g', 'recentFiles[0]/path')

        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b'/tmp/a.txt\n')

    def test_binary_value_written_raw(self):
        exit_code, output, _ = self.run_main(self.settings_path, '-g', 'MainWindow/state')

        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b'\x00\x00\x00\xff\x00\x00\x00\x02')

    def test_missing_key(self):
        exit_code, output, errors = self.run_main(self.settings_path, '-g', 'MainWindow/geometry')

        self.assertEqual(exit_code, 1)
        self.assertEqual(output, b'')
        self.assertIn("Key 'geometry' not set", errors)

    def test_missing_file(self):
        exit_code, _, errors = self.run_main(os.path.join(self.temp_dir, 'nope.conf'), '-g', 'title')

        self.assertEqual(exit_code, 1)
        self.assertIn("does not exist", errors)

    def test_bad_key_path(self):
        exit_code, _, _ = self.run_main(self.settings_path, '-g', 'recentFiles[x]/path')

        self.assertEqual(exit_code, 1)


class DecodeStateTest(CLITestBase):
    def test_complete_state(self):
        path = self.write_file('state.bin', state_blob(simple_dock_area(['files', 'console'])))

        exit_code, output, errors = self.run_main(path, '--decode-state')

        self.assertEqual(exit_code, 0)

        obj = json.loads(output.decode('utf-8'))
        self.assertEqual(obj['status'], 'complete')
        self.assertEqual(len(obj['items']), 1)
        self.assertEqual(errors, '')

    def test_partial_state(self):
        path = self.write_file('state.bin', state_blob(simple_dock_area(), u8(0x00)))

        exit_code, output, errors = self.run_main(path, '-d')

        self.assertEqual(exit_code, 0)
        self.assertEqual(json.loads(output.decode('utf-8'))['status'], 'unknown_marker')
        self.assertIn('unrecognized item marker', errors)

    def test_partial_state_strict(self):
        path = self.write_file('state.bin', state_blob(simple_dock_area(), u8(0x00)))

        exit_code, output, _ = self.run_main(path, '-d', '--strict')

        self.assertEqual(exit_code, 1)
        self.assertEqual(json.loads(output.decode('utf-8'))['status'], 'unknown_marker')

    def test_max_depth(self):
        path = self.write_file('state.bin', state_blob(simple_dock_area()))

        exit_code, output, _ = self.run_main(path, '-d', '--max-depth', '0')

        self.assertEqual(exit_code, 0)
        self.assertEqual(json.loads(output.decode('utf-8'))['status'], 'truncated')

    def test_missing_file(self):
        exit_code, output, errors = self.run_main(os.path.join(self.temp_dir, 'nope.bin'), '-d')

        self.assertEqual(exit_code, 1)
        self.assertEqual(output, b'')
        self.assertIn("does not exist", errors)


class ArgumentsTest(CLITestBase):
    def test_no_source(self):
        exit_code, _, errors = self.run_main('-d')

        self.assertEqual(exit_code, 1)
        self.assertIn("Input not specified", errors)

    def test_no_action(self):
        exit_code, output, errors = self.run_main('App.conf')

        self.assertEqual(exit_code, 1)
        self.assertEqual(output, b'')
        self.assertIn('usage:', errors)

    def test_multiple_actions(self):
        exit_code, _, errors = self.run_main('App.conf', '-d', '-g', 'title')

        self.assertEqual(exit_code, 1)
        self.assertIn("Can't specify multiple actions.", errors)

    def test_usage_error(self):
        exit_code, _, _ = self.run_main('App.conf', '--max-depth', 'deep')

        self.assertEqual(exit_code, 1)

    def test_version(self):
        exit_code, output, _ = self.run_main('--version')

        self.assertEqual(exit_code, 0)
        self.assertIn(b'qt-window-state', output)


if __name__ == '__main__':
    unittest.main()
