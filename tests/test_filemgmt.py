#!/usr/bin/env python3
"""
Tests for the file management helpers in filemgmt.py.
"""

import io
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path to import the flat modules
sys.path.insert(0, str(Path(__file__).parent.parent))
import filemgmt  # pylint: disable=wrong-import-position


class TestFileManagement(unittest.TestCase):
    def setUp(self) -> None:
        self.test_dir = tempfile.mkdtemp()
        self.target = os.path.join(self.test_dir, "target.txt")
        with open(self.target, "wb") as f:
            f.write(b"original\n")

    def tearDown(self) -> None:
        shutil.rmtree(self.test_dir)

    def test_temp_file_is_created_next_to_target(self) -> None:
        stream, temp_name = filemgmt.create_temp_file(self.target)
        try:
            self.assertEqual(os.path.dirname(temp_name), self.test_dir)
            self.assertTrue(stream.writable())
        finally:
            filemgmt.close_remove_file(stream, temp_name)
        self.assertFalse(os.path.exists(temp_name))

    def test_replace_file(self) -> None:
        stream, temp_name = filemgmt.create_temp_file(self.target)
        stream.write(b"cleaned\n")
        filemgmt.close_complete_or_remove(stream, temp_name)

        filemgmt.replace_file(self.target, temp_name)

        with open(self.target, "rb") as f:
            self.assertEqual(f.read(), b"cleaned\n")
        self.assertFalse(os.path.exists(temp_name))

    @unittest.skipIf(os.name == "nt", "POSIX permissions")
    def test_replace_file_copies_mode(self) -> None:
        os.chmod(self.target, 0o600)
        stream, temp_name = filemgmt.create_temp_file(self.target)
        filemgmt.close_file(stream, temp_name)
        os.chmod(temp_name, 0o644)

        filemgmt.replace_file(self.target, temp_name)

        self.assertEqual(os.stat(self.target).st_mode & 0o777, 0o600)

    def test_chown_failure_is_ignored(self) -> None:
        stream, temp_name = filemgmt.create_temp_file(self.target)
        filemgmt.close_file(stream, temp_name)

        with patch("os.chown", side_effect=PermissionError("Not owner"), create=True):
            filemgmt.replace_file(self.target, temp_name)

        self.assertFalse(os.path.exists(temp_name))

    def test_standard_streams_are_never_closed(self) -> None:
        fake_stdin = io.TextIOWrapper(io.BytesIO(b"data"))
        fake_stdout = io.TextIOWrapper(io.BytesIO())

        with patch("sys.stdin", fake_stdin), patch("sys.stdout", fake_stdout):
            stdin = filemgmt.open_input("-")
            stdout = filemgmt.open_output("-")
            self.assertIs(stdin, fake_stdin.buffer)
            self.assertIs(stdout, fake_stdout.buffer)

            filemgmt.close_file(stdin, "-")
            filemgmt.close_remove_file(stdout, "-")
            filemgmt.close_complete_or_remove(stdout, "-")

        self.assertFalse(fake_stdin.buffer.closed)
        self.assertFalse(fake_stdout.buffer.closed)

    def test_describe(self) -> None:
        self.assertEqual(filemgmt.describe("-"), filemgmt.STDIN_DESCRIPTION)
        self.assertEqual(filemgmt.describe("-", output=True), filemgmt.STDOUT_DESCRIPTION)
        self.assertEqual(filemgmt.describe("notes.txt"), "notes.txt")


if __name__ == "__main__":
    unittest.main()
