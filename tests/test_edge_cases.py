#!/usr/bin/env python3
"""
Test edge cases for the stream cleaner and in-place processing.
"""

import logging
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path to import the flat modules
sys.path.insert(0, str(Path(__file__).parent.parent))
import normalize  # pylint: disable=wrong-import-position
from cleanconfig import (  # pylint: disable=wrong-import-position
    CleanConfig,
    EolMode,
    WhitespaceMode,
)
from cleanstream import Verdict, clean_bytes  # pylint: disable=wrong-import-position

normalize.logger.setLevel(logging.CRITICAL)


class TestEdgeCases(unittest.TestCase):
    def setUp(self):
        # Create a temporary directory
        self.test_dir = tempfile.mkdtemp()
        self.config = CleanConfig(eol_mode=EolMode.LF)

    def tearDown(self):
        # Clean up the temporary directory
        shutil.rmtree(self.test_dir)

    def test_very_long_lines(self):
        """Test processing files with very long lines."""
        long_file = os.path.join(self.test_dir, "long.txt")
        with open(long_file, "wb") as f:
            f.write((b"a" * 10000 + b"\r\n") * 5)

        verdict = normalize.process_file_in_place(long_file, self.config)
        self.assertIs(verdict, Verdict.MODIFIED)
        with open(long_file, "rb") as f:
            self.assertEqual(f.read(), (b"a" * 10000 + b"\n") * 5)

    def test_many_blank_lines(self):
        """Blank lines between text are kept as they are."""
        data = b"Line 1\n" + b"\n" * 100 + b"Line 2\n"
        output, verdict = clean_bytes(data, self.config)
        self.assertEqual(output, data)
        self.assertIs(verdict, Verdict.UNMODIFIED)

    def test_whitespace_only_lines_become_blank(self):
        output, verdict = clean_bytes(b"a\n   \n\t\nb\n", self.config)
        self.assertEqual(output, b"a\n\n\nb\n")
        self.assertIs(verdict, Verdict.MODIFIED)

    def test_unicode_content(self):
        """Multi-byte characters count as one column per byte."""
        data = "Hello 世界\r\nПривет мир\r\n".encode("utf-8")
        output, verdict = clean_bytes(data, self.config)
        self.assertEqual(output, "Hello 世界\nПривет мир\n".encode("utf-8"))
        self.assertIs(verdict, Verdict.MODIFIED)

    def test_whitespace_only_file(self):
        path = os.path.join(self.test_dir, "blank.txt")
        with open(path, "wb") as f:
            f.write(b"  \n\t\n\n")

        verdict = normalize.process_file_in_place(path, self.config)

        self.assertIs(verdict, Verdict.MODIFIED)
        self.assertEqual(os.path.getsize(path), 0)

    def test_empty_file(self):
        path = os.path.join(self.test_dir, "empty.txt")
        open(path, "wb").close()  # pylint: disable=consider-using-with

        verdict = normalize.process_file_in_place(path, self.config)

        self.assertIs(verdict, Verdict.UNMODIFIED)
        self.assertEqual(os.path.getsize(path), 0)

    def test_leading_whitespace_on_first_line(self):
        output, _ = clean_bytes(b"\n\n  x", self.config)
        self.assertEqual(output, b"\n\n  x\n")

    def test_tab_size_one(self):
        config = CleanConfig(
            eol_mode=EolMode.LF, whitespace_mode=WhitespaceMode.TABS, tab_size=1, tab_min=1
        )
        output, verdict = clean_bytes(b"a  b\n", config)
        self.assertEqual(output, b"a\t\tb\n")
        self.assertIs(verdict, Verdict.MODIFIED)

    def test_tab_after_content_in_spaces_mode(self):
        output, _ = clean_bytes(b"ab\tc\n", CleanConfig(eol_mode=EolMode.LF, tab_size=4))
        self.assertEqual(output, b"ab  c\n")

    def test_cr_eol_round_trip(self):
        config = CleanConfig(eol_mode=EolMode.CR)
        output, _ = clean_bytes(b"one\r\ntwo\nthree", config)
        self.assertEqual(output, b"one\rtwo\rthree\r")
        again, verdict = clean_bytes(output, config)
        self.assertEqual(again, output)
        self.assertIs(verdict, Verdict.UNMODIFIED)


if __name__ == "__main__":
    unittest.main()
