#!/usr/bin/env python3
"""
Unit tests for core/truncation.py
"""

import os
import sys
import unittest

# Add parent directory to path to import module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from azure_devops_mcp.core.config import TruncationBudget
from azure_devops_mcp.core.errors import AzureDevOpsValidationError
from azure_devops_mcp.core.truncation import (
    CONTENT_TRUNCATION_MARKER,
    LINE_TRUNCATION_MARKER,
    compute_window,
    patch_truncation_marker,
    truncate_file_content,
    truncate_long_lines,
    truncate_patch,
    truncate_total_size,
)


class TestComputeWindow(unittest.TestCase):
    """Test cases for line window selection"""

    def test_default_window_is_one_page(self):
        window = compute_window(1500)
        self.assertEqual((window.start, window.end), (1, 1000))

    def test_span_is_capped_at_page_size(self):
        window = compute_window(5000, requested_start=10, requested_end=4000)
        self.assertEqual((window.start, window.end), (10, 1009))

    def test_end_is_clamped_to_file(self):
        window = compute_window(50, requested_start=40, requested_end=80)
        self.assertEqual((window.start, window.end), (40, 50))

    def test_start_is_clamped_to_first_line(self):
        window = compute_window(50, requested_start=-5, requested_end=10)
        self.assertEqual((window.start, window.end), (1, 10))

    def test_start_past_end_gives_empty_window(self):
        window = compute_window(10, requested_start=20)
        self.assertTrue(window.is_empty)
        self.assertEqual(window.line_count, 0)

    def test_end_before_start_is_rejected(self):
        with self.assertRaises(AzureDevOpsValidationError):
            compute_window(100, requested_start=50, requested_end=10)

    def test_custom_page_size(self):
        window = compute_window(100, max_lines_per_page=25)
        self.assertEqual((window.start, window.end), (1, 25))


class TestLineTruncation(unittest.TestCase):
    """Test cases for per-line truncation"""

    def test_long_lines_are_cut_and_counted(self):
        result = truncate_long_lines(["a" * 2000] * 5, max_line_length=1000)
        self.assertEqual(result.truncated_count, 5)
        for line in result.lines:
            self.assertEqual(line, "a" * 1000 + LINE_TRUNCATION_MARKER)

    def test_short_lines_are_untouched(self):
        result = truncate_long_lines(["short", "x" * 1000], max_line_length=1000)
        self.assertEqual(result.truncated_count, 0)
        self.assertEqual(result.lines, ["short", "x" * 1000])


class TestTotalSizeTruncation(unittest.TestCase):
    """Test cases for total-size truncation"""

    def test_keeps_lines_that_fit(self):
        lines = ["x" * 10] * 5
        # 10 + 11 + 11 = 32 fits in 35, a fourth line would need 43
        result = truncate_total_size(lines, max_chars=35, start_line=7)
        self.assertTrue(result.truncated)
        self.assertEqual(len(result.lines), 3)
        self.assertEqual(result.end_line, 9)

    def test_exact_fit_is_not_truncated(self):
        lines = ["x" * 10, "y" * 10]
        result = truncate_total_size(lines, max_chars=21)
        self.assertFalse(result.truncated)
        self.assertEqual(result.end_line, 2)


class TestTextTruncation(unittest.TestCase):
    """Test cases for whole-text truncation"""

    def test_small_text_is_returned_verbatim(self):
        result = truncate_file_content("line one\nline two")
        self.assertEqual(result.content, "line one\nline two")
        self.assertFalse(result.truncated)

    def test_large_file_gets_content_marker(self):
        text = "\n".join(["z" * 500] * 100)
        result = truncate_file_content(text)
        self.assertTrue(result.size_truncated)
        self.assertTrue(result.content.endswith("\n" + CONTENT_TRUNCATION_MARKER))
        body = result.content[: -len("\n" + CONTENT_TRUNCATION_MARKER)]
        self.assertLessEqual(len(body), 20000)

    def test_patch_over_budget_gets_patch_marker(self):
        budget = TruncationBudget(max_patch_length=300)
        patch = "\n".join(["+" + "p" * 49] * 20)
        result = truncate_patch(patch, budget)
        self.assertTrue(result.truncated)
        self.assertTrue(result.content.endswith(patch_truncation_marker(300)))
        self.assertIn("exceeded 300 characters", result.content)

    def test_every_line_respects_line_budget(self):
        text = "\n".join(["q" * n for n in (10, 999, 1000, 1001, 5000)])
        result = truncate_file_content(text)
        for line in result.content.split("\n"):
            self.assertLessEqual(len(line), 1000 + len(LINE_TRUNCATION_MARKER))
        self.assertEqual(result.truncated_line_count, 2)


if __name__ == "__main__":
    unittest.main()
