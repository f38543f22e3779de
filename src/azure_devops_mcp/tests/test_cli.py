#!/usr/bin/env python3
"""
Unit tests for cli/formatters.py, cli/schemas.py and cli/cli.py
"""

import os
import sys
import unittest
from io import StringIO
from unittest.mock import patch

import typer
from typer.testing import CliRunner

# Add parent directory to path to import module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from azure_devops_mcp.cli.cli import app, parse_filters
from azure_devops_mcp.cli.formatters import (
    build_changes_table,
    console,
    print_error,
    print_truncation_note,
)
from azure_devops_mcp.cli.schemas import format_cli_response
from azure_devops_mcp.core.client import AzureDevOpsClient

from fakes import FakeAzureDevOpsClient


class TestCliFormatters(unittest.TestCase):
    """Test cases for CLI formatters"""

    def setUp(self):
        """Redirect rich console output to StringIO"""
        self.console_output = StringIO()
        console.file = self.console_output

    def tearDown(self):
        console.file = sys.stdout

    def test_print_error(self):
        print_error("Path '/x' not found")
        output = self.console_output.getvalue()

        self.assertIn("Error", output)
        self.assertIn("Path '/x' not found", output)

    def test_changes_table_has_one_row_per_file(self):
        table = build_changes_table([
            {"path": "/a.py", "change_type": "add", "patch": "+x"},
            {"path": "/b.py", "change_type": "delete"},
            {"path": "/c.py", "change_type": "edit", "patch": "[omitted]", "truncated": True},
        ])
        self.assertEqual(table.row_count, 3)

    def test_truncation_note_is_printed(self):
        print_truncation_note({"truncation_note": "2 patch(es) omitted"})
        self.assertIn("2 patch(es) omitted", self.console_output.getvalue())


class TestCliSchemas(unittest.TestCase):
    """Test cases for CLI response envelopes"""

    def test_success_response(self):
        self.assertEqual(format_cli_response(True, data={"count": 1}), {"success": True, "data": {"count": 1}})

    def test_error_response_drops_empty_fields(self):
        self.assertEqual(
            format_cli_response(False, error="denied", category="permission"),
            {"success": False, "error": "denied", "category": "permission"},
        )


class TestCliCommands(unittest.TestCase):
    """Test cases for CLI commands against a fake client"""

    def setUp(self):
        self.runner = CliRunner()

    def test_parse_filters(self):
        self.assertIsNone(parse_filters(None))
        self.assertEqual(
            parse_filters(["Repository=web", "Repository=api", "Path=/src"]),
            {"Repository": ["web", "api"], "Path": ["/src"]},
        )
        with self.assertRaises(typer.BadParameter):
            parse_filters(["Repository"])

    def test_repos_json_output(self):
        client = FakeAzureDevOpsClient(repositories=[{"id": "1", "name": "web"}])
        with patch.object(AzureDevOpsClient, "from_config", return_value=client), \
                patch("azure_devops_mcp.cli.cli.print_json") as mock_print_json:
            result = self.runner.invoke(app, ["--json", "repos", "proj"])

        self.assertEqual(result.exit_code, 0)
        mock_print_json.assert_called_once_with({"success": True, "data": [{"id": "1", "name": "web"}]})

    def test_missing_file_exits_with_error(self):
        with patch.object(AzureDevOpsClient, "from_config", return_value=FakeAzureDevOpsClient()), \
                patch("azure_devops_mcp.cli.cli.print_json") as mock_print_json:
            result = self.runner.invoke(app, ["--json", "content", "proj", "repo", "/missing.txt"])

        self.assertEqual(result.exit_code, 1)
        payload = mock_print_json.call_args.args[0]
        self.assertFalse(payload["success"])
        self.assertEqual(payload["category"], "not_found")

    def test_zero_start_line_is_rejected(self):
        result = self.runner.invoke(app, ["content", "proj", "repo", "/a.txt", "--start-line", "0"])
        self.assertNotEqual(result.exit_code, 0)


if __name__ == "__main__":
    unittest.main()
