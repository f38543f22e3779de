"""
CLI Layer for Azure DevOps MCP Tools

This package contains the CLI (Command Line Interface) layer, providing a
rich interface for human users on top of the core operations.

Usage:
    from azure_devops_mcp.cli import app as azure_devops_app
    azure_devops_app()
"""

from azure_devops_mcp.cli.cli import app
from azure_devops_mcp.cli.formatters import (
    build_changes_table,
    console,
    print_content_result,
    print_error,
    print_info,
    print_json,
    print_warning,
)
from azure_devops_mcp.cli.schemas import format_cli_response

__all__ = [
    'app',
    'build_changes_table',
    'console',
    'print_content_result',
    'print_error',
    'print_info',
    'print_json',
    'print_warning',
    'format_cli_response',
]
