"""
Azure DevOps MCP Tools

Azure DevOps repository, commit, pull request and code search tools for AI
agents, with every returned text artifact kept inside a fixed size budget.

This package follows a three-layer architecture:

1. Core Layer: Pure business logic (truncation engine, change enumeration, REST client)
2. Presentation Layer: CLI interface with rich formatting
3. Integration Layer: MCP wrapper for AI agent usage

Usage:
    # Direct API usage (Core Layer)
    from azure_devops_mcp.core import AzureDevOpsClient, ContentRequest, get_content
    response = await get_content(AzureDevOpsClient.from_config(), ContentRequest(...))

    # CLI usage (Presentation Layer)
    # python -m azure_devops_mcp.cli.cli content Fabrikam web /README.md

    # MCP server usage (Integration Layer)
    # python -m azure_devops_mcp.mcp.mcp_server start
"""

__version__ = "1.0.0"

# Core functionality
from azure_devops_mcp.core import (
    AzureDevOpsClient,
    ContentRequest,
    TruncationBudget,
    get_content,
    get_pull_request_changes,
    list_changes_with_diffs,
    list_commits,
    list_repositories,
    search_code,
)

# CLI layer
from azure_devops_mcp.cli import app as cli_app

# MCP layer
from azure_devops_mcp.mcp import create_mcp_server

__all__ = [
    # Core
    'AzureDevOpsClient',
    'ContentRequest',
    'TruncationBudget',
    'get_content',
    'list_changes_with_diffs',
    'list_commits',
    'get_pull_request_changes',
    'search_code',
    'list_repositories',

    # CLI entrypoint
    'cli_app',

    # MCP server
    'create_mcp_server',

    # Version info
    '__version__',
]
