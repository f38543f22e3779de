"""
MCP Layer for Azure DevOps MCP Tools

This package contains the MCP (Model Context Protocol) layer, exposing the
core operations as tools for AI agents.

Usage:
    # Start the MCP server
    python -m azure_devops_mcp.mcp.mcp_server start

    # Use the MCP server in Python
    from azure_devops_mcp.mcp import create_mcp_server
    mcp = create_mcp_server()
    mcp.run()
"""

from azure_devops_mcp.mcp.mcp_tools import create_mcp_server
from azure_devops_mcp.mcp.mcp_server import (
    configure_logging,
    get_server_info,
    health_check,
    main,
)
from azure_devops_mcp.mcp.wrappers import format_error, format_mcp_response

__all__ = [
    'create_mcp_server',
    'main',
    'health_check',
    'get_server_info',
    'configure_logging',
    'format_mcp_response',
    'format_error',
]

# Example configuration for .mcp.json
EXAMPLE_MCP_CONFIG = """
{
  "mcpServers": {
    "azure-devops": {
      "command": "python",
      "args": ["-m", "azure_devops_mcp.mcp.mcp_server", "start"],
      "env": {
        "AZURE_DEVOPS_ORG_URL": "https://dev.azure.com/your-org",
        "AZURE_DEVOPS_PAT": "<personal access token>"
      }
    }
  }
}
"""
