#!/usr/bin/env python3
"""
MCP Server Entry Point for Azure DevOps Tools

This is the main entry point for the Azure DevOps MCP server, designed to be
directly referenced in the .mcp.json configuration.

This module is part of the Integration Layer and connects the MCP functionality
to the application core.
"""

import argparse
import json
import os
import platform
import sys
from typing import Any, Dict

from loguru import logger

from azure_devops_mcp import __version__
from azure_devops_mcp.core import config
from azure_devops_mcp.core.client import extract_organization
from azure_devops_mcp.core.errors import AzureDevOpsError
from azure_devops_mcp.mcp.mcp_tools import create_mcp_server


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    """
    Configure logging with proper format and level.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    log_dir = os.path.dirname(config.LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger.remove()

    logger.add(
        config.LOG_FILE,
        rotation="10 MB",
        retention="1 week",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
    )

    # stdout carries the stdio transport, so visible output goes to stderr
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | {message}",
        level=level,
        colorize=True,
    )


def get_server_info() -> Dict[str, Any]:
    """
    Get server information.

    Returns:
        Dict[str, Any]: Server information
    """
    return {
        "name": "Azure DevOps MCP Server",
        "version": __version__,
        "description": "Azure DevOps repository, pull request and search tools with bounded output",
        "api_version": config.AZURE_DEVOPS_API_VERSION,
        "limits": config.DEFAULT_BUDGET.model_dump(),
    }


def health_check() -> Dict[str, Any]:
    """
    Check that the server is configured to reach an organization.

    Returns:
        Dict[str, Any]: Health check results
    """
    try:
        organization = extract_organization(config.AZURE_DEVOPS_ORG_URL)
    except AzureDevOpsError as e:
        return {"status": "unhealthy", "error": e.message}

    if not config.AZURE_DEVOPS_PAT:
        return {"status": "unhealthy", "error": "AZURE_DEVOPS_PAT is not set"}

    return {
        "status": "healthy",
        "organization": organization,
        "default_project": config.AZURE_DEVOPS_DEFAULT_PROJECT,
        "platform": platform.system(),
        "python_version": platform.python_version(),
    }


def main() -> int:
    """
    Main entry point for the MCP server.

    Returns:
        int: Exit code
    """
    parser = argparse.ArgumentParser(description="Azure DevOps MCP Server")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    start_parser = subparsers.add_parser("start", help="Start the MCP server")
    start_parser.add_argument("--host", type=str, default="localhost", help="Host to listen on")
    start_parser.add_argument("--port", type=int, default=3000, help="Port to listen on")
    start_parser.add_argument(
        "--transport", choices=["stdio", "sse"], default="stdio", help="MCP transport"
    )
    start_parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    subparsers.add_parser("health", help="Check server configuration")
    subparsers.add_parser("info", help="Display server information")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "start":
        log_level = "DEBUG" if args.debug else config.LOG_LEVEL
        configure_logging(log_level)

        logger.info("Starting MCP server for Azure DevOps tools")
        logger.info(f"Transport: {args.transport}, Host: {args.host}, Port: {args.port}")

        try:
            mcp = create_mcp_server(host=args.host, port=args.port)
            mcp.run(transport=args.transport)
        except KeyboardInterrupt:
            logger.info("Server stopped by user")
            return 0
        except Exception as e:
            logger.exception(f"Server failed to start: {str(e)}")
            return 1

    elif args.command == "health":
        result = health_check()
        print(json.dumps(result, indent=2))
        return 0 if result["status"] == "healthy" else 1

    elif args.command == "info":
        print(json.dumps(get_server_info(), indent=2))
        return 0

    return 0


if __name__ == "__main__":
    """
    Usage:
      python -m azure_devops_mcp.mcp.mcp_server start [--transport stdio|sse] [--debug]
      python -m azure_devops_mcp.mcp.mcp_server health
      python -m azure_devops_mcp.mcp.mcp_server info
    """
    sys.exit(main())
