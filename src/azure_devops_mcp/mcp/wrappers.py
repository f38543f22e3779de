#!/usr/bin/env python3
"""
MCP Wrappers for Azure DevOps Tools

This module provides MCP-specific wrapper functions for the core operations,
handling parameter conversion and turning exceptions into MCP responses with
an error category the agent can act on.

This module is part of the Integration Layer and can depend on both
Core Layer and Presentation Layer components.

Sample input:
    await get_file_content_wrapper("Fabrikam", "web", "/README.md", start_line=1, end_line=50)

Expected output:
    {"success": True, "content": "# Web ...", "is_directory": False, "total_lines": 12, ...}
    # or
    {"success": False, "error": "Path '/nope' not found ...", "category": "not_found"}
"""

import traceback
from typing import Any, Dict, List, Optional

from loguru import logger

from azure_devops_mcp.core.artifact_links import link_branch_to_work_item, link_commit_to_work_item
from azure_devops_mcp.core.changes import list_changes_with_diffs
from azure_devops_mcp.core.client import AzureDevOpsClient
from azure_devops_mcp.core.commits import list_commits
from azure_devops_mcp.core.content import get_content
from azure_devops_mcp.core.errors import AzureDevOpsError, ErrorCategory
from azure_devops_mcp.core.models import ContentRequest, VersionType
from azure_devops_mcp.core.pull_requests import get_pull_request_changes
from azure_devops_mcp.core.repositories import list_repositories
from azure_devops_mcp.core.search import search_code


def format_mcp_response(
    success: bool,
    data: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None,
    category: Optional[str] = None,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """
    Format a response in MCP-compatible format.

    Args:
        success: Whether the operation was successful
        data: Response data (for successful operations)
        error: Error message (for failed operations)
        category: Error category (for failed operations)
        details: Extra error details (for failed operations)

    Returns:
        Dict[str, Any]: MCP-compatible response
    """
    response: Dict[str, Any] = {"success": success}

    if success and data is not None:
        response.update(data)
    elif not success and error is not None:
        response["error"] = error
        if category is not None:
            response["category"] = category
        if details is not None:
            response["details"] = details

    return response


def format_error(error: Exception, operation: str) -> Dict[str, Any]:
    """
    Convert an exception raised by a core operation into an MCP response.

    Args:
        error: The exception
        operation: Human-readable operation name for the log

    Returns:
        Dict[str, Any]: MCP-compatible error response
    """
    if isinstance(error, AzureDevOpsError):
        logger.warning(f"{operation} failed ({error.category.value}): {error.message}")
        return format_mcp_response(False, error=error.message, category=error.category.value, details=error.details)

    # pydantic.ValidationError is a ValueError
    if isinstance(error, ValueError):
        logger.warning(f"{operation} rejected invalid arguments: {str(error)}")
        return format_mcp_response(
            False, error=f"Invalid arguments: {str(error)}", category=ErrorCategory.VALIDATION.value
        )

    logger.error(f"{operation} failed: {str(error)}")
    logger.debug(traceback.format_exc())
    return format_mcp_response(
        False, error=f"{operation} failed: {str(error)}", category=ErrorCategory.INTERNAL.value
    )


async def get_file_content_wrapper(
    project: str,
    repository: str,
    path: str = "/",
    version: Optional[str] = None,
    version_type: str = VersionType.BRANCH.value,
    start_line: Optional[int] = None,
    end_line: Optional[int] = None,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """
    MCP wrapper for file and directory content.

    Args:
        project: Project ID or name
        repository: Repository ID or name
        path: File or directory path
        version: Branch, commit or tag
        version_type: branch, commit or tag
        start_line: First line (1-based)
        end_line: Last line (inclusive)
        client: Client to use; built from the environment when omitted

    Returns:
        Dict[str, Any]: MCP-compatible response
    """
    try:
        request = ContentRequest(
            project=project,
            repository=repository,
            path=path,
            version=version,
            version_type=VersionType(version_type),
            start_line=start_line,
            end_line=end_line,
        )
        response = await get_content(client or AzureDevOpsClient.from_config(), request)
        return format_mcp_response(True, data=response.to_response())
    except Exception as e:
        return format_error(e, "Get file content")


async def list_commit_changes_wrapper(
    project: str,
    repository: str,
    commit_id: str,
    include_diffs: bool = False,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """MCP wrapper for the files changed by one commit."""
    try:
        result = await list_changes_with_diffs(
            client or AzureDevOpsClient.from_config(), project, repository, commit_id, include_diffs
        )
        return format_mcp_response(True, data=result.to_response())
    except Exception as e:
        return format_error(e, "List commit changes")


async def list_commits_wrapper(
    project: str,
    repository: str,
    branch: str,
    top: int = 10,
    skip: Optional[int] = None,
    include_diffs: bool = False,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """MCP wrapper for commit listing."""
    try:
        result = await list_commits(
            client or AzureDevOpsClient.from_config(), project, repository, branch, top, skip, include_diffs
        )
        return format_mcp_response(True, data=result)
    except Exception as e:
        return format_error(e, "List commits")


async def get_pull_request_changes_wrapper(
    project: str,
    repository: str,
    pull_request_id: int,
    include_diffs: bool = False,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """MCP wrapper for pull request changes."""
    try:
        result = await get_pull_request_changes(
            client or AzureDevOpsClient.from_config(), project, repository, pull_request_id, include_diffs
        )
        return format_mcp_response(True, data=result)
    except Exception as e:
        return format_error(e, "Get pull request changes")


async def search_code_wrapper(
    search_text: str,
    project: Optional[str] = None,
    filters: Optional[Dict[str, List[str]]] = None,
    page: int = 0,
    include_snippet: bool = False,
    include_content: bool = False,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """MCP wrapper for code search."""
    try:
        result = await search_code(
            client or AzureDevOpsClient.from_config(),
            search_text,
            project,
            filters,
            page,
            include_snippet,
            include_content,
        )
        return format_mcp_response(True, data=result)
    except Exception as e:
        return format_error(e, "Search code")


async def list_repositories_wrapper(
    project: str,
    include_links: bool = False,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """MCP wrapper for repository listing."""
    try:
        repositories = await list_repositories(client or AzureDevOpsClient.from_config(), project, include_links)
        return format_mcp_response(True, data={"repositories": repositories, "count": len(repositories)})
    except Exception as e:
        return format_error(e, "List repositories")


async def link_commit_wrapper(
    work_item_id: int,
    project: str,
    repository: str,
    commit_sha: str,
    operation: str = "add",
    comment: Optional[str] = None,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """MCP wrapper for linking a commit to a work item."""
    try:
        result = await link_commit_to_work_item(
            client or AzureDevOpsClient.from_config(),
            work_item_id, project, repository, commit_sha, operation, comment,
        )
        return format_mcp_response(True, data=result)
    except Exception as e:
        return format_error(e, "Link commit to work item")


async def link_branch_wrapper(
    work_item_id: int,
    project: str,
    repository: str,
    branch: str,
    operation: str = "add",
    comment: Optional[str] = None,
    client: Optional[AzureDevOpsClient] = None,
) -> Dict[str, Any]:
    """MCP wrapper for linking a branch to a work item."""
    try:
        result = await link_branch_to_work_item(
            client or AzureDevOpsClient.from_config(),
            work_item_id, project, repository, branch, operation, comment,
        )
        return format_mcp_response(True, data=result)
    except Exception as e:
        return format_error(e, "Link branch to work item")
