#!/usr/bin/env python3
"""
MCP Tools for Azure DevOps

This module provides MCP tool definitions for reading repositories, commits,
pull requests and code search results, and for linking Git artifacts to work
items. Every text artifact a tool returns is bounded by the truncation engine
so it fits in the agent's context window.

This module is part of the Integration Layer and can depend on both
Core Layer and Presentation Layer components.

Sample input:
- MCP server configuration

Expected output:
- Configured MCP server with registered tools
"""

from typing import Any, Dict, List, Optional

from loguru import logger
from mcp.server.fastmcp import FastMCP

from azure_devops_mcp.mcp.wrappers import (
    get_file_content_wrapper,
    get_pull_request_changes_wrapper,
    link_branch_wrapper,
    link_commit_wrapper,
    list_commit_changes_wrapper,
    list_commits_wrapper,
    list_repositories_wrapper,
    search_code_wrapper,
)


def create_mcp_server(
    name: str = "Azure DevOps Tools",
    host: str = "localhost",
    port: int = 3000,
) -> FastMCP:
    """
    Create and configure MCP server with Azure DevOps tools

    Args:
        name: Name for the MCP server
        host: Host to listen on
        port: Port to listen on

    Returns:
        FastMCP: Configured MCP server instance
    """
    mcp = FastMCP(name, host=host, port=port)
    logger.info(f"Initialized FastMCP server: {name} on {host}:{port}")

    register_file_content_tool(mcp)
    register_commit_changes_tool(mcp)
    register_commits_tool(mcp)
    register_pull_request_changes_tool(mcp)
    register_search_code_tool(mcp)
    register_repositories_tool(mcp)
    register_artifact_link_tools(mcp)

    return mcp


def register_file_content_tool(mcp: FastMCP) -> None:
    """
    Register get_file_content tool with the MCP server

    Args:
        mcp: MCP server instance
    """
    @mcp.tool()
    async def get_file_content(
        project: str,
        repository: str,
        path: str = "/",
        version: Optional[str] = None,
        version_type: str = "branch",
        start_line: Optional[int] = None,
        end_line: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Get the content of a file or directory from a Git repository.

        Files are returned at most 1000 lines at a time. Lines longer than 1000
        characters and responses longer than 20000 characters are truncated.

        Args:
            project (str): Project ID or name
            repository (str): Repository ID or name
            path (str, optional): File or directory path. Defaults to "/".
            version (str, optional): Branch, commit SHA or tag to read.
            version_type (str, optional): "branch", "commit" or "tag". Defaults to "branch".
            start_line (int, optional): First line to return (1-based).
            end_line (int, optional): Last line to return (inclusive).

        Returns:
            dict: MCP-compliant response containing:
                - content: File text or a JSON directory listing
                - is_directory: Whether the path is a directory
                - total_lines, start_line, end_line: Pagination for files
                - truncated, truncation_note: Present when content was cut
                - next_start_line: Where the next page begins, if any
                On error:
                - error: Error message as a string.
                - category: not_found, validation, authentication, ...
        """
        logger.info(f"File content requested: {project}/{repository}{path} lines {start_line}-{end_line}")
        return await get_file_content_wrapper(
            project, repository, path, version, version_type, start_line, end_line
        )


def register_commit_changes_tool(mcp: FastMCP) -> None:
    @mcp.tool()
    async def list_commit_changes(
        project: str,
        repository: str,
        commit_id: str,
        include_diffs: bool = False,
    ) -> Dict[str, Any]:
        """
        List the files changed by a commit, optionally with unified diffs.

        Each diff is limited to 10000 characters and all diffs together to
        50000 characters; files past the limit get an omission placeholder.

        Args:
            project (str): Project ID or name
            repository (str): Repository ID or name
            commit_id (str): Commit SHA
            include_diffs (bool, optional): Attach a unified diff per file. Defaults to False.

        Returns:
            dict: MCP-compliant response containing:
                - entries: [{path, change_type, patch?, truncated?}] in commit order
                - truncation_note, truncated_patch_count, omitted_patch_count: When diffs were cut
        """
        logger.info(f"Commit changes requested: {project}/{repository}@{commit_id} diffs={include_diffs}")
        return await list_commit_changes_wrapper(project, repository, commit_id, include_diffs)


def register_commits_tool(mcp: FastMCP) -> None:
    @mcp.tool()
    async def list_commits(
        project: str,
        repository: str,
        branch: str,
        top: int = 10,
        skip: Optional[int] = None,
        include_diffs: bool = False,
    ) -> Dict[str, Any]:
        """
        List recent commits on a branch with the files each commit changed.

        Args:
            project (str): Project ID or name
            repository (str): Repository ID or name
            branch (str): Branch name
            top (int, optional): Number of commits. Defaults to 10.
            skip (int, optional): Number of commits to skip.
            include_diffs (bool, optional): Attach unified diffs. Defaults to False.

        Returns:
            dict: MCP-compliant response containing:
                - commits: [{commit_id, comment, author, committer, url, parents, files}]
                - truncation_note: When any diff was truncated or omitted
        """
        logger.info(f"Commits requested: {project}/{repository} {branch} top={top} diffs={include_diffs}")
        return await list_commits_wrapper(project, repository, branch, top, skip, include_diffs)


def register_pull_request_changes_tool(mcp: FastMCP) -> None:
    @mcp.tool()
    async def get_pull_request_changes(
        project: str,
        repository: str,
        pull_request_id: int,
        include_diffs: bool = False,
    ) -> Dict[str, Any]:
        """
        Get the files changed in a pull request's latest iteration and its policy evaluations.

        Args:
            project (str): Project ID or name
            repository (str): Repository ID or name
            pull_request_id (int): Pull request number
            include_diffs (bool, optional): Attach unified diffs. Defaults to False.

        Returns:
            dict: MCP-compliant response containing:
                - files: [{path, change_type, patch?, truncated?}]
                - evaluations: Policy evaluation records
                - source_ref_name, target_ref_name, iteration_id
                - truncation_note: When any diff was truncated or omitted
        """
        logger.info(f"Pull request changes requested: {project}/{repository}!{pull_request_id}")
        return await get_pull_request_changes_wrapper(project, repository, pull_request_id, include_diffs)


def register_search_code_tool(mcp: FastMCP) -> None:
    @mcp.tool()
    async def search_code(
        search_text: str,
        project: Optional[str] = None,
        filters: Optional[Dict[str, List[str]]] = None,
        page: int = 0,
        include_snippet: bool = False,
        include_content: bool = False,
    ) -> Dict[str, Any]:
        """
        Search code across the repositories of a project.

        Pages hold 25 results, or 10 when include_content is set. File content
        is truncated to 20000 characters.

        Args:
            search_text (str): Text to search for
            project (str, optional): Project name. Defaults to AZURE_DEVOPS_DEFAULT_PROJECT.
            filters (dict, optional): e.g. {"Repository": ["web"], "Path": ["/src"]}
            page (int, optional): Zero-based page number. Defaults to 0.
            include_snippet (bool, optional): Include code snippets. Defaults to False.
            include_content (bool, optional): Include each file's content. Defaults to False.

        Returns:
            dict: MCP-compliant response containing:
                - count, results: Search hits
                - current_page, total_pages, page_size, has_more: Pagination
        """
        logger.info(f"Code search requested: '{search_text}' in {project} page={page}")
        return await search_code_wrapper(search_text, project, filters, page, include_snippet, include_content)


def register_repositories_tool(mcp: FastMCP) -> None:
    @mcp.tool()
    async def list_repositories(project: str, include_links: bool = False) -> Dict[str, Any]:
        """
        List the enabled Git repositories of a project.

        Args:
            project (str): Project ID or name
            include_links (bool, optional): Include reference links. Defaults to False.

        Returns:
            dict: MCP-compliant response containing:
                - repositories: Repository records
                - count: Number of repositories
        """
        logger.info(f"Repositories requested for {project}")
        return await list_repositories_wrapper(project, include_links)


def register_artifact_link_tools(mcp: FastMCP) -> None:
    """
    Register the work item artifact link tools with the MCP server

    Args:
        mcp: MCP server instance
    """
    @mcp.tool()
    async def link_commit_to_work_item(
        work_item_id: int,
        project: str,
        repository: str,
        commit_sha: str,
        operation: str = "add",
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Link a Git commit to a work item, or remove the link.

        Args:
            work_item_id (int): Work item number
            project (str): Project ID or name
            repository (str): Repository ID or name
            commit_sha (str): Full commit SHA
            operation (str, optional): "add" or "remove". Defaults to "add".
            comment (str, optional): Comment stored on the link.

        Returns:
            dict: MCP-compliant response with the artifact URL and updated work item
        """
        logger.info(f"{operation} commit link {commit_sha} on work item {work_item_id}")
        return await link_commit_wrapper(work_item_id, project, repository, commit_sha, operation, comment)

    @mcp.tool()
    async def link_branch_to_work_item(
        work_item_id: int,
        project: str,
        repository: str,
        branch: str,
        operation: str = "add",
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Link a Git branch to a work item, or remove the link.

        Args:
            work_item_id (int): Work item number
            project (str): Project ID or name
            repository (str): Repository ID or name
            branch (str): Branch name without refs/heads/
            operation (str, optional): "add" or "remove". Defaults to "add".
            comment (str, optional): Comment stored on the link.

        Returns:
            dict: MCP-compliant response with the artifact URL and updated work item
        """
        logger.info(f"{operation} branch link {branch} on work item {work_item_id}")
        return await link_branch_wrapper(work_item_id, project, repository, branch, operation, comment)
