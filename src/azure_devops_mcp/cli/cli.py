#!/usr/bin/env python3
"""
Command Line Interface for Azure DevOps MCP Tools

This module provides a CLI for the Azure DevOps tools using Typer and Rich,
allowing users to read files, inspect commits and pull requests, search code
and link artifacts to work items with the same size limits the MCP tools
apply.

This module is part of the Presentation Layer and should only depend on
Core Layer components, not on Integration Layer.

Sample input:
- CLI commands with options, e.g.
  azure-devops-tools content Fabrikam web /src/app.py --start-line 200

Expected output:
- Formatted console output of operation results
- Structured JSON output for machine consumption (--json)
"""

import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional

import typer
from loguru import logger

from azure_devops_mcp.core.artifact_links import (
    LinkOperation,
    link_branch_to_work_item,
    link_commit_to_work_item,
)
from azure_devops_mcp.core.changes import list_changes_with_diffs
from azure_devops_mcp.core.client import AzureDevOpsClient
from azure_devops_mcp.core.commits import list_commits
from azure_devops_mcp.core.content import get_content
from azure_devops_mcp.core.errors import AzureDevOpsError
from azure_devops_mcp.core.models import ContentRequest, VersionType
from azure_devops_mcp.core.pull_requests import get_pull_request_changes
from azure_devops_mcp.core.repositories import list_repositories
from azure_devops_mcp.core.search import search_code
from azure_devops_mcp.cli.formatters import (
    print_changes,
    print_commits,
    print_content_result,
    print_error,
    print_json,
    print_link_result,
    print_pull_request_changes,
    print_repositories,
    print_search_results,
    print_truncation_note,
)
from azure_devops_mcp.cli.schemas import format_cli_response


app = typer.Typer(
    help="Azure DevOps tools with bounded output",
    rich_markup_mode="rich",
    add_completion=False,
)


def validate_positive_option(ctx: typer.Context, value: Optional[int]) -> Optional[int]:
    """Typer callback rejecting zero and negative numbers."""
    if value is not None and value < 1:
        raise typer.BadParameter(f"must be at least 1, got {value}")
    return value


def parse_filters(values: Optional[List[str]]) -> Optional[Dict[str, List[str]]]:
    """
    Parse repeated --filter Name=value options into search filters.

    Args:
        values: Raw option values, e.g. ["Repository=web", "Path=/src"]

    Returns:
        Optional[Dict[str, List[str]]]: Filters grouped by name
    """
    if not values:
        return None
    filters: Dict[str, List[str]] = {}
    for value in values:
        name, sep, item = value.partition("=")
        if not sep or not name or not item:
            raise typer.BadParameter(f"expected Name=value, got '{value}'")
        filters.setdefault(name.strip(), []).append(item.strip())
    return filters


def run_command(
    ctx: typer.Context,
    name: str,
    operation: Callable[[AzureDevOpsClient], Awaitable[Any]],
    render: Callable[[Any], None],
) -> None:
    """
    Run a core operation and print its result or error.

    Args:
        ctx: Typer context holding the --json flag
        name: Command name used in log messages
        operation: Coroutine factory taking a client
        render: Rich renderer for the successful result
    """
    json_output = ctx.obj.get("json_output", False)
    try:
        client = AzureDevOpsClient.from_config()
        result = asyncio.run(operation(client))
    except AzureDevOpsError as e:
        logger.error(f"{name} command failed: {e.message}")
        if json_output:
            print_json(format_cli_response(False, error=e.message, category=e.category.value, details=e.details))
        else:
            print_error(e.message, title=f"{name} failed ({e.category.value})")
        sys.exit(1)

    if json_output:
        print_json(format_cli_response(True, data=result))
    else:
        render(result)


@app.callback()
def main(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
):
    """
    Azure DevOps tools - read repositories, commits, pull requests and search results

    Connection settings come from AZURE_DEVOPS_ORG_URL and AZURE_DEVOPS_PAT.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json_output


@app.command("content")
def content_command(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project ID or name"),
    repository: str = typer.Argument(..., help="Repository ID or name"),
    path: str = typer.Argument("/", help="File or directory path"),
    version: Optional[str] = typer.Option(None, "--version", "-v", help="Branch, commit or tag"),
    version_type: VersionType = typer.Option(VersionType.BRANCH, "--version-type", help="Kind of --version"),
    start_line: Optional[int] = typer.Option(
        None, "--start-line", "-s", help="First line (1-based)", callback=validate_positive_option
    ),
    end_line: Optional[int] = typer.Option(
        None, "--end-line", "-e", help="Last line (inclusive)", callback=validate_positive_option
    ),
):
    """
    Show a file page by page, or list a directory.
    """
    request = ContentRequest(
        project=project,
        repository=repository,
        path=path,
        version=version,
        version_type=version_type,
        start_line=start_line,
        end_line=end_line,
    )

    async def operation(client: AzureDevOpsClient) -> Dict[str, Any]:
        return (await get_content(client, request)).to_response()

    run_command(ctx, "content", operation, lambda result: print_content_result(path, result))


@app.command("changes")
def changes_command(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project ID or name"),
    repository: str = typer.Argument(..., help="Repository ID or name"),
    commit_id: str = typer.Argument(..., help="Commit SHA"),
    diffs: bool = typer.Option(False, "--diffs", "-d", help="Include unified diffs"),
):
    """
    List the files changed by a commit.
    """
    async def operation(client: AzureDevOpsClient) -> Dict[str, Any]:
        return (await list_changes_with_diffs(client, project, repository, commit_id, diffs)).to_response()

    def render(result: Dict[str, Any]) -> None:
        print_changes(result["entries"], title=f"Commit {commit_id[:10]}", show_patches=diffs)
        print_truncation_note(result)

    run_command(ctx, "changes", operation, render)


@app.command("commits")
def commits_command(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project ID or name"),
    repository: str = typer.Argument(..., help="Repository ID or name"),
    branch: str = typer.Argument(..., help="Branch name"),
    top: int = typer.Option(10, "--top", "-n", help="Number of commits", callback=validate_positive_option),
    skip: Optional[int] = typer.Option(None, "--skip", help="Commits to skip"),
    diffs: bool = typer.Option(False, "--diffs", "-d", help="Include unified diffs"),
):
    """
    List recent commits on a branch with their changed files.
    """
    async def operation(client: AzureDevOpsClient) -> Dict[str, Any]:
        return await list_commits(client, project, repository, branch, top, skip, diffs)

    run_command(ctx, "commits", operation, lambda result: print_commits(result, show_patches=diffs))


@app.command("pr-changes")
def pull_request_changes_command(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project ID or name"),
    repository: str = typer.Argument(..., help="Repository ID or name"),
    pull_request_id: int = typer.Argument(..., help="Pull request number"),
    diffs: bool = typer.Option(False, "--diffs", "-d", help="Include unified diffs"),
):
    """
    Show the changed files and policy evaluations of a pull request.
    """
    async def operation(client: AzureDevOpsClient) -> Dict[str, Any]:
        return await get_pull_request_changes(client, project, repository, pull_request_id, diffs)

    run_command(
        ctx, "pr-changes", operation, lambda result: print_pull_request_changes(result, show_patches=diffs)
    )


@app.command("search")
def search_command(
    ctx: typer.Context,
    search_text: str = typer.Argument(..., help="Text to search for"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name"),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f", help="Filter as Name=value, repeatable"),
    page: int = typer.Option(0, "--page", help="Zero-based page number"),
    snippet: bool = typer.Option(False, "--snippet", help="Include code snippets"),
    content: bool = typer.Option(False, "--content", "-c", help="Include file content"),
):
    """
    Search code across the repositories of a project.
    """
    parsed_filters = parse_filters(filters)

    async def operation(client: AzureDevOpsClient) -> Dict[str, Any]:
        return await search_code(client, search_text, project, parsed_filters, page, snippet, content)

    run_command(ctx, "search", operation, lambda result: print_search_results(result, show_content=content))


@app.command("repos")
def repositories_command(
    ctx: typer.Context,
    project: str = typer.Argument(..., help="Project ID or name"),
    links: bool = typer.Option(False, "--links", help="Include reference links"),
):
    """
    List the enabled repositories of a project.
    """
    async def operation(client: AzureDevOpsClient) -> List[Dict[str, Any]]:
        return await list_repositories(client, project, links)

    run_command(ctx, "repos", operation, lambda result: print_repositories(result, project))


@app.command("link-commit")
def link_commit_command(
    ctx: typer.Context,
    work_item_id: int = typer.Argument(..., help="Work item number"),
    project: str = typer.Argument(..., help="Project ID or name"),
    repository: str = typer.Argument(..., help="Repository ID or name"),
    commit_sha: str = typer.Argument(..., help="Full commit SHA"),
    operation: LinkOperation = typer.Option(LinkOperation.ADD, "--operation", "-o", help="add or remove"),
    comment: Optional[str] = typer.Option(None, "--comment", help="Link comment"),
):
    """
    Link a commit to a work item, or remove the link.
    """
    async def run(client: AzureDevOpsClient) -> Dict[str, Any]:
        return await link_commit_to_work_item(
            client, work_item_id, project, repository, commit_sha, operation, comment
        )

    run_command(ctx, "link-commit", run, print_link_result)


@app.command("link-branch")
def link_branch_command(
    ctx: typer.Context,
    work_item_id: int = typer.Argument(..., help="Work item number"),
    project: str = typer.Argument(..., help="Project ID or name"),
    repository: str = typer.Argument(..., help="Repository ID or name"),
    branch: str = typer.Argument(..., help="Branch name without refs/heads/"),
    operation: LinkOperation = typer.Option(LinkOperation.ADD, "--operation", "-o", help="add or remove"),
    comment: Optional[str] = typer.Option(None, "--comment", help="Link comment"),
):
    """
    Link a branch to a work item, or remove the link.
    """
    async def run(client: AzureDevOpsClient) -> Dict[str, Any]:
        return await link_branch_to_work_item(
            client, work_item_id, project, repository, branch, operation, comment
        )

    run_command(ctx, "link-branch", run, print_link_result)


if __name__ == "__main__":
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level}: {message}</level>",
        level="WARNING",
        colorize=True,
    )
    app()
