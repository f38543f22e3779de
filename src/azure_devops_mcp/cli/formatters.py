"""
Formatters for Azure DevOps CLI

This module provides rich formatting utilities for the CLI presentation layer:
panels for file content and diffs, and tables for change lists, commits,
search hits and repositories.

This module is part of the Presentation Layer and should only depend on
Core Layer components, not on Integration Layer.

Sample input:
- Content response dictionary
- Change list or commit listing dictionaries
- Error messages

Expected output:
- Rich formatted tables and panels
"""

import json
import os
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

# Initialize console
console = Console()


# Color scheme
COLORS = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "blue",
    "path": "cyan",
    "highlight": "magenta",
    "dim": "grey70",
}

CHANGE_TYPE_STYLES = {
    "add": "green",
    "edit": "yellow",
    "delete": "red",
    "rename": "magenta",
}


def guess_lexer(path: str) -> str:
    """Pick a syntax highlighter from a file extension."""
    extension = os.path.splitext(path)[1].lstrip(".")
    return extension or "text"


def print_error(message: str, title: str = "Error") -> None:
    """
    Format and print error message to the console.

    Args:
        message: Error message
        title: Panel title
    """
    console.print(Panel(
        Text(message, style=COLORS["error"]),
        title=f"[bold {COLORS['error']}]{title}",
        border_style=COLORS["error"],
        padding=(1, 2),
    ))


def print_warning(message: str, title: str = "Warning") -> None:
    console.print(Panel(
        Text(message, style=COLORS["warning"]),
        title=f"[bold {COLORS['warning']}]{title}",
        border_style=COLORS["warning"],
        padding=(1, 2),
    ))


def print_info(message: str, title: str = "Info") -> None:
    console.print(Panel(
        Text(message, style=COLORS["info"]),
        title=f"[bold {COLORS['info']}]{title}",
        border_style=COLORS["info"],
        padding=(1, 2),
    ))


def print_json(data: Any, title: str = "JSON Output") -> None:
    """
    Format and print JSON data to the console.

    Args:
        data: JSON-serializable data
        title: Panel title
    """
    syntax = Syntax(json.dumps(data, indent=2, default=str), "json", theme="monokai", line_numbers=True)
    console.print(Panel(
        syntax,
        title=f"[bold {COLORS['info']}]{title}",
        border_style=COLORS["info"],
        padding=(1, 2),
    ))


def print_content_result(path: str, result: Dict[str, Any]) -> None:
    """
    Print a file's content with line numbers, or a directory listing.

    Args:
        path: Requested path
        result: Content response dictionary
    """
    if result.get("is_directory"):
        items = json.loads(result.get("content") or "[]")
        table = Table(title=f"Directory: {path}")
        table.add_column("Path", style=COLORS["path"])
        table.add_column("Type", style=COLORS["dim"])
        table.add_column("Object Id", style=COLORS["dim"])
        for item in items:
            table.add_row(
                item.get("path", ""),
                "folder" if item.get("isFolder") else item.get("gitObjectType", "blob"),
                item.get("objectId", ""),
            )
        console.print(table)
        return

    syntax = Syntax(
        result.get("content", ""),
        guess_lexer(path),
        line_numbers=True,
        start_line=result.get("start_line") or 1,
        word_wrap=False,
    )
    subtitle = f"lines {result.get('start_line')}-{result.get('end_line')} of {result.get('total_lines')}"
    console.print(Panel(
        syntax,
        title=f"[bold {COLORS['path']}]{path}",
        subtitle=subtitle,
        border_style=COLORS["info"],
    ))
    if result.get("truncated"):
        print_warning(result.get("truncation_note", ""), title="Truncated")


def build_changes_table(files: List[Dict[str, Any]], title: str = "Changed Files") -> Table:
    """
    Build a table of file changes.

    Args:
        files: File change entries
        title: Table title

    Returns:
        Table: Rich table with one row per file
    """
    table = Table(title=title)
    table.add_column("#", justify="right", style=COLORS["dim"])
    table.add_column("Change", style=COLORS["highlight"])
    table.add_column("Path", style=COLORS["path"])
    table.add_column("Patch", justify="right", style=COLORS["info"])

    for index, entry in enumerate(files, start=1):
        change_type = entry.get("change_type", "unknown")
        patch = entry.get("patch")
        if patch is None:
            patch_info = "-"
        else:
            patch_info = f"{len(patch)} chars"
            if entry.get("truncated"):
                patch_info += " (truncated)"
        table.add_row(
            str(index),
            Text(change_type, style=CHANGE_TYPE_STYLES.get(change_type, COLORS["dim"])),
            entry.get("path", ""),
            patch_info,
        )
    return table


def print_changes(files: List[Dict[str, Any]], title: str = "Changed Files", show_patches: bool = False) -> None:
    """Print a change table and, optionally, every patch."""
    console.print(build_changes_table(files, title))
    if not show_patches:
        return
    for entry in files:
        if entry.get("patch"):
            console.print(Panel(
                Syntax(entry["patch"], "diff", word_wrap=False),
                title=f"[bold {COLORS['path']}]{entry.get('path', '')}",
                border_style=COLORS["dim"],
            ))


def print_truncation_note(result: Dict[str, Any]) -> None:
    note = result.get("truncation_note")
    if note:
        print_warning(note, title="Truncated")


def print_commits(result: Dict[str, Any], show_patches: bool = False) -> None:
    """
    Print a commit listing.

    Args:
        result: Commit listing dictionary
        show_patches: Whether to print every patch
    """
    for commit in result.get("commits", []):
        author = (commit.get("author") or {}).get("name", "unknown")
        comment = (commit.get("comment") or "").strip().splitlines()
        header = Text()
        header.append(commit["commit_id"][:10], style=COLORS["highlight"])
        header.append(f"  {author}  ", style=COLORS["dim"])
        header.append(comment[0] if comment else "")
        console.print(header)
        print_changes(commit.get("files", []), title="", show_patches=show_patches)
    print_truncation_note(result)


def print_pull_request_changes(result: Dict[str, Any], show_patches: bool = False) -> None:
    title = (
        f"PR {result.get('pull_request_id')} iteration {result.get('iteration_id')}: "
        f"{result.get('source_ref_name')} -> {result.get('target_ref_name')}"
    )
    print_changes(result.get("files", []), title=title, show_patches=show_patches)

    evaluations = result.get("evaluations") or []
    if evaluations:
        table = Table(title="Policy Evaluations")
        table.add_column("Policy", style=COLORS["path"])
        table.add_column("Status", style=COLORS["highlight"])
        for evaluation in evaluations:
            policy_type = ((evaluation.get("configuration") or {}).get("type") or {}).get("displayName", "")
            table.add_row(policy_type, str(evaluation.get("status", "")))
        console.print(table)
    print_truncation_note(result)


def print_search_results(result: Dict[str, Any], show_content: bool = False) -> None:
    """
    Print code search hits with pagination information.

    Args:
        result: Search response dictionary
        show_content: Whether to print the enriched file content
    """
    table = Table(
        title=f"Code Search: {result.get('count', 0)} result(s), "
        f"page {result.get('current_page', 0) + 1} of {max(result.get('total_pages', 0), 1)}"
    )
    table.add_column("Repository", style=COLORS["highlight"])
    table.add_column("Path", style=COLORS["path"])
    for hit in result.get("results", []):
        table.add_row((hit.get("repository") or {}).get("name", ""), hit.get("path", ""))
    console.print(table)

    if show_content:
        for hit in result.get("results", []):
            if "content" in hit:
                console.print(Panel(
                    Syntax(hit["content"], guess_lexer(hit.get("path", "")), line_numbers=True),
                    title=f"[bold {COLORS['path']}]{hit.get('path', '')}",
                    border_style=COLORS["dim"],
                ))
    if result.get("has_more"):
        print_info(f"More results available: request page {result.get('current_page', 0) + 1}")


def print_repositories(repositories: List[Dict[str, Any]], project: Optional[str] = None) -> None:
    table = Table(title=f"Repositories in {project}" if project else "Repositories")
    table.add_column("Name", style=COLORS["highlight"])
    table.add_column("Default Branch", style=COLORS["path"])
    table.add_column("Size", justify="right", style=COLORS["info"])
    table.add_column("Id", style=COLORS["dim"])
    for repository in repositories:
        table.add_row(
            repository.get("name", ""),
            repository.get("defaultBranch", ""),
            str(repository.get("size", "")),
            repository.get("id", ""),
        )
    console.print(table)


def print_link_result(result: Dict[str, Any]) -> None:
    verb = "Linked" if result.get("operation") == "add" else "Unlinked"
    content = Text()
    content.append("Work item: ", style=COLORS["dim"])
    content.append(f"{result.get('work_item_id')}\n", style=COLORS["highlight"])
    content.append("Artifact: ", style=COLORS["dim"])
    content.append(result.get("artifact_url", ""), style=COLORS["path"])
    console.print(Panel(
        content,
        title=f"[bold green]{verb} successfully",
        border_style=COLORS["success"],
        padding=(1, 2),
    ))
