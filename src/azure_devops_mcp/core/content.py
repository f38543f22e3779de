"""
File and Directory Content Retrieval

Reads a path from a Git repository at an optional version. Directories come
back as a JSON listing of their items. Files are paginated by line window
and bounded by the truncation engine:

1. The window is resolved against the file's total line count
2. Lines in the window longer than the line budget are shortened
3. Trailing lines are dropped once the character budget is spent

Each kind of truncation is reported in its own field, and a single composed
note is present only when something was actually cut.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    request = ContentRequest(project="Fabrikam", repository="web", path="/big.log")
    response = await get_content(client, request)

Expected output:
    {'content': '...', 'is_directory': False, 'total_lines': 1500, 'start_line': 1,
     'end_line': 1000, 'truncated': True, 'next_start_line': 1001,
     'truncation_note': 'showing lines 1-1000 of 1500; request startLine=1001 to continue', ...}
"""

import json
from typing import Any, Dict, List

from loguru import logger

from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget
from azure_devops_mcp.core.errors import AzureDevOpsError, AzureDevOpsNotFoundError
from azure_devops_mcp.core.models import ContentRequest, ContentResponse
from azure_devops_mcp.core.truncation import (
    CONTENT_TRUNCATION_MARKER,
    compute_window,
    line_truncation_note,
    pagination_note,
    render_lines,
    size_truncation_note,
    split_lines,
    truncate_long_lines,
    truncate_total_size,
)


def is_directory_listing(path: str, items: List[Dict[str, Any]]) -> bool:
    """
    Decide whether an items lookup describes a directory.

    Args:
        path: Requested path
        items: Items returned by a one-level lookup of the path

    Returns:
        bool: True for directories
    """
    if items and items[0].get("isFolder"):
        return True
    return len(items) > 1 or (path != "/" and path.endswith("/"))


def paginate_content(
    text: str,
    request: ContentRequest,
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> ContentResponse:
    """
    Apply the line window and both truncators to a file's text.

    Args:
        text: Full file text
        request: Content request carrying the optional line window
        budget: Size limits

    Returns:
        ContentResponse: Bounded file content with truncation metadata
    """
    lines = split_lines(text)
    total_lines = len(lines)
    window = compute_window(total_lines, request.start_line, request.end_line, budget.max_lines_per_page)

    selected = [] if window.is_empty else lines[window.start - 1:window.end]
    by_line = truncate_long_lines(selected, budget.max_line_length)
    by_size = truncate_total_size(by_line.lines, budget.max_total_chars, window.start)

    end_line = by_size.end_line if by_size.truncated else window.end
    content = render_lines(by_size.lines, CONTENT_TRUNCATION_MARKER if by_size.truncated else None)
    has_more = not window.is_empty and end_line < total_lines

    notes = []
    if by_line.truncated_count:
        notes.append(line_truncation_note(by_line.truncated_count, budget.max_line_length))
    if by_size.truncated:
        notes.append(size_truncation_note(budget.max_total_chars, end_line))
    if has_more:
        notes.append(pagination_note(window.start, end_line, total_lines))

    truncated = bool(notes)
    return ContentResponse(
        content=content,
        is_directory=False,
        total_lines=total_lines,
        start_line=window.start,
        end_line=end_line,
        truncated=truncated,
        truncation_note="; ".join(notes) if truncated else None,
        truncated_line_count=by_line.truncated_count if by_line.truncated_count else None,
        size_truncated=True if by_size.truncated else None,
        next_start_line=end_line + 1 if has_more else None,
    )


async def get_content(
    client: Any,
    request: ContentRequest,
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> ContentResponse:
    """
    Get the content of a file or directory.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        request: What to read and which lines to return
        budget: Size limits

    Returns:
        ContentResponse: Directory listing or bounded file content

    Raises:
        AzureDevOpsNotFoundError: If the path does not exist
        AzureDevOpsValidationError: If the line window is invalid
    """
    logger.info(
        f"Getting content of {request.path} in {request.project}/{request.repository}"
        f" at {request.version or 'default branch'}"
    )

    items: List[Dict[str, Any]] = []
    try:
        items = await client.get_items(
            request.project, request.repository, request.path, request.version, request.version_type
        )
        directory = is_directory_listing(request.path, items)
    except AzureDevOpsError as e:
        logger.debug(f"Item lookup failed for {request.path}, reading it as a file: {e}")
        directory = False

    if directory:
        logger.debug(f"{request.path} is a directory with {len(items)} item(s)")
        return ContentResponse(content=json.dumps(items, indent=2), is_directory=True)

    try:
        text = await client.get_item_text(
            request.project, request.repository, request.path, request.version, request.version_type
        )
    except AzureDevOpsNotFoundError as e:
        raise AzureDevOpsNotFoundError(
            f"Path '{request.path}' not found in repository '{request.repository}'"
            f" of project '{request.project}'",
            e.details,
        ) from e
    response = paginate_content(text, request, budget)
    if response.truncated:
        logger.debug(f"{request.path}: {response.truncation_note}")
    return response
