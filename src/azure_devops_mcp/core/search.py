"""
Code Search

Runs a code search against the Azure DevOps search service and, when asked,
enriches every hit with the file's content at the indexed commit. Enrichment
fetches run concurrently behind a semaphore and each file is bounded with
the truncation engine.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to third-party package documentation:
- Code Search REST API: https://learn.microsoft.com/rest/api/azure/devops/search/code-search-results

Sample input:
    result = await search_code(client, "TODO", project="Fabrikam", include_content=True)

Expected output:
    {'count': 3, 'results': [{'fileName': 'app.py', 'path': '/src/app.py',
     'content': '...'}, ...], 'current_page': 0, 'total_pages': 1,
     'page_size': 25, 'has_more': False}
"""

import asyncio
import math
from typing import Any, Dict, List, Optional

from loguru import logger

from azure_devops_mcp.core import config
from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget
from azure_devops_mcp.core.errors import (
    AzureDevOpsAuthenticationError,
    AzureDevOpsError,
    AzureDevOpsNotFoundError,
    AzureDevOpsPermissionError,
    AzureDevOpsValidationError,
)
from azure_devops_mcp.core.models import VersionType
from azure_devops_mcp.core.truncation import truncate_file_content

_SEARCH_ERROR_MESSAGES = {
    AzureDevOpsNotFoundError: "Repository or project not found",
    AzureDevOpsValidationError: "Invalid search parameters",
    AzureDevOpsAuthenticationError: "Authentication failed",
    AzureDevOpsPermissionError: "Permission denied to access repository",
}


def build_search_request(
    search_text: str,
    project: str,
    filters: Optional[Dict[str, List[str]]],
    page: int,
    include_snippet: bool,
    include_content: bool,
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> Dict[str, Any]:
    """Request body of a code search page; scoped to the project."""
    top = config.CODE_SEARCH_PAGE_SIZE
    if include_content:
        top = min(top, budget.max_search_enrichment)
    return {
        "searchText": search_text,
        "$skip": page * config.CODE_SEARCH_PAGE_SIZE,
        "$top": top,
        "filters": {"Project": [project], **(filters or {})},
        "includeFacets": True,
        "includeSnippet": include_snippet,
    }


async def enrich_results_with_content(
    client: Any,
    results: List[Dict[str, Any]],
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> None:
    """
    Attach bounded file content to every search result in place.

    A result whose content cannot be fetched is left without content.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        results: Search results as returned by the service
        budget: Size limits and enrichment concurrency
    """
    semaphore = asyncio.Semaphore(budget.max_search_enrichment)

    async def enrich(result: Dict[str, Any]) -> None:
        path = result.get("path", "")
        versions = result.get("versions") or [{}]
        try:
            async with semaphore:
                text = await client.get_item_text(
                    (result.get("project") or {}).get("name"),
                    (result.get("repository") or {}).get("id"),
                    path,
                    versions[0].get("changeId"),
                    VersionType.COMMIT,
                )
        except AzureDevOpsError as e:
            logger.warning(f"Failed to fetch content for {path}: {e}")
            return
        result["content"] = truncate_file_content(text, budget).content

    await asyncio.gather(*(enrich(result) for result in results))


async def search_code(
    client: Any,
    search_text: str,
    project: Optional[str] = None,
    filters: Optional[Dict[str, List[str]]] = None,
    page: int = 0,
    include_snippet: bool = False,
    include_content: bool = False,
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> Dict[str, Any]:
    """
    Search code in the repositories of a project.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        search_text: Text to search for
        project: Project name; defaults to AZURE_DEVOPS_DEFAULT_PROJECT
        filters: Extra search filters, e.g. {"Repository": ["web"]}
        page: Zero-based page number; negative values are treated as 0
        include_snippet: Whether to return code snippets
        include_content: Whether to attach each file's bounded content
        budget: Size limits

    Returns:
        Dict[str, Any]: Search response with pagination metadata

    Raises:
        AzureDevOpsValidationError: If no project is given or configured
    """
    if not search_text:
        raise AzureDevOpsValidationError("Search text is required")
    page = max(0, page or 0)
    project = project or config.AZURE_DEVOPS_DEFAULT_PROJECT
    if not project:
        raise AzureDevOpsValidationError(
            "Project ID is required. Either provide a project or set the "
            "AZURE_DEVOPS_DEFAULT_PROJECT environment variable."
        )

    request_body = build_search_request(
        search_text, project, filters, page, include_snippet, include_content, budget
    )
    logger.info(f"Searching code in {project} for '{search_text}' (page {page})")
    try:
        response = await client.search_code(project, request_body)
    except AzureDevOpsError as e:
        message = _SEARCH_ERROR_MESSAGES.get(type(e))
        if message is None:
            raise
        raise type(e)(message, e.details) from e

    results = response.get("results") or []
    if include_content and results:
        await enrich_results_with_content(client, results, budget)

    count = response.get("count", 0)
    total_pages = math.ceil(count / config.CODE_SEARCH_PAGE_SIZE)
    return {
        **response,
        "results": results,
        "current_page": page,
        "total_pages": total_pages,
        "page_size": config.CODE_SEARCH_PAGE_SIZE,
        "has_more": page < total_pages - 1,
    }
