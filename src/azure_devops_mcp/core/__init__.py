"""
Core Layer for Azure DevOps MCP Tools

This package contains the business logic for reading repositories, commits,
pull requests and search results from Azure DevOps while keeping every text
artifact inside a fixed size budget.

The core layer is designed to be:
1. Independent of UI or integration concerns
2. Testable in isolation against fake clients
3. Focused on business logic only

Usage:
    from azure_devops_mcp.core import AzureDevOpsClient, ContentRequest, get_content
    client = AzureDevOpsClient.from_config()
    response = await get_content(client, ContentRequest(project="Fabrikam", repository="web", path="/README.md"))
"""

# Configuration
from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget

# Errors
from azure_devops_mcp.core.errors import (
    AzureDevOpsAuthenticationError,
    AzureDevOpsError,
    AzureDevOpsNotFoundError,
    AzureDevOpsPermissionError,
    AzureDevOpsValidationError,
    ErrorCategory,
    TransientFetchError,
)

# Models
from azure_devops_mcp.core.models import (
    ChangeListResult,
    ChangeType,
    ContentRequest,
    ContentResponse,
    FileChangeEntry,
    VersionType,
)

# Transport
from azure_devops_mcp.core.client import AzureDevOpsClient

# Truncation engine
from azure_devops_mcp.core.truncation import (
    compute_window,
    truncate_file_content,
    truncate_long_lines,
    truncate_patch,
    truncate_total_size,
)
from azure_devops_mcp.core.budget import PatchBudgetTracker
from azure_devops_mcp.core.changes import ChangeEnumerator, list_changes_with_diffs, map_change_type

# Operations
from azure_devops_mcp.core.content import get_content
from azure_devops_mcp.core.commits import list_commits
from azure_devops_mcp.core.pull_requests import get_pull_request_changes
from azure_devops_mcp.core.search import search_code
from azure_devops_mcp.core.repositories import list_repositories
from azure_devops_mcp.core.artifact_links import (
    LinkOperation,
    link_branch_to_work_item,
    link_commit_to_work_item,
)

__all__ = [
    # Configuration
    'DEFAULT_BUDGET',
    'TruncationBudget',

    # Errors
    'AzureDevOpsError',
    'AzureDevOpsNotFoundError',
    'AzureDevOpsValidationError',
    'AzureDevOpsAuthenticationError',
    'AzureDevOpsPermissionError',
    'TransientFetchError',
    'ErrorCategory',

    # Models
    'ContentRequest',
    'ContentResponse',
    'ChangeListResult',
    'FileChangeEntry',
    'ChangeType',
    'VersionType',

    # Transport
    'AzureDevOpsClient',

    # Truncation engine
    'compute_window',
    'truncate_long_lines',
    'truncate_total_size',
    'truncate_file_content',
    'truncate_patch',
    'PatchBudgetTracker',
    'ChangeEnumerator',
    'map_change_type',

    # Operations
    'get_content',
    'list_changes_with_diffs',
    'list_commits',
    'get_pull_request_changes',
    'search_code',
    'list_repositories',
    'LinkOperation',
    'link_commit_to_work_item',
    'link_branch_to_work_item',
]
