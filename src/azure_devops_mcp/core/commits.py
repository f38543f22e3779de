"""
Commit Listing

Lists the commits on a branch together with the files each commit changed,
optionally with bounded unified diffs. One patch budget spans the whole
response, so the total size of all diffs across all commits stays bounded.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    result = await list_commits(client, "Fabrikam", "web", "main", top=2, include_diffs=True)

Expected output:
    {'commits': [{'commit_id': '9b1f...', 'comment': 'Fix login', 'files': [...]}, ...],
     'truncation_note': '1 patch(es) truncated (exceeded 10000 chars)', ...}
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from azure_devops_mcp.core.budget import PatchBudgetTracker
from azure_devops_mcp.core.changes import (
    ChangeEnumerator,
    blob_fetcher,
    change_record_from_api,
    summarize_budget,
)
from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget
from azure_devops_mcp.core.errors import AzureDevOpsValidationError


async def list_commits(
    client: Any,
    project: str,
    repository: str,
    branch: str,
    top: int = 10,
    skip: Optional[int] = None,
    include_diffs: bool = False,
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> Dict[str, Any]:
    """
    List commits on a branch with the files they changed.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        project: Project ID or name
        repository: Repository ID or name
        branch: Branch name
        top: Maximum number of commits
        skip: Number of commits to skip
        include_diffs: Whether to attach unified diffs to every file
        budget: Size limits

    Returns:
        Dict[str, Any]: Commits in service order plus aggregate truncation fields
    """
    if not branch:
        raise AzureDevOpsValidationError("Branch name is required")
    if top < 1:
        raise AzureDevOpsValidationError(f"top must be at least 1, got {top}")

    logger.info(f"Listing up to {top} commit(s) on {branch} in {project}/{repository}")
    commits = await client.get_commits(project, repository, branch, top, skip)

    tracker = PatchBudgetTracker.from_budget(budget)
    enumerator = ChangeEnumerator(blob_fetcher(client, project, repository), budget)

    results: List[Dict[str, Any]] = []
    for commit in commits:
        commit_id = commit.get("commitId")
        if not commit_id:
            continue

        raw_changes = await client.get_commit_changes(project, repository, commit_id)
        records = [change_record_from_api(raw) for raw in raw_changes]
        entries = await enumerator.enumerate(records, include_diffs, tracker)

        results.append({
            "commit_id": commit_id,
            "comment": commit.get("comment"),
            "author": commit.get("author"),
            "committer": commit.get("committer"),
            "url": commit.get("url"),
            "parents": commit.get("parents"),
            "files": [entry.model_dump(exclude_none=True) for entry in entries],
        })

    logger.debug(f"Listed {len(results)} commit(s), {tracker.bytes_used} patch chars used")
    return {"commits": results, **summarize_budget(tracker)}
