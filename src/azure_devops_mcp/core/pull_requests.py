"""
Pull Request Changes

Retrieves the files changed in the latest iteration of a pull request, the
policy evaluations attached to it, and optionally bounded diffs of every
file.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    result = await get_pull_request_changes(client, "Fabrikam", "web", 42)

Expected output:
    {'pull_request_id': 42, 'iteration_id': 3, 'source_ref_name': 'refs/heads/feature',
     'target_ref_name': 'refs/heads/main', 'files': [...], 'evaluations': [...]}
"""

import asyncio
from typing import Any, Dict

from loguru import logger

from azure_devops_mcp.core.budget import PatchBudgetTracker
from azure_devops_mcp.core.changes import (
    ChangeEnumerator,
    blob_fetcher,
    change_record_from_api,
    summarize_budget,
)
from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget
from azure_devops_mcp.core.errors import AzureDevOpsNotFoundError, AzureDevOpsValidationError


def pull_request_artifact_id(project: str, pull_request_id: int) -> str:
    """Artifact id under which policies evaluate a pull request."""
    return f"vstfs:///CodeReview/CodeReviewId/{project}/{pull_request_id}"


async def get_pull_request_changes(
    client: Any,
    project: str,
    repository: str,
    pull_request_id: int,
    include_diffs: bool = False,
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> Dict[str, Any]:
    """
    Get the changed files and policy evaluations of a pull request.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        project: Project ID or name
        repository: Repository ID or name
        pull_request_id: Pull request number
        include_diffs: Whether to attach unified diffs
        budget: Size limits

    Returns:
        Dict[str, Any]: Files, raw iteration change entries, evaluations, ref names and truncation fields

    Raises:
        AzureDevOpsNotFoundError: If the pull request has no iterations
    """
    if pull_request_id < 1:
        raise AzureDevOpsValidationError(f"Invalid pull request id: {pull_request_id}")

    logger.info(f"Getting changes of pull request {pull_request_id} in {project}/{repository}")
    pull_request, iterations = await asyncio.gather(
        client.get_pull_request(project, repository, pull_request_id),
        client.get_pull_request_iterations(project, repository, pull_request_id),
    )
    if not iterations:
        raise AzureDevOpsNotFoundError(f"No iterations found for pull request {pull_request_id}")

    iteration_id = iterations[-1].get("id")
    raw_changes, evaluations = await asyncio.gather(
        client.get_pull_request_iteration_changes(project, repository, pull_request_id, iteration_id),
        client.get_policy_evaluations(project, pull_request_artifact_id(project, pull_request_id)),
    )

    records = [change_record_from_api(raw) for raw in raw_changes]
    tracker = PatchBudgetTracker.from_budget(budget)
    enumerator = ChangeEnumerator(blob_fetcher(client, project, repository), budget)
    entries = await enumerator.enumerate(records, include_diffs, tracker)

    return {
        "pull_request_id": pull_request_id,
        "iteration_id": iteration_id,
        "source_ref_name": pull_request.get("sourceRefName"),
        "target_ref_name": pull_request.get("targetRefName"),
        "files": [entry.model_dump(exclude_none=True) for entry in entries],
        "changes": raw_changes,
        "evaluations": evaluations,
        **summarize_budget(tracker),
    }
