"""
Work Item Artifact Links

Adds or removes links between work items and Git artifacts (commits and
branches). Links are ArtifactLink relations whose URL is a vstfs:/// artifact
URI, written with a JSON Patch document against the work item.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to third-party package documentation:
- Work Items Update: https://learn.microsoft.com/rest/api/azure/devops/wit/work-items/update

Sample input:
    await link_commit_to_work_item(client, 101, "Fabrikam", "web", "9b1f...", LinkOperation.ADD)

Expected output:
    {'success': True, 'work_item_id': 101, 'operation': 'add',
     'artifact_url': 'vstfs:///Git/Commit/Fabrikam/web/9b1f...', 'work_item': {...}}
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from loguru import logger

from azure_devops_mcp.core.errors import AzureDevOpsNotFoundError, AzureDevOpsValidationError

ARTIFACT_LINK_RELATION = "ArtifactLink"
COMMIT_LINK_NAME = "Fixed in Commit"
BRANCH_LINK_NAME = "Branch"


class LinkOperation(str, Enum):
    ADD = "add"
    REMOVE = "remove"


def commit_artifact_url(project: str, repository: str, commit_sha: str) -> str:
    return f"vstfs:///Git/Commit/{project}/{repository}/{commit_sha}"


def branch_artifact_url(project: str, repository: str, branch: str) -> str:
    """Ref artifact URL; the ref name's slashes are double encoded."""
    encoded_ref = quote(f"refs/heads/{branch}", safe="!~*'()").replace("%2F", "%252F")
    return f"vstfs:///Git/Ref/{project}/{repository}/{encoded_ref}"


def _require(**values: Any) -> None:
    for name, value in values.items():
        if not value:
            label = name.replace("_", " ").capitalize()
            raise AzureDevOpsValidationError(f"{label} is required")


async def _update_artifact_link(
    client: Any,
    work_item_id: int,
    project: str,
    artifact_url: str,
    link_name: str,
    operation: LinkOperation,
    comment: Optional[str],
) -> Dict[str, Any]:
    try:
        operation = LinkOperation(operation)
    except ValueError:
        raise AzureDevOpsValidationError(f"Invalid operation '{operation}', expected add or remove")

    if operation == LinkOperation.ADD:
        attributes = {"name": link_name}
        if comment:
            attributes["comment"] = comment
        document: List[Dict[str, Any]] = [{
            "op": "add",
            "path": "/relations/-",
            "value": {"rel": ARTIFACT_LINK_RELATION, "url": artifact_url, "attributes": attributes},
        }]
    else:
        work_item = await client.get_work_item(work_item_id, expand="relations")
        relations = work_item.get("relations")
        if not relations:
            raise AzureDevOpsNotFoundError(f"Work item '{work_item_id}' has no relations to remove")

        index = next(
            (
                position
                for position, relation in enumerate(relations)
                if relation.get("rel") == ARTIFACT_LINK_RELATION and relation.get("url") == artifact_url
            ),
            None,
        )
        if index is None:
            raise AzureDevOpsNotFoundError(
                f"{link_name} link {artifact_url} not found on work item '{work_item_id}'"
            )
        document = [{"op": "remove", "path": f"/relations/{index}"}]

    logger.info(f"{operation.value.capitalize()} {artifact_url} on work item {work_item_id}")
    updated = await client.update_work_item(project, work_item_id, document)
    return {
        "success": True,
        "work_item_id": work_item_id,
        "artifact_url": artifact_url,
        "operation": operation.value,
        "work_item": updated,
    }


async def link_commit_to_work_item(
    client: Any,
    work_item_id: int,
    project: str,
    repository: str,
    commit_sha: str,
    operation: LinkOperation = LinkOperation.ADD,
    comment: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Link a commit to a work item, or remove an existing link.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        work_item_id: Work item number
        project: Project ID or name
        repository: Repository ID or name
        commit_sha: Full commit SHA
        operation: add or remove
        comment: Optional link comment (add only)

    Returns:
        Dict[str, Any]: Operation result with the updated work item

    Raises:
        AzureDevOpsValidationError: If an identifier is missing
        AzureDevOpsNotFoundError: If the link to remove does not exist
    """
    _require(work_item_id=work_item_id, project=project, repository_id=repository, commit_sha=commit_sha)
    url = commit_artifact_url(project, repository, commit_sha)
    return await _update_artifact_link(
        client, work_item_id, project, url, COMMIT_LINK_NAME, operation, comment
    )


async def link_branch_to_work_item(
    client: Any,
    work_item_id: int,
    project: str,
    repository: str,
    branch: str,
    operation: LinkOperation = LinkOperation.ADD,
    comment: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Link a branch to a work item, or remove an existing link.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        work_item_id: Work item number
        project: Project ID or name
        repository: Repository ID or name
        branch: Branch name without the refs/heads/ prefix
        operation: add or remove
        comment: Optional link comment (add only)

    Returns:
        Dict[str, Any]: Operation result with the updated work item
    """
    _require(work_item_id=work_item_id, project=project, repository_id=repository, branch_name=branch)
    url = branch_artifact_url(project, repository, branch)
    return await _update_artifact_link(
        client, work_item_id, project, url, BRANCH_LINK_NAME, operation, comment
    )
