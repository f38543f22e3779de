"""
Repository Listing

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    repositories = await list_repositories(client, "Fabrikam")

Expected output:
    [{'id': '5febef5a-...', 'name': 'web', 'defaultBranch': 'refs/heads/main', ...}]
"""

from typing import Any, Dict, List

from loguru import logger


async def list_repositories(client: Any, project: str, include_links: bool = False) -> List[Dict[str, Any]]:
    """
    List the enabled repositories of a project.

    Disabled repositories are left out and the isDisabled field is removed
    from the rest.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        project: Project ID or name
        include_links: Whether to include reference links

    Returns:
        List[Dict[str, Any]]: Repositories
    """
    repositories = await client.get_repositories(project, include_links)
    enabled = [
        {key: value for key, value in repository.items() if key != "isDisabled"}
        for repository in repositories
        if not repository.get("isDisabled")
    ]
    logger.debug(f"{len(enabled)} of {len(repositories)} repositories in {project} are enabled")
    return enabled
