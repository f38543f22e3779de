"""
Azure DevOps REST Client

Thin transport over the Azure DevOps REST API. Calls are made with a
requests Session using personal access token authentication, retried on
connection failures with tenacity, and exposed to the async core through
asyncio.to_thread so several fetches can be in flight at once.

Content and blob reads are streamed: the HTTP response is held inside a
``with`` block so the connection is released whether the read completes,
stops half way, or raises.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to third-party package documentation:
- Requests: https://requests.readthedocs.io/en/latest/
- Tenacity: https://tenacity.readthedocs.io/en/latest/
- Azure DevOps REST API: https://learn.microsoft.com/rest/api/azure/devops/

Sample input:
    client = AzureDevOpsClient("https://dev.azure.com/contoso", pat="xxxx")
    text = await client.get_blob_text("Fabrikam", "web", "7f3a...")

Expected output:
    "# Web\\n..."
"""

import asyncio
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from azure_devops_mcp.core import config
from azure_devops_mcp.core.errors import (
    AzureDevOpsValidationError,
    TransientFetchError,
    error_from_status,
)
from azure_devops_mcp.core.models import VersionType

POLICY_API_VERSION = "7.1-preview.1"

_transport_retry = retry(
    retry=retry_if_exception_type(
        (requests.exceptions.ConnectionError, requests.exceptions.Timeout, TransientFetchError)
    ),
    stop=stop_after_attempt(config.REQUEST_MAX_ATTEMPTS),
    wait=wait_exponential(multiplier=0.2, max=4),
    reraise=True,
)


def extract_organization(org_url: str) -> str:
    """
    Extract the organization name from a dev.azure.com URL.

    Args:
        org_url: Organization URL, e.g. https://dev.azure.com/contoso

    Returns:
        str: Organization name

    Raises:
        AzureDevOpsValidationError: If the URL does not name an organization
    """
    match = re.match(r"https?://dev\.azure\.com/([^/]+)", org_url or "")
    if not match:
        raise AzureDevOpsValidationError("Could not extract organization from connection URL")
    return match.group(1)


def version_params(version: Optional[str], version_type: VersionType) -> Dict[str, str]:
    """Query parameters of a Git version descriptor."""
    if not version:
        return {}
    return {
        "versionDescriptor.version": version,
        "versionDescriptor.versionType": VersionType(version_type).value,
    }


class AzureDevOpsClient:
    """Session-backed client for the Git, Policy, Search and Work Item APIs."""

    def __init__(
        self,
        org_url: str,
        pat: Optional[str] = None,
        api_version: str = config.AZURE_DEVOPS_API_VERSION,
        timeout: float = config.REQUEST_TIMEOUT,
        search_host: str = config.AZURE_DEVOPS_SEARCH_HOST,
        session: Optional[requests.Session] = None,
    ):
        if not org_url:
            raise AzureDevOpsValidationError("Organization URL is required")
        self.org_url = org_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self.search_host = search_host.rstrip("/")
        self.session = session or requests.Session()
        if pat:
            self.session.auth = ("", pat)

    @classmethod
    def from_config(cls) -> "AzureDevOpsClient":
        """Create a client from the environment configuration."""
        return cls(config.AZURE_DEVOPS_ORG_URL, pat=config.AZURE_DEVOPS_PAT)

    # --- URL helpers ---

    def _project_url(self, project: str, *parts: str) -> str:
        path = "/".join(quote(str(part), safe="") for part in parts)
        return f"{self.org_url}/{quote(project, safe='')}/_apis/{path}"

    def _git_url(self, project: str, repository: str, *parts: str) -> str:
        return self._project_url(project, "git", "repositories", repository, *parts)

    # --- Synchronous transport ---

    def _raise_for_status(self, response: requests.Response, description: str) -> None:
        if response.ok:
            return
        try:
            details = response.json()
        except ValueError:
            details = response.text[:500] if response.text else None
        logger.warning(f"{description} failed with HTTP {response.status_code}")
        raise error_from_status(
            response.status_code,
            f"{description} failed with HTTP {response.status_code}",
            details,
        )

    @_transport_retry
    def _request_json(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        api_version: Optional[str] = None,
    ) -> Any:
        query = {"api-version": api_version or self.api_version}
        query.update(params or {})
        logger.debug(f"{method} {url} {query}")
        response = self.session.request(
            method, url, params=query, json=json_body, headers=headers, timeout=self.timeout
        )
        self._raise_for_status(response, f"{method} {url}")
        return response.json() if response.content else None

    @_transport_retry
    def _read_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        query = {"api-version": self.api_version}
        query.update(params or {})
        headers = {"Accept": "application/octet-stream"}
        try:
            with self.session.get(
                url, params=query, headers=headers, stream=True, timeout=self.timeout
            ) as response:
                self._raise_for_status(response, f"GET {url}")
                chunks = [
                    chunk
                    for chunk in response.iter_content(chunk_size=config.STREAM_CHUNK_SIZE)
                    if chunk
                ]
        except (
            requests.exceptions.ChunkedEncodingError,
            requests.exceptions.ConnectionError,
            requests.exceptions.Timeout,
        ) as e:
            raise TransientFetchError(f"Failed to read content from {url}: {str(e)}") from e
        return b"".join(chunks).decode("utf-8", errors="replace")

    async def _json(self, method: str, url: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._request_json, method, url, **kwargs)

    # --- Git: items and blobs ---

    async def get_items(
        self,
        project: str,
        repository: str,
        path: str,
        version: Optional[str] = None,
        version_type: VersionType = VersionType.BRANCH,
    ) -> List[Dict[str, Any]]:
        params = {"scopePath": path, "recursionLevel": "OneLevel"}
        params.update(version_params(version, version_type))
        data = await self._json("GET", self._git_url(project, repository, "items"), params=params)
        return (data or {}).get("value", [])

    async def get_item_text(
        self,
        project: str,
        repository: str,
        path: str,
        version: Optional[str] = None,
        version_type: VersionType = VersionType.BRANCH,
    ) -> str:
        params = {"path": path, "download": "false", "$format": "octetStream"}
        params.update(version_params(version, version_type))
        return await asyncio.to_thread(self._read_text, self._git_url(project, repository, "items"), params)

    async def get_blob_text(self, project: str, repository: str, object_id: Optional[str]) -> str:
        if not object_id:
            return ""
        url = self._git_url(project, repository, "blobs", object_id)
        return await asyncio.to_thread(self._read_text, url, {"$format": "octetstream"})

    # --- Git: commits and pull requests ---

    async def get_commits(
        self,
        project: str,
        repository: str,
        branch: str,
        top: int = 10,
        skip: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "searchCriteria.itemVersion.version": branch,
            "searchCriteria.itemVersion.versionType": VersionType.BRANCH.value,
            "searchCriteria.$top": top,
        }
        if skip:
            params["searchCriteria.$skip"] = skip
        data = await self._json("GET", self._git_url(project, repository, "commits"), params=params)
        return (data or {}).get("value", [])

    async def get_commit_changes(self, project: str, repository: str, commit_id: str) -> List[Dict[str, Any]]:
        url = self._git_url(project, repository, "commits", commit_id, "changes")
        data = await self._json("GET", url)
        return (data or {}).get("changes", [])

    async def get_pull_request(self, project: str, repository: str, pull_request_id: int) -> Dict[str, Any]:
        url = self._git_url(project, repository, "pullRequests", str(pull_request_id))
        return await self._json("GET", url) or {}

    async def get_pull_request_iterations(
        self, project: str, repository: str, pull_request_id: int
    ) -> List[Dict[str, Any]]:
        url = self._git_url(project, repository, "pullRequests", str(pull_request_id), "iterations")
        data = await self._json("GET", url)
        return (data or {}).get("value", [])

    async def get_pull_request_iteration_changes(
        self, project: str, repository: str, pull_request_id: int, iteration_id: int
    ) -> List[Dict[str, Any]]:
        url = self._git_url(
            project, repository, "pullRequests", str(pull_request_id),
            "iterations", str(iteration_id), "changes",
        )
        data = await self._json("GET", url)
        return (data or {}).get("changeEntries", [])

    async def get_policy_evaluations(self, project: str, artifact_id: str) -> List[Dict[str, Any]]:
        url = self._project_url(project, "policy", "evaluations")
        data = await self._json(
            "GET", url, params={"artifactId": artifact_id}, api_version=POLICY_API_VERSION
        )
        return (data or {}).get("value", [])

    async def get_repositories(self, project: str, include_links: bool = False) -> List[Dict[str, Any]]:
        params = {"includeLinks": "true"} if include_links else {}
        data = await self._json("GET", self._project_url(project, "git", "repositories"), params=params)
        return (data or {}).get("value", [])

    # --- Search ---

    async def search_code(self, project: str, request_body: Dict[str, Any]) -> Dict[str, Any]:
        organization = extract_organization(self.org_url)
        url = (
            f"{self.search_host}/{quote(organization, safe='')}/{quote(project, safe='')}"
            f"/_apis/search/codesearchresults"
        )
        return await self._json("POST", url, json_body=request_body) or {}

    # --- Work items ---

    async def get_work_item(self, work_item_id: int, expand: str = "relations") -> Dict[str, Any]:
        url = f"{self.org_url}/_apis/wit/workitems/{work_item_id}"
        return await self._json("GET", url, params={"$expand": expand}) or {}

    async def update_work_item(
        self, project: str, work_item_id: int, document: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        url = self._project_url(project, "wit", "workitems", str(work_item_id))
        headers = {"Content-Type": "application/json-patch+json"}
        return await self._json("PATCH", url, json_body=document, headers=headers) or {}
