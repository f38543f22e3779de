#!/usr/bin/env python3
"""
Unit tests for core/search.py
"""

import asyncio
from unittest.mock import patch

import pytest

from azure_devops_mcp.core import config
from azure_devops_mcp.core.errors import (
    AzureDevOpsNotFoundError,
    AzureDevOpsPermissionError,
    AzureDevOpsValidationError,
    TransientFetchError,
)
from azure_devops_mcp.core.search import search_code
from azure_devops_mcp.core.truncation import CONTENT_TRUNCATION_MARKER

from fakes import FakeAzureDevOpsClient


def hit(path: str, change_id: str = "sha1") -> dict:
    return {
        "fileName": path.rsplit("/", 1)[-1],
        "path": path,
        "project": {"name": "proj"},
        "repository": {"id": "repo-id", "name": "web"},
        "versions": [{"branchName": "main", "changeId": change_id}],
    }


def test_request_is_scoped_and_paged():
    client = FakeAzureDevOpsClient(search_response={"count": 60, "results": [hit("/a.py")]})

    result = asyncio.run(search_code(client, "TODO", project="proj", page=1, filters={"Repository": ["web"]}))

    request = client.search_requests[0]
    assert request["$skip"] == 25
    assert request["$top"] == 25
    assert request["filters"] == {"Project": ["proj"], "Repository": ["web"]}
    assert result["current_page"] == 1
    assert result["total_pages"] == 3
    assert result["page_size"] == 25
    assert result["has_more"] is True


def test_negative_page_is_first_page():
    client = FakeAzureDevOpsClient(search_response={"count": 3, "results": []})

    result = asyncio.run(search_code(client, "TODO", project="proj", page=-4))

    assert client.search_requests[0]["$skip"] == 0
    assert result["current_page"] == 0
    assert result["has_more"] is False


def test_content_enrichment_is_bounded():
    big = "\n".join(["w" * 900] * 40)
    client = FakeAzureDevOpsClient(
        search_response={"count": 2, "results": [hit("/big.py", "c1"), hit("/small.py", "c2")]},
        files={"/big.py": big, "/small.py": "tiny"},
    )

    result = asyncio.run(search_code(client, "w", project="proj", include_content=True))

    assert client.search_requests[0]["$top"] == 10
    big_content = result["results"][0]["content"]
    assert big_content.endswith(CONTENT_TRUNCATION_MARKER)
    assert len(big_content) <= 20000 + len("\n" + CONTENT_TRUNCATION_MARKER)
    assert result["results"][1]["content"] == "tiny"
    assert {call["version"] for call in client.item_text_calls} == {"c1", "c2"}


def test_failed_enrichment_is_skipped():
    client = FakeAzureDevOpsClient(
        search_response={"count": 2, "results": [hit("/missing.py"), hit("/ok.py")]},
        files={"/ok.py": "ok"},
    )

    result = asyncio.run(search_code(client, "ok", project="proj", include_content=True))

    assert "content" not in result["results"][0]
    assert result["results"][1]["content"] == "ok"


def test_default_project_is_used():
    client = FakeAzureDevOpsClient()
    with patch.object(config, "AZURE_DEVOPS_DEFAULT_PROJECT", "Fallback"):
        asyncio.run(search_code(client, "x"))
    assert client.search_requests[0]["filters"]["Project"] == ["Fallback"]


def test_missing_project_is_rejected():
    with patch.object(config, "AZURE_DEVOPS_DEFAULT_PROJECT", None):
        with pytest.raises(AzureDevOpsValidationError):
            asyncio.run(search_code(FakeAzureDevOpsClient(), "x"))


@pytest.mark.parametrize(
    "raised,expected_type,message",
    [
        (AzureDevOpsNotFoundError("HTTP 404"), AzureDevOpsNotFoundError, "Repository or project not found"),
        (AzureDevOpsPermissionError("HTTP 403"), AzureDevOpsPermissionError, "Permission denied to access repository"),
    ],
)
def test_http_errors_are_reworded(raised, expected_type, message):
    client = FakeAzureDevOpsClient(search_error=raised)
    with pytest.raises(expected_type) as excinfo:
        asyncio.run(search_code(client, "x", project="proj"))
    assert excinfo.value.message == message


def test_other_errors_propagate_unchanged():
    error = TransientFetchError("connection reset")
    client = FakeAzureDevOpsClient(search_error=error)
    with pytest.raises(TransientFetchError) as excinfo:
        asyncio.run(search_code(client, "x", project="proj"))
    assert excinfo.value is error
