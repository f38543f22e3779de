#!/usr/bin/env python3
"""
Unit tests for core/client.py

The requests Session is replaced with a MagicMock so no network calls are
made.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
import requests

from azure_devops_mcp.core.changes import ChangeEnumerator, blob_fetcher, change_record_from_api
from azure_devops_mcp.core.client import AzureDevOpsClient, extract_organization, version_params
from azure_devops_mcp.core.errors import (
    AzureDevOpsNotFoundError,
    AzureDevOpsValidationError,
    TransientFetchError,
)
from azure_devops_mcp.core.models import VersionType


def streamed_response(chunks=None, error=None, status_code=200):
    response = MagicMock()
    response.__enter__.return_value = response
    response.ok = status_code < 400
    response.status_code = status_code
    response.json.return_value = {"message": "not here"}
    if error is not None:
        response.iter_content.side_effect = error
    else:
        response.iter_content.return_value = iter(chunks or [])
    return response


def json_response(body, status_code=200):
    response = MagicMock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.content = b"{}"
    response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return AzureDevOpsClient("https://dev.azure.com/contoso/", pat="secret", session=session)


def test_pat_is_used_as_basic_auth(client, session):
    assert session.auth == ("", "secret")
    assert client.org_url == "https://dev.azure.com/contoso"


def test_missing_org_url_is_rejected():
    with pytest.raises(AzureDevOpsValidationError):
        AzureDevOpsClient("", session=MagicMock())


def test_streamed_text_is_joined_and_decoded(client, session):
    session.get.return_value = streamed_response([b"caf", b"\xc3\xa9", b"", b"\n"])

    text = asyncio.run(client.get_blob_text("proj", "repo", "abc"))

    assert text == "café\n"
    url = session.get.call_args.args[0]
    assert url == "https://dev.azure.com/contoso/proj/_apis/git/repositories/repo/blobs/abc"


def test_interrupted_stream_is_released_and_retried(client, session):
    responses = [
        streamed_response(error=requests.exceptions.ChunkedEncodingError("reset"))
        for _ in range(3)
    ]
    session.get.side_effect = responses

    with pytest.raises(TransientFetchError):
        asyncio.run(client.get_blob_text("proj", "repo", "abc"))

    assert session.get.call_count == 3
    for response in responses:
        assert response.__exit__.called


def test_not_found_is_not_retried(client, session):
    session.get.return_value = streamed_response(status_code=404)

    with pytest.raises(AzureDevOpsNotFoundError):
        asyncio.run(client.get_item_text("proj", "repo", "/missing.txt"))

    assert session.get.call_count == 1
    assert session.get.return_value.__exit__.called


def test_empty_blob_id_makes_no_request(client, session):
    assert asyncio.run(client.get_blob_text("proj", "repo", None)) == ""
    session.get.assert_not_called()


def test_server_error_on_one_blob_keeps_the_batch(client, session):
    def get(url, **kwargs):
        if url.endswith("/blobs/bad"):
            return streamed_response(status_code=503)
        return streamed_response([b"fine\n"])

    session.get.side_effect = get
    enumerator = ChangeEnumerator(blob_fetcher(client, "proj", "repo"))
    records = [
        change_record_from_api({"item": {"path": "/bad.txt", "objectId": "bad"}, "changeType": "add"}),
        change_record_from_api({"item": {"path": "/ok.txt", "objectId": "ok"}, "changeType": "add"}),
    ]

    entries = asyncio.run(enumerator.enumerate(records, include_diffs=True))

    assert len(entries) == 2
    assert entries[0].patch == ""
    assert "+fine" in entries[1].patch


def test_json_requests_carry_api_version(client, session):
    session.request.return_value = json_response({"value": [{"id": "1", "name": "web"}]})

    repositories = asyncio.run(client.get_repositories("proj", include_links=True))

    assert repositories == [{"id": "1", "name": "web"}]
    method, url = session.request.call_args.args
    params = session.request.call_args.kwargs["params"]
    assert method == "GET"
    assert url == "https://dev.azure.com/contoso/proj/_apis/git/repositories"
    assert params == {"api-version": "7.1", "includeLinks": "true"}


def test_search_goes_to_search_host(client, session):
    session.request.return_value = json_response({"count": 0, "results": []})

    asyncio.run(client.search_code("My Project", {"searchText": "x"}))

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == "https://almsearch.dev.azure.com/contoso/My%20Project/_apis/search/codesearchresults"


def test_extract_organization():
    assert extract_organization("https://dev.azure.com/contoso") == "contoso"
    with pytest.raises(AzureDevOpsValidationError):
        extract_organization("https://example.com/contoso")


def test_version_params():
    assert version_params(None, VersionType.BRANCH) == {}
    assert version_params("abc", VersionType.COMMIT) == {
        "versionDescriptor.version": "abc",
        "versionDescriptor.versionType": "commit",
    }
