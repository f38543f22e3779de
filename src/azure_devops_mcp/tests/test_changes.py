#!/usr/bin/env python3
"""
Unit tests for core/changes.py
"""

import asyncio
import os
import sys
import unittest

# Add parent directory to path to import module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from azure_devops_mcp.core.budget import PatchBudgetTracker
from azure_devops_mcp.core.changes import (
    ChangeEnumerator,
    blob_fetcher,
    change_record_from_api,
    list_changes_with_diffs,
    map_change_type,
    resolve_display_path,
)
from azure_devops_mcp.core.config import TruncationBudget
from azure_devops_mcp.core.errors import AzureDevOpsError, AzureDevOpsNotFoundError
from azure_devops_mcp.core.models import ChangeRecord, ChangeType
from azure_devops_mcp.core.truncation import OMITTED_PATCH_PLACEHOLDER

from fakes import FakeAzureDevOpsClient, change, sized_patch


def passthrough_synthesizer(old_label, new_label, old_text, new_text):
    """Use the new blob text itself as the patch, so patch sizes are exact."""
    return new_text


class TestChangeTypes(unittest.TestCase):
    """Test cases for change type mapping"""

    def test_numeric_codes(self):
        self.assertEqual(map_change_type(1), ChangeType.ADD)
        self.assertEqual(map_change_type(2), ChangeType.EDIT)
        self.assertEqual(map_change_type(16), ChangeType.DELETE)
        self.assertEqual(map_change_type(1024), ChangeType.SOURCE_RENAME)
        self.assertEqual(map_change_type(8191), ChangeType.ALL)

    def test_names_are_case_insensitive(self):
        self.assertEqual(map_change_type("Edit"), ChangeType.EDIT)
        self.assertEqual(map_change_type("sourceRename"), ChangeType.SOURCE_RENAME)
        self.assertEqual(map_change_type("targetRename"), ChangeType.TARGET_RENAME)
        self.assertEqual(map_change_type("16"), ChangeType.DELETE)

    def test_unrecognized_values_map_to_unknown(self):
        self.assertEqual(map_change_type(None), ChangeType.UNKNOWN)
        self.assertEqual(map_change_type(3), ChangeType.UNKNOWN)
        self.assertEqual(map_change_type("edit, rename"), ChangeType.UNKNOWN)
        self.assertEqual(map_change_type("bogus"), ChangeType.UNKNOWN)

    def test_display_path_falls_back_to_original_path(self):
        self.assertEqual(resolve_display_path(ChangeRecord(path="/new.txt", original_path="/old.txt")), "/new.txt")
        self.assertEqual(resolve_display_path(ChangeRecord(original_path="/old.txt")), "/old.txt")
        self.assertEqual(resolve_display_path(ChangeRecord()), "")

    def test_change_record_from_api(self):
        record = change_record_from_api(
            change("/b.txt", "rename", object_id="new", original_object_id="old", original_path="/a.txt")
        )
        self.assertEqual(record.path, "/b.txt")
        self.assertEqual(record.original_path, "/a.txt")
        self.assertEqual(record.object_id, "new")
        self.assertEqual(record.original_object_id, "old")
        self.assertEqual(record.change_type_code, "rename")


class TestChangeEnumerator(unittest.TestCase):
    """Test cases for the change enumerator"""

    def enumerate(self, client, raw_changes, include_diffs=True, budget=None, synthesize=None):
        budget = budget or TruncationBudget()
        kwargs = {"synthesize": synthesize} if synthesize else {}
        enumerator = ChangeEnumerator(blob_fetcher(client, "proj", "repo"), budget, **kwargs)
        tracker = PatchBudgetTracker.from_budget(budget)
        records = [change_record_from_api(raw) for raw in raw_changes]
        entries = asyncio.run(enumerator.enumerate(records, include_diffs, tracker))
        return entries, tracker

    def test_without_diffs_nothing_is_fetched(self):
        client = FakeAzureDevOpsClient(blobs={"n1": "text"})
        entries, _ = self.enumerate(client, [change("/a.txt", "add", object_id="n1")], include_diffs=False)

        self.assertEqual(client.fetched_blobs, [])
        self.assertEqual(entries[0].model_dump(exclude_none=True), {"path": "/a.txt", "change_type": "add"})

    def test_ten_large_patches_keep_eight(self):
        blobs = {f"n{i}": sized_patch(6000) for i in range(10)}
        raw = [change(f"/file{i}.txt", "edit", object_id=f"n{i}") for i in range(10)]
        client = FakeAzureDevOpsClient(blobs=blobs)

        entries, tracker = self.enumerate(client, raw, synthesize=passthrough_synthesizer)

        for entry in entries[:8]:
            self.assertEqual(len(entry.patch), 6000)
            self.assertIsNone(entry.truncated)
        for entry in entries[8:]:
            self.assertEqual(entry.patch, OMITTED_PATCH_PLACEHOLDER)
            self.assertTrue(entry.truncated)
        self.assertEqual(tracker.bytes_used, 48000)
        self.assertIn("2 patch(es) omitted", tracker.truncation_note())

    def test_output_order_ignores_completion_order(self):
        # Earlier entries finish last
        delays = {f"n{i}": 0.01 * (5 - i) for i in range(5)}
        blobs = {f"n{i}": f"content {i}\n" for i in range(5)}
        raw = [change(f"/f{i}.txt", "add", object_id=f"n{i}") for i in range(5)]
        client = FakeAzureDevOpsClient(blobs=blobs, blob_delays=delays)

        entries, _ = self.enumerate(client, raw)

        self.assertEqual([entry.path for entry in entries], [f"/f{i}.txt" for i in range(5)])
        for i, entry in enumerate(entries):
            self.assertIn(f"+content {i}", entry.patch)

    def test_budget_assignment_is_deterministic(self):
        blobs = {f"n{i}": sized_patch(6000 + i) for i in range(10)}
        raw = [change(f"/file{i}.txt", "edit", object_id=f"n{i}") for i in range(10)]

        first, _ = self.enumerate(
            FakeAzureDevOpsClient(blobs=blobs, blob_delays={f"n{i}": 0.001 * (10 - i) for i in range(10)}),
            raw, synthesize=passthrough_synthesizer,
        )
        second, _ = self.enumerate(
            FakeAzureDevOpsClient(blobs=blobs, blob_delays={f"n{i}": 0.001 * i for i in range(10)}),
            raw, synthesize=passthrough_synthesizer,
        )

        self.assertEqual(
            [entry.model_dump() for entry in first],
            [entry.model_dump() for entry in second],
        )

    def test_deleted_file_is_diffed_against_empty_text(self):
        client = FakeAzureDevOpsClient(blobs={"old": "gone\n"})
        entries, _ = self.enumerate(client, [change("/gone.txt", "delete", original_object_id="old")])

        self.assertEqual(entries[0].change_type, "delete")
        self.assertIn("-gone", entries[0].patch)
        self.assertEqual(client.fetched_blobs, ["old"])

    def test_transient_failure_degrades_to_empty_patch(self):
        client = FakeAzureDevOpsClient(
            blobs={"n1": "one\n", "n2": "two\n"},
            failing_blobs=["n1"],
        )
        entries, tracker = self.enumerate(client, [
            change("/broken.txt", "add", object_id="n1"),
            change("/fine.txt", "add", object_id="n2"),
        ])

        self.assertEqual(entries[0].patch, "")
        self.assertIsNone(entries[0].truncated)
        self.assertIn("+two", entries[1].patch)
        self.assertIsNone(tracker.truncation_note())

    def test_http_failures_degrade_to_empty_patch(self):
        client = FakeAzureDevOpsClient(
            blobs={"n3": "three\n"},
            blob_errors={
                "n1": AzureDevOpsError("GET .../blobs/n1 failed with HTTP 503"),
                "n2": AzureDevOpsNotFoundError("GET .../blobs/n2 failed with HTTP 404"),
            },
        )
        entries, tracker = self.enumerate(client, [
            change("/unavailable.txt", "edit", object_id="n1"),
            change("/vanished.txt", "add", object_id="n2"),
            change("/fine.txt", "add", object_id="n3"),
        ])

        self.assertEqual([entry.patch for entry in entries[:2]], ["", ""])
        self.assertIn("+three", entries[2].patch)
        self.assertIsNone(tracker.truncation_note())

    def test_unexpected_error_stops_other_entries(self):
        finished = []

        async def fetch(object_id):
            if object_id is None:
                return ""
            if object_id == "bad":
                raise RuntimeError("decoder crashed")
            await asyncio.sleep(0.05)
            finished.append(object_id)
            return "text\n"

        async def run():
            enumerator = ChangeEnumerator(fetch)
            records = [
                change_record_from_api(change("/bad.txt", "add", object_id="bad")),
                change_record_from_api(change("/slow.txt", "add", object_id="slow")),
            ]
            with self.assertRaises(RuntimeError):
                await enumerator.enumerate(records, include_diffs=True)
            await asyncio.sleep(0.1)

        asyncio.run(run())
        self.assertEqual(finished, [])

    def test_long_lines_are_not_reported_as_oversized_patches(self):
        client = FakeAzureDevOpsClient(blobs={"n1": "q" * 1500})
        entries, tracker = self.enumerate(client, [change("/wide.txt", "add", object_id="n1")])

        self.assertLess(len(entries[0].patch), 10000)
        self.assertTrue(entries[0].truncated)
        self.assertEqual(tracker.truncated_count, 0)
        self.assertEqual(tracker.line_truncated_count, 1)
        self.assertEqual(tracker.truncation_note(), "1 patch(es) with lines over 1000 chars shortened")

    def test_oversized_patch_is_truncated(self):
        budget = TruncationBudget(max_patch_length=1000)
        client = FakeAzureDevOpsClient(blobs={"n1": sized_patch(5000)})

        entries, tracker = self.enumerate(
            client, [change("/big.txt", "edit", object_id="n1")], budget=budget, synthesize=passthrough_synthesizer
        )

        self.assertTrue(entries[0].truncated)
        self.assertTrue(entries[0].patch.endswith("... [truncated - patch exceeded 1000 characters]"))
        self.assertEqual(tracker.truncated_count, 1)

    def test_exhausted_budget_stops_fetching(self):
        budget = TruncationBudget(max_total_patch_size=6000, max_diff_concurrency=1)
        blobs = {f"n{i}": sized_patch(6000) for i in range(5)}
        raw = [change(f"/file{i}.txt", "edit", object_id=f"n{i}") for i in range(5)]
        client = FakeAzureDevOpsClient(blobs=blobs)

        entries, tracker = self.enumerate(client, raw, budget=budget, synthesize=passthrough_synthesizer)

        self.assertEqual(len(entries[0].patch), 6000)
        self.assertEqual([entry.patch for entry in entries[1:]], [OMITTED_PATCH_PLACEHOLDER] * 4)
        self.assertNotIn("n4", client.fetched_blobs)
        self.assertEqual(tracker.omitted_count, 4)


class TestListChangesWithDiffs(unittest.TestCase):
    """Test cases for commit change listing"""

    def test_result_carries_aggregate_fields(self):
        client = FakeAzureDevOpsClient(
            blobs={f"n{i}": sized_patch(6000) for i in range(10)},
            commit_changes={"abc": [change(f"/f{i}", "edit", object_id=f"n{i}") for i in range(10)]},
        )

        result = asyncio.run(list_changes_with_diffs(client, "proj", "repo", "abc", include_diffs=True))
        response = result.to_response()

        self.assertEqual(len(response["entries"]), 10)
        self.assertEqual(response["omitted_patch_count"], 2)
        self.assertEqual(response["truncated_patch_count"], 0)
        self.assertEqual(response["line_truncated_patch_count"], 0)
        self.assertIn("omitted", response["truncation_note"])

    def test_line_truncation_has_its_own_count(self):
        client = FakeAzureDevOpsClient(
            blobs={"n1": "q" * 1500},
            commit_changes={"abc": [change("/wide.txt", "add", object_id="n1")]},
        )

        response = asyncio.run(list_changes_with_diffs(client, "proj", "repo", "abc", include_diffs=True)).to_response()

        self.assertEqual(response["line_truncated_patch_count"], 1)
        self.assertEqual(response["truncated_patch_count"], 0)
        self.assertNotIn("exceeded 10000", response["truncation_note"])

    def test_no_truncation_fields_when_nothing_was_cut(self):
        client = FakeAzureDevOpsClient(
            blobs={"n1": "hello\n"},
            commit_changes={"abc": [change("/hello.txt", 1, object_id="n1")]},
        )

        response = asyncio.run(list_changes_with_diffs(client, "proj", "repo", "abc", include_diffs=True)).to_response()

        self.assertEqual(response["entries"][0]["change_type"], "add")
        self.assertNotIn("truncation_note", response)
        self.assertNotIn("omitted_patch_count", response)


if __name__ == "__main__":
    unittest.main()
