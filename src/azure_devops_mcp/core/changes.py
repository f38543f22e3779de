"""
Change Enumerator

Walks an ordered change list (a commit's or a pull request iteration's),
classifies each entry's change type and, when diffs are requested, produces
a bounded unified diff per file.

Per entry with diffs requested:
1. Check the patch budget; if exhausted, emit the omission placeholder
   without fetching anything
2. Fetch the old and new blob texts concurrently; if either read fails,
   the entry gets an empty diff and the rest of the batch carries on
3. Synthesize the unified diff
4. Apply per-line and per-patch truncation
5. Reserve the final length in the patch budget

Entries are processed as concurrent tasks, bounded by a semaphore, but their
budget reservations are committed strictly in change-list order. The output
is therefore identical for identical input regardless of which fetch returns
first.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    enumerator = ChangeEnumerator(fetch_blob)
    entries = await enumerator.enumerate(records, include_diffs=True)

Expected output:
    [FileChangeEntry(path="/src/app.py", change_type="edit", patch="--- /src/app.py\\n+++ ...")]
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from loguru import logger

from azure_devops_mcp.core.budget import PatchBudgetTracker
from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget
from azure_devops_mcp.core.diff import synthesize_diff
from azure_devops_mcp.core.errors import AzureDevOpsError
from azure_devops_mcp.core.models import ChangeListResult, ChangeRecord, ChangeType, FileChangeEntry
from azure_devops_mcp.core.truncation import OMITTED_PATCH_PLACEHOLDER, TextTruncation, truncate_patch

BlobFetcher = Callable[[Optional[str]], Awaitable[str]]
DiffSynthesizer = Callable[[str, str, str, str], str]

# VersionControlChangeType flag values
CHANGE_TYPE_CODES: Dict[int, ChangeType] = {
    0: ChangeType.NONE,
    1: ChangeType.ADD,
    2: ChangeType.EDIT,
    4: ChangeType.ENCODING,
    8: ChangeType.RENAME,
    16: ChangeType.DELETE,
    32: ChangeType.UNDELETE,
    64: ChangeType.BRANCH,
    128: ChangeType.MERGE,
    256: ChangeType.LOCK,
    512: ChangeType.ROLLBACK,
    1024: ChangeType.SOURCE_RENAME,
    2048: ChangeType.TARGET_RENAME,
    4096: ChangeType.PROPERTY,
    8191: ChangeType.ALL,
}

CHANGE_TYPE_NAMES: Dict[str, ChangeType] = {
    **{change_type.value: change_type for change_type in ChangeType},
    "sourcerename": ChangeType.SOURCE_RENAME,
    "targetrename": ChangeType.TARGET_RENAME,
}


def map_change_type(code: Union[int, str, None]) -> ChangeType:
    """
    Map a raw change type (flag value or name) to a ChangeType.

    Combined flags and unrecognized values map to ChangeType.UNKNOWN.

    Args:
        code: Numeric flag value, its string form, or a change type name

    Returns:
        ChangeType: Normalized change type
    """
    if code is None or isinstance(code, bool):
        return ChangeType.UNKNOWN
    if isinstance(code, int):
        return CHANGE_TYPE_CODES.get(code, ChangeType.UNKNOWN)

    name = str(code).strip()
    if name.isdigit():
        return CHANGE_TYPE_CODES.get(int(name), ChangeType.UNKNOWN)
    return CHANGE_TYPE_NAMES.get(name.lower(), ChangeType.UNKNOWN)


def resolve_display_path(record: ChangeRecord) -> str:
    """Current path, falling back to the original path for removed entries."""
    return record.path or record.original_path or ""


def change_record_from_api(raw: Dict[str, Any]) -> ChangeRecord:
    """Build a ChangeRecord from a commit or pull request change entry."""
    item = raw.get("item") or {}
    return ChangeRecord(
        path=item.get("path"),
        original_path=raw.get("originalPath") or item.get("originalPath"),
        object_id=item.get("objectId"),
        original_object_id=item.get("originalObjectId"),
        change_type_code=raw.get("changeType"),
    )


def blob_fetcher(client: Any, project: str, repository: str) -> BlobFetcher:
    """Bind a client's blob reader to one repository."""

    async def fetch(object_id: Optional[str]) -> str:
        return await client.get_blob_text(project, repository, object_id)

    return fetch


def omitted_entry(path: str, change_type: ChangeType) -> FileChangeEntry:
    return FileChangeEntry(
        path=path,
        change_type=change_type,
        patch=OMITTED_PATCH_PLACEHOLDER,
        truncated=True,
    )


class ChangeEnumerator:
    """Turns a change list into ordered FileChangeEntry results."""

    def __init__(
        self,
        fetch_blob: BlobFetcher,
        budget: TruncationBudget = DEFAULT_BUDGET,
        synthesize: DiffSynthesizer = synthesize_diff,
    ):
        self.fetch_blob = fetch_blob
        self.budget = budget
        self.synthesize = synthesize

    async def enumerate(
        self,
        changes: Sequence[ChangeRecord],
        include_diffs: bool,
        tracker: Optional[PatchBudgetTracker] = None,
    ) -> List[FileChangeEntry]:
        """
        Classify every change and, if requested, attach a bounded diff.

        Args:
            changes: Change records in their original order
            include_diffs: Whether to fetch blobs and synthesize diffs
            tracker: Patch budget shared by the whole response; a new one is
                created when not given

        Returns:
            List[FileChangeEntry]: One entry per change, in input order
        """
        if not include_diffs:
            return [
                FileChangeEntry(
                    path=resolve_display_path(record),
                    change_type=map_change_type(record.change_type_code),
                )
                for record in changes
            ]

        if tracker is None:
            tracker = PatchBudgetTracker.from_budget(self.budget)
        semaphore = asyncio.Semaphore(self.budget.max_diff_concurrency)
        committed = [asyncio.Event() for _ in changes]

        tasks = [
            asyncio.ensure_future(self._resolve_entry(index, record, tracker, semaphore, committed))
            for index, record in enumerate(changes)
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # One entry failed unexpectedly; stop the others before propagating
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _resolve_entry(
        self,
        index: int,
        record: ChangeRecord,
        tracker: PatchBudgetTracker,
        semaphore: asyncio.Semaphore,
        committed: List[asyncio.Event],
    ) -> FileChangeEntry:
        path = resolve_display_path(record)
        change_type = map_change_type(record.change_type_code)
        try:
            bounded: Optional[TextTruncation] = None
            if not await tracker.is_exhausted():
                async with semaphore:
                    if not await tracker.is_exhausted():
                        bounded = await self._build_patch(record, path)

            # Reservations are committed in change-list order
            if index > 0:
                await committed[index - 1].wait()

            if bounded is None:
                await tracker.record_omitted()
                return omitted_entry(path, change_type)

            admitted = await tracker.reserve(
                len(bounded.content),
                size_truncated=bounded.size_truncated,
                line_truncated=bounded.truncated_line_count > 0,
            )
            if not admitted:
                return omitted_entry(path, change_type)

            return FileChangeEntry(
                path=path,
                change_type=change_type,
                patch=bounded.content,
                truncated=True if bounded.truncated else None,
            )
        finally:
            committed[index].set()

    async def _build_patch(self, record: ChangeRecord, path: str) -> TextTruncation:
        old_text, new_text = await asyncio.gather(
            self.fetch_blob(record.original_object_id),
            self.fetch_blob(record.object_id),
            return_exceptions=True,
        )
        for result in (old_text, new_text):
            if isinstance(result, AzureDevOpsError):
                logger.warning(
                    f"Could not read blobs for {path} ({result.category.value}), returning an empty diff: {result}"
                )
                return truncate_patch("", self.budget)
            if isinstance(result, BaseException):
                raise result

        raw_patch = self.synthesize(record.original_path or path, path, old_text, new_text)
        return truncate_patch(raw_patch, self.budget)


def summarize_budget(tracker: PatchBudgetTracker) -> Dict[str, Any]:
    """Aggregate truncation fields of a response, empty when nothing was cut."""
    note = tracker.truncation_note()
    if note is None:
        return {}
    return {
        "truncation_note": note,
        "truncated_patch_count": tracker.truncated_count,
        "line_truncated_patch_count": tracker.line_truncated_count,
        "omitted_patch_count": tracker.omitted_count,
    }


async def list_changes_with_diffs(
    client: Any,
    project: str,
    repository: str,
    commit_id: str,
    include_diffs: bool = False,
    budget: TruncationBudget = DEFAULT_BUDGET,
) -> ChangeListResult:
    """
    List the files changed by a commit, optionally with bounded diffs.

    Args:
        client: AzureDevOpsClient (or any object with the same coroutines)
        project: Project ID or name
        repository: Repository ID or name
        commit_id: Commit SHA
        include_diffs: Whether to attach unified diffs
        budget: Size limits

    Returns:
        ChangeListResult: Ordered entries plus aggregate truncation fields
    """
    logger.info(f"Listing changes of commit {commit_id} in {project}/{repository}")
    raw_changes = await client.get_commit_changes(project, repository, commit_id)
    records = [change_record_from_api(raw) for raw in raw_changes]

    tracker = PatchBudgetTracker.from_budget(budget)
    enumerator = ChangeEnumerator(blob_fetcher(client, project, repository), budget)
    entries = await enumerator.enumerate(records, include_diffs, tracker)

    return ChangeListResult(entries=entries, **summarize_budget(tracker))
