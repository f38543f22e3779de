"""
Patch Budget Tracker

Enforces the aggregate character budget for all patches produced in one
response (a commit listing or a pull request). Change entries are diffed by
concurrent tasks, so every read and write of the counters goes through a
single asyncio lock.

Policy:
- Once the budget is exhausted, later entries are not fetched at all.
- A patch that would push the total past the budget is refused and the
  tracker is exhausted from then on; it is reported as omitted.
- Exhaustion never cancels in-flight work; it is accounted for when it arrives.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    tracker = PatchBudgetTracker(max_total_patch_size=50000, max_patch_length=10000)
    await tracker.reserve(6000)

Expected output:
    tracker.bytes_used  # 6000
"""

import asyncio
from typing import Optional

from loguru import logger

from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget


class PatchBudgetTracker:
    """Aggregate patch budget for exactly one multi-file response."""

    def __init__(
        self,
        max_total_patch_size: int,
        max_patch_length: int,
        max_line_length: int = DEFAULT_BUDGET.max_line_length,
    ):
        self.max_total_patch_size = max_total_patch_size
        self.max_patch_length = max_patch_length
        self.max_line_length = max_line_length
        self._lock = asyncio.Lock()
        self._bytes_used = 0
        self._truncated_count = 0
        self._line_truncated_count = 0
        self._omitted_count = 0
        self._refused = False

    @classmethod
    def from_budget(cls, budget: TruncationBudget = DEFAULT_BUDGET) -> "PatchBudgetTracker":
        return cls(budget.max_total_patch_size, budget.max_patch_length, budget.max_line_length)

    @property
    def bytes_used(self) -> int:
        return self._bytes_used

    @property
    def truncated_count(self) -> int:
        """Patches cut short because they exceeded max_patch_length."""
        return self._truncated_count

    @property
    def line_truncated_count(self) -> int:
        """Patches with at least one line cut to max_line_length."""
        return self._line_truncated_count

    @property
    def omitted_count(self) -> int:
        return self._omitted_count

    def _exhausted(self) -> bool:
        return self._refused or self._bytes_used >= self.max_total_patch_size

    async def is_exhausted(self) -> bool:
        async with self._lock:
            return self._exhausted()

    async def reserve(self, length: int, size_truncated: bool = False, line_truncated: bool = False) -> bool:
        """
        Account for a finalized patch.

        Args:
            length: Length of the patch after per-patch truncation
            size_truncated: Whether trailing lines were dropped to fit max_patch_length
            line_truncated: Whether any line was shortened to max_line_length

        Returns:
            bool: True if the patch is admitted, False if it must be omitted
        """
        async with self._lock:
            if self._exhausted():
                self._omitted_count += 1
                return False
            if self._bytes_used + length > self.max_total_patch_size:
                logger.debug(
                    f"Patch of {length} chars refused at {self._bytes_used}/{self.max_total_patch_size}"
                )
                self._refused = True
                self._omitted_count += 1
                return False
            self._bytes_used += length
            if size_truncated:
                self._truncated_count += 1
            if line_truncated:
                self._line_truncated_count += 1
            return True

    async def record_omitted(self) -> None:
        """Count an entry that was skipped without being fetched."""
        async with self._lock:
            self._omitted_count += 1

    def truncation_note(self) -> Optional[str]:
        """Compose the aggregate note, or None when nothing was cut."""
        notes = []
        if self._truncated_count > 0:
            notes.append(
                f"{self._truncated_count} patch(es) truncated (exceeded {self.max_patch_length} chars)"
            )
        if self._line_truncated_count > 0:
            notes.append(
                f"{self._line_truncated_count} patch(es) with lines over "
                f"{self.max_line_length} chars shortened"
            )
        if self._omitted_count > 0:
            notes.append(
                f"{self._omitted_count} patch(es) omitted "
                f"(total size limit of {self.max_total_patch_size} chars reached)"
            )
        return "; ".join(notes) if notes else None
