"""
Truncation Engine for Azure DevOps MCP Tools

This module keeps every text artifact returned to the model inside a fixed
size budget. It provides the three building blocks shared by file content,
commit diffs, pull request diffs and search results:

1. Content window selection: clamp a requested line range to the file and to
   the page size
2. Per-line truncation: shorten lines longer than the line budget
3. Total-size truncation: drop trailing lines once the character budget is
   spent

Line-level shortening always runs before the character budget is applied, so
the accounting is deterministic for a given input.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    lines = ["a" * 2000, "short"]
    result = truncate_long_lines(lines, max_line_length=1000)

Expected output:
    result.truncated_count  # 1
    result.lines[0]         # "aaa...a [truncated]" (1000 chars + marker)
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from azure_devops_mcp.core.config import DEFAULT_BUDGET, TruncationBudget
from azure_devops_mcp.core.errors import AzureDevOpsValidationError

LINE_TRUNCATION_MARKER = " [truncated]"
CONTENT_TRUNCATION_MARKER = "[content truncated due to size limits]"
OMITTED_PATCH_PLACEHOLDER = "[omitted - total patch size limit reached]"


def patch_truncation_marker(max_patch_length: int) -> str:
    """Marker appended to a patch cut at the per-patch budget."""
    return f"... [truncated - patch exceeded {max_patch_length} characters]"


@dataclass(frozen=True)
class LineWindow:
    """Resolved 1-based inclusive line range. Empty when end < start."""
    start: int
    end: int

    @property
    def line_count(self) -> int:
        return max(0, self.end - self.start + 1)

    @property
    def is_empty(self) -> bool:
        return self.line_count == 0


@dataclass(frozen=True)
class LineTruncation:
    lines: List[str]
    truncated_count: int


@dataclass(frozen=True)
class SizeTruncation:
    lines: List[str]
    truncated: bool
    end_line: int


@dataclass(frozen=True)
class TextTruncation:
    """Outcome of running both truncators over a whole text."""
    content: str
    truncated_line_count: int
    size_truncated: bool

    @property
    def truncated(self) -> bool:
        return self.truncated_line_count > 0 or self.size_truncated


def split_lines(text: str) -> List[str]:
    """Split text on newlines. An empty text is a single empty line."""
    return text.split("\n")


def compute_window(
    total_lines: int,
    requested_start: Optional[int] = None,
    requested_end: Optional[int] = None,
    max_lines_per_page: int = DEFAULT_BUDGET.max_lines_per_page,
) -> LineWindow:
    """
    Resolve a requested line range into a clamped, page-bounded window.

    Args:
        total_lines: Number of lines in the file
        requested_start: First requested line (defaults to 1)
        requested_end: Last requested line (defaults to one full page)
        max_lines_per_page: Hard cap on the window size

    Returns:
        LineWindow: Window within [1, total_lines]; empty if start is past the end

    Raises:
        AzureDevOpsValidationError: If the requested end precedes the start
    """
    start = 1 if requested_start is None else requested_start
    if requested_end is not None and requested_end < start:
        raise AzureDevOpsValidationError(
            f"Invalid line range: end line {requested_end} is before start line {start}"
        )

    end = start + max_lines_per_page - 1 if requested_end is None else requested_end
    if end - start + 1 > max_lines_per_page:
        end = start + max_lines_per_page - 1

    start = max(1, start)
    end = min(total_lines, end)
    if start > total_lines:
        return LineWindow(start=start, end=start - 1)
    return LineWindow(start=start, end=end)


def truncate_long_lines(lines: Sequence[str], max_line_length: int) -> LineTruncation:
    """
    Shorten every line longer than max_line_length and count them.

    Args:
        lines: Lines to process
        max_line_length: Characters kept per line before the marker

    Returns:
        LineTruncation: Processed lines and the number of shortened lines
    """
    processed: List[str] = []
    count = 0
    for line in lines:
        if len(line) > max_line_length:
            processed.append(line[:max_line_length] + LINE_TRUNCATION_MARKER)
            count += 1
        else:
            processed.append(line)
    return LineTruncation(lines=processed, truncated_count=count)


def truncate_total_size(lines: Sequence[str], max_chars: int, start_line: int = 1) -> SizeTruncation:
    """
    Keep leading lines while their joined length stays within max_chars.

    Args:
        lines: Lines to process, already per-line truncated
        max_chars: Character budget for the joined lines
        start_line: Line number of the first element, used for the end line

    Returns:
        SizeTruncation: Retained lines, whether any were dropped, and the
        effective last line number
    """
    used = 0
    retained = 0
    for index, line in enumerate(lines):
        cost = len(line) + (1 if index > 0 else 0)
        if used + cost > max_chars:
            break
        used += cost
        retained += 1

    return SizeTruncation(
        lines=list(lines[:retained]),
        truncated=retained < len(lines),
        end_line=start_line + retained - 1,
    )


def render_lines(lines: Sequence[str], marker: Optional[str] = None) -> str:
    """Join lines, appending the marker on its own line when given."""
    content = "\n".join(lines)
    if marker:
        content += "\n" + marker
    return content


def truncate_text(text: str, max_line_length: int, max_chars: int, marker: str) -> TextTruncation:
    """
    Apply per-line truncation then total-size truncation to a whole text.

    Args:
        text: Raw text
        max_line_length: Characters kept per line
        max_chars: Character budget for the whole text (marker excluded)
        marker: Marker appended when trailing lines are dropped

    Returns:
        TextTruncation: Bounded content and what was cut
    """
    by_line = truncate_long_lines(split_lines(text), max_line_length)
    if by_line.truncated_count == 0 and len(text) <= max_chars:
        return TextTruncation(content=text, truncated_line_count=0, size_truncated=False)

    by_size = truncate_total_size(by_line.lines, max_chars)
    content = render_lines(by_size.lines, marker if by_size.truncated else None)
    return TextTruncation(
        content=content,
        truncated_line_count=by_line.truncated_count,
        size_truncated=by_size.truncated,
    )


def truncate_file_content(content: str, budget: TruncationBudget = DEFAULT_BUDGET) -> TextTruncation:
    """Bound a whole file's text, as used for search result enrichment."""
    return truncate_text(
        content,
        budget.max_line_length,
        budget.max_total_chars,
        CONTENT_TRUNCATION_MARKER,
    )


def truncate_patch(patch: str, budget: TruncationBudget = DEFAULT_BUDGET) -> TextTruncation:
    """Bound a single file's unified diff to the per-patch budget."""
    return truncate_text(
        patch,
        budget.max_line_length,
        budget.max_patch_length,
        patch_truncation_marker(budget.max_patch_length),
    )


def line_truncation_note(count: int, max_line_length: int) -> str:
    return f"{count} line(s) exceeded {max_line_length} characters and were truncated"


def size_truncation_note(max_chars: int, end_line: int) -> str:
    return f"content exceeded {max_chars} characters; output stops after line {end_line}"


def pagination_note(start: int, end: int, total_lines: int) -> str:
    return f"showing lines {start}-{end} of {total_lines}; request startLine={end + 1} to continue"
