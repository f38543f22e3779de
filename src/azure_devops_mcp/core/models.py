"""
Data Models for Azure DevOps MCP Tools

Pydantic models shared by the core operations: content requests and
responses, raw change records from the service, and the file change entries
emitted by the change enumerator.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to third-party package documentation:
- Pydantic: https://docs.pydantic.dev/latest/

Sample input:
    request = ContentRequest(project="Fabrikam", repository="web", path="/README.md")

Expected output:
    ContentResponse(content="# Web", is_directory=False, total_lines=1,
                    start_line=1, end_line=1).to_response()
    # {'content': '# Web', 'is_directory': False, 'total_lines': 1, 'start_line': 1, 'end_line': 1}
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class VersionType(str, Enum):
    """Kinds of version descriptors understood by the Git items API."""
    BRANCH = "branch"
    COMMIT = "commit"
    TAG = "tag"


class ChangeType(str, Enum):
    """Normalized change kinds for a file within a commit or pull request."""
    NONE = "none"
    ADD = "add"
    EDIT = "edit"
    ENCODING = "encoding"
    RENAME = "rename"
    DELETE = "delete"
    UNDELETE = "undelete"
    BRANCH = "branch"
    MERGE = "merge"
    LOCK = "lock"
    ROLLBACK = "rollback"
    SOURCE_RENAME = "source-rename"
    TARGET_RENAME = "target-rename"
    PROPERTY = "property"
    ALL = "all"
    UNKNOWN = "unknown"


class ContentRequest(BaseModel):
    """Parameters of a single file or directory content request."""
    project: str = Field(..., min_length=1, description="Project ID or name")
    repository: str = Field(..., min_length=1, description="Repository ID or name")
    path: str = Field("/", description="Path to the file or directory")
    version: Optional[str] = Field(None, description="Branch, commit or tag to read from")
    version_type: VersionType = Field(VersionType.BRANCH, description="Kind of the version value")
    start_line: Optional[int] = Field(None, description="First line to return (1-based)")
    end_line: Optional[int] = Field(None, description="Last line to return (inclusive)")


class ContentResponse(BaseModel):
    """File or directory content, with pagination and truncation metadata."""
    content: str
    is_directory: bool
    total_lines: Optional[int] = None
    start_line: Optional[int] = None
    end_line: Optional[int] = None
    truncated: Optional[bool] = None
    truncation_note: Optional[str] = None
    truncated_line_count: Optional[int] = None
    size_truncated: Optional[bool] = None
    next_start_line: Optional[int] = None

    def to_response(self) -> Dict[str, Any]:
        """Dump the response without the fields that were never set."""
        return self.model_dump(exclude_none=True)


class ChangeRecord(BaseModel):
    """One raw entry of a change list as reported by the service."""
    path: Optional[str] = None
    original_path: Optional[str] = None
    object_id: Optional[str] = None
    original_object_id: Optional[str] = None
    change_type_code: Optional[Union[int, str]] = None


class FileChangeEntry(BaseModel):
    """A file's change, optionally with its (bounded) unified diff."""
    model_config = ConfigDict(use_enum_values=True)

    path: str
    change_type: ChangeType
    patch: Optional[str] = None
    truncated: Optional[bool] = None


class ChangeListResult(BaseModel):
    """Ordered file changes of one revision plus aggregate truncation data."""
    entries: List[FileChangeEntry] = Field(default_factory=list)
    truncation_note: Optional[str] = None
    truncated_patch_count: Optional[int] = None
    line_truncated_patch_count: Optional[int] = None
    omitted_patch_count: Optional[int] = None

    def to_response(self) -> Dict[str, Any]:
        """Dump the result without the fields that were never set."""
        return self.model_dump(exclude_none=True)
