"""
Error Types for Azure DevOps MCP Tools

This module defines the exception hierarchy raised by the core layer. Every
error carries a category so that the CLI and MCP layers can report failures
uniformly without inspecting exception types.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Sample input:
    raise AzureDevOpsNotFoundError("Path '/README.md' not found")

Expected output:
    error.to_dict()
    # {'error': "Path '/README.md' not found", 'category': 'not_found'}
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """
    Enumeration of error categories.
    """
    NOT_FOUND = "not_found"              # Path, revision, or entry absent
    VALIDATION = "validation"            # Malformed or missing identifiers
    TRANSIENT_FETCH = "transient_fetch"  # A single blob read failed mid-stream
    AUTHENTICATION = "authentication"    # Credentials rejected
    PERMISSION = "permission"            # Credentials lack access
    INTERNAL = "internal"                # Anything unclassified


class AzureDevOpsError(Exception):
    """Base class for all errors raised by this package."""

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for a tool response."""
        response: Dict[str, Any] = {"error": self.message, "category": self.category.value}
        if self.details is not None:
            response["details"] = self.details
        return response


class AzureDevOpsNotFoundError(AzureDevOpsError):
    category = ErrorCategory.NOT_FOUND


class AzureDevOpsValidationError(AzureDevOpsError):
    category = ErrorCategory.VALIDATION


class TransientFetchError(AzureDevOpsError):
    category = ErrorCategory.TRANSIENT_FETCH


class AzureDevOpsAuthenticationError(AzureDevOpsError):
    category = ErrorCategory.AUTHENTICATION


class AzureDevOpsPermissionError(AzureDevOpsError):
    category = ErrorCategory.PERMISSION


_STATUS_ERRORS = {
    400: AzureDevOpsValidationError,
    401: AzureDevOpsAuthenticationError,
    403: AzureDevOpsPermissionError,
    404: AzureDevOpsNotFoundError,
}


def error_from_status(status_code: int, message: str, details: Optional[Any] = None) -> AzureDevOpsError:
    """
    Map an HTTP status code to the matching error type.

    Args:
        status_code: HTTP status returned by the service
        message: Human readable description of the failed call
        details: Optional response body for diagnostics

    Returns:
        AzureDevOpsError: Typed error instance (not raised)
    """
    error_cls = _STATUS_ERRORS.get(status_code, AzureDevOpsError)
    return error_cls(message, details)
