"""
Response Schemas for Azure DevOps CLI

Envelope models used when the CLI prints machine-readable JSON with --json.

This module is part of the Presentation Layer and should only depend on
Core Layer components, not on Integration Layer.

Third-party package documentation:
- Pydantic: https://docs.pydantic.dev/

Sample input:
    format_cli_response(False, error="Path '/x' not found", category="not_found")

Expected output:
    {"success": False, "error": "Path '/x' not found", "category": "not_found"}
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response model"""
    success: bool = False
    error: str
    category: Optional[str] = None
    details: Optional[Any] = None


class SuccessResponse(BaseModel):
    """Success response model"""
    success: bool = True
    data: Any


def format_cli_response(
    success: bool,
    data: Optional[Any] = None,
    error: Optional[str] = None,
    category: Optional[str] = None,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """
    Format a standardized CLI response.

    Args:
        success: Whether the operation was successful
        data: Response data (for successful operations)
        error: Error message (for failed operations)
        category: Error category (for failed operations)
        details: Extra error details

    Returns:
        Dict[str, Any]: Formatted response
    """
    if success and data is not None:
        return SuccessResponse(data=data).model_dump()
    elif not success and error is not None:
        response = ErrorResponse(error=error, category=category, details=details)
        return response.model_dump(exclude_none=True)
    else:
        return {"success": success}
