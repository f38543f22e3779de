"""
Configuration Module for Azure DevOps MCP Tools

This module centralizes connection settings for the Azure DevOps REST API and
the truncation budget shared by every content-producing operation. Sensitive
values (the personal access token) are loaded from environment variables,
optionally from a .env file.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Third-Party Package Documentation:
- python-dotenv: https://github.com/theskumar/python-dotenv
- Pydantic: https://docs.pydantic.dev/latest/

Sample Input:
Environment variables (e.g., in .env file or exported):
AZURE_DEVOPS_ORG_URL="https://dev.azure.com/contoso"
AZURE_DEVOPS_PAT="xxxxxxxx"
AZURE_DEVOPS_DEFAULT_PROJECT="Fabrikam"

Expected Output (when imported):
    from azure_devops_mcp.core.config import DEFAULT_BUDGET
    DEFAULT_BUDGET.max_line_length  # 1000
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load environment variables from .env file if it exists
load_dotenv()

# --- Connection Configuration ---
AZURE_DEVOPS_ORG_URL: str = os.environ.get("AZURE_DEVOPS_ORG_URL", "")
AZURE_DEVOPS_PAT: str = os.environ.get("AZURE_DEVOPS_PAT", "")
AZURE_DEVOPS_DEFAULT_PROJECT: Optional[str] = os.environ.get("AZURE_DEVOPS_DEFAULT_PROJECT") or None
AZURE_DEVOPS_API_VERSION: str = os.environ.get("AZURE_DEVOPS_API_VERSION", "7.1")
AZURE_DEVOPS_SEARCH_HOST: str = os.environ.get("AZURE_DEVOPS_SEARCH_HOST", "https://almsearch.dev.azure.com")

# --- Transport Configuration ---
REQUEST_TIMEOUT: float = float(os.environ.get("AZURE_DEVOPS_REQUEST_TIMEOUT", 30))
REQUEST_MAX_ATTEMPTS: int = int(os.environ.get("AZURE_DEVOPS_REQUEST_MAX_ATTEMPTS", 3))
STREAM_CHUNK_SIZE: int = 64 * 1024

# --- Logging ---
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE: str = os.environ.get("AZURE_DEVOPS_MCP_LOG_FILE", "logs/azure_devops_mcp.log")

# --- Search ---
CODE_SEARCH_PAGE_SIZE: int = 25


class TruncationBudget(BaseModel):
    """Size limits applied to every text artifact returned to the model."""

    model_config = ConfigDict(frozen=True)

    max_line_length: int = Field(1000, gt=0, description="Characters kept per line")
    max_total_chars: int = Field(20000, gt=0, description="Characters per single-content response")
    max_lines_per_page: int = Field(1000, gt=0, description="Lines per content page")
    max_patch_length: int = Field(10000, gt=0, description="Characters per file patch")
    max_total_patch_size: int = Field(50000, gt=0, description="Characters across all patches in one response")
    max_search_enrichment: int = Field(10, gt=0, description="Concurrent content fetches for search results")
    max_diff_concurrency: int = Field(8, gt=0, description="Concurrent change entries being diffed")


DEFAULT_BUDGET = TruncationBudget()
