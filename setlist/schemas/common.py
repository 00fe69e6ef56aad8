"""
Shared envelope pieces: pagination metadata and the error body.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class PageMeta(BaseModel):
    page: int = Field(..., ge=1, description="Current page (1-indexed)")
    per_page: int = Field(..., ge=1, description="Items per page")
    total: int = Field(..., ge=0, description="Items matching the filter across all pages")
    total_pages: int = Field(..., ge=0, description="ceil(total / per_page)")


class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    details: Optional[Dict[str, Any]] = Field(None, description="Per-field details, when available")


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing request."""

    error: ErrorBody
