from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

class PaginationInfo(BaseModel):
    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Items per page")
    pages: int = Field(..., description="Total number of pages")

class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable error message")
    code: str = Field(..., description="Machine readable error code")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Field level details, if any")
