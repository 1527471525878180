"""
Pydantic schemas for content block responses
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Schema for every error body"""
    error: str = Field(..., description="Human readable error message")


class UpdateResponse(BaseModel):
    """Schema for update response"""
    document: Optional[Dict[str, Any]] = Field(None, description="Updated content block")
    updated: int = Field(..., description="Number of records updated")


class DeleteResponse(BaseModel):
    """Schema for delete response"""
    id: str = Field(..., description="Identifier that was passed in")
    deleted: int = Field(..., description="Number of records deleted")
