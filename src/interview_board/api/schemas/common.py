"""Shared Pydantic schemas for API responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys, populated by field name or alias."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationMeta(CamelModel):
    """Pagination metadata for page-numbered list responses."""

    page: int = Field(description="Current 1-based page number")
    limit: int = Field(description="Maximum number of items per page")
    total: int = Field(description="Total number of items available")
    pages: int = Field(description="Total number of pages")
    has_more: bool = Field(description="Whether a later page exists")
