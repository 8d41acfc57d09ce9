"""
Common schemas shared across multiple endpoints.

Response envelope, pagination metadata, health status and the base
schema for ORM-backed resources.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# Type variable for generic response data
T = TypeVar("T")


class PaginationMeta(BaseModel):
    """
    Pagination metadata included in list responses.

    Attributes:
        page: Current page number (1-indexed)
        page_size: Number of items per page
        total_items: Total number of items across all pages
        total_pages: Total number of pages
        has_next: Whether there is a next page
        has_prev: Whether there is a previous page
    """

    page: int = Field(ge=1, description="Current page number (1-indexed)")
    page_size: int = Field(ge=1, description="Number of items per page")
    total_items: int = Field(ge=0, description="Total number of items")
    total_pages: int = Field(ge=0, description="Total number of pages")
    has_next: bool = Field(description="Whether there is a next page")
    has_prev: bool = Field(description="Whether there is a previous page")

    @classmethod
    def create(
        cls,
        page: int,
        page_size: int,
        total_items: int,
    ) -> "PaginationMeta":
        """
        Create pagination metadata from query parameters and total count.

        Args:
            page: Current page number
            page_size: Items per page
            total_items: Total items matching the query

        Returns:
            PaginationMeta instance
        """
        total_pages = (total_items + page_size - 1) // page_size if total_items > 0 else 0
        return cls(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ApiResponse(BaseModel, Generic[T]):
    """
    Standard API response wrapper.

    Attributes:
        data: Response payload
        meta: Response metadata (request_id, pagination, etc.)
    """

    data: T
    meta: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """
    Health check response schema.

    Attributes:
        status: Overall health status
        version: Application version
        environment: Current environment
        timestamp: Server timestamp
        checks: Individual health check results
    """

    status: str = Field(description="Overall health status (healthy, degraded, unhealthy)")
    version: str = Field(description="Application version")
    environment: str = Field(description="Current environment")
    timestamp: datetime = Field(description="Server timestamp")
    checks: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Individual health check results",
    )


class BaseResourceSchema(BaseModel):
    """Base schema for ORM-backed resource responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Unique identifier")
    created_at: datetime = Field(description="When the resource was created")
    updated_at: datetime = Field(description="When the resource was last updated")
