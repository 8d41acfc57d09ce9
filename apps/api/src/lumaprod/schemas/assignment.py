"""
Pydantic schemas for the assignment endpoint.

One endpoint accepts either an auto-assign run or a single-day reassignment,
selected by ``action``.
"""

from typing import Literal

from pydantic import BaseModel, Field

from lumaprod.models.enums import ContentMode

MONTH_REGEX = r"^\d{4}-\d{2}$"


class AutoAssignRequest(BaseModel):
    """
    Round-robin assignment of a month's unassigned items.

    Attributes:
        month: Target month (YYYY-MM)
        mode: Content mode
        language: Optional language filter
    """

    action: Literal["auto_assign"]
    month: str = Field(pattern=MONTH_REGEX, description="Target month (YYYY-MM)")
    mode: ContentMode
    language: str | None = Field(default=None, max_length=10)


class ReassignRequest(BaseModel):
    """Give one day's item to a specific creator."""

    action: Literal["reassign"]
    content_item_id: int = Field(ge=1)
    creator_id: int = Field(ge=1)


AssignmentRequest = AutoAssignRequest | ReassignRequest


class AutoAssignResponse(BaseModel):
    """Counts from an auto-assign run."""

    assigned: int = Field(ge=0)
    skipped: int = Field(ge=0)


class ReassignResponse(BaseModel):
    """Result of a reassignment."""

    success: bool = True
    content_item_id: int
    creator_id: int
