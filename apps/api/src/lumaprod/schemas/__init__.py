"""
Pydantic schemas for API request/response validation.

This module exports all schemas used for data validation and serialization
in the LumaProd API endpoints.
"""

from lumaprod.schemas.assignment import (
    AssignmentRequest,
    AutoAssignRequest,
    AutoAssignResponse,
    ReassignRequest,
    ReassignResponse,
)
from lumaprod.schemas.common import (
    ApiResponse,
    BaseResourceSchema,
    HealthResponse,
    PaginationMeta,
)
from lumaprod.schemas.creator import (
    CreatorCreate,
    CreatorDeactivateResponse,
    CreatorResponse,
    CreatorUpdate,
)
from lumaprod.schemas.content import (
    ApproveRequest,
    ContentCreateRequest,
    ContentItemResponse,
    ContentListResponse,
    RejectRequest,
    ReviewRequest,
    SubmissionRequest,
)
from lumaprod.schemas.generation import (
    AvatarTriggerRequest,
    AvatarTriggerResponse,
    GenerationLogResponse,
    HeyGenWebhookPayload,
    PoolResetResponse,
    PoolStatsResponse,
    WebhookAck,
)

__all__ = [
    # Common
    "ApiResponse",
    "BaseResourceSchema",
    "PaginationMeta",
    "HealthResponse",
    # Content
    "ContentItemResponse",
    "ContentListResponse",
    "ContentCreateRequest",
    "SubmissionRequest",
    "ApproveRequest",
    "RejectRequest",
    "ReviewRequest",
    # Creators
    "CreatorResponse",
    "CreatorCreate",
    "CreatorUpdate",
    "CreatorDeactivateResponse",
    # Assignment
    "AssignmentRequest",
    "AutoAssignRequest",
    "ReassignRequest",
    "AutoAssignResponse",
    "ReassignResponse",
    # Generation
    "HeyGenWebhookPayload",
    "WebhookAck",
    "AvatarTriggerRequest",
    "AvatarTriggerResponse",
    "GenerationLogResponse",
    "PoolStatsResponse",
    "PoolResetResponse",
]
