"""
External API client integrations for LumaProd.

This module provides clients for external services:
- HeyGen: Avatar video generation with webhook completion
- Email: Transactional email delivery for creator notifications

All clients follow consistent patterns:
- Retry logic with exponential backoff
- Bounded timeouts
- Comprehensive logging
"""

from lumaprod.integrations.base_client import SyncBaseHTTPClient, UsageMetrics
from lumaprod.integrations.email_client import EmailClient
from lumaprod.integrations.heygen_client import (
    HeyGenClient,
    VideoGenerationJob,
    VideoStatus,
    get_heygen_client,
)

__all__ = [
    # Base
    "SyncBaseHTTPClient",
    "UsageMetrics",
    # HeyGen
    "HeyGenClient",
    "VideoGenerationJob",
    "VideoStatus",
    "get_heygen_client",
    # Email
    "EmailClient",
]
