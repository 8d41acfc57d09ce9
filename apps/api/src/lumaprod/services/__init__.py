"""
Business logic services for LumaProd.

This module provides the core services of the production pipeline:
- VerseSelector: Unused-verse selection from the KJV pool
- ContentStore: Daily content rows and verse reservation
- AssignmentScheduler: Monthly round-robin assignment to creators
- LifecycleController: Guarded review-state transitions
- GenerationCorrelator: Avatar-video jobs, callbacks and reconciliation

Services take a SQLAlchemy session and are constructed per request or task.
"""

from lumaprod.services.assignment import AssignmentResult, AssignmentScheduler
from lumaprod.services.content_store import ContentStore, month_range
from lumaprod.services.generation import (
    AvatarVideoRequest,
    CallbackOutcome,
    GenerationCorrelator,
    JobResult,
    ReconcileSummary,
    SubmissionSummary,
)
from lumaprod.services.generation_log import GenerationLog
from lumaprod.services.lifecycle import LifecycleController
from lumaprod.services.notifications import NotificationDispatcher
from lumaprod.services.verse_pool import TOTAL_VERSES, VerseReference, verse_pool
from lumaprod.services.verse_selection import PoolStats, VerseSelector

__all__ = [
    # Verses
    "VerseSelector",
    "VerseReference",
    "PoolStats",
    "verse_pool",
    "TOTAL_VERSES",
    # Content
    "ContentStore",
    "month_range",
    "LifecycleController",
    # Assignment
    "AssignmentScheduler",
    "AssignmentResult",
    # Generation
    "GenerationCorrelator",
    "GenerationLog",
    "AvatarVideoRequest",
    "CallbackOutcome",
    "JobResult",
    "ReconcileSummary",
    "SubmissionSummary",
    # Notifications
    "NotificationDispatcher",
]
