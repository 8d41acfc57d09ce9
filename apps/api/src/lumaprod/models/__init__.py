"""
SQLAlchemy ORM Models for LumaProd.

This module exports all database models and enums used in the application.
"""

from lumaprod.models.base import Base, TimestampMixin
from lumaprod.models.content_item import ContentItem
from lumaprod.models.creator import Creator
from lumaprod.models.enums import (
    ContentMode,
    ContentStatus,
    GenerationField,
    GenerationStatus,
    UserRole,
)
from lumaprod.models.generation_log import GenerationLogEntry
from lumaprod.models.used_verse import UsedVerse

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Models
    "Creator",
    "ContentItem",
    "UsedVerse",
    "GenerationLogEntry",
    # Enums
    "ContentMode",
    "ContentStatus",
    "GenerationField",
    "GenerationStatus",
    "UserRole",
]
