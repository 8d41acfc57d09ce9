"""
Pydantic schemas for admin creator management.

Defines the creator response and the create/update requests. HeyGen
avatar and voice ids may be comma-separated pools.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from lumaprod.schemas.common import BaseResourceSchema

# Columns an update may clear with an explicit null
NULLABLE_FIELDS = frozenset({"email", "heygen_avatar_id", "heygen_voice_id"})


def _clean_languages(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    cleaned = [code.strip() for code in value]
    if any(not code for code in cleaned):
        raise ValueError("Language codes must not be empty")
    return list(dict.fromkeys(cleaned))


class CreatorResponse(BaseResourceSchema):
    """
    Schema for a creator profile.

    Attributes:
        user_id: Token subject linked to the profile
        name: Display name
        languages: Language codes the creator records in
        monthly_capacity: Items assignable per month and mode
        active: Whether the creator receives new work
    """

    user_id: str
    name: str
    email: str | None = None
    languages: list[str]
    monthly_capacity: int
    can_bible: bool
    can_positivity: bool
    is_ai: bool
    heygen_avatar_id: str | None = None
    heygen_voice_id: str | None = None
    active: bool


class CreatorCreate(BaseModel):
    """Create a creator profile for an existing user."""

    user_id: str = Field(min_length=1, max_length=64, description="Token subject of the user")
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    languages: list[str] = Field(min_length=1, description="Language codes, at least one")
    monthly_capacity: int = Field(ge=1, le=100)
    can_bible: bool
    can_positivity: bool
    is_ai: bool
    heygen_avatar_id: str | None = Field(default=None, max_length=1024)

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, value: list[str]) -> list[str]:
        return _clean_languages(value)


class CreatorUpdate(BaseModel):
    """
    Partial update of a creator profile.

    Only fields present in the request are changed. Setting ``active`` to
    true reactivates a deactivated profile.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    languages: list[str] | None = Field(default=None, min_length=1)
    monthly_capacity: int | None = Field(default=None, ge=1, le=100)
    can_bible: bool | None = None
    can_positivity: bool | None = None
    is_ai: bool | None = None
    heygen_avatar_id: str | None = Field(default=None, max_length=1024)
    heygen_voice_id: str | None = Field(default=None, max_length=1024)
    active: bool | None = None

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, value: list[str] | None) -> list[str] | None:
        return _clean_languages(value)

    def changes(self) -> dict[str, Any]:
        """Fields to apply; nulls are ignored except on the optional columns."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in NULLABLE_FIELDS
        }


class CreatorDeactivateResponse(BaseModel):
    """Result of deactivating a creator."""

    deactivated: bool = True
    unassigned_count: int = Field(ge=0, description="Pending items handed back for reassignment")
