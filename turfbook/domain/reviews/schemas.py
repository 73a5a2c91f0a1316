"""Review domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ReviewAspects(BaseModel):
    cleanliness: Optional[int] = Field(None, ge=1, le=5)
    facilities: Optional[int] = Field(None, ge=1, le=5)
    staff: Optional[int] = Field(None, ge=1, le=5)
    value: Optional[int] = Field(None, ge=1, le=5)


def _strip_comment(v):
    if v is not None:
        v = v.strip() or None
    return v


class ReviewCreate(BaseModel):
    """Schema for reviewing a turf after playing there"""

    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    aspects: Optional[ReviewAspects] = None
    # Defaults to the oldest completed booking that has no review yet
    bookingId: Optional[int] = None

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v):
        return _strip_comment(v)


class ReviewUpdate(BaseModel):
    """Schema for editing a review; omitted fields are kept"""

    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    aspects: Optional[ReviewAspects] = None

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v):
        return _strip_comment(v)
