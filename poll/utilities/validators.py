"""
Input schemas using Pydantic for the JSON API.

Only whitespace is normalized here; blank names and labels are accepted and
turned into no-ops by the board itself.
"""
from pydantic import BaseModel, Field, field_validator


class ParticipantInput(BaseModel):
    """Schema for adding a participant."""
    name: str = ""

    @field_validator('name')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        return v.strip() if isinstance(v, str) else v


class ToggleInput(BaseModel):
    """Schema for toggling one availability flag."""
    week_index: int = Field(..., ge=0)


class WeekLabelInput(BaseModel):
    """Schema for renaming a week."""
    label: str = ""

    @field_validator('label')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        return v.strip() if isinstance(v, str) else v


class ClearRequest(BaseModel):
    """Schema for the clear-all request; nothing happens unless confirmed."""
    confirmed: bool = False
