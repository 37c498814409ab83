"""Authentication schemas: VID login and explicit registration."""

from typing import Any, Dict, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from ..core.constants import MAX_CODE_LENGTH, MAX_REGISTRATION_RATING, NO_RATING
from ..core.sanitize import clean_text
from ._strict_base import StrictModel, StrictRequestModel


class LoginRequest(StrictRequestModel):
    vid: str = Field(..., min_length=1, description="IVAO VID")

    @field_validator("vid", mode="before")
    @classmethod
    def _clean_vid(cls, v: object) -> object:
        return v if v is None else clean_text(v, MAX_CODE_LENGTH)


class RegisterRequest(StrictRequestModel):
    vid: str = Field(..., min_length=1)
    rating: int = Field(..., ge=NO_RATING, le=MAX_REGISTRATION_RATING)
    rating_level: Optional[str] = Field(None, max_length=16)
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None

    @field_validator("vid", mode="before")
    @classmethod
    def _clean_vid(cls, v: object) -> object:
        return v if v is None else clean_text(v, MAX_CODE_LENGTH)

    @field_validator("name", "rating_level", mode="before")
    @classmethod
    def _clean_text_fields(cls, v: object) -> object:
        if v is None:
            return v
        return clean_text(v) or None


class UserResponse(StrictModel):
    model_config = StrictModel.model_config | ConfigDict(from_attributes=True)

    vid: str
    name: Optional[str] = None
    rating: int
    rating_level: Optional[str] = None
    division_id: Optional[str] = None
    country_id: Optional[str] = None


class TokenResponse(StrictModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class MeResponse(StrictModel):
    """Decoded token claims, or ``user: null`` when no valid token was sent."""

    user: Optional[Dict[str, Any]] = None
