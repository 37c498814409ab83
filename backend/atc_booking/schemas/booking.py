# backend/atc_booking/schemas/booking.py
"""
Booking schemas.

Request models sanitize free text on the way in but leave ``start_at`` /
``end_at`` as supplied (ISO-8601 string or datetime): the admission engine
owns temporal validation so malformed instants become an
``InvalidInterval`` rejection rather than a generic 422.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from ..core.constants import MAX_CODE_LENGTH, MAX_NOTES_LENGTH
from ..core.sanitize import clean_optional, clean_text
from ..core.timezone_utils import Instant
from ._strict_base import StrictModel, StrictRequestModel

MAX_BOOKING_TYPE_LENGTH = 32
MAX_USER_NAME_LENGTH = 255


class _BookingFields(StrictRequestModel):
    @field_validator("position", mode="before", check_fields=False)
    @classmethod
    def _clean_position(cls, v: object) -> object:
        if v is None:
            return v
        return clean_text(v, MAX_CODE_LENGTH)

    @field_validator("notes", mode="before", check_fields=False)
    @classmethod
    def _clean_notes(cls, v: object) -> object:
        if v is None:
            return v
        return clean_text(v, MAX_NOTES_LENGTH)

    @field_validator("booking_type", mode="before", check_fields=False)
    @classmethod
    def _clean_booking_type(cls, v: object) -> object:
        if v is None:
            return v
        return clean_optional(str(v), MAX_BOOKING_TYPE_LENGTH) or None


class BookingCreate(_BookingFields):
    """Request to book a position for ``[start_at, end_at)``."""

    position: Optional[str] = Field(None, description="Position code, e.g. RKSI_TWR")
    start_at: Optional[Instant] = Field(None, description="Start instant (ISO-8601, UTC if naive)")
    end_at: Optional[Instant] = Field(None, description="End instant (exclusive)")
    training_mode: bool = False
    exam_mode: bool = False
    no_voice: bool = False
    booking_type: Optional[str] = Field(None, description="training | event | exam")
    notes: Optional[str] = None
    user_name: Optional[str] = Field(None, description="Display name snapshot")

    @field_validator("user_name", mode="before")
    @classmethod
    def _clean_user_name(cls, v: object) -> object:
        if v is None:
            return v
        return clean_text(v, MAX_USER_NAME_LENGTH)


class BookingUpdate(_BookingFields):
    """Partial update; only fields that are sent are applied."""

    position: Optional[str] = None
    start_at: Optional[Instant] = None
    end_at: Optional[Instant] = None
    training_mode: Optional[bool] = None
    exam_mode: Optional[bool] = None
    no_voice: Optional[bool] = None
    booking_type: Optional[str] = None
    notes: Optional[str] = None


class BookingResponse(StrictModel):
    model_config = StrictModel.model_config | ConfigDict(from_attributes=True)

    id: str
    position: str
    user_vid: str
    user_name: str
    start_at: datetime
    end_at: datetime
    training_mode: bool
    exam_mode: bool
    no_voice: bool
    booking_type: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class OccupantResponse(StrictModel):
    """Who holds a position right now."""

    id: str
    vid: str
    start_at: datetime
    end_at: datetime


class DeletedResponse(StrictModel):
    ok: bool = True
    id: str
