"""Position catalog schemas."""

from typing import Optional

from pydantic import ConfigDict

from ._strict_base import StrictModel


class PositionResponse(StrictModel):
    model_config = StrictModel.model_config | ConfigDict(from_attributes=True)

    code: str
    name: Optional[str] = None
    capacity: int
    role: Optional[str] = None
    division: Optional[str] = None
    required_rating: int
    required_rating_name: str
