"""Pydantic request and response models for the HTTP API."""

from .auth import LoginRequest, MeResponse, RegisterRequest, TokenResponse, UserResponse
from .booking import (
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    DeletedResponse,
    OccupantResponse,
)
from .position import PositionResponse

__all__ = [
    "BookingCreate",
    "BookingResponse",
    "BookingUpdate",
    "DeletedResponse",
    "LoginRequest",
    "MeResponse",
    "OccupantResponse",
    "PositionResponse",
    "RegisterRequest",
    "TokenResponse",
    "UserResponse",
]
