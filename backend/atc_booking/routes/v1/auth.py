# backend/atc_booking/routes/v1/auth.py
"""
Authentication routes - API v1

Endpoints:
    POST /register - Create or update a controller with an explicit rating
    POST /login - Resolve a VID (local, then IVAO) and issue a token
    GET /me - Claims of the presented token, or null
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ...api.dependencies import get_current_claims_optional, get_identity_directory
from ...auth import create_access_token, token_claims_for
from ...core.config import settings
from ...core.exceptions import DomainException, IdentityNotFoundException
from ...models.user import User
from ...schemas.auth import LoginRequest, MeResponse, RegisterRequest, TokenResponse, UserResponse
from ...services.identity_directory import FallbackPolicy, IdentityDirectory
from .errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(token_claims_for(user)),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse)
async def register(
    payload: RegisterRequest,
    directory: IdentityDirectory = Depends(get_identity_directory),
) -> TokenResponse:
    try:
        user = await asyncio.to_thread(
            directory.register,
            payload.vid,
            payload.rating,
            rating_level=payload.rating_level,
            name=payload.name,
            email=str(payload.email) if payload.email else None,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    directory: IdentityDirectory = Depends(get_identity_directory),
) -> TokenResponse:
    """
    Log in by VID.

    Unknown VIDs are looked up on IVAO. If IVAO is rate limited or down a
    placeholder account without a rating is created (configurable).
    """
    fallback = (
        FallbackPolicy.PLACEHOLDER
        if settings.identity_fallback_placeholder
        else FallbackPolicy.FAIL
    )
    try:
        user = await asyncio.to_thread(directory.resolve, payload.vid, fallback)
        if user is None:
            raise IdentityNotFoundException(payload.vid)
    except DomainException as e:
        handle_domain_exception(e)
    return _token_response(user)


@router.get("/me", response_model=MeResponse)
async def me(
    claims: Optional[Dict[str, Any]] = Depends(get_current_claims_optional),
) -> MeResponse:
    return MeResponse(user=claims)
