# Copyright 2025 msq
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from hazard_watch.api.deps import get_current_user, require_user_service
from hazard_watch.api.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    UserEnvelope,
    UserResponse,
)
from hazard_watch.db.models import UserRecord
from hazard_watch.errors import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from hazard_watch.services import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    payload: RegisterRequest,
    users: UserService = Depends(require_user_service),
) -> AuthResponse:
    try:
        session = users.register(
            name=payload.name,
            email=str(payload.email),
            password=payload.password,
            phone=payload.phone,
            location=payload.location.to_record(),
        )
    except EmailAlreadyRegisteredError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.from_record(session.user),
        token=session.token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    users: UserService = Depends(require_user_service),
) -> AuthResponse:
    try:
        session = users.authenticate(email=str(payload.email), password=payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    return AuthResponse(
        message="Login successful",
        user=UserResponse.from_record(session.user),
        token=session.token,
    )


@router.get("/me", response_model=UserEnvelope)
@router.get("/profile", response_model=UserEnvelope)
async def current_user(user: UserRecord = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.from_record(user))


@router.put("/profile", response_model=AuthResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    user: UserRecord = Depends(get_current_user),
    users: UserService = Depends(require_user_service),
) -> AuthResponse:
    try:
        updated = users.update_profile(
            user.id,
            name=payload.name,
            phone=payload.phone,
            location=payload.location.to_record() if payload.location else None,
        )
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return AuthResponse(
        message="Profile updated successfully",
        user=UserResponse.from_record(updated),
        token=users.tokens.create_access_token(user_id=updated.id, email=updated.email),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(user: UserRecord = Depends(get_current_user)) -> MessageResponse:
    # tokens are stateless; the client drops its copy
    return MessageResponse(message="Logout successful")
