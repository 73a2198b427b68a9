from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ...dependencies import get_current_user_required, get_user_repository
from ....core.exceptions import AuthenticationError, UserExistsError
from ....models.user import User
from ....repositories.user_repository import UserRepository
from ....services.auth_service import AuthService
from ..schemas import AuthResponse, LoginRequest, SignupRequest

router = APIRouter()


@router.post("/signup", response_model=AuthResponse)
async def signup(
    request: SignupRequest,
    users: UserRepository = Depends(get_user_repository)
):
    try:
        user, token = AuthService(users).register(
            email=request.email,
            password=request.password,
            name=request.name,
            preferences=request.preferences,
        )
    except UserExistsError as e:
        raise HTTPException(status_code=409, detail=e.message)

    return AuthResponse(message="User registered successfully", user=user.to_public_dict(), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    users: UserRepository = Depends(get_user_repository)
):
    try:
        user, token = AuthService(users).login(request.email, request.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)

    return AuthResponse(message="Login successful", user=user.to_public_dict(), token=token)


@router.get("/me")
async def get_profile(current_user: User = Depends(get_current_user_required)) -> Dict[str, Any]:
    return current_user.to_public_dict()
