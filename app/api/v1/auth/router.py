from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser, LoginRequest, LoginResponse
from app.auth.services import login_user
from app.core.schemas import ApiResponse, ok
from app.db.session import get_db

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    return ok(await login_user(db, payload), message="Login successful")


@router.post("/login-oauth")
async def login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """OAuth2 password form for the interactive docs; username is the email."""
    payload = LoginRequest(email=form_data.username.strip(), password=form_data.password)
    result = await login_user(db, payload)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.get("/me", response_model=ApiResponse[CurrentUser])
async def me(current_user: CurrentUser = Depends(get_current_user)):
    return ok(current_user)
