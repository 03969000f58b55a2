"""
Authentication router.

Login, current principal, and the two-step password reset flow.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_portal.app.core.database import get_db
from rbac_portal.app.middleware.auth import (
    authenticate,
    get_auth_service,
    get_password_reset_service,
)
from rbac_portal.app.models.user_orm import UserORM
from rbac_portal.app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PrincipalSummary,
    ResetPasswordConfirm,
    ResetPasswordRequest,
)
from rbac_portal.app.schemas.common import MessageResponse
from rbac_portal.app.services.auth_service import AuthService
from rbac_portal.app.services.password_reset import PasswordResetService

router = APIRouter()

RESET_REQUESTED_MESSAGE = "If the email exists, a reset link has been sent"


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange email and password for a session token."""
    result = await auth.login(db, body.email, body.password)
    return LoginResponse(token=result.token, user=PrincipalSummary.model_validate(result.user))


@router.get("/me", response_model=PrincipalSummary)
async def me(principal: UserORM = Depends(authenticate)):
    return principal


@router.post("/reset-password", response_model=MessageResponse)
async def request_password_reset(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    resets: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Start a password reset. The answer is the same whether or not the email
    belongs to an account.
    """
    await resets.request_reset(db, body.email)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password/confirm", response_model=MessageResponse)
async def confirm_password_reset(
    body: ResetPasswordConfirm,
    db: AsyncSession = Depends(get_db),
    resets: PasswordResetService = Depends(get_password_reset_service),
):
    await resets.confirm_reset(db, body.token, body.new_password)
    return MessageResponse(message="Password reset successful")
