"""
Auth Endpoints.

Session lifecycle, account management and password reset. The session is
a signed JWT carried in an HttpOnly cookie.
"""

from fastapi import APIRouter, Response

from messenger.backend.core.config import get_app_config
from messenger.backend.core.dependencies import CurrentAccount, DbSession, RequestId
from messenger.backend.core.security import create_session_token
from messenger.backend.schemas.auth import (
    AccountResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from messenger.backend.schemas.base import ApiResponse, OkResult, ResponseMetadata
from messenger.backend.services.account import AccountService
from messenger.backend.services.password_reset import PasswordResetService

router = APIRouter()


def _set_session_cookie(response: Response, account_id: str) -> None:
    security = get_app_config().security
    cookie = security.session_cookie
    response.set_cookie(
        key=cookie.name,
        value=create_session_token(account_id),
        max_age=security.jwt.session_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=cookie.secure,
        samesite=cookie.samesite,
    )


def _clear_session_cookie(response: Response) -> None:
    cookie = get_app_config().security.session_cookie
    response.delete_cookie(
        key=cookie.name,
        httponly=True,
        secure=cookie.secure,
        samesite=cookie.samesite,
    )


@router.post(
    "/signup",
    response_model=ApiResponse[AccountResponse],
    status_code=201,
    summary="Create an account",
)
async def signup(
    data: SignupRequest,
    response: Response,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[AccountResponse]:
    """Create an account on the free plan and start a session."""
    account = await AccountService(db).signup(data)
    _set_session_cookie(response, account.id)
    return ApiResponse(
        data=AccountResponse.from_account(account),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/login",
    response_model=ApiResponse[AccountResponse],
    summary="Log in",
)
async def login(
    data: LoginRequest,
    response: Response,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[AccountResponse]:
    account = await AccountService(db).authenticate(data)
    _set_session_cookie(response, account.id)
    return ApiResponse(
        data=AccountResponse.from_account(account),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/logout",
    response_model=ApiResponse[OkResult],
    summary="Log out",
)
async def logout(response: Response, request_id: RequestId) -> ApiResponse[OkResult]:
    _clear_session_cookie(response)
    return ApiResponse(data=OkResult(), metadata=ResponseMetadata(request_id=request_id))


@router.get(
    "/me",
    response_model=ApiResponse[AccountResponse],
    summary="Current account",
)
async def me(account: CurrentAccount, request_id: RequestId) -> ApiResponse[AccountResponse]:
    return ApiResponse(
        data=AccountResponse.from_account(account),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/change-password",
    response_model=ApiResponse[OkResult],
    summary="Change password",
)
async def change_password(
    data: ChangePasswordRequest,
    account: CurrentAccount,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[OkResult]:
    await AccountService(db).change_password(account, data)
    return ApiResponse(data=OkResult(), metadata=ResponseMetadata(request_id=request_id))


@router.delete(
    "/account",
    response_model=ApiResponse[OkResult],
    summary="Delete account",
)
async def delete_account(
    account: CurrentAccount,
    response: Response,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[OkResult]:
    """Delete the account and everything it owns, then end the session."""
    await AccountService(db).delete_account(account)
    _clear_session_cookie(response)
    return ApiResponse(data=OkResult(), metadata=ResponseMetadata(request_id=request_id))


@router.post(
    "/forgot-password",
    response_model=ApiResponse[OkResult],
    summary="Request a password reset",
)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[OkResult]:
    """Always succeeds, whether or not the email is registered."""
    await PasswordResetService(db).request_reset(data.email)
    return ApiResponse(data=OkResult(), metadata=ResponseMetadata(request_id=request_id))


@router.post(
    "/reset-password",
    response_model=ApiResponse[OkResult],
    summary="Reset password with a token",
)
async def reset_password(
    data: ResetPasswordRequest,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[OkResult]:
    await PasswordResetService(db).reset_password(data.token, data.new_password)
    return ApiResponse(data=OkResult(), metadata=ResponseMetadata(request_id=request_id))
