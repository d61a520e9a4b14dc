"""
Authentication endpoints for the ProcessHub API.

Sign-in and sign-up answer with the public user and set the session cookie.
Sign-up is email based: a one-time code is mailed and verified before the
account is created. Google sign-in redirects through the consent screen and
lands back on the web client with the session cookie set.
"""

import secrets
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from ...core.auth.google import GoogleOAuthClient, GoogleOAuthError
from ...core.auth.tokens import (
    InvalidTokenError,
    clear_auth_cookie,
    create_access_token,
    set_auth_cookie,
)
from ...core.config import get_config
from ...core.database.tortoise_schemas import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SendOTPRequest,
    SessionUser,
    SignInRequest,
    UserResponse,
    VerifyOTPRequest,
)
from ...core.dependencies import (
    get_auth_service,
    get_google_client,
    read_session_claims,
)
from ...core.logging import (
    SecurityEventType,
    SecuritySeverity,
    security_logger,
)
from ...core.services import AuthService

router = APIRouter(prefix="/auth", tags=["authentication"])

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_PATH = "/api/auth/google"
OAUTH_STATE_MAX_AGE = 600


@router.post("/signin")
async def sign_in(
    data: SignInRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    Sign in with email and password.

    Returns:
        The signed-in user; the session cookie is set on the response
    """
    user = await service.sign_in(data)
    set_auth_cookie(response, create_access_token(user))
    return {
        "message": "Successfully signed in",
        "user": UserResponse.model_validate(user).to_json(),
    }


@router.post("/signout")
async def sign_out(request: Request, response: Response) -> Dict[str, str]:
    """Clear the session cookie."""
    clear_auth_cookie(response)
    security_logger.log_security_event(
        SecurityEventType.LOGOUT, severity=SecuritySeverity.LOW, request=request
    )
    return {"message": "Successfully signed out"}


@router.get("/check", response_model=None)
async def check_session(request: Request) -> Union[Dict[str, Any], JSONResponse]:
    """
    Report whether the request carries a valid session.

    Returns:
        ``{authenticated: true, user}`` or a 401 with ``authenticated: false``
    """
    try:
        claims = read_session_claims(request)
    except InvalidTokenError:
        claims = None

    if claims is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"authenticated": False},
        )

    user = SessionUser.model_validate(claims)
    return {"authenticated": True, "user": user.to_json()}


@router.post("/send-otp")
async def send_otp(
    data: SendOTPRequest, service: AuthService = Depends(get_auth_service)
) -> Dict[str, str]:
    """Email a sign-up verification code."""
    await service.send_otp(data)
    return {"message": "OTP sent successfully"}


@router.post("/verify-otp")
async def verify_otp(
    data: VerifyOTPRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    Verify a sign-up code and create the account.

    Returns:
        The new user; the session cookie is set on the response
    """
    user = await service.verify_otp(data)
    set_auth_cookie(response, create_access_token(user), samesite="lax")
    return {
        "message": "OTP verified successfully",
        "user": UserResponse.model_validate(user).to_json(),
    }


@router.post("/forgot-password")
async def forgot_password(
    data: ForgotPasswordRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, str]:
    """
    Email a password reset link.

    The answer is the same whether or not the address has an account.
    """
    await service.forgot_password(data, origin=request.headers.get("origin"))
    security_logger.log_security_event(
        SecurityEventType.PASSWORD_RESET_REQUESTED,
        severity=SecuritySeverity.LOW,
        request=request,
        details={"email": data.email},
    )
    return {"message": "Password reset email sent successfully"}


@router.post("/reset-password")
async def reset_password(
    data: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)
) -> Dict[str, str]:
    """Set a new password with a reset token."""
    await service.reset_password(data)
    return {"message": "Password reset successfully"}


def _sign_in_error(reason: str) -> RedirectResponse:
    app_url = get_config().api.app_url.rstrip("/")
    return RedirectResponse(
        f"{app_url}/signin?error={quote(reason)}",
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/google", response_class=RedirectResponse)
async def google_sign_in(
    client: GoogleOAuthClient = Depends(get_google_client),
) -> RedirectResponse:
    """Redirect to the Google consent screen."""
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(
        client.authorization_url(state), status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        path=OAUTH_STATE_PATH,
        httponly=True,
        secure=get_config().is_production(),
        samesite="lax",
    )
    return response


@router.get("/google/callback", response_class=RedirectResponse)
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    client: GoogleOAuthClient = Depends(get_google_client),
    service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """
    Finish Google sign-in.

    Failures redirect to the sign-in page with an ``error`` code; success
    redirects to the web client with the session cookie set.
    """
    if not code:
        return _sign_in_error("no_code")

    expected = request.cookies.get(OAUTH_STATE_COOKIE)
    if not state or not expected or not secrets.compare_digest(state, expected):
        security_logger.log_access_denied(
            user_id=None,
            resource="google_callback",
            reason="state_mismatch",
            request=request,
        )
        return _sign_in_error("invalid_state")

    try:
        access_token = await client.exchange_code(code)
        profile = await client.fetch_profile(access_token)
    except GoogleOAuthError as e:
        return _sign_in_error(e.reason)

    user = await service.google_sign_in(profile)

    app_url = get_config().api.app_url.rstrip("/")
    response = RedirectResponse(f"{app_url}/", status_code=status.HTTP_302_FOUND)
    set_auth_cookie(response, create_access_token(user), samesite="lax")
    response.delete_cookie(OAUTH_STATE_COOKIE, path=OAUTH_STATE_PATH)
    return response
