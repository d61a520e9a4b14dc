"""
Authentication service for ProcessHub.

This module contains the sign-in, email sign-up, Google sign-in and
password reset workflows. Session cookies are set by the route handlers;
this service returns the user the session is issued for.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

from redis.exceptions import RedisError

from ..auth.otp import OTPStore
from ..auth.password import (
    generate_otp,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from ..auth.tortoise_models import AuthType, User, UserRole
from ..config import get_config
from ..database.tortoise_schemas import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SendOTPRequest,
    SignInRequest,
    VerifyOTPRequest,
)
from ..email import EmailSender
from ..errors import BadRequestError, ServiceError, UnauthorizedError
from ..logging import (
    SecurityEventType,
    SecuritySeverity,
    get_logger,
    security_logger,
)
from ..repositories.user_repository import UserRepository, normalize_email

logger = get_logger(__name__)


def reset_link_base(origin: Optional[str]) -> str:
    """
    Pick the base URL for a password reset link.

    The request origin is only trusted when it is one of the allowed CORS
    origins; anything else falls back to the configured app URL.

    Args:
        origin: Origin header of the request, if any

    Returns:
        Base URL without a trailing slash
    """
    config = get_config()
    if origin:
        candidate = origin.strip().rstrip("/")
        allowed = {o.rstrip("/") for o in config.cors_origins_resolved}
        if candidate in allowed:
            return candidate
        logger.warning("Ignoring untrusted origin for reset link", origin=origin)
    return config.api.app_url.rstrip("/")


class AuthService:
    """Sign-in, sign-up and password reset workflows."""

    def __init__(
        self,
        user_repository: UserRepository,
        otp_store: OTPStore,
        email_sender: EmailSender,
    ) -> None:
        """
        Initialize the authentication service.

        Args:
            user_repository: User data access
            otp_store: Store for pending sign-up codes
            email_sender: Outgoing email
        """
        self.user_repository = user_repository
        self.otp_store = otp_store
        self.email_sender = email_sender

    async def sign_in(self, data: SignInRequest) -> User:
        """
        Check an email and password pair.

        Args:
            data: Sign-in credentials

        Returns:
            The authenticated user

        Raises:
            BadRequestError: If a credential is missing
            UnauthorizedError: If the credentials do not match
        """
        if not data.email or not data.password:
            raise BadRequestError("Email and password are required")

        user = await self.user_repository.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.hashed_password):
            security_logger.log_auth_failure(
                email=data.email, reason="invalid_credentials"
            )
            raise UnauthorizedError("Invalid credentials")

        security_logger.log_auth_success(user_id=str(user.id))
        logger.info("User signed in", user_id=str(user.id), event_type="user_signin")
        return user

    async def send_otp(self, data: SendOTPRequest) -> None:
        """
        Generate and email a sign-up code.

        Raises:
            BadRequestError: If the email is missing
            ServiceError: If the code could not be delivered
        """
        if not data.email:
            raise BadRequestError("Email is required")

        email = normalize_email(data.email)
        code = generate_otp()
        try:
            await self.otp_store.save(email, code)
        except (RedisError, OSError) as e:
            logger.error("Could not store OTP", email=email, error=str(e))
            raise ServiceError("Failed to send OTP") from e

        if not await self.email_sender.send_otp_email(email, code):
            try:
                await self.otp_store.discard(email)
            except (RedisError, OSError) as e:
                logger.warning("Could not discard OTP", email=email, error=str(e))
            raise ServiceError("Failed to send OTP")

        logger.info("OTP sent", email=email, event_type="otp_sent")

    async def verify_otp(self, data: VerifyOTPRequest) -> User:
        """
        Complete sign-up by checking the code and creating the account.

        Returns:
            The newly created user

        Raises:
            BadRequestError: If the code is missing, wrong or expired, or the
                email is already registered
            ServiceError: If the code store is unavailable
        """
        if not data.email or not data.otp:
            raise BadRequestError("Email and OTP are required")

        email = normalize_email(data.email)
        try:
            valid = await self.otp_store.verify(email, data.otp)
        except (RedisError, OSError) as e:
            logger.error("Could not read OTP", email=email, error=str(e))
            raise ServiceError("Failed to verify OTP") from e
        if not valid:
            security_logger.log_auth_failure(email=email, reason="invalid_otp")
            raise BadRequestError("Invalid or expired OTP")

        if await self.user_repository.email_exists(email):
            raise BadRequestError("User already exists")

        try:
            role = UserRole(data.role or UserRole.USER.value)
        except ValueError:
            role = UserRole.USER

        user = await self.user_repository.create(
            email=email,
            name=data.name or email,
            hashed_password=hash_password(data.password) if data.password else None,
            role=role,
            auth_type=AuthType.EMAIL,
        )
        logger.info("User registered", user_id=str(user.id), event_type="user_signup")
        return user

    async def forgot_password(
        self, data: ForgotPasswordRequest, origin: Optional[str] = None
    ) -> None:
        """
        Email a password reset link.

        Unknown emails are answered exactly like known ones.

        Args:
            data: Request with the account email
            origin: Origin header of the request; used for the link only when
                it is an allowed CORS origin

        Raises:
            BadRequestError: If the email is missing
            ServiceError: If the reset email could not be delivered
        """
        if not data.email:
            raise BadRequestError("Email is required")

        user = await self.user_repository.get_by_email(data.email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        security = get_config().security
        token = generate_reset_token()
        await self.user_repository.update(
            user,
            reset_password_token=hash_reset_token(token),
            reset_password_expire=datetime.now(timezone.utc)
            + timedelta(seconds=security.reset_token_lifetime_seconds),
        )

        base_url = reset_link_base(origin)
        email_param = quote(user.email, safe="")
        reset_url = f"{base_url}/reset-password?token={token}&email={email_param}"
        if not await self.email_sender.send_password_reset_email(user.email, reset_url):
            await self.user_repository.update(
                user, reset_password_token=None, reset_password_expire=None
            )
            raise ServiceError("Failed to send reset email")

        logger.info(
            "Password reset email sent",
            user_id=str(user.id),
            event_type="password_reset_requested",
        )

    async def reset_password(self, data: ResetPasswordRequest) -> None:
        """
        Set a new password using a reset token.

        Raises:
            BadRequestError: If fields are missing, the token is invalid or
                expired, or the password is unchanged
        """
        if not data.token or not data.email or not data.password:
            raise BadRequestError("Missing required fields")

        user = await self.user_repository.get_by_reset_token(
            data.email, hash_reset_token(data.token), datetime.now(timezone.utc)
        )
        if user is None:
            raise BadRequestError("Invalid or expired reset token")

        if verify_password(data.password, user.hashed_password):
            raise BadRequestError(
                "New password cannot be the same as your old password"
            )

        await self.user_repository.update(
            user,
            hashed_password=hash_password(data.password),
            reset_password_token=None,
            reset_password_expire=None,
        )
        security_logger.log_security_event(
            SecurityEventType.PASSWORD_CHANGED,
            user_id=str(user.id),
            details={"method": "reset_token"},
            severity=SecuritySeverity.LOW,
        )

    async def google_sign_in(self, profile: Dict[str, Any]) -> User:
        """
        Find, link or create the account for a Google profile.

        The account is looked up by Google id first and then by email; an
        email match is linked to the Google id. Google pictures only replace
        a profile picture that is unset or came from Google earlier.

        Args:
            profile: Google userinfo with ``id``, ``email``, ``name`` and
                ``picture``

        Returns:
            The signed-in user
        """
        google_id = str(profile["id"])
        picture = profile.get("picture") or None

        user = await self.user_repository.get_by_google_id(google_id)
        if user is not None:
            changes: Dict[str, Any] = {"name": profile.get("name") or user.name}
            if picture:
                if not user.profile_picture or user.profile_picture == user.picture:
                    changes["profile_picture"] = picture
                changes["picture"] = picture
            user = await self.user_repository.update(user, **changes)
            logger.info(
                "Google user signed in",
                user_id=str(user.id),
                event_type="google_signin",
            )
        else:
            user = await self.user_repository.get_by_email(profile["email"])
            if user is not None:
                user = await self.user_repository.update(
                    user,
                    google_id=google_id,
                    picture=picture or user.picture,
                    profile_picture=user.profile_picture or picture,
                    auth_type=AuthType.GOOGLE,
                )
                logger.info(
                    "Google account linked",
                    user_id=str(user.id),
                    event_type="google_linked",
                )
            else:
                email = normalize_email(profile["email"])
                user = await self.user_repository.create(
                    email=email,
                    name=profile.get("name") or email,
                    hashed_password=None,
                    google_id=google_id,
                    picture=picture,
                    profile_picture=picture,
                    role=UserRole.USER,
                    auth_type=AuthType.GOOGLE,
                )
                logger.info(
                    "Google user registered",
                    user_id=str(user.id),
                    event_type="user_signup",
                )

        security_logger.log_auth_success(
            user_id=str(user.id), additional_details={"method": "google"}
        )
        return user
