from datetime import datetime, timedelta
from typing import Optional, Tuple

from codereview.core import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    as_utc,
    create_access_token,
    decode_token,
    generate_token,
    get_config,
    get_logger,
    hash_password,
    hash_token,
    utcnow,
    verify_password,
)
from codereview.models import User, UserRole
from codereview.repositories import CohortRepository, UserRepository
from codereview.schemas import RegisterRequest

from .email_service import EmailService


def _expired(expires_at: Optional[datetime]) -> bool:
    return expires_at is None or as_utc(expires_at) < utcnow()


class AuthService:
    """Registration, login and the single-use email token flows."""

    def __init__(self, users: UserRepository, cohorts: CohortRepository, email: EmailService):
        self.users = users
        self.cohorts = cohorts
        self.email = email
        self.logger = get_logger("services.auth")

    async def register(self, payload: RegisterRequest) -> User:
        email = payload.email.strip().lower()
        if await self.users.get_by_email(email):
            raise ConflictError("User with this email already exists")

        role = UserRole(payload.role or UserRole.STUDENT)
        if role not in UserRole.self_registrable():
            raise ForbiddenError(f"Cannot register as {role.value}")

        if payload.cohort:
            if role != UserRole.STUDENT:
                raise BadRequestError("Only students can belong to a cohort")
            if await self.cohorts.get_by_id(payload.cohort) is None:
                raise NotFoundError("Cohort not found")

        token = generate_token()
        ttl = get_config().AUTH.VERIFICATION_TOKEN_EXPIRES_IN
        user = await self.users.create(
            email=email,
            password_hash=hash_password(payload.password),
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            role=role,
            cohort=payload.cohort,
            is_verified=False,
            verification_token=token,
            verification_token_expires=utcnow() + timedelta(seconds=ttl),
        )
        if payload.cohort:
            await self.cohorts.add_to_set(payload.cohort, "students", user.id)

        self.logger.info("user_registered", user_id=user.id, role=role.value)
        await self._send_verification(user, token)
        return user

    async def login(self, email: str, password: str) -> Tuple[str, User]:
        """Check credentials and account state; return a bearer token and the user."""
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            raise ForbiddenError("Your account has been deactivated")
        if get_config().AUTH.REQUIRE_VERIFIED_EMAIL and not user.is_verified:
            raise ForbiddenError("Please verify your email before logging in")

        token = create_access_token(user.id, UserRole(user.role).value)
        user = await self.users.update(user.id, {"last_login": utcnow()}) or user
        self.logger.info("user_logged_in", user_id=user.id)
        return token, user

    async def authenticate(self, token: str) -> User:
        """Resolve a bearer token to an active user."""
        data = decode_token(token)
        user = await self.users.get_by_id(data.sub)
        if user is None:
            raise UnauthorizedError("User not found or token is invalid")
        if not user.is_active:
            raise ForbiddenError("Your account has been deactivated")
        return user

    async def verify_email(self, token: str) -> User:
        user = await self.users.get_by_verification_token(token)
        if user is None or _expired(user.verification_token_expires):
            raise BadRequestError("Invalid or expired verification token")
        verified = await self.users.update(
            user.id,
            {"is_verified": True, "verification_token": None, "verification_token_expires": None},
        )
        self.logger.info("email_verified", user_id=user.id)
        return verified

    async def resend_verification(self, email: str) -> None:
        user = await self.users.get_by_email(email)
        if user is None:
            return
        if user.is_verified:
            raise BadRequestError("Email is already verified")

        token = generate_token()
        ttl = get_config().AUTH.VERIFICATION_TOKEN_EXPIRES_IN
        await self.users.update(
            user.id,
            {"verification_token": token, "verification_token_expires": utcnow() + timedelta(seconds=ttl)},
        )
        await self._send_verification(user, token)

    async def forgot_password(self, email: str) -> None:
        """Email a reset link when the account exists; silent otherwise."""
        user = await self.users.get_by_email(email)
        if user is None:
            self.logger.info("password_reset_unknown_email")
            return

        token = generate_token()
        ttl = get_config().AUTH.RESET_TOKEN_EXPIRES_IN
        await self.users.update(
            user.id,
            {"reset_password_token": hash_token(token), "reset_password_expires": utcnow() + timedelta(seconds=ttl)},
        )
        try:
            sent = await self.email.send_password_reset_email(user, token, ttl)
        except Exception:
            self.logger.exception("password_reset_email_failed", user_id=user.id)
            return
        if not sent:
            self.logger.warning("password_reset_email_not_sent", user_id=user.id)

    async def _send_verification(self, user: User, token: str) -> None:
        try:
            sent = await self.email.send_verification_email(user, token)
        except Exception:
            self.logger.exception("verification_email_failed", user_id=user.id)
            return
        if not sent:
            self.logger.warning("verification_email_not_sent", user_id=user.id)

    async def reset_password(self, token: str, new_password: str) -> None:
        user = await self.users.get_by_reset_token(hash_token(token))
        if user is None or _expired(user.reset_password_expires):
            raise BadRequestError("Invalid or expired reset token")
        await self.users.update(
            user.id,
            {
                "password_hash": hash_password(new_password),
                "reset_password_token": None,
                "reset_password_expires": None,
            },
        )
        self.logger.info("password_reset", user_id=user.id)
