import re
from datetime import timedelta

import pytest

from codereview.core import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    create_access_token,
    decode_token,
    hash_token,
    reset_config,
    utcnow,
)
from codereview.models import UserRole
from codereview.schemas import RegisterRequest
from codereview.services import AuthService


def _register(email="new@example.com", **overrides) -> RegisterRequest:
    data = {"email": email, "password": "password123", "first_name": "New", "last_name": "User"}
    data.update(overrides)
    return RegisterRequest(**data)


def _link_token(sender, address: str, path: str) -> str:
    [(_, _, body)] = sender.sent_to(address)[-1:]
    match = re.search(rf"{re.escape(path)}/([0-9a-f]+)", body)
    assert match is not None
    return match.group(1)


@pytest.fixture
def service(container) -> AuthService:
    return container.auth_service


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_unverified_student(self, service, sender):
        user = await service.register(_register("New@Example.com"))

        assert user.email == "new@example.com"
        assert user.role == UserRole.STUDENT
        assert user.is_verified is False
        assert user.verification_token
        assert _link_token(sender, "new@example.com", "/auth/verify") == user.verification_token

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, service, student):
        with pytest.raises(ConflictError):
            await service.register(_register("ALICE@example.com"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SUPERADMIN])
    async def test_cannot_self_register_as_admin(self, service, role):
        with pytest.raises(ForbiddenError):
            await service.register(_register(role=role))

    @pytest.mark.asyncio
    async def test_reviewer_registration(self, service):
        user = await service.register(_register(role=UserRole.REVIEWER))
        assert user.role == UserRole.REVIEWER

    @pytest.mark.asyncio
    async def test_student_joins_cohort(self, service, container, cohort):
        user = await service.register(_register(cohort=cohort.id))

        assert user.cohort == cohort.id
        assert (await container.cohorts.get_by_id(cohort.id)).students == [user.id]

    @pytest.mark.asyncio
    async def test_reviewer_cannot_join_cohort(self, service, cohort):
        with pytest.raises(BadRequestError):
            await service.register(_register(role=UserRole.REVIEWER, cohort=cohort.id))

    @pytest.mark.asyncio
    async def test_unknown_cohort(self, service):
        with pytest.raises(NotFoundError):
            await service.register(_register(cohort="0" * 24))

    @pytest.mark.asyncio
    async def test_undelivered_email_still_registers(self, service, container, sender):
        sender.succeed = False

        user = await service.register(_register())

        assert await container.users.get_by_id(user.id) is not None

    @pytest.mark.asyncio
    async def test_mail_relay_error_still_registers(self, service, container, sender):
        sender.error = ConnectionRefusedError("relay down")

        user = await service.register(_register())

        stored = await container.users.get_by_id(user.id)
        assert stored is not None
        assert stored.verification_token == user.verification_token

    @pytest.mark.asyncio
    async def test_resend_survives_mail_relay_error(self, service, container, sender):
        user = await service.register(_register())
        sender.error = ConnectionRefusedError("relay down")

        await service.resend_verification(user.email)

        assert (await container.users.get_by_id(user.id)).verification_token != user.verification_token


class TestLogin:
    @pytest.mark.asyncio
    async def test_success_returns_token_and_records_login(self, service, student):
        token, user = await service.login("alice@example.com", "password123")

        data = decode_token(token)
        assert data.sub == student.id
        assert data.role == "student"
        assert user.last_login is not None

    @pytest.mark.asyncio
    async def test_email_lookup_is_case_insensitive(self, service, student):
        _, user = await service.login("Alice@Example.COM", "password123")
        assert user.id == student.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, service, student):
        with pytest.raises(UnauthorizedError):
            await service.login("alice@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_unknown_email(self, service):
        with pytest.raises(UnauthorizedError):
            await service.login("nobody@example.com", "password123")

    @pytest.mark.asyncio
    async def test_inactive_account(self, service, container):
        container.users.add_user("gone@example.com", is_active=False)

        with pytest.raises(ForbiddenError):
            await service.login("gone@example.com", "password123")
        # credentials are checked before account state
        with pytest.raises(UnauthorizedError):
            await service.login("gone@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_unverified_account(self, service, container):
        container.users.add_user("fresh@example.com", is_verified=False)

        with pytest.raises(ForbiddenError):
            await service.login("fresh@example.com", "password123")

    @pytest.mark.asyncio
    async def test_unverified_allowed_when_not_required(self, service, container, monkeypatch):
        monkeypatch.setenv("CODEREVIEW__AUTH__REQUIRE_VERIFIED_EMAIL", "false")
        reset_config()
        container.users.add_user("fresh@example.com", is_verified=False)

        _, user = await service.login("fresh@example.com", "password123")

        assert user.is_verified is False


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_resolves_user(self, service, reviewer):
        token = create_access_token(reviewer.id, "reviewer")
        assert (await service.authenticate(token)).id == reviewer.id

    @pytest.mark.asyncio
    async def test_deleted_user(self, service, container, reviewer):
        token = create_access_token(reviewer.id, "reviewer")
        await container.users.delete(reviewer.id)

        with pytest.raises(UnauthorizedError):
            await service.authenticate(token)

    @pytest.mark.asyncio
    async def test_deactivated_user(self, service, container, reviewer):
        token = create_access_token(reviewer.id, "reviewer")
        await container.users.update(reviewer.id, {"is_active": False})

        with pytest.raises(ForbiddenError):
            await service.authenticate(token)

    @pytest.mark.asyncio
    async def test_expired_and_garbage_tokens(self, service, reviewer):
        with pytest.raises(UnauthorizedError, match="expired"):
            await service.authenticate(create_access_token(reviewer.id, "reviewer", expires_in=-10))
        with pytest.raises(UnauthorizedError):
            await service.authenticate("not-a-token")


class TestEmailVerification:
    @pytest.mark.asyncio
    async def test_verify_clears_token(self, service, container):
        user = await service.register(_register())

        verified = await service.verify_email(user.verification_token)

        assert verified.is_verified is True
        assert verified.verification_token is None
        with pytest.raises(BadRequestError):
            await service.verify_email(user.verification_token)

    @pytest.mark.asyncio
    async def test_expired_token(self, service, container):
        user = await service.register(_register())
        await container.users.update(user.id, {"verification_token_expires": utcnow() - timedelta(minutes=1)})

        with pytest.raises(BadRequestError):
            await service.verify_email(user.verification_token)

    @pytest.mark.asyncio
    async def test_resend_issues_new_token(self, service, container, sender):
        user = await service.register(_register())

        await service.resend_verification("new@example.com")

        refreshed = await container.users.get_by_id(user.id)
        assert refreshed.verification_token != user.verification_token
        assert len(sender.sent_to("new@example.com")) == 2
        assert _link_token(sender, "new@example.com", "/auth/verify") == refreshed.verification_token

    @pytest.mark.asyncio
    async def test_resend_for_verified_user(self, service, student):
        with pytest.raises(BadRequestError):
            await service.resend_verification(student.email)

    @pytest.mark.asyncio
    async def test_resend_for_unknown_email_is_silent(self, service, sender):
        await service.resend_verification("nobody@example.com")
        assert sender.sent == []


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_forgot_then_reset(self, service, container, sender, student):
        await service.forgot_password(student.email)

        token = _link_token(sender, student.email, "/auth/reset-password")
        stored = await container.users.get_by_id(student.id)
        assert stored.reset_password_token == hash_token(token)

        await service.reset_password(token, "new-password-1")

        _, user = await service.login(student.email, "new-password-1")
        assert user.reset_password_token is None
        with pytest.raises(BadRequestError):
            await service.reset_password(token, "another-password")

    @pytest.mark.asyncio
    async def test_unknown_email_is_silent(self, service, sender):
        await service.forgot_password("nobody@example.com")
        assert sender.sent == []

    @pytest.mark.asyncio
    async def test_forgot_survives_mail_relay_error(self, service, container, sender, student):
        sender.error = ConnectionRefusedError("relay down")

        await service.forgot_password(student.email)

        assert (await container.users.get_by_id(student.id)).reset_password_token is not None

    @pytest.mark.asyncio
    async def test_expired_reset_token(self, service, container, sender, student):
        await service.forgot_password(student.email)
        token = _link_token(sender, student.email, "/auth/reset-password")
        await container.users.update(student.id, {"reset_password_expires": utcnow() - timedelta(seconds=1)})

        with pytest.raises(BadRequestError):
            await service.reset_password(token, "new-password-1")
