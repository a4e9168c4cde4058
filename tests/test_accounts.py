"""Tests for sign-up, sign-in and OTP-gated account changes."""

import pytest

from traveltrek.errors import (
    AuthenticationError,
    ConflictError,
    DuplicateAccountError,
    NotFoundError,
    ValidationError,
)
from traveltrek.models import PlanType
from traveltrek.schemas.auth import (
    GoogleAuthRequest,
    LoginRequest,
    MemberLoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SetPasswordRequest,
)
from traveltrek.schemas.membership import EnrollRequest
from traveltrek.schemas.user import ProfileUpdate
from traveltrek.services.accounts import AccountService, PasswordSetupRequired
from traveltrek.services.membership import MembershipLifecycle
from traveltrek.services.security import decode_access_token, verify_password


@pytest.fixture
def accounts(db, otp_store, dispatcher, clock):
    return AccountService(db, otp_store, dispatcher, clock=clock)


@pytest.fixture
def lifecycle(db, dispatcher, clock):
    return MembershipLifecycle(db, dispatcher, clock=clock)


def register_request(email="ravi@example.com", password="secret123"):
    return RegisterRequest(name="Ravi", email=email, phone="9123456780", password=password)


async def active_member(lifecycle, email="member@example.com"):
    user, membership = await lifecycle.enroll(
        EnrollRequest(name="Meera", email=email, phone="9000000000", plan_type=PlanType.ONE_YEAR)
    )
    activation = await lifecycle.activate(membership.id)
    return user, activation.membership_number


class TestRegisterAndLogin:
    async def test_register_issues_token(self, accounts, dispatcher):
        result = await accounts.register(register_request())

        claims = decode_access_token(result.token)
        assert claims["sub"] == result.user.id
        assert claims["email"] == "ravi@example.com"
        assert result.user.password_set
        assert dispatcher.of_kind("welcome") == [("welcome", "ravi@example.com")]

    async def test_register_duplicate_email(self, accounts):
        await accounts.register(register_request())
        with pytest.raises(DuplicateAccountError) as exc_info:
            await accounts.register(register_request(email="Ravi@Example.com"))
        assert exc_info.value.status_code == 409

    async def test_login(self, accounts):
        await accounts.register(register_request())

        result = await accounts.login(LoginRequest(email="ravi@example.com", password="secret123"))

        assert result.user.email == "ravi@example.com"
        assert result.membership is None

    async def test_login_wrong_password(self, accounts):
        await accounts.register(register_request())
        with pytest.raises(AuthenticationError):
            await accounts.login(LoginRequest(email="ravi@example.com", password="nope"))

    async def test_login_unknown_email(self, accounts):
        with pytest.raises(AuthenticationError):
            await accounts.login(LoginRequest(email="ghost@example.com", password="secret123"))

    async def test_login_passwordless_account(self, accounts, lifecycle):
        await lifecycle.enroll(
            EnrollRequest(name="Meera", email="meera@example.com", phone="9000000000", plan_type="1Y")
        )
        with pytest.raises(AuthenticationError):
            await accounts.login(LoginRequest(email="meera@example.com", password="anything"))


class TestMemberLogin:
    async def test_first_login_requires_password_setup(self, accounts, lifecycle):
        _, number = await active_member(lifecycle)

        result = await accounts.member_login(MemberLoginRequest(membership_number=number))

        assert isinstance(result, PasswordSetupRequired)
        assert result.email == "member@example.com"
        assert result.membership_number == number

    async def test_pending_membership_has_no_number_to_log_in_with(self, accounts, lifecycle):
        await lifecycle.enroll(
            EnrollRequest(name="Meera", email="meera@example.com", phone="9000000000", plan_type="1Y")
        )
        with pytest.raises(AuthenticationError):
            await accounts.member_login(MemberLoginRequest(membership_number="2025000001"))

    async def test_expired_membership_is_refused(self, accounts, lifecycle, clock):
        _, number = await active_member(lifecycle)
        clock.advance(days=400)

        with pytest.raises(AuthenticationError) as exc_info:
            await accounts.member_login(MemberLoginRequest(membership_number=number))
        assert exc_info.value.extra["status"] == "EXPIRED"

    async def test_unknown_number(self, accounts):
        with pytest.raises(AuthenticationError):
            await accounts.member_login(MemberLoginRequest(membership_number="2025999999"))

    async def test_set_password_then_login(self, accounts, lifecycle):
        _, number = await active_member(lifecycle)

        setup = await accounts.set_member_password(
            SetPasswordRequest(
                membership_number=number,
                email="MEMBER@example.com",
                password="trek2025",
                confirm_password="trek2025",
            )
        )
        assert decode_access_token(setup.token)["membership_number"] == number

        result = await accounts.member_login(
            MemberLoginRequest(membership_number=number, password="trek2025")
        )
        assert result.membership.membership_number == number

        with pytest.raises(AuthenticationError):
            await accounts.member_login(MemberLoginRequest(membership_number=number, password="wrong1"))

    async def test_set_password_only_once(self, accounts, lifecycle):
        _, number = await active_member(lifecycle)
        request = SetPasswordRequest(
            membership_number=number,
            email="member@example.com",
            password="trek2025",
            confirm_password="trek2025",
        )
        await accounts.set_member_password(request)

        with pytest.raises(ConflictError):
            await accounts.set_member_password(request)

    async def test_set_password_email_mismatch(self, accounts, lifecycle):
        _, number = await active_member(lifecycle)
        with pytest.raises(ValidationError):
            await accounts.set_member_password(
                SetPasswordRequest(
                    membership_number=number,
                    email="someone@example.com",
                    password="trek2025",
                    confirm_password="trek2025",
                )
            )

    async def test_set_password_unknown_number(self, accounts):
        with pytest.raises(NotFoundError):
            await accounts.set_member_password(
                SetPasswordRequest(
                    membership_number="2025000042",
                    email="someone@example.com",
                    password="trek2025",
                    confirm_password="trek2025",
                )
            )


class TestGoogle:
    async def test_creates_then_links(self, accounts, dispatcher):
        first = await accounts.google_auth(
            GoogleAuthRequest(email="g@example.com", google_id="g-1", name="Gita")
        )
        second = await accounts.google_auth(GoogleAuthRequest(email="g@example.com", google_id="g-1"))

        assert first.user.id == second.user.id
        assert second.user.google_id == "g-1"
        assert len(dispatcher.of_kind("welcome")) == 1

    async def test_links_existing_account(self, accounts):
        registered = await accounts.register(register_request())

        result = await accounts.google_auth(
            GoogleAuthRequest(email="ravi@example.com", google_id="g-77")
        )

        assert result.user.id == registered.user.id
        assert result.user.google_id == "g-77"


class TestPasswordRecovery:
    async def test_forgot_then_reset(self, accounts, dispatcher):
        await accounts.register(register_request())

        await accounts.forgot_password("ravi@example.com")
        code = dispatcher.last_otp()
        await accounts.reset_password(
            ResetPasswordRequest(email="ravi@example.com", otp=code, new_password="newsecret")
        )

        result = await accounts.login(LoginRequest(email="ravi@example.com", password="newsecret"))
        assert result.user.email == "ravi@example.com"

    async def test_forgot_unknown_email_is_silent(self, accounts, dispatcher):
        await accounts.forgot_password("ghost@example.com")
        assert dispatcher.of_kind("otp") == []

    async def test_reset_with_wrong_code(self, accounts, dispatcher):
        await accounts.register(register_request())
        await accounts.forgot_password("ravi@example.com")
        wrong = "000000" if dispatcher.last_otp() != "000000" else "111111"

        with pytest.raises(ValidationError) as exc_info:
            await accounts.reset_password(
                ResetPasswordRequest(email="ravi@example.com", otp=wrong, new_password="newsecret")
            )
        assert exc_info.value.message == "Invalid or expired OTP"

    async def test_reset_after_expiry(self, accounts, dispatcher, clock):
        await accounts.register(register_request())
        await accounts.forgot_password("ravi@example.com")
        clock.advance(minutes=6)

        with pytest.raises(ValidationError):
            await accounts.reset_password(
                ResetPasswordRequest(
                    email="ravi@example.com", otp=dispatcher.last_otp(), new_password="newsecret"
                )
            )


class TestProfileChanges:
    async def test_update_profile_directly(self, accounts):
        result = await accounts.register(register_request())

        user = await accounts.update_profile(result.user, ProfileUpdate(phone="9998887776"))

        assert user.phone == "9998887776"
        assert user.name == "Ravi"

    async def test_otp_change_applies_stored_value(self, accounts, dispatcher):
        user = (await accounts.register(register_request())).user

        await accounts.request_profile_change(user, "phone", "  9000011111 ")
        code = dispatcher.last_otp()
        user = await accounts.verify_profile_change(user, "phone", code)

        assert user.phone == "9000011111"

    async def test_otp_for_one_field_does_not_change_another(self, accounts, dispatcher):
        user = (await accounts.register(register_request())).user

        await accounts.request_profile_change(user, "name", "Ravi Kumar")
        code = dispatcher.last_otp()

        with pytest.raises(ValidationError):
            await accounts.verify_profile_change(user, "phone", code)
        assert user.phone == "9123456780"

    async def test_unsupported_field(self, accounts):
        user = (await accounts.register(register_request())).user
        with pytest.raises(ValidationError):
            await accounts.request_profile_change(user, "email", "x@example.com")

    async def test_password_change_holds_only_a_hash(self, accounts, dispatcher, otp_store):
        user = (await accounts.register(register_request())).user

        await accounts.request_password_change(user, "brandnew1")
        pending = otp_store.backend.get((user.id, "password")).value.pending_value
        assert pending != "brandnew1"
        assert verify_password("brandnew1", pending)

        await accounts.verify_password_change(user, dispatcher.last_otp())
        assert verify_password("brandnew1", user.password_hash)

    async def test_fcm_token(self, accounts):
        user = (await accounts.register(register_request())).user
        await accounts.update_fcm_token(user, "device-token")
        assert user.fcm_token == "device-token"
