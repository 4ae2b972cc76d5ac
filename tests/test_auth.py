"""
Tests for registration, email verification, login lockout and password reset.
"""
import pytest

from app.application.dtos.user_dtos import RegisterUserDto
from app.application.use_cases.register_user import RegisterUserUseCase
from app.domain.enums import TokenKind
from app.domain.exceptions import ConflictError
from app.infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl

EMAIL = "otieno@hireme.co.ke"
PASSWORD = "secret123"


async def _register(client, email=EMAIL, password=PASSWORD):
    return await client.post(
        "/api/register",
        json={"name": "Otieno Odhiambo", "email": email, "password": password, "phone": "0712345678"},
    )


async def _login(client, email=EMAIL, password=PASSWORD):
    response = await client.post("/api/login", json={"email": email, "password": password})
    client.cookies.clear()
    return response


@pytest.mark.asyncio
async def test_register_queues_verification_email(client, email_service, issued_tokens):
    response = await _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["emailSent"] is True
    assert body["userId"] > 0

    tokens = await issued_tokens(EMAIL, TokenKind.EMAIL_VERIFICATION)
    assert len(tokens) == 1
    sent = email_service.to(EMAIL)
    assert len(sent) == 1
    assert tokens[0] in sent[0]["html"]


@pytest.mark.asyncio
async def test_register_duplicate_email_is_rejected(client):
    await _register(client)
    response = await _register(client, email=EMAIL.upper())

    assert response.status_code == 400
    assert response.json()["code"] == "email_taken"


@pytest.mark.asyncio
async def test_register_race_on_same_email_is_a_conflict(
    create_user, session_factory, settings, monkeypatch, fetch_user
):
    await create_user(email=EMAIL)

    async with session_factory() as session:
        unit_of_work = UnitOfWorkImpl(session)

        # A concurrent registration committed between the existence check and the insert
        async def not_yet_registered(email):
            return False

        monkeypatch.setattr(unit_of_work.users, "exists_by_email", not_yet_registered)
        request = RegisterUserDto(name="Otieno Odhiambo", email=EMAIL, password=PASSWORD)

        with pytest.raises(ConflictError) as excinfo:
            await RegisterUserUseCase(unit_of_work, settings).execute(request)

    assert excinfo.value.code == "email_taken"
    assert excinfo.value.status_code == 400
    assert (await fetch_user(EMAIL)).name == "Wanjiru Kamau"


@pytest.mark.asyncio
async def test_register_validation_errors(client):
    response = await client.post("/api/register", json={"name": "", "email": "not-an-email", "password": "123"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_error"
    assert len(body["errors"]) == 3


@pytest.mark.asyncio
async def test_register_succeeds_when_email_sending_fails(client, email_service):
    email_service.fail = True

    response = await _register(client)

    assert response.status_code == 201
    assert email_service.sent == []


@pytest.mark.asyncio
async def test_unverified_user_cannot_login(client):
    await _register(client)

    response = await _login(client)

    assert response.status_code == 403
    assert response.json()["code"] == "email_not_verified"


@pytest.mark.asyncio
async def test_verify_email_then_login(client, issued_tokens, fetch_user):
    await _register(client)
    token = (await issued_tokens(EMAIL, TokenKind.EMAIL_VERIFICATION))[0]

    response = await client.get("/api/verify-email", params={"token": token})
    assert response.status_code == 200
    assert (await fetch_user(EMAIL)).email_verified is True

    # Tokens are single use
    again = await client.get("/api/verify-email", params={"token": token})
    assert again.status_code == 400
    assert again.json()["code"] == "invalid_or_expired_token"

    login = await _login(client)
    assert login.status_code == 200
    body = login.json()
    assert body["token"]
    assert body["user"]["email"] == EMAIL
    assert body["user"]["emailVerified"] is True


@pytest.mark.asyncio
async def test_verify_email_with_unknown_token(client):
    response = await client.get("/api/verify-email", params={"token": "nope"})
    assert response.status_code == 400

    missing = await client.get("/api/verify-email")
    assert missing.status_code == 400


@pytest.mark.asyncio
async def test_expired_verification_token_is_rejected(client, issued_tokens, expire_tokens, fetch_user):
    await _register(client)
    token = (await issued_tokens(EMAIL, TokenKind.EMAIL_VERIFICATION))[0]
    await expire_tokens(EMAIL, TokenKind.EMAIL_VERIFICATION)

    response = await client.get("/api/verify-email", params={"token": token})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_or_expired_token"
    assert (await fetch_user(EMAIL)).email_verified is False


@pytest.mark.asyncio
async def test_resend_verification_invalidates_previous_token(client, issued_tokens):
    await _register(client)

    response = await client.post("/api/resend-verification", json={"email": EMAIL})
    assert response.status_code == 200

    first, second = await issued_tokens(EMAIL, TokenKind.EMAIL_VERIFICATION)
    assert (await client.get("/api/verify-email", params={"token": first})).status_code == 400
    assert (await client.get("/api/verify-email", params={"token": second})).status_code == 200


@pytest.mark.asyncio
async def test_resend_verification_does_not_reveal_accounts(client, email_service):
    response = await client.post("/api/resend-verification", json={"email": "ghost@hireme.co.ke"})

    assert response.status_code == 200
    assert email_service.sent == []


@pytest.mark.asyncio
async def test_login_invalid_credentials(client, create_user):
    await create_user(email=EMAIL)

    wrong_password = await _login(client, password="wrong-password")
    unknown_email = await _login(client, email="nobody@hireme.co.ke")

    assert wrong_password.status_code == 400
    assert unknown_email.status_code == 400
    assert wrong_password.json()["message"] == unknown_email.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_lockout_tiers(client, create_user, fetch_user, expire_lock):
    await create_user(email=EMAIL)

    for _ in range(2):
        assert (await _login(client, password="wrong")).status_code == 400

    third = await _login(client, password="wrong")
    assert third.status_code == 423
    assert 890 <= int(third.headers["Retry-After"]) <= 900
    assert third.json()["code"] == "account_locked"

    # While locked even the right password is refused and nothing is counted
    locked = await _login(client)
    assert locked.status_code == 423
    assert (await fetch_user(EMAIL)).login_attempts == 3

    await expire_lock(EMAIL)
    fourth = await _login(client, password="wrong")
    assert fourth.status_code == 423
    assert int(fourth.headers["Retry-After"]) <= 900

    await expire_lock(EMAIL)
    fifth = await _login(client, password="wrong")
    assert fifth.status_code == 423
    assert 3590 <= int(fifth.headers["Retry-After"]) <= 3600
    assert (await fetch_user(EMAIL)).login_attempts == 5


@pytest.mark.asyncio
async def test_successful_login_resets_failures(client, create_user, fetch_user):
    await create_user(email=EMAIL)
    await _login(client, password="wrong")
    await _login(client, password="wrong")

    response = await _login(client)

    assert response.status_code == 200
    user = await fetch_user(EMAIL)
    assert user.login_attempts == 0
    assert user.locked_until is None
    assert user.last_login is not None


@pytest.mark.asyncio
async def test_login_sets_session_cookie(client, create_user):
    await create_user(email=EMAIL)

    response = await client.post("/api/login", json={"email": EMAIL, "password": PASSWORD})

    assert response.status_code == 200
    assert "httponly" in response.headers["set-cookie"].lower()
    # The cookie alone authenticates
    profile = await client.get("/api/profile")
    assert profile.status_code == 200
    assert profile.json()["email"] == EMAIL


@pytest.mark.asyncio
async def test_forgot_password_is_generic(client, create_user, email_service):
    await create_user(email=EMAIL)

    known = await client.post("/api/forgot-password", json={"email": EMAIL})
    unknown = await client.post("/api/forgot-password", json={"email": "ghost@hireme.co.ke"})

    assert known.status_code == unknown.status_code == 200
    assert known.json()["message"] == unknown.json()["message"]
    assert len(email_service.to(EMAIL)) == 1
    assert email_service.to("ghost@hireme.co.ke") == []


@pytest.mark.asyncio
async def test_reset_password_flow(client, create_user, issued_tokens, expire_lock):
    await create_user(email=EMAIL)
    for _ in range(3):
        await _login(client, password="wrong")

    await client.post("/api/forgot-password", json={"email": EMAIL})
    await client.post("/api/forgot-password", json={"email": EMAIL})
    first, second = await issued_tokens(EMAIL, TokenKind.PASSWORD_RESET)

    stale = await client.post("/api/reset-password", json={"token": first, "password": "brand-new-pass"})
    assert stale.status_code == 400

    response = await client.post("/api/reset-password", json={"token": second, "password": "brand-new-pass"})
    assert response.status_code == 200

    reused = await client.post("/api/reset-password", json={"token": second, "password": "another-pass"})
    assert reused.status_code == 400

    # Reset also lifts the lockout
    assert (await _login(client)).status_code == 400
    assert (await _login(client, password="brand-new-pass")).status_code == 200


@pytest.mark.asyncio
async def test_expired_reset_token_is_rejected(client, create_user, issued_tokens, expire_tokens):
    await create_user(email=EMAIL)
    await client.post("/api/forgot-password", json={"email": EMAIL})
    token = (await issued_tokens(EMAIL, TokenKind.PASSWORD_RESET))[0]
    await expire_tokens(EMAIL, TokenKind.PASSWORD_RESET)

    response = await client.post("/api/reset-password", json={"token": token, "password": "brand-new-pass"})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_or_expired_token"
    assert (await _login(client)).status_code == 200


@pytest.mark.asyncio
async def test_logout_revokes_token(client, user_headers):
    assert (await client.get("/api/profile", headers=user_headers)).status_code == 200

    response = await client.post("/api/logout", headers=user_headers)
    assert response.status_code == 200

    after = await client.get("/api/profile", headers=user_headers)
    assert after.status_code == 401


@pytest.mark.asyncio
async def test_protected_routes_need_a_token(client):
    assert (await client.get("/api/profile")).status_code == 401
    bad = await client.get("/api/profile", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_update_profile(client, user_headers):
    response = await client.put(
        "/api/profile",
        json={"name": "Wanjiru K.", "location": "Kisumu"},
        headers=user_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Wanjiru K."
    assert body["location"] == "Kisumu"
