# Local application imports
from waterwatch.services.auth import AuthEvent, AuthGate, ensure_admin_account
from waterwatch.services.auth.token_services import decode_access_token
from waterwatch.services.service_enums import ServiceError
from waterwatch.settings import settings


async def test_sign_up_signs_in_and_emits(db):
    gate = AuthGate()
    seen = []
    gate.on_auth_state_change(lambda event, user_id: seen.append((event, user_id)))

    result = await gate.sign_up(db, "New.Citizen@Example.com", "long-enough-pass", "New Citizen")

    auth_session = result.unwrap()
    assert auth_session.user.email == "new.citizen@example.com"
    assert auth_session.is_admin is False
    assert seen == [(AuthEvent.SIGNED_IN, auth_session.user.id)]

    payload = decode_access_token(auth_session.access_token)
    assert payload["sub"] == str(auth_session.user.id)
    assert payload["jti"] == auth_session.jti
    assert payload["is_admin"] is False


async def test_duplicate_sign_up(db, citizen):
    result = await AuthGate().sign_up(db, citizen.email, "another-pass")
    assert result.error == ServiceError.Auth.EMAIL_ALREADY_REGISTERED


async def test_sign_in_checks_password(db, citizen):
    gate = AuthGate()
    assert (await gate.sign_in(db, citizen.email, "wrong-pass")).error == ServiceError.Auth.INVALID_CREDENTIALS
    assert (await gate.sign_in(db, "nobody@example.com", "s3cret-pass")).error == ServiceError.Auth.INVALID_CREDENTIALS
    assert (await gate.sign_in(db, "CITIZEN@example.com", "s3cret-pass")).ok


async def test_session_lookup_and_sign_out(db, citizen):
    gate = AuthGate()
    events = []

    async def listener(event, user_id):
        events.append((event, user_id))

    unsubscribe = gate.on_auth_state_change(listener)
    auth_session = (await gate.sign_in(db, citizen.email, "s3cret-pass")).unwrap()

    resolved = (await gate.get_session(db, auth_session.access_token)).unwrap()
    assert resolved.user.id == citizen.id

    signed_out = await gate.sign_out(db, auth_session.jti)
    assert signed_out.data == citizen.id
    assert events[-1] == (AuthEvent.SIGNED_OUT, citizen.id)

    assert (await gate.get_session(db, auth_session.access_token)).error == ServiceError.Auth.INVALID_TOKEN
    assert (await gate.sign_out(db, auth_session.jti)).error == ServiceError.Session.SESSION_ALREADY_INVALIDATED

    unsubscribe()
    await gate.sign_in(db, citizen.email, "s3cret-pass")
    assert len(events) == 2


async def test_garbage_token_is_rejected(db):
    assert (await AuthGate().get_session(db, "not-a-jwt")).error == ServiceError.Auth.INVALID_TOKEN


async def test_admin_account_is_seeded_once(db):
    first = await ensure_admin_account(db)
    second = await ensure_admin_account(db)

    assert first.id == second.id
    assert first.is_admin is True
    assert first.email == settings.ADMIN_EMAIL

    auth_session = (await AuthGate().sign_in(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)).unwrap()
    assert auth_session.is_admin is True
    assert decode_access_token(auth_session.access_token)["is_admin"] is True
