import pytest
import jwt
from datetime import datetime, timedelta, timezone
from flask import g

from backend.auth_service.utils import (
    create_token,
    decode_token,
    authenticate_request,
    token_required,
    TokenVerificationError,
)

SECRET = "test_secret"


def test_create_token():
    token = create_token(123, SECRET)

    assert isinstance(token, str)

    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["id"] == 123
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60


def test_create_token_requires_secret():
    with pytest.raises(ValueError):
        create_token(1, "")


def test_decode_token():
    token = create_token(456, SECRET)
    assert decode_token(token, SECRET) == 456


def test_decode_token_wrong_secret():
    token = create_token(456, "other_secret")
    with pytest.raises(TokenVerificationError):
        decode_token(token, SECRET)


def test_decode_token_expired():
    issued = datetime.now(timezone.utc) - timedelta(days=2)
    token = create_token(456, SECRET, now=issued)
    with pytest.raises(TokenVerificationError):
        decode_token(token, SECRET)


def test_decode_token_garbage():
    with pytest.raises(TokenVerificationError):
        decode_token("invalid.token.here", SECRET)


def test_decode_token_without_id_claim():
    now = datetime.now(timezone.utc)
    token = jwt.encode({"sub": "1", "iat": now, "exp": now + timedelta(hours=1)}, SECRET, algorithm="HS256")
    with pytest.raises(TokenVerificationError):
        decode_token(token, SECRET)


def test_authenticate_request_valid(app):
    token = create_token(789, SECRET)

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        uid, err, code = authenticate_request()
        assert uid == 789
        assert err is None
        assert code is None


def test_authenticate_request_missing_header(app):
    with app.test_request_context():
        uid, err, code = authenticate_request()
        assert uid is None
        assert code == 401
        assert err.json["error"] == "Access denied. No token provided."


def test_authenticate_request_scheme_without_token(app):
    with app.test_request_context(headers={"Authorization": "Bearer"}):
        uid, err, code = authenticate_request()
        assert uid is None
        assert code == 401


def test_authenticate_request_invalid_token(app):
    with app.test_request_context(headers={"Authorization": "Bearer not-a-jwt"}):
        uid, err, code = authenticate_request()
        assert uid is None
        assert code == 403
        assert err.json["error"] == "Invalid token or token expired"


def test_authenticate_request_expired_token_same_message(app):
    issued = datetime.now(timezone.utc) - timedelta(days=2)
    token = create_token(5, SECRET, now=issued)

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        uid, err, code = authenticate_request()
        assert code == 403
        assert err.json["error"] == "Invalid token or token expired"


def test_authenticate_request_unexpected_fault(app, mocker):
    mocker.patch("backend.auth_service.utils.decode_token", side_effect=RuntimeError("boom"))

    with app.test_request_context(headers={"Authorization": "Bearer abc"}):
        uid, err, code = authenticate_request()
        assert uid is None
        assert code == 500
        assert err.json["error"] == "Internal server error during authentication"


def test_token_required_binds_user(app):
    @token_required
    def view():
        return {"user_id": g.user_id}

    token = create_token(42, SECRET)
    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        assert view() == {"user_id": 42}


def test_token_required_rejects_without_calling_view(app, mocker):
    inner = mocker.Mock()
    view = token_required(inner)

    with app.test_request_context():
        response, code = view()
        assert code == 401
        inner.assert_not_called()
