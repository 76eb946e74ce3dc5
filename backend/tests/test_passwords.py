from backend.auth_service.passwords import hash_password, verify_password


def test_hash_is_salted():
    first = hash_password("password123")
    second = hash_password("password123")

    assert first != second
    assert first.startswith("$argon2id$")


def test_verify_password_roundtrip():
    stored = hash_password("password123")

    assert verify_password("password123", stored) is True
    assert verify_password("wrongpassword", stored) is False


def test_verify_password_bad_hash_returns_false():
    assert verify_password("password123", "not-a-hash") is False


def test_verify_password_empty_inputs():
    assert verify_password("", "whatever") is False
    assert verify_password("password123", "") is False


def test_verify_password_non_string_inputs():
    stored = hash_password("12345")

    assert verify_password(12345, stored) is False
    assert verify_password(["12345"], stored) is False
    assert verify_password("12345", None) is False
