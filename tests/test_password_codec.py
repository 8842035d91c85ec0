from datetime import datetime, timedelta

import pytest

from app.core.auth import (
    digest_reset_token,
    generate_reset_token,
    hash_password,
    is_password_hash,
    verify_password,
)


@pytest.mark.parametrize("password", ["pw1", "correct horse battery staple", "ünïcødé"])
def test_hash_verifies_its_own_password(password):
    stored = hash_password(password)

    assert stored.startswith("$2")
    assert stored != password
    assert verify_password(password, stored)


def test_hash_rejects_other_password():
    stored = hash_password("pw1")
    assert not verify_password("pw2", stored)


def test_hash_is_salted():
    assert hash_password("same") != hash_password("same")


def test_legacy_plaintext_password_matches_exactly():
    assert verify_password("plain123", "plain123")
    assert not verify_password("plain1234", "plain123")
    assert not verify_password("PLAIN123", "plain123")


def test_missing_values_never_verify():
    assert not verify_password("", "")
    assert not verify_password("pw", None)
    assert not verify_password(None, hash_password("pw"))


def test_malformed_hash_does_not_raise():
    assert not verify_password("pw", "$2b$not-a-real-hash")


def test_is_password_hash():
    assert is_password_hash(hash_password("x"))
    assert not is_password_hash("plain123")
    assert not is_password_hash(None)


def test_reset_token_only_digest_is_derived():
    now = datetime(2026, 1, 1, 12, 0, 0)
    token, digest, expires_at = generate_reset_token(now, expire_minutes=60)

    assert len(token) == 40
    assert digest == digest_reset_token(token)
    assert digest != token
    assert len(digest) == 64
    assert expires_at == now + timedelta(hours=1)


def test_reset_tokens_are_unique():
    now = datetime(2026, 1, 1)
    tokens = {generate_reset_token(now)[0] for _ in range(20)}
    assert len(tokens) == 20
