"""Unit tests for JWT token creation and decoding."""

from datetime import timedelta

import pytest
from jose import JWTError

from app.auth.jwt import (
    create_access_token,
    create_refresh_token,
    create_token_pair,
    decode_token,
)


class TestAccessToken:
    def test_standard_claims(self):
        payload = decode_token(create_access_token({"sub": "user-123"}))
        assert payload["sub"] == "user-123"
        assert payload["type"] == "access"
        assert "iat" in payload
        assert "exp" in payload

    def test_custom_claims_kept(self):
        payload = decode_token(create_access_token({"sub": "u", "role": "HOST", "email": "h@x.com"}))
        assert payload["role"] == "HOST"
        assert payload["email"] == "h@x.com"

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)


class TestRefreshToken:
    def test_type_and_sub(self):
        payload = decode_token(create_refresh_token({"sub": "user-xyz"}))
        assert payload["type"] == "refresh"
        assert payload["sub"] == "user-xyz"

    def test_drops_profile_claims(self):
        payload = decode_token(create_refresh_token({"sub": "u", "role": "ADMIN"}))
        assert "role" not in payload


class TestDecodeToken:
    @pytest.mark.parametrize("token", ["not.a.valid.token", ""])
    def test_garbage_rejected(self, token):
        with pytest.raises(JWTError):
            decode_token(token)


class TestCreateTokenPair:
    def test_pair_shape(self):
        pair = create_token_pair("user-123")
        assert pair["token_type"] == "bearer"
        assert decode_token(pair["access_token"])["type"] == "access"
        assert decode_token(pair["refresh_token"])["type"] == "refresh"

    def test_identity_claims_on_access_only(self):
        pair = create_token_pair("user-123", email="r@x.com", role="RENTER")
        access = decode_token(pair["access_token"])
        refresh = decode_token(pair["refresh_token"])
        assert (access["email"], access["role"]) == ("r@x.com", "RENTER")
        assert refresh["sub"] == "user-123"
        assert "role" not in refresh

    def test_omitted_claims_absent(self):
        access = decode_token(create_token_pair("user-123")["access_token"])
        assert "email" not in access
        assert "role" not in access
