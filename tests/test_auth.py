"""
Tests for registration, login, the bearer-token dependency and provider
API key handling.
"""

from datetime import timedelta
from unittest.mock import patch

from app.core.config import settings
from app.core.security import create_access_token, decrypt_api_key, encrypt_api_key, mask_api_key


class TestRegister:
    """Tests for POST /auth/register."""

    def test_register(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "sam@example.com", "password": "longenough", "display_name": "Sam"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "sam@example.com"
        assert "hashed_password" not in body

    def test_duplicate_email(self, client, test_user):
        response = client.post(
            "/auth/register",
            json={"email": "test@example.com", "password": "longenough"},
        )
        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "sam@example.com", "password": "short"},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "VALIDATION_ERROR"
        assert response.json()["detail"]["message"].startswith("password:")


class TestLogin:
    """Tests for POST /auth/login."""

    def test_login(self, client, test_user):
        response = client.post(
            "/auth/login",
            json={"email": "test@example.com", "password": "testpassword"},
        )

        assert response.status_code == 200
        token = response.json()["access_token"]
        me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["email"] == "test@example.com"

    def test_wrong_password(self, client, test_user):
        response = client.post(
            "/auth/login",
            json={"email": "test@example.com", "password": "nope-nope"},
        )
        assert response.status_code == 401

    def test_inactive_user(self, client, db, test_user):
        test_user.is_active = False
        db.commit()

        response = client.post(
            "/auth/login",
            json={"email": "test@example.com", "password": "testpassword"},
        )
        assert response.status_code == 403


class TestCurrentUser:
    """Tests for the get_current_user dependency via /users/me."""

    def test_invalid_token(self, client):
        response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client, test_user):
        token = create_access_token(subject=test_user.id, expires_delta=timedelta(minutes=-1))

        response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_unknown_user(self, client, db):
        token = create_access_token(subject="00000000-0000-0000-0000-000000000000")

        response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


class TestMaskApiKey:
    """Tests for mask_api_key()."""

    def test_keeps_last_four(self):
        assert mask_api_key("sk-abcdef123456") == "****3456"

    def test_short_key_fully_masked(self):
        assert mask_api_key("abcd") == "****"


class TestApiKeyEncryption:
    """Tests for encrypt_api_key() / decrypt_api_key()."""

    def test_without_encryption_key_stored_as_given(self):
        with patch.object(settings, "AI_ENCRYPTION_KEY", ""):
            assert encrypt_api_key("sk-abcdef123456") == "sk-abcdef123456"

    def test_encrypted_format(self):
        with patch.object(settings, "AI_ENCRYPTION_KEY", "server-secret"):
            stored = encrypt_api_key("sk-abcdef123456")

        prefix, iv, tag, ciphertext = stored.split(":")
        assert prefix == "enc"
        assert len(iv) == 24
        assert len(tag) == 32
        assert "sk-abcdef123456" not in stored

    def test_decrypts_with_same_key(self):
        with patch.object(settings, "AI_ENCRYPTION_KEY", "server-secret"):
            stored = encrypt_api_key("sk-abcdef123456")
            assert decrypt_api_key(stored) == "sk-abcdef123456"

    def test_fresh_iv_per_encryption(self):
        with patch.object(settings, "AI_ENCRYPTION_KEY", "server-secret"):
            assert encrypt_api_key("sk-abcdef123456") != encrypt_api_key("sk-abcdef123456")

    def test_plaintext_rows_pass_through(self):
        with patch.object(settings, "AI_ENCRYPTION_KEY", "server-secret"):
            assert decrypt_api_key("sk-legacy-plain") == "sk-legacy-plain"

    def test_wrong_key_returns_stored_value(self):
        with patch.object(settings, "AI_ENCRYPTION_KEY", "server-secret"):
            stored = encrypt_api_key("sk-abcdef123456")
        with patch.object(settings, "AI_ENCRYPTION_KEY", "another-secret"):
            assert decrypt_api_key(stored) == stored
