"""
Affiliate Tracker Backend: Auth Service Unit Tests
==================================================

What:  Tests for password hashing, registration, login and token handling.
How:   Mock DB sessions and an explicit clock; no real database and no sleeping.

What we test:
    ✅ Hashes are salted, verifiable, and never equal the plaintext
    ✅ Tokens verify before expiry and fail at exactly issued + ttl
    ✅ Tampered, foreign-secret and malformed tokens are rejected
    ✅ Authorization header parsing (missing, wrong scheme, empty)
    ✅ Duplicate email and generic invalid-credential failures
"""

import time
from uuid import uuid4

import pytest
from jose import jwt
from sqlalchemy.exc import IntegrityError

from affiliate_tracker.config import Settings
from affiliate_tracker.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
)
from affiliate_tracker.models.user import User
from affiliate_tracker.services.auth_service import AuthService

from conftest import make_result

SECRET = "test-secret-not-for-production"


class TestPasswordHashing:
    """Tests for hash_password / verify_password."""

    def test_hash_is_not_plaintext(self, auth_service):
        hashed = auth_service.hash_password("secret123")
        assert hashed != "secret123"
        assert hashed.startswith("$2")

    def test_same_password_hashes_differently(self, auth_service):
        """Each hash carries its own salt."""
        assert auth_service.hash_password("secret123") != auth_service.hash_password("secret123")

    def test_verify_round_trip(self, auth_service):
        hashed = auth_service.hash_password("secret123")
        assert auth_service.verify_password("secret123", hashed) is True
        assert auth_service.verify_password("secret124", hashed) is False

    def test_malformed_hash_does_not_verify(self, auth_service):
        assert auth_service.verify_password("secret123", "not-a-bcrypt-hash") is False

    def test_long_password_is_accepted(self, auth_service):
        """Passwords past bcrypt's 72-byte limit still hash and verify."""
        password = "x" * 100
        hashed = auth_service.hash_password(password)
        assert auth_service.verify_password(password, hashed) is True


class TestTokens:
    """Tests for issue_token / verify_token with an explicit clock."""

    def setup_method(self):
        self.service = AuthService(Settings(jwt_secret=SECRET, bcrypt_rounds=4))
        self.issued_at = 1_700_000_000

    def test_token_carries_id_and_role(self):
        user_id = str(uuid4())
        token = self.service.issue_token(user_id, "user", now=self.issued_at)

        claims = self.service.verify_token(token, now=self.issued_at + 10)

        assert claims.id == user_id
        assert claims.role == "user"

    def test_token_lifetime_is_one_hour(self):
        token = self.service.issue_token("u1", "user", now=self.issued_at)
        payload = jwt.get_unverified_claims(token)
        assert payload["exp"] - payload["iat"] == 3600

    def test_token_valid_just_before_expiry(self):
        token = self.service.issue_token("u1", "user", now=self.issued_at)
        assert self.service.verify_token(token, now=self.issued_at + 3599).id == "u1"

    def test_token_expired_after_one_hour(self):
        token = self.service.issue_token("u1", "user", now=self.issued_at)
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify_token(token, now=self.issued_at + 3600)
        assert exc_info.value.message == "Token has expired"

    def test_token_from_other_secret_rejected(self):
        other = AuthService(Settings(jwt_secret="another-secret", bcrypt_rounds=4))
        token = other.issue_token("u1", "user", now=self.issued_at)
        with pytest.raises(InvalidTokenError):
            self.service.verify_token(token, now=self.issued_at)

    def test_tampered_token_rejected(self):
        token = self.service.issue_token("u1", "user", now=self.issued_at)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(InvalidTokenError):
            self.service.verify_token(tampered, now=self.issued_at)

    def test_garbage_token_rejected(self):
        with pytest.raises(InvalidTokenError):
            self.service.verify_token("not.a.token")

    def test_token_without_subject_rejected(self):
        token = jwt.encode({"exp": self.issued_at + 60}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            self.service.verify_token(token, now=self.issued_at)

    def test_default_clock_is_wall_time(self):
        token = self.service.issue_token("u1", "user")
        assert self.service.verify_token(token).id == "u1"
        with pytest.raises(InvalidTokenError):
            self.service.verify_token(token, now=time.time() + 7200)


class TestAuthenticate:
    """Tests for Authorization header handling."""

    def setup_method(self):
        self.service = AuthService(Settings(jwt_secret=SECRET, bcrypt_rounds=4))

    @pytest.mark.parametrize("header", [None, "", "   ", "Bearer", "Bearer   ", "Basic dXNlcjpwYXNz"])
    def test_missing_or_non_bearer_header(self, header):
        with pytest.raises(MissingTokenError) as exc_info:
            self.service.authenticate(header)
        assert exc_info.value.message == "No token provided, authorization denied"

    def test_bearer_token_resolves_claims(self):
        token = self.service.issue_token("u1", "user")
        assert self.service.authenticate(f"Bearer {token}").id == "u1"

    def test_scheme_is_case_insensitive(self):
        token = self.service.issue_token("u1", "user")
        assert self.service.authenticate(f"bearer {token}").id == "u1"

    def test_invalid_bearer_token(self):
        with pytest.raises(InvalidTokenError):
            self.service.authenticate("Bearer abc.def.ghi")


class TestRegister:
    """Tests for AuthService.register."""

    @pytest.mark.asyncio
    async def test_register_success(self, auth_service, mock_db_session):
        user = await auth_service.register(
            db=mock_db_session,
            name="Ada",
            email="ada@example.com",
            password="secret123",
        )

        assert user.email == "ada@example.com"
        assert user.role == "user"
        assert "password" not in user.model_dump()
        assert "password_hash" not in user.model_dump()

        stored = mock_db_session.add.call_args.args[0]
        assert stored.password_hash != "secret123"
        assert auth_service.verify_password("secret123", stored.password_hash)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_register_stores_lower_cased_email(self, auth_service, mock_db_session):
        user = await auth_service.register(
            db=mock_db_session,
            name="Ada",
            email="  Ada@EXAMPLE.com ",
            password="secret123",
        )

        assert user.email == "ada@example.com"
        assert mock_db_session.add.call_args.args[0].role == "user"

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service, mock_db_session):
        mock_db_session.execute.return_value = make_result(scalar=uuid4())

        with pytest.raises(DuplicateEmailError):
            await auth_service.register(
                db=mock_db_session,
                name="Ada",
                email="ada@example.com",
                password="secret123",
            )
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_unique_index_race(self, auth_service, mock_db_session):
        """A concurrent insert that wins the unique index still maps to duplicate email."""
        mock_db_session.flush.side_effect = IntegrityError("INSERT", {}, Exception("unique"))

        with pytest.raises(DuplicateEmailError):
            await auth_service.register(
                db=mock_db_session,
                name="Ada",
                email="ada@example.com",
                password="secret123",
            )

    @pytest.mark.asyncio
    async def test_register_database_failure(self, auth_service, mock_db_session):
        mock_db_session.flush.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError):
            await auth_service.register(
                db=mock_db_session,
                name="Ada",
                email="ada@example.com",
                password="secret123",
            )


class TestLogin:
    """Tests for AuthService.login."""

    def _stored_user(self, auth_service, password="secret123"):
        return User(
            id=uuid4(),
            name="Ada",
            email="ada@example.com",
            password_hash=auth_service.hash_password(password),
            role="user",
        )

    @pytest.mark.asyncio
    async def test_login_returns_verifiable_token(self, auth_service, mock_db_session):
        user = self._stored_user(auth_service)
        mock_db_session.execute.return_value = make_result(scalar=user)

        token = await auth_service.login(mock_db_session, "ada@example.com", "secret123")

        assert auth_service.verify_token(token).id == str(user.id)

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(self, auth_service, mock_db_session):
        mock_db_session.execute.return_value = make_result(scalar=None)
        with pytest.raises(InvalidCredentialsError) as unknown:
            await auth_service.login(mock_db_session, "nobody@example.com", "secret123")

        mock_db_session.execute.return_value = make_result(scalar=self._stored_user(auth_service))
        with pytest.raises(InvalidCredentialsError) as mismatch:
            await auth_service.login(mock_db_session, "ada@example.com", "wrong-password")

        assert unknown.value.message == mismatch.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_login_looks_up_lower_cased_email(self, auth_service, mock_db_session):
        user = self._stored_user(auth_service)
        mock_db_session.execute.return_value = make_result(scalar=user)

        await auth_service.login(mock_db_session, "ADA@Example.com", "secret123")

        query = mock_db_session.execute.call_args.args[0]
        assert list(query.compile().params.values()) == ["ada@example.com"]

    @pytest.mark.asyncio
    async def test_login_database_failure(self, auth_service, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError):
            await auth_service.login(mock_db_session, "ada@example.com", "secret123")
