"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from pydantic import ValidationError

from geocats.core.config import settings
from geocats.core.errors import InvalidCredentialError, MissingCredentialError
from geocats.schemas.auth import IdentityClaim

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for user name and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(sub: str, role: str) -> str:
    """Create a JWT access token with sub (account id), role, and exp."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "role": role,
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


class TokenValidator:
    """
    Verifies bearer tokens and turns them into IdentityClaims.

    Holds only the verification secret and algorithm it was constructed with, so one
    instance can be shared by any number of concurrent requests.
    """

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("TokenValidator requires a non-empty secret")
        self._secret = secret
        self._algorithms = [algorithm]

    def validate(self, credential: str | bytes | None) -> IdentityClaim:
        """
        Decode and verify a credential.

        Raises MissingCredentialError when nothing was supplied and InvalidCredentialError on a
        bad signature, malformed encoding, expired token, or a payload without sub/role.
        """
        if credential is None or not credential.strip():
            raise MissingCredentialError()
        try:
            payload = jwt.decode(credential, self._secret, algorithms=self._algorithms)
        except jwt.PyJWTError as e:
            raise InvalidCredentialError() from e
        try:
            return IdentityClaim(subject=payload.get("sub"), role=payload.get("role"))
        except ValidationError as e:
            raise InvalidCredentialError("Invalid token payload") from e
