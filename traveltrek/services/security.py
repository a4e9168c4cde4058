"""Password hashing (bcrypt) and bearer tokens (JWT)."""

from datetime import timedelta

import bcrypt
import jwt

from traveltrek.clock import utcnow
from traveltrek.config import settings
from traveltrek.errors import AuthenticationError


def _to_bcrypt_secret(password: str) -> bytes:
    """
    bcrypt only uses the first 72 BYTES of the password.
    Truncate explicitly so longer inputs do not raise.
    """
    secret = password.encode("utf-8")
    if len(secret) > 72:
        secret = secret[:72]
    return secret


def hash_password(password: str) -> str:
    """Returns a bcrypt hash as a UTF-8 string."""
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(_to_bcrypt_secret(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_to_bcrypt_secret(password), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash (e.g. placeholder on federated accounts)
        return False


def create_access_token(user_id: str, email: str, membership_number: str | None = None) -> str:
    now = utcnow()
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expire_minutes),
    }
    if membership_number:
        payload["membership_number"] = membership_number
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")
