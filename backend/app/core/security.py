from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def create_identity_token(
    email: str,
    user_id: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign an identity assertion for an already authenticated user.

    ``sub`` carries the authenticated email and ``uid`` the identity
    provider's user id.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.IDENTITY_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": email.strip().lower(), "uid": user_id, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_identity_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def is_global_admin(email: str | None) -> bool:
    if not email or not settings.GLOBAL_ADMIN_EMAIL:
        return False
    return email.strip().lower() == settings.GLOBAL_ADMIN_EMAIL
