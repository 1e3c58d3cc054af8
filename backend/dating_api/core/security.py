from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from dating_api.core.config import settings
from dating_api.core.errors import InvalidTokenError, TokenExpiredError

# CryptContext handles password hashing using bcrypt
# bcrypt generates a salt per hash and stores it inside the hash string
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Claim carrying the user id inside the token
USER_ID_CLAIM = "userId"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT for ``user_id`` that expires after ``expires_delta``"""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    # No refresh or revocation: the token is valid until 'exp'
    to_encode = {
        USER_ID_CLAIM: str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT token.

    Raises TokenExpiredError when the signature is valid but 'exp' has passed,
    InvalidTokenError for any other problem (bad signature, malformed token,
    missing user id claim).
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()

    if not payload.get(USER_ID_CLAIM):
        raise InvalidTokenError()
    return payload
