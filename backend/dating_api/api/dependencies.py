import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from dating_api.core.database import get_db
from dating_api.core.errors import AuthenticationError, InvalidTokenError, TokenExpiredError
from dating_api.core.security import USER_ID_CLAIM, decode_access_token
from dating_api.models.user import User
from dating_api.services.credential_store import credential_store

logger = logging.getLogger(__name__)

# Bearer scheme - extracts the token from the Authorization header
# auto_error=False so a missing header goes through our own error envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the bearer token of the request to a user.

    Used as a dependency by every endpoint that requires a session.
    Soft-deleted users are not rejected here: a token stays usable until
    it expires.
    """
    if credentials is None:
        logger.info("Rejected request without bearer token")
        raise AuthenticationError()

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenExpiredError:
        logger.warning("Rejected expired token")
        raise
    except InvalidTokenError:
        logger.warning("Rejected invalid token")
        raise

    user = credential_store.find_by_id(db, payload[USER_ID_CLAIM])
    if user is None:
        logger.warning(f"Token refers to unknown user {payload[USER_ID_CLAIM]}")
        raise InvalidTokenError()

    return user
