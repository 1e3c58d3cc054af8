import logging
from typing import Any, Dict, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from dating_api.core.errors import InvalidCredentialsError, NotFoundError, UnexpectedError
from dating_api.core.security import create_access_token
from dating_api.models.user import User
from dating_api.services.credential_store import credential_store

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"

# The only attributes a user may change on their own profile
UPDATABLE_FIELDS = (
    "name",
    "nickname",
    "bio",
    "location",
    "avatar_url",
    "interested_in_genders",
    "interested_in_roles",
)


class ProfileService:
    @staticmethod
    def register(db: Session, fields: Dict[str, Any]) -> Tuple[User, str]:
        """Create the account and issue its first token"""
        try:
            user = credential_store.create(db, fields)
        except SQLAlchemyError as e:
            db.rollback()
            raise UnexpectedError("Error registering user", details=str(e))

        logger.info(f"Registered user {user.id} ({user.nickname})")
        return user, create_access_token(user.id)

    @staticmethod
    def login(db: Session, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and issue a token.

        Unknown email, deleted account and wrong password all raise the same
        InvalidCredentialsError so callers cannot probe which emails exist.
        """
        try:
            user = credential_store.find_by_email(db, email)
            if user is None or not credential_store.verify_password(user, password):
                logger.warning("Failed login attempt")
                raise InvalidCredentialsError()

            user = credential_store.touch_last_active(db, user)
        except SQLAlchemyError as e:
            db.rollback()
            raise UnexpectedError("Error logging in", details=str(e))

        logger.info(f"User {user.id} logged in")
        return user, create_access_token(user.id)

    @staticmethod
    def get_profile(db: Session, user_id: str) -> User:
        # Deleted accounts are still visible by id
        user = credential_store.find_by_id(db, user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    @staticmethod
    def update_profile(db: Session, user_id: str, changes: Dict[str, Any]) -> User:
        """Apply the whitelisted, non-null entries of ``changes``"""
        updates = {
            key: value for key, value in changes.items()
            if key in UPDATABLE_FIELDS and value is not None
        }
        try:
            user = credential_store.update(db, user_id, updates)
        except SQLAlchemyError as e:
            db.rollback()
            raise UnexpectedError("Error updating profile", details=str(e))

        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        logger.info(f"User {user_id} updated {sorted(updates)}")
        return user

    @staticmethod
    def delete_account(db: Session, user_id: str) -> None:
        """Soft delete: the row stays, login stops working"""
        try:
            user = credential_store.soft_delete(db, user_id)
        except SQLAlchemyError as e:
            db.rollback()
            raise UnexpectedError("Error deleting account", details=str(e))

        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        logger.info(f"User {user_id} deleted their account")


profile_service = ProfileService()
