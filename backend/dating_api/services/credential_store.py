import logging
import re
from typing import Any, Dict, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from dating_api.core.errors import DuplicateKeyError
from dating_api.models.user import User

logger = logging.getLogger(__name__)

# Matches the colliding column in both SQLite ("users.email") and
# PostgreSQL ("uq_users_email") unique-violation messages
_UNIQUE_FIELD_RE = re.compile(r"(?:uq_users_|users\.)(email|nickname)")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def duplicate_field(error: IntegrityError) -> Optional[str]:
    """Name of the unique field an IntegrityError collided on, if any"""
    match = _UNIQUE_FIELD_RE.search(str(error.orig))
    return match.group(1) if match else None


def _plain(values) -> list[str]:
    # Enum members -> stored string values, order preserved
    return [getattr(value, "value", value) for value in values]


class CredentialStore:
    @staticmethod
    def create(db: Session, fields: Dict[str, Any]) -> User:
        """
        Persist a new user.

        ``fields`` carries the plaintext ``password``; it is hashed on
        assignment. Uniqueness of email and nickname is left to the
        database constraints so concurrent registrations cannot race.
        """
        fields = dict(fields)
        fields["email"] = normalize_email(fields["email"])
        fields["nickname"] = fields["nickname"].strip()
        for key in ("interested_in_genders", "interested_in_roles"):
            fields[key] = _plain(fields.get(key) or [])

        user = User(**fields)
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            field = duplicate_field(e)
            if field is None:
                raise
            raise DuplicateKeyError(field)
        db.refresh(user)
        return user

    @staticmethod
    def find_by_email(db: Session, email: str) -> Optional[User]:
        """Active (not soft-deleted) user with this email"""
        return db.query(User).filter(
            User.email == normalize_email(email),
            User.is_deleted.is_(False)
        ).first()

    @staticmethod
    def find_by_id(db: Session, user_id: str) -> Optional[User]:
        # Soft-deleted users are still returned here
        return db.get(User, user_id)

    @staticmethod
    def verify_password(user: User, candidate: str) -> bool:
        return user.check_password(candidate)

    @staticmethod
    def touch_last_active(db: Session, user: User) -> User:
        """Set last_active_at to the database's current time"""
        user.last_active_at = func.now()
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update(db: Session, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        """Apply ``changes`` to the user; returns None when the id is unknown"""
        user = db.get(User, user_id)
        if user is None:
            return None

        for key, value in changes.items():
            if key in ("interested_in_genders", "interested_in_roles"):
                value = _plain(value)
            setattr(user, key, value)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            field = duplicate_field(e)
            if field is None:
                raise
            raise DuplicateKeyError(field)
        db.refresh(user)
        return user

    @staticmethod
    def soft_delete(db: Session, user_id: str) -> Optional[User]:
        user = db.get(User, user_id)
        if user is None:
            return None
        user.is_deleted = True
        db.commit()
        db.refresh(user)
        return user


credential_store = CredentialStore()
