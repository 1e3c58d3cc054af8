import uuid
from sqlalchemy import Column, String, Date, DateTime, Boolean, Enum, JSON, UniqueConstraint
from sqlalchemy.sql import func
from dating_api.core.database import Base
from dating_api.core.security import get_password_hash, verify_password
from dating_api.models.enums import Gender, Role


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def generate_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    Dating profile and login credentials of one person.

    The password is only ever stored as a bcrypt hash: assign the plaintext
    to ``user.password`` and the hash lands in ``hashed_password``.
    Deleting an account flips ``is_deleted``; rows are never removed.
    """
    __tablename__ = "users"
    # Named so a violation can be traced back to the colliding field
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("nickname", name="uq_users_nickname"),
    )

    id = Column(String(32), primary_key=True, default=generate_user_id)
    name = Column(String, nullable=False)
    nickname = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Role, name="user_role", values_callable=_enum_values), nullable=False)
    avatar_url = Column(String, nullable=False, default="")
    bio = Column(String, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    birthday = Column(Date, nullable=False)
    gender = Column(Enum(Gender, name="user_gender", values_callable=_enum_values), nullable=False)
    # No endpoint sets this; verification is handled outside the API
    is_verified = Column(Boolean, nullable=False, default=False)
    interested_in_genders = Column(JSON, nullable=False, default=list)
    interested_in_roles = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_active_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)

    @property
    def password(self):
        raise AttributeError("password is write-only; use check_password()")

    @password.setter
    def password(self, plain_password: str):
        # Hash only when a new password is assigned
        self.hashed_password = get_password_hash(plain_password)

    def check_password(self, candidate: str) -> bool:
        return verify_password(candidate, self.hashed_password)

    def __repr__(self):
        return f"<User id={self.id} nickname={self.nickname!r}>"
