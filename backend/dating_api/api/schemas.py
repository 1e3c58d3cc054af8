from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer
from dating_api.models.enums import Gender, Role


class PublicProfile(BaseModel):
    """Profile as returned by register and login. Never carries the password."""
    id: str
    name: str
    nickname: str
    email: str
    role: Role
    avatar_url: str
    bio: str
    location: str
    birthday: date
    gender: Gender
    is_verified: bool
    interested_in_genders: List[Gender]
    interested_in_roles: List[Role]

    model_config = ConfigDict(from_attributes=True)


class FullProfile(PublicProfile):
    """Public profile plus activity timestamps"""
    created_at: Optional[datetime]
    last_active_at: Optional[datetime]
    updated_at: Optional[datetime] = None

    @field_serializer('created_at', 'last_active_at', 'updated_at')
    def serialize_timestamp(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class AuthResponse(BaseModel):
    message: str
    token: str
    user: PublicProfile


class ProfileResponse(BaseModel):
    user: FullProfile


class ProfileUpdateResponse(BaseModel):
    message: str
    user: FullProfile


class MessageResponse(BaseModel):
    message: str
