from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from dating_api.core.database import get_db
from dating_api.models.user import User
from dating_api.api.dependencies import get_current_user
from dating_api.api.schemas import MessageResponse, ProfileResponse, ProfileUpdateResponse
from dating_api.api.validation import GenderList, OptionalText, RoleList, Text
from dating_api.services.profile_service import profile_service

router = APIRouter(prefix="/users", tags=["users"])


class ProfileUpdate(BaseModel):
    # Any other key in the body (role, email, is_verified, ...) is ignored
    name: Optional[Text] = None
    nickname: Optional[Text] = None
    bio: Optional[OptionalText] = None
    location: Optional[OptionalText] = None
    avatar_url: Optional[OptionalText] = None
    interested_in_genders: Optional[GenderList] = None
    interested_in_roles: Optional[RoleList] = None


# /me routes are declared before /{user_id} so "me" is never taken as an id

@router.patch("/me", response_model=ProfileUpdateResponse)
def update_me(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update the authenticated user's profile"""
    user = profile_service.update_profile(
        db, current_user.id, payload.model_dump(exclude_unset=True))
    return {"message": "Profile updated successfully", "user": user}


@router.delete("/me", response_model=MessageResponse)
def delete_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Soft delete the authenticated user's account"""
    profile_service.delete_account(db, current_user.id)
    return {"message": "Account deleted successfully"}


@router.get("/{user_id}", response_model=ProfileResponse)
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get another user's profile by id"""
    return {"user": profile_service.get_profile(db, user_id)}
