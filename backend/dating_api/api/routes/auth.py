from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from dating_api.core.database import get_db
from dating_api.models.user import User
from dating_api.api.dependencies import get_current_user
from dating_api.api.schemas import AuthResponse, ProfileResponse
from dating_api.api.validation import (
    Email,
    GenderList,
    IsoDate,
    LoginPassword,
    OptionalText,
    Password,
    RoleList,
    Text,
)
from dating_api.models.enums import Gender, Role
from dating_api.services.profile_service import profile_service

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    name: Text
    nickname: Text
    email: Email
    password: Password
    role: Role
    avatar_url: OptionalText = ""
    bio: OptionalText = ""
    location: OptionalText = ""
    birthday: IsoDate
    gender: Gender
    interested_in_genders: GenderList
    interested_in_roles: RoleList


class LoginRequest(BaseModel):
    email: Email
    password: LoginPassword


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user and return a session token"""
    user, token = profile_service.register(db, payload.model_dump())
    return {
        "message": "User registered successfully",
        "token": token,
        "user": user,
    }


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a session token"""
    user, token = profile_service.login(db, payload.email, payload.password)
    return {
        "message": "Login successful",
        "token": token,
        "user": user,
    }


@router.get("/me", response_model=ProfileResponse)
def get_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the profile of the authenticated user"""
    return {"user": profile_service.get_profile(db, current_user.id)}
