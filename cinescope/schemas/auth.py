from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from typing import List, Optional


# Schema for user registration
class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, description="Username must be at least 3 characters")
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72, description="Password must be at least 6 characters")


# Schema for user login
class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, description="Password is required")


class FavoriteEntry(BaseModel):
    movie_id: int
    added_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# Schema for user response
class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class AuthData(UserResponse):
    token: str


class AuthResponse(BaseModel):
    success: bool = True
    data: AuthData


class ProfileData(UserResponse):
    favorites: List[FavoriteEntry] = []


class ProfileResponse(BaseModel):
    success: bool = True
    data: ProfileData
