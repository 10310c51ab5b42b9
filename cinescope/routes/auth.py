from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from cinescope.database import get_db
from cinescope.schemas.auth import UserRegister, UserLogin, AuthResponse, ProfileResponse
from cinescope.services.auth_service import AuthService
from cinescope.utils.dependencies import get_current_user
from cinescope.models.user import User

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new user"""
    return {"success": True, "data": AuthService.register_user(db, user_data)}


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with email and password"""
    return {"success": True, "data": AuthService.login_user(db, credentials)}


@router.get("/profile", response_model=ProfileResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    """Get current authenticated user with their favorites"""
    return {"success": True, "data": current_user}
