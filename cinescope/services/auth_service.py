from sqlalchemy import or_
from sqlalchemy.orm import Session
from cinescope.models.user import User
from cinescope.schemas.auth import UserRegister, UserLogin
from cinescope.utils.security import hash_password, verify_password, create_access_token
from fastapi import HTTPException, status
import logging
from typing import cast

logger = logging.getLogger(__name__)


def _auth_payload(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "created_at": user.created_at,
        "token": create_access_token(data={"sub": user.email, "user_id": user.id}),
    }


class AuthService:
    @staticmethod
    def register_user(db: Session, user_data: UserRegister) -> dict:
        # Email and username are both unique
        existing_user = db.query(User).filter(
            or_(User.email == user_data.email, User.username == user_data.username)
        ).first()
        if existing_user:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

        new_user = User(
            username=user_data.username,
            email=user_data.email,
            password_hash=hash_password(user_data.password),
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
        logger.info(f"Registered user {new_user.username} (id={new_user.id})")
        return _auth_payload(new_user)

    @staticmethod
    def login_user(db: Session, credentials: UserLogin) -> dict:
        user = db.query(User).filter(User.email == credentials.email).first()

        if not user or not verify_password(credentials.password, str(user.password_hash)):
            logger.warning(f"Login failed for email {credentials.email}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

        if not cast(bool, user.is_active):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

        return _auth_payload(user)
