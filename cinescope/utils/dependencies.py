from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from cinescope.database import get_db
from cinescope.utils.security import decode_token
from cinescope.models.user import User
from cinescope.services.tmdb_service import TMDBClient
from cinescope.services.catalog_service import MovieService, TVService

# Dependency to get the current authenticated user
security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    token = credentials.credentials
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, token failed")

    user_id = payload.get("user_id")
    user = db.query(User).filter(User.id == user_id).first()

    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


_tmdb_client = None


def get_tmdb_client() -> TMDBClient:
    """One TMDBClient per process, built from the environment on first use."""
    global _tmdb_client
    if _tmdb_client is None:
        _tmdb_client = TMDBClient.from_env()
    return _tmdb_client


def get_movie_service(
    client: TMDBClient = Depends(get_tmdb_client),
    db: Session = Depends(get_db)
) -> MovieService:
    return MovieService(client, db)


def get_tv_service(
    client: TMDBClient = Depends(get_tmdb_client),
    db: Session = Depends(get_db)
) -> TVService:
    return TVService(client, db)
