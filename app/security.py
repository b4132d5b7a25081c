# app/security.py
"""Password hashing, JWT issuing and the auth dependencies used by routes."""
import os
from datetime import timedelta
from typing import Optional
import bcrypt
import jwt
from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from .db import get_db
from .models import User
from .utils import utcnow

load_dotenv()
JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "168"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def create_access_token(user: User) -> str:
    payload = {
        "userId": user.id,
        "email": user.email,
        "role": user.role,
        "exp": utcnow() + timedelta(hours=JWT_EXPIRE_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise _unauthorized("No token provided, authorization denied")
    try:
        claims = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")
    user_id = claims.get("userId")
    if user_id is None:
        raise _unauthorized("Invalid token")
    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("User account is inactive")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Resolve the caller if a valid token is present; guests get None."""
    if credentials is None:
        return None
    try:
        claims = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError:
        return None
    user_id = claims.get("userId")
    user = db.get(User, user_id) if user_id is not None else None
    if user is None or not user.is_active:
        return None
    return user


def require_roles(*roles: str):
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied. Insufficient permissions")
        return user
    return checker
