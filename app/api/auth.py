# app/api/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from .. import crud, schemas
from ..activity import activity_logger
from ..db import get_db
from ..models import User, UserRole
from ..security import hash_password, verify_password, create_access_token, get_current_user
from ..utils import request_meta

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(message: str, user: User):
    return {"message": message, "token": create_access_token(user), "user": user}


@router.post("/register", response_model=schemas.TokenOut, status_code=201)
def register(payload: schemas.UserRegister, request: Request, db: Session = Depends(get_db)):
    if crud.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=409, detail="Email already registered")
    user = crud.create_user(db, {
        "email": payload.email.lower(),
        "password_hash": hash_password(payload.password),
        "full_name": payload.full_name.strip(),
        "phone": payload.phone,
        "role": UserRole.user.value,
    })
    ip, ua = request_meta(request)
    activity_logger.log(
        user.id, "user_registered", "authentication",
        {"email": user.email, "full_name": user.full_name}, ip, ua,
    )
    return _token_response("User registered successfully", user)


@router.post("/login", response_model=schemas.TokenOut)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    ip, ua = request_meta(request)
    user = crud.get_user_by_email(db, payload.email)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is inactive")
    if not verify_password(payload.password, user.password_hash):
        activity_logger.log(user.id, "login_failed", "authentication", {"reason": "invalid_password"}, ip, ua)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    activity_logger.log(user.id, "user_login", "authentication", {"email": user.email}, ip, ua)
    return _token_response("Login successful", user)


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"user": schemas.UserOut.model_validate(user)}


@router.post("/logout")
def logout(request: Request, user: User = Depends(get_current_user)):
    ip, ua = request_meta(request)
    activity_logger.log(user.id, "user_logout", "authentication", {}, ip, ua)
    return {"message": "Logged out successfully"}


@router.post("/change-password")
def change_password(
    payload: schemas.PasswordChange,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    crud.update_user(db, user, {"password_hash": hash_password(payload.new_password)})
    ip, ua = request_meta(request)
    activity_logger.log(user.id, "password_changed", "authentication", {}, ip, ua)
    return {"message": "Password changed successfully"}


@router.get("/verify")
def verify(user: User = Depends(get_current_user)):
    return {"valid": True, "user": {"id": user.id, "email": user.email, "role": user.role}}
