from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import or_
from sqlalchemy.orm import Session

from timetable_backend.database import get_db
from timetable_backend.models.user import User
from timetable_backend.schemas.user import RegisterOut, UserCreate, UserOut
from timetable_backend.utils.auth import create_access_token, get_current_user
from timetable_backend.utils.hashing import hash_password, verify_password

import logging
logger = logging.getLogger("app.auth")


router = APIRouter(prefix="/auth", tags=["Auth"])


# 註冊
@router.post("/register", response_model=RegisterOut, status_code=201)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    exists = db.query(User).filter(
        or_(User.username == user_data.username, User.email == user_data.email)
    ).first()
    if exists:
        raise HTTPException(status_code=400, detail="User already exists with this email or username")

    new_user = User(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("Registered user %s", new_user.username)

    token = create_access_token({"sub": new_user.username})
    return {"user": UserOut.model_validate(new_user), "token": token}


# 登入
@router.post("/login")
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == form_data.username).first()
    if not user or not verify_password(form_data.password, user.password_hash):
        logger.warning("Failed login for %s", form_data.username)
        raise HTTPException(status_code=403, detail="Invalid credentials")

    token = create_access_token({"sub": user.username})
    return {"access_token": token, "token_type": "bearer"}


# 取得使用者資料
@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
