from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta
import logging

from anonqa.config import settings
from anonqa.database import get_db
from anonqa.dependencies import create_access_token, get_current_user
from anonqa.errors import Unauthenticated
from anonqa.models.user import User
from anonqa.schemas.user import Profile, Token, UserRegister
from anonqa.services import users as user_service

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/register", response_model=Profile, status_code=201)
def register(data: UserRegister, db: Session = Depends(get_db)):
    user = user_service.register_user(db, data.email, data.password, data.full_name)
    return user_service.profile_view(user)


@router.post("/token", response_model=Token)
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    # username 欄位填入 email
    user = user_service.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise Unauthenticated(detail="帳號或密碼錯誤", reason="invalid_credentials")

    access_token = create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        secure=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    logger.info(f"用戶 {user.id} 登入成功")
    return Token(access_token=access_token)


@router.get("/me", response_model=Profile)
def me(current_user: User = Depends(get_current_user)):
    return user_service.profile_view(current_user)


@router.get("/logout")
def logout(response: Response):
    response.delete_cookie("access_token")
    return {"message": "已登出"}
