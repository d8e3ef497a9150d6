from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session, selectinload
from datetime import datetime, timedelta
from typing import Optional

from anonqa.config import settings
from anonqa.database import get_db
from anonqa.errors import Unauthenticated
from anonqa.models.user import User
from anonqa.permissions import Identity
from anonqa.services.email import EmailTransport, ResendTransport

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_token(request: Request, bearer: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """優先使用 Authorization 標頭，其次為 access_token cookie"""
    if bearer:
        return bearer
    token = request.cookies.get("access_token")
    if token and token.startswith("Bearer "):
        return token.replace("Bearer ", "", 1)
    return None


def create_access_token(data: dict, expires_delta: timedelta = None):
    """
    創建訪問令牌

    Args:
        data: 要編碼到令牌中的數據
        expires_delta: 令牌的過期時間增量，如果未提供則使用設定值

    Returns:
        str: JWT令牌
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _load_user(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            return None
        user_id = int(subject)
    except (JWTError, ValueError):
        return None

    user = db.query(User).options(selectinload(User.roles)).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(db: Session = Depends(get_db), token: Optional[str] = Depends(get_token)) -> User:
    user = _load_user(db, token)
    if user is None:
        raise Unauthenticated()
    return user


def get_current_identity(user: User = Depends(get_current_user)) -> Identity:
    return Identity(user_id=user.id, roles=frozenset(user.role_names))


def get_optional_identity(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(get_token)
) -> Optional[Identity]:
    """未登入時回傳 None，由服務層決定是否拒絕"""
    user = _load_user(db, token)
    if user is None:
        return None
    return Identity(user_id=user.id, roles=frozenset(user.role_names))


def get_email_transport() -> Optional[EmailTransport]:
    """未設定 RESEND_API_KEY 時不寄送郵件"""
    if not settings.RESEND_API_KEY:
        return None
    return ResendTransport(
        api_url=settings.EMAIL_API_URL,
        api_key=settings.RESEND_API_KEY,
        sender=settings.EMAIL_FROM,
        timeout=settings.EMAIL_TIMEOUT,
    )
