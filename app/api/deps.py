# app/api/deps.py
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.core.exceptions import Unauthorized
from app.core.security import decode_access_token, verify_admin_credentials
from app.schemas.admin import AdminCredentials

# JWT Bearer 토큰 스킴 (토큰 없으면 직접 401 처리)
security = HTTPBearer(auto_error=False)

def get_current_user(
    token: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """JWT 토큰으로 현재 유저 가져오기"""
    credentials_exception = Unauthorized(headers={"WWW-Authenticate": "Bearer"})

    if token is None:
        raise credentials_exception

    payload = decode_access_token(token.credentials)
    if payload is None:
        raise credentials_exception

    user_id: str = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception

    return user

def require_admin(credentials: AdminCredentials) -> None:
    """관리자 공유 비밀 확인 (요청 본문의 email/password)"""
    if not verify_admin_credentials(credentials.email, credentials.password):
        raise Unauthorized("관리자 인증 정보가 올바르지 않습니다")
