# app/database.py
import json
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from app.config import settings
from app.core.exceptions import RecordWriteFailed
from app.core.logger import logger

# SQLite는 스레드 간 커넥션 공유 허용 필요
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

# 데이터베이스 엔진 생성
engine = create_engine(
    settings.database_url,
    echo=settings.debug,  # SQL 쿼리 로그 출력
    connect_args=connect_args,
    json_serializer=lambda obj: json.dumps(obj, ensure_ascii=False),  # 태그 검색용
    pool_pre_ping=True
)

# 세션 팩토리
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base 클래스 (모든 모델의 부모)
Base = declarative_base()

# DB 세션 의존성 (FastAPI에서 사용)
def get_db():
    """DB 세션 생성 및 종료"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def commit(db: Session) -> None:
    """커밋 실패 시 롤백 후 RecordWriteFailed"""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"DB 커밋 실패: {e}")
        raise RecordWriteFailed() from e
