# app/models/user.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base
from datetime import datetime, timezone
import uuid

class User(Base):
    """유저 모델"""
    __tablename__ = "users"

    # 기본 필드
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    # 타임스탬프
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # 관계 (삭제는 user_service에서 순서대로 처리)
    photos = relationship("Photo", back_populates="user", passive_deletes=True)
    albums = relationship("Album", back_populates="user", passive_deletes=True)

    def __repr__(self):
        return f"<User {self.email}>"
