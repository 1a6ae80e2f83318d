# app/models/photo.py
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from app.database import Base
from datetime import datetime, timezone
import uuid

class Photo(Base):
    """사진 모델"""
    __tablename__ = "photos"

    # 기본 필드
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # 스토리지 정보
    public_id = Column(String, nullable=False)  # 블롭 스토어 식별자
    url = Column(String, nullable=False)  # 공개 URL
    folder = Column(String, nullable=False)  # <root>/<user_id>/<YYYY-MM>

    # 설명
    caption = Column(String, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)

    # 논리 날짜 (사용자 지정, 기본값은 업로드 시각)
    photo_date = Column(DateTime(timezone=True), nullable=False, index=True)

    # 타임스탬프
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # 관계
    user = relationship("User", back_populates="photos")

    def __repr__(self):
        return f"<Photo {self.public_id}>"
