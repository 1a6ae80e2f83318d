# app/models/album.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from datetime import datetime, timezone
import uuid

class Album(Base):
    """앨범 모델"""
    __tablename__ = "albums"

    # 기본 필드
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")

    # 타임스탬프
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # 관계
    user = relationship("User", back_populates="albums")
    entries = relationship(
        "AlbumPhoto",
        back_populates="album",
        order_by="AlbumPhoto.position",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    @property
    def photos(self):
        """표시 순서(추가 순서)대로 사진 목록"""
        return [entry.photo for entry in self.entries]

    @property
    def photo_ids(self) -> list[str]:
        return [entry.photo_id for entry in self.entries]

    def __repr__(self):
        return f"<Album {self.name}>"

class AlbumPhoto(Base):
    """앨범-사진 멤버십 (순서 포함)"""
    __tablename__ = "album_photos"
    __table_args__ = (
        UniqueConstraint("album_id", "photo_id", name="uq_album_photos_album_photo"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    album_id = Column(String, ForeignKey("albums.id", ondelete="CASCADE"), nullable=False, index=True)
    photo_id = Column(String, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)  # 표시 순서
    added_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # 관계
    album = relationship("Album", back_populates="entries")
    photo = relationship("Photo", lazy="joined")

    def __repr__(self):
        return f"<AlbumPhoto {self.album_id}:{self.photo_id}@{self.position}>"
