# app/schemas/album.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from app.schemas.photo import PhotoResponse

class AlbumCreate(BaseModel):
    """앨범 생성 요청"""
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=1000)

class AlbumUpdate(BaseModel):
    """앨범 수정 요청 (없는 필드는 유지)"""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)

class AlbumPhotoRequest(BaseModel):
    """앨범에 사진 추가"""
    photo_id: str

class AlbumResponse(BaseModel):
    """앨범 응답 (사진 포함, 추가 순서대로)"""
    id: str
    user_id: str
    name: str
    description: str
    photos: List[PhotoResponse]
    created_at: datetime

    class Config:
        from_attributes = True
