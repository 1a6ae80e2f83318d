# app/schemas/photo.py
from pydantic import BaseModel, Field
from datetime import datetime

class PhotoResponse(BaseModel):
    """사진 응답"""
    id: str
    user_id: str
    public_id: str
    url: str
    folder: str
    caption: str
    tags: list[str]
    photo_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True

class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class PhotoListResponse(BaseModel):
    """사진 목록 응답"""
    photos: list[PhotoResponse]
    pagination: PaginationResponse

class PhotoUpdate(BaseModel):
    """캡션/태그 수정 (없는 필드는 유지)"""
    caption: str | None = None
    tags: list[str] | None = None

class BulkPhotoRequest(BaseModel):
    """사진 ID 목록"""
    photo_ids: list[str] = Field(..., min_length=1, max_length=500)

class BulkResult(BaseModel):
    """일괄 처리 결과"""
    success_count: int
    failure_count: int

class CaptionRequest(BaseModel):
    image_url: str = Field(..., min_length=1)

class CaptionResponse(BaseModel):
    caption: str
    tags: list[str]
