# app/schemas/admin.py
from pydantic import BaseModel, Field
from datetime import datetime

from app.schemas.photo import PhotoResponse

class AdminCredentials(BaseModel):
    """관리자 공유 비밀 (세션 아님)"""
    email: str
    password: str

class AdminDeleteUser(AdminCredentials):
    user_id: str = Field(..., min_length=1)

class AdminDeletePhotos(AdminCredentials):
    photo_ids: list[str] = Field(..., min_length=1, max_length=500)

class AdminUser(BaseModel):
    id: str
    name: str
    email: str
    created_at: datetime
    photo_count: int

class AdminUserList(BaseModel):
    user_count: int
    users: list[AdminUser]

class PhotoOwner(BaseModel):
    id: str
    name: str
    email: str

    class Config:
        from_attributes = True

class AdminPhoto(PhotoResponse):
    """사진 + 소유자 정보"""
    user: PhotoOwner

class AdminPhotoList(BaseModel):
    photos: list[AdminPhoto]

class DeleteUserResult(BaseModel):
    message: str
    deleted_photos: int
    deleted_albums: int
