# app/api/routes/albums.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models.user import User
from app.schemas.album import AlbumCreate, AlbumUpdate, AlbumPhotoRequest, AlbumResponse
from app.schemas.photo import BulkPhotoRequest, BulkResult
from app.api.deps import get_current_user
from app.services import album_service

router = APIRouter(prefix="/api/v1/albums", tags=["앨범"])

@router.get("/", response_model=List[AlbumResponse])
def list_albums(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """내 앨범 목록 (사진 포함)"""
    return album_service.list_albums(db, current_user)

@router.post("/", response_model=AlbumResponse, status_code=status.HTTP_201_CREATED)
def create_album(
    data: AlbumCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """앨범 생성"""
    return album_service.create_album(db, current_user, data.name, data.description)

@router.get("/{album_id}", response_model=AlbumResponse)
def get_album(
    album_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return album_service.get_album(db, current_user, album_id)

@router.put("/{album_id}", response_model=AlbumResponse)
def update_album(
    album_id: str,
    data: AlbumUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """앨범 이름/설명 수정"""
    return album_service.update_album(
        db,
        current_user,
        album_id,
        name=data.name,
        description=data.description
    )

@router.delete("/{album_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_album(
    album_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """앨범 삭제 (사진은 유지)"""
    album_service.delete_album(db, current_user, album_id)
    return None

@router.post("/{album_id}/photos", response_model=AlbumResponse)
def add_photo_to_album(
    album_id: str,
    data: AlbumPhotoRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """앨범에 사진 추가"""
    return album_service.add_photo(db, current_user, album_id, data.photo_id)

@router.post("/{album_id}/photos/bulk", response_model=BulkResult)
def add_photos_to_album(
    album_id: str,
    data: BulkPhotoRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """앨범에 사진 일괄 추가"""
    return album_service.add_photos(db, current_user, album_id, data.photo_ids)

@router.delete("/{album_id}/photos/{photo_id}", response_model=AlbumResponse)
def remove_photo_from_album(
    album_id: str,
    photo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """앨범에서 사진 제거 (없으면 그대로)"""
    return album_service.remove_photo(db, current_user, album_id, photo_id)
