# app/api/routes/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.admin import (
    AdminCredentials, AdminDeleteUser, AdminDeletePhotos,
    AdminUserList, AdminPhotoList, DeleteUserResult
)
from app.schemas.photo import BulkResult
from app.api.deps import require_admin
from app.core.logger import logger
from app.services import photo_service, user_service
from app.services.storage_service import BlobStore, get_blob_store

# 관리자 API: 세션 대신 요청 본문의 공유 비밀로 인증
router = APIRouter(prefix="/api/v1/admin", tags=["관리자"])

@router.post("/users", response_model=AdminUserList)
def list_users(credentials: AdminCredentials, db: Session = Depends(get_db)):
    """전체 유저 + 사진 수"""
    require_admin(credentials)

    users = user_service.list_users_with_photo_counts(db)
    return {"user_count": len(users), "users": users}

@router.post("/delete-user", response_model=DeleteUserResult)
def delete_user(
    data: AdminDeleteUser,
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """유저와 모든 사진/앨범 삭제"""
    require_admin(data)

    logger.warning(f"관리자 유저 삭제 요청: {data.user_id}")
    result = user_service.delete_user(db, blob_store, data.user_id)
    return {"message": "유저와 모든 데이터가 삭제되었습니다", **result}

@router.post("/photos", response_model=AdminPhotoList)
def list_all_photos(credentials: AdminCredentials, db: Session = Depends(get_db)):
    """전체 사진 (소유자 정보 포함)"""
    require_admin(credentials)

    return {"photos": user_service.list_all_photos(db)}

@router.post("/delete-photos", response_model=BulkResult)
def delete_photos(
    data: AdminDeletePhotos,
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """소유자 무관 일괄 삭제"""
    require_admin(data)

    logger.warning(f"관리자 사진 일괄 삭제 요청: {len(data.photo_ids)}건")
    return photo_service.delete_photos(db, blob_store, data.photo_ids)
