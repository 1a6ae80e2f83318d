# app/api/routes/photos.py
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, UploadFile, File, Form, Query, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.photo import (
    PhotoResponse, PhotoListResponse, PhotoUpdate,
    BulkPhotoRequest, BulkResult, CaptionRequest, CaptionResponse
)
from app.api.deps import get_current_user
from app.core.exceptions import InvalidInput
from app.core.file_security import validate_uploaded_file, sanitize_filename
from app.core.tags import split_tags
from app.services import ai_service, photo_service
from app.services.storage_service import BlobStore, get_blob_store

router = APIRouter(prefix="/api/v1/photos", tags=["사진"])

@router.post("/upload", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
async def upload_photo(
    file: UploadFile | None = File(None),
    caption: str = Form(""),
    tags: str = Form(""),  # 쉼표 구분
    photo_date: date | None = Form(None),
    auto_caption: bool = Form(False),
    auto_tags: bool = Form(False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """사진 업로드 (선택적으로 AI 캡션/태그)"""
    if file is None:
        raise InvalidInput("이미지 파일이 필요합니다")

    validate_uploaded_file(file)
    content = await file.read()

    logical_date = datetime.now(timezone.utc)
    if photo_date is not None:
        logical_date = photo_service.start_of_day(photo_date)

    return await run_in_threadpool(
        photo_service.upload_photo,
        db,
        blob_store,
        current_user,
        content,
        sanitize_filename(file.filename),
        photo_date=logical_date,
        caption=caption,
        tags=split_tags(tags),
        auto_caption=auto_caption,
        auto_tags=auto_tags
    )

@router.get("/", response_model=PhotoListResponse)
def get_my_photos(
    page: int = Query(1, ge=1, description="페이지 번호"),
    limit: int = Query(photo_service.DEFAULT_PAGE_SIZE, ge=1, le=photo_service.MAX_PAGE_SIZE, description="페이지당 개수"),
    from_date: date | None = Query(None, description="시작일 (포함)"),
    to_date: date | None = Query(None, description="종료일 (그날 전체 포함)"),
    search: str | None = Query(None, description="캡션/태그 검색"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """내 사진 목록 조회 (필터, 페이지네이션)"""
    photos, total = photo_service.list_photos(
        db,
        current_user,
        from_date=from_date,
        to_date=to_date,
        search=search,
        page=page,
        page_size=limit
    )

    return {
        "photos": photos,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": photo_service.page_count(total, limit)
        }
    }

@router.post("/bulk-delete", response_model=BulkResult)
def bulk_delete_photos(
    data: BulkPhotoRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """내 사진 일괄 삭제 (성공/실패 개수 반환)"""
    return photo_service.delete_photos(db, blob_store, data.photo_ids, owner=current_user)

@router.post("/generate-caption", response_model=CaptionResponse)
def generate_caption(
    data: CaptionRequest,
    current_user: User = Depends(get_current_user)
):
    """이미지 URL로 캡션/태그 생성 (실패 시 기본값)"""
    return ai_service.generate_caption_and_tags(data.image_url)

@router.get("/{photo_id}", response_model=PhotoResponse)
def get_photo(
    photo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """사진 상세"""
    return photo_service.get_photo(db, current_user, photo_id)

@router.put("/{photo_id}", response_model=PhotoResponse)
def update_photo(
    photo_id: str,
    data: PhotoUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """캡션/태그 수정"""
    return photo_service.update_photo(
        db,
        current_user,
        photo_id,
        caption=data.caption,
        tags=data.tags
    )

@router.delete("/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_photo(
    photo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """사진 삭제 (블롭 먼저, 다음 레코드)"""
    photo_service.delete_photo(db, blob_store, current_user, photo_id)
    return None
