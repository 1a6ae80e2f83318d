# app/services/photo_service.py
import math
import os
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time as dt_time, timedelta, timezone
from typing import List

from sqlalchemy import String, func, or_, select, type_coerce
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import (
    InvalidInput, NotFound, RecordWriteFailed, StorageDeleteFailed, StorageWriteFailed
)
from app.core.logger import logger
from app.core.tags import clean_tags
from app.database import commit
from app.models.album import AlbumPhoto
from app.models.photo import Photo
from app.models.user import User
from app.services.ai_service import generate_caption_and_tags, guess_mime_type
from app.services.storage_service import BlobStore, StorageError

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
BULK_WORKERS = 8

def build_folder(user_id: str, photo_date: datetime) -> str:
    """스토리지 폴더: <root>/<user_id>/<YYYY-MM>"""
    return f"{settings.storage_root}/{user_id}/{photo_date:%Y-%m}"

def build_blob_key(filename: str) -> str:
    """폴더 내 고유 키 (<epoch ms>-<uuid8><ext>)"""
    ext = os.path.splitext(filename or "")[1].lower() or ".jpg"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"

def start_of_day(value: date) -> datetime:
    return datetime.combine(value, dt_time.min, tzinfo=timezone.utc)

def upload_photo(
    db: Session,
    blob_store: BlobStore,
    owner: User,
    content: bytes,
    filename: str,
    photo_date: datetime | None = None,
    caption: str = "",
    tags: List[str] | None = None,
    auto_caption: bool = False,
    auto_tags: bool = False
) -> Photo:
    """
    사진 업로드

    1. 블롭 저장 (실패 시 StorageWriteFailed, 레코드 없음)
    2. 요청 시 AI 캡션/태그 (실패해도 기본값으로 계속)
    3. 레코드 저장 (실패 시 RecordWriteFailed, 블롭은 남음)
    """
    if not content:
        raise InvalidInput("이미지 파일이 필요합니다")

    if photo_date is None:
        photo_date = datetime.now(timezone.utc)

    folder = build_folder(owner.id, photo_date)
    key = build_blob_key(filename)

    try:
        blob = blob_store.upload(content, folder, key, guess_mime_type(key))
    except StorageError as e:
        logger.error(f"블롭 업로드 실패 (user={owner.id}, folder={folder}): {e}")
        raise StorageWriteFailed() from e

    final_caption = (caption or "").strip()
    final_tags = clean_tags(tags)

    if auto_caption or auto_tags:
        generated = generate_caption_and_tags(blob.url, content=content)
        if auto_caption:
            final_caption = generated["caption"]
        if auto_tags:
            final_tags = clean_tags(generated["tags"])

    photo = Photo(
        user_id=owner.id,
        public_id=blob.public_id,
        url=blob.url,
        folder=folder,
        caption=final_caption,
        tags=final_tags,
        photo_date=photo_date
    )
    db.add(photo)
    try:
        commit(db)
    except RecordWriteFailed:
        # 재시도하지 않음: 블롭은 고아로 남김
        logger.error(f"레코드 저장 실패, 고아 블롭 남음: {blob.public_id}")
        raise
    db.refresh(photo)

    logger.info(f"사진 업로드 완료: {photo.id} ({blob.public_id})")
    return photo

def get_photo(db: Session, owner: User, photo_id: str) -> Photo:
    """본인 사진 조회 (없거나 타인 소유면 NotFound)"""
    photo = db.query(Photo)\
        .filter(Photo.id == photo_id, Photo.user_id == owner.id)\
        .first()

    if not photo:
        raise NotFound("사진을 찾을 수 없습니다")

    return photo

def destroy_photo(db: Session, blob_store: BlobStore, photo: Photo) -> None:
    """블롭 삭제 → 멤버십 제거 → 레코드 삭제"""
    try:
        blob_store.destroy(photo.public_id)
    except StorageError as e:
        logger.error(f"블롭 삭제 실패, 레코드 유지: {photo.public_id}: {e}")
        raise StorageDeleteFailed() from e

    remove_photo_records(db, [photo])
    commit(db)

def remove_photo_records(db: Session, photos: List[Photo]) -> None:
    """앨범 멤버십과 사진 레코드 삭제 (커밋은 호출자)"""
    if not photos:
        return
    photo_ids = [photo.id for photo in photos]
    db.query(AlbumPhoto)\
        .filter(AlbumPhoto.photo_id.in_(photo_ids))\
        .delete(synchronize_session=False)
    for photo in photos:
        db.delete(photo)

def delete_photo(db: Session, blob_store: BlobStore, owner: User, photo_id: str) -> None:
    """사진 삭제 (본인 것만)"""
    photo = get_photo(db, owner, photo_id)
    destroy_photo(db, blob_store, photo)
    logger.info(f"사진 삭제 완료: {photo_id}")

def destroy_blobs(blob_store: BlobStore, photos: List[Photo]) -> tuple[List[Photo], List[Photo]]:
    """
    블롭 동시 삭제 (모두 시작 → 모두 대기)

    Returns: (성공한 사진, 실패한 사진)
    """
    if not photos:
        return [], []

    def destroy(photo: Photo) -> bool:
        try:
            blob_store.destroy(photo.public_id)
            return True
        except StorageError as e:
            logger.error(f"블롭 삭제 실패: {photo.public_id}: {e}")
            return False

    with ThreadPoolExecutor(max_workers=min(BULK_WORKERS, len(photos))) as executor:
        results = list(executor.map(destroy, photos))

    destroyed = [photo for photo, ok in zip(photos, results) if ok]
    failed = [photo for photo, ok in zip(photos, results) if not ok]
    return destroyed, failed

def delete_photos(db: Session, blob_store: BlobStore, photo_ids: List[str], owner: User | None = None) -> dict:
    """
    일괄 삭제 (부분 성공 허용)

    owner가 있으면 본인 사진만, 없으면 (관리자) 전체 대상.
    없는 ID, 타인 사진, 블롭 삭제 실패는 모두 실패로 집계.
    """
    unique_ids = list(dict.fromkeys(photo_ids))

    query = db.query(Photo).filter(Photo.id.in_(unique_ids))
    if owner is not None:
        query = query.filter(Photo.user_id == owner.id)
    photos = query.all()

    destroyed, failed = destroy_blobs(blob_store, photos)

    remove_photo_records(db, destroyed)
    commit(db)

    success_count = len(destroyed)
    failure_count = len(photo_ids) - success_count
    logger.info(
        f"일괄 삭제: 요청 {len(photo_ids)}, 성공 {success_count}, 실패 {failure_count} "
        f"(블롭 실패 {len(failed)})"
    )
    return {"success_count": success_count, "failure_count": failure_count}

def update_photo(
    db: Session,
    owner: User,
    photo_id: str,
    caption: str | None = None,
    tags: List[str] | None = None
) -> Photo:
    """캡션/태그 부분 수정 (블롭, 날짜는 건드리지 않음)"""
    photo = get_photo(db, owner, photo_id)

    if caption is not None:
        photo.caption = caption.strip()
    if tags is not None:
        photo.tags = clean_tags(tags)

    commit(db)
    db.refresh(photo)
    return photo

def _tag_contains(db: Session, term: str):
    """태그 배열 원소 중 하나라도 term을 포함하는지 (원소 단위 EXISTS)"""
    if db.get_bind().dialect.name == "postgresql":
        elements = func.json_array_elements_text(Photo.tags)
    else:
        elements = func.json_each(Photo.tags)

    tag = elements.table_valued("value", name="tag")
    return select(tag.c.value)\
        .where(type_coerce(tag.c.value, String).icontains(term, autoescape=True))\
        .exists()

def list_photos(
    db: Session,
    owner: User,
    from_date: date | None = None,
    to_date: date | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE
) -> tuple[List[Photo], int]:
    """
    내 사진 목록 (날짜 범위/검색, 페이지네이션)

    - from_date 포함, to_date는 그날 하루 전체 포함
    - search: 캡션 또는 태그 부분 일치 (대소문자 무시)
    - 정렬: photo_date 내림차순, 같으면 최근 업로드 먼저
    """
    if page < 1:
        raise InvalidInput("page는 1 이상이어야 합니다")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise InvalidInput(f"page_size는 1~{MAX_PAGE_SIZE} 사이여야 합니다")

    query = db.query(Photo).filter(Photo.user_id == owner.id)

    if from_date:
        query = query.filter(Photo.photo_date >= start_of_day(from_date))
    if to_date:
        query = query.filter(Photo.photo_date < start_of_day(to_date + timedelta(days=1)))

    if search and search.strip():
        term = search.strip()
        query = query.filter(
            or_(
                Photo.caption.icontains(term, autoescape=True),
                _tag_contains(db, term)
            )
        )

    total = query.count()

    skip = (page - 1) * page_size
    photos = query\
        .order_by(Photo.photo_date.desc(), Photo.created_at.desc())\
        .offset(skip)\
        .limit(page_size)\
        .all()

    return photos, total

def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0
