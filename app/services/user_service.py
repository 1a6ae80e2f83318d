# app/services/user_service.py
from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import EmailAlreadyRegistered, InvalidInput, NotFound, StorageDeleteFailed
from app.core.logger import logger
from app.core.security import hash_password, verify_password
from app.database import commit
from app.models.album import Album, AlbumPhoto
from app.models.photo import Photo
from app.models.user import User
from app.services.photo_service import destroy_blobs, remove_photo_records
from app.services.storage_service import BlobStore

def register_user(db: Session, name: str, email: str, password: str) -> User:
    """회원가입"""
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email or not password:
        raise InvalidInput("이름, 이메일, 비밀번호는 필수입니다")

    # 이메일 중복 체크
    if db.query(User).filter(User.email == email).first():
        raise EmailAlreadyRegistered()

    user = User(
        name=name,
        email=email,
        hashed_password=hash_password(password)
    )
    db.add(user)
    commit(db)
    db.refresh(user)

    logger.info(f"회원가입: {user.email}")
    return user

def authenticate(db: Session, email: str, password: str) -> User | None:
    """이메일/비밀번호 확인 (실패 시 None)"""
    user = db.query(User).filter(User.email == (email or "").strip().lower()).first()
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user

def list_users_with_photo_counts(db: Session) -> List[dict]:
    """전체 유저 + 사진 수 (최근 가입 순)"""
    photo_counts = db.query(Photo.user_id, func.count(Photo.id).label("photo_count"))\
        .group_by(Photo.user_id)\
        .subquery()

    rows = db.query(User, func.coalesce(photo_counts.c.photo_count, 0))\
        .outerjoin(photo_counts, photo_counts.c.user_id == User.id)\
        .order_by(User.created_at.desc())\
        .all()

    return [
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "created_at": user.created_at,
            "photo_count": count
        }
        for user, count in rows
    ]

def list_all_photos(db: Session) -> List[Photo]:
    """전체 사진 (소유자 포함, 최근 업로드 순)"""
    return db.query(Photo)\
        .options(joinedload(Photo.user))\
        .order_by(Photo.created_at.desc())\
        .all()

def delete_user(db: Session, blob_store: BlobStore, user_id: str) -> dict:
    """
    유저 삭제 (사진 블롭 → 사진 → 앨범 → 유저 순)

    블롭 삭제가 하나라도 실패하면 성공한 사진만 지우고 StorageDeleteFailed.
    유저와 나머지 사진은 남으므로 다시 시도하면 이어서 삭제됨.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("유저를 찾을 수 없습니다")

    photos = db.query(Photo).filter(Photo.user_id == user.id).all()
    destroyed, failed = destroy_blobs(blob_store, photos)

    remove_photo_records(db, destroyed)

    if failed:
        commit(db)
        logger.error(f"유저 삭제 중단 ({user_id}): 블롭 삭제 실패 {len(failed)}건")
        raise StorageDeleteFailed(
            f"이미지 {len(failed)}건 삭제에 실패했습니다. 다시 시도해주세요"
        )

    album_ids = db.query(Album.id).filter(Album.user_id == user.id)
    db.query(AlbumPhoto)\
        .filter(AlbumPhoto.album_id.in_(album_ids.scalar_subquery()))\
        .delete(synchronize_session=False)
    album_count = db.query(Album)\
        .filter(Album.user_id == user.id)\
        .delete(synchronize_session=False)

    db.delete(user)
    commit(db)

    logger.info(f"유저 삭제 완료: {user_id} (사진 {len(destroyed)}, 앨범 {album_count})")
    return {"deleted_photos": len(destroyed), "deleted_albums": album_count}
