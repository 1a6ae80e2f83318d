# app/services/album_service.py
from typing import List
from sqlalchemy.orm import Session

from app.core.exceptions import AlreadyMember, InvalidInput, NotFound
from app.core.logger import logger
from app.database import commit
from app.models.album import Album, AlbumPhoto
from app.models.photo import Photo
from app.models.user import User

def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("앨범 이름은 필수입니다")
    return name

def get_album(db: Session, owner: User, album_id: str) -> Album:
    """본인 앨범 조회 (없거나 타인 소유면 NotFound)"""
    album = db.query(Album)\
        .filter(Album.id == album_id, Album.user_id == owner.id)\
        .first()

    if not album:
        raise NotFound("앨범을 찾을 수 없습니다")

    return album

def _get_owned_photo(db: Session, owner: User, photo_id: str) -> Photo:
    photo = db.query(Photo)\
        .filter(Photo.id == photo_id, Photo.user_id == owner.id)\
        .first()

    if not photo:
        raise NotFound("사진을 찾을 수 없습니다")

    return photo

def _append(album: Album, photo: Photo) -> None:
    next_position = max((entry.position for entry in album.entries), default=-1) + 1
    album.entries.append(AlbumPhoto(photo_id=photo.id, photo=photo, position=next_position))

def create_album(db: Session, owner: User, name: str, description: str | None = None) -> Album:
    """앨범 생성"""
    album = Album(
        user_id=owner.id,
        name=_clean_name(name),
        description=(description or "").strip()
    )
    db.add(album)
    commit(db)
    db.refresh(album)

    logger.info(f"앨범 생성: {album.id} (user={owner.id})")
    return album

def list_albums(db: Session, owner: User) -> List[Album]:
    """내 앨범 목록 (최근 생성 순, 사진 포함)"""
    return db.query(Album)\
        .filter(Album.user_id == owner.id)\
        .order_by(Album.created_at.desc())\
        .all()

def update_album(
    db: Session,
    owner: User,
    album_id: str,
    name: str | None = None,
    description: str | None = None
) -> Album:
    """이름/설명 부분 수정"""
    album = get_album(db, owner, album_id)

    if name is not None:
        album.name = _clean_name(name)
    if description is not None:
        album.description = description.strip()

    commit(db)
    db.refresh(album)
    return album

def delete_album(db: Session, owner: User, album_id: str) -> None:
    """앨범 삭제 (사진은 그대로, 멤버십만 제거)"""
    album = get_album(db, owner, album_id)
    db.delete(album)
    commit(db)
    logger.info(f"앨범 삭제: {album_id}")

def add_photo(db: Session, owner: User, album_id: str, photo_id: str) -> Album:
    """앨범에 사진 추가 (중복이면 AlreadyMember)"""
    album = get_album(db, owner, album_id)
    photo = _get_owned_photo(db, owner, photo_id)

    if photo.id in album.photo_ids:
        raise AlreadyMember()

    _append(album, photo)
    commit(db)
    db.refresh(album)
    return album

def add_photos(db: Session, owner: User, album_id: str, photo_ids: List[str]) -> dict:
    """
    앨범에 사진 일괄 추가 (부분 성공 허용)

    없는 사진, 타인 사진, 이미 포함된 사진은 실패로 집계
    """
    album = get_album(db, owner, album_id)

    owned = {
        photo.id: photo
        for photo in db.query(Photo)
            .filter(Photo.id.in_(list(set(photo_ids))), Photo.user_id == owner.id)
            .all()
    }

    members = set(album.photo_ids)
    success_count = 0
    for photo_id in photo_ids:
        photo = owned.get(photo_id)
        if photo is None or photo_id in members:
            continue
        _append(album, photo)
        members.add(photo_id)
        success_count += 1

    commit(db)
    return {"success_count": success_count, "failure_count": len(photo_ids) - success_count}

def remove_photo(db: Session, owner: User, album_id: str, photo_id: str) -> Album:
    """앨범에서 사진 제거 (없는 사진이면 아무것도 안 함)"""
    album = get_album(db, owner, album_id)

    for entry in list(album.entries):
        if entry.photo_id == photo_id:
            album.entries.remove(entry)

    commit(db)
    db.refresh(album)
    return album
