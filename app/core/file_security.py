# app/core/file_security.py
import os
from fastapi import UploadFile, HTTPException, status

from app.config import settings
from app.core.exceptions import InvalidInput

# 설정
MAX_FILE_SIZE = settings.max_upload_size_mb * 1024 * 1024
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp"
}

def validate_file_extension(filename: str) -> None:
    """파일 확장자 검증"""
    ext = os.path.splitext(filename)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise InvalidInput(
            f"허용되지 않은 파일 형식입니다. 허용: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

def validate_file_size(file: UploadFile) -> None:
    """파일 크기 검증"""
    file.file.seek(0, 2)  # 파일 끝으로 이동
    size = file.file.tell()  # 현재 위치 = 파일 크기
    file.file.seek(0)  # 다시 처음으로

    if size == 0:
        raise InvalidInput("이미지 파일이 비어 있습니다")

    if size > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"파일 크기가 너무 큽니다. 최대: {MAX_FILE_SIZE // 1024 // 1024}MB"
        )

def validate_mime_type(file: UploadFile) -> None:
    """MIME 타입 검증 (content_type 헤더 기준)"""
    if file.content_type not in ALLOWED_MIME_TYPES:
        raise InvalidInput(
            f"허용되지 않은 파일 형식입니다. 업로드한 타입: {file.content_type}"
        )

def sanitize_filename(filename: str) -> str:
    """파일명 안전하게 변환"""
    filename = os.path.basename(filename)  # 경로 제거
    filename = filename.replace(" ", "_")  # 공백 → 언더스코어

    name, ext = os.path.splitext(filename)

    # 알파벳, 숫자, 언더스코어, 하이픈만 허용
    safe_name = "".join(c for c in name if c.isalnum() or c in "_-")

    if len(safe_name) > 50:
        safe_name = safe_name[:50]

    return f"{safe_name}{ext.lower()}"

def validate_uploaded_file(file: UploadFile) -> None:
    """전체 파일 검증"""
    if not file.filename:
        raise InvalidInput("이미지 파일이 필요합니다")
    validate_file_extension(file.filename)
    validate_file_size(file)
    validate_mime_type(file)
