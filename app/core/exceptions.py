# app/core/exceptions.py
from fastapi import HTTPException, status


class AppError(HTTPException):
    """서비스 계층 에러 (응답 형식은 FastAPI가 처리)"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "요청을 처리할 수 없습니다"

    def __init__(self, detail: str | None = None, headers: dict | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers
        )


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "인증 정보가 올바르지 않습니다"


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "필수 항목이 누락되었습니다"


class NotFound(AppError):
    """존재하지 않거나 본인 소유가 아님 (구분하지 않음)"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "찾을 수 없습니다"


class AlreadyMember(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "이미 앨범에 포함된 사진입니다"


class EmailAlreadyRegistered(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "이미 사용 중인 이메일입니다"


class StorageWriteFailed(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "이미지 업로드에 실패했습니다"


class StorageDeleteFailed(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "이미지 삭제에 실패했습니다. 다시 시도해주세요"


class RecordWriteFailed(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "데이터 저장에 실패했습니다"
