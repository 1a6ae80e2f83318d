# app/services/storage_service.py
import os
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.core.logger import logger

class StorageError(Exception):
    """블롭 스토어 I/O 실패"""

@dataclass
class StoredBlob:
    public_id: str
    url: str

class BlobStore:
    """블롭 스토어 인터페이스 (public_id = <folder>/<key>)"""

    def upload(self, content: bytes, folder: str, key: str, content_type: str) -> StoredBlob:
        raise NotImplementedError

    def destroy(self, public_id: str) -> None:
        raise NotImplementedError

    @staticmethod
    def make_public_id(folder: str, key: str) -> str:
        return f"{folder.strip('/')}/{key}"

class LocalBlobStore(BlobStore):
    """로컬 디스크 저장 (StaticFiles로 서빙)"""

    def __init__(self, base_dir: str, public_base_url: str):
        self.base_dir = base_dir
        self.public_base_url = public_base_url.rstrip("/")
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, public_id: str) -> str:
        path = os.path.normpath(os.path.join(self.base_dir, public_id))
        # 저장 디렉토리 밖으로 나가는 경로 차단
        if not path.startswith(os.path.normpath(self.base_dir) + os.sep):
            raise StorageError(f"잘못된 public_id: {public_id}")
        return path

    def upload(self, content: bytes, folder: str, key: str, content_type: str) -> StoredBlob:
        public_id = self.make_public_id(folder, key)
        path = self._path(public_id)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as buffer:
                buffer.write(content)
        except OSError as e:
            raise StorageError(str(e)) from e

        return StoredBlob(public_id=public_id, url=f"{self.public_base_url}/{public_id}")

    def destroy(self, public_id: str) -> None:
        path = self._path(public_id)
        # 이미 없는 파일은 삭제된 것으로 간주
        if not os.path.exists(path):
            logger.warning(f"삭제할 파일 없음: {public_id}")
            return
        try:
            os.remove(path)
        except OSError as e:
            raise StorageError(str(e)) from e

    def exists(self, public_id: str) -> bool:
        return os.path.exists(self._path(public_id))

class S3BlobStore(BlobStore):
    """S3 호환 오브젝트 스토리지 (Cloudflare R2 등)"""

    def __init__(self, bucket_name: str, public_base_url: str, client=None):
        self.bucket_name = bucket_name
        self.public_base_url = public_base_url.rstrip("/")
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url or None,
            aws_access_key_id=settings.s3_access_key_id or None,
            aws_secret_access_key=settings.s3_secret_access_key or None,
        )

    def upload(self, content: bytes, folder: str, key: str, content_type: str) -> StoredBlob:
        public_id = self.make_public_id(folder, key)
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=public_id,
                Body=content,
                ContentType=content_type,
                ACL="public-read"
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(str(e)) from e

        return StoredBlob(public_id=public_id, url=f"{self.public_base_url}/{public_id}")

    def destroy(self, public_id: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=public_id)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(str(e)) from e

@lru_cache
def get_blob_store() -> BlobStore:
    """설정에 따른 블롭 스토어 (FastAPI 의존성)"""
    if settings.storage_backend == "s3":
        logger.info(f"S3 스토리지 사용: {settings.s3_bucket_name}")
        return S3BlobStore(settings.s3_bucket_name, settings.public_base_url)
    return LocalBlobStore(settings.local_storage_dir, settings.public_base_url)
