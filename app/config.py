# app/config.py
from pydantic_settings import BaseSettings
from pydantic import field_validator

class Settings(BaseSettings):
    """환경변수 설정"""

    # API 기본 설정
    app_name: str = "Mehndi Album API"
    debug: bool = False

    # Database
    database_url: str

    # JWT
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # OpenAI API (캡션/태그 자동 생성)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # 관리자 (세션과 별개의 공유 비밀)
    admin_email: str = ""
    admin_password: str = ""

    # 스토리지
    storage_backend: str = "local"  # local | s3
    storage_root: str = "mehndi-album"
    local_storage_dir: str = "uploads"
    public_base_url: str = "/uploads"

    # S3 호환 스토리지 (Cloudflare R2 등)
    s3_endpoint_url: str = ""
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_bucket_name: str = ""

    # 업로드 제한
    max_upload_size_mb: int = 20

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @field_validator('secret_key')
    def validate_secret_key(cls, v):
        if len(v) < 32:
            raise ValueError('SECRET_KEY는 최소 32자 이상이어야 합니다')
        return v

    @field_validator('storage_backend')
    def validate_storage_backend(cls, v):
        if v not in ("local", "s3"):
            raise ValueError('STORAGE_BACKEND는 local 또는 s3 이어야 합니다')
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False

# 싱글톤 인스턴스
settings = Settings()
