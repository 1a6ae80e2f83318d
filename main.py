# main.py
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.api.routes import auth, photos, albums, admin
from app.core.logging_middleware import log_requests
from app.core.logger import logger
from app.database import Base, engine
from app.services.storage_service import get_blob_store

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug
)

# ===== 로깅 미들웨어 =====
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    return await log_requests(request, call_next)

# 요청 크기 제한 미들웨어 (파일 한도 + 폼 여유분)
MAX_REQUEST_SIZE = (settings.max_upload_size_mb + 1) * 1024 * 1024

@app.middleware("http")
async def limit_upload_size(request: Request, call_next):
    """요청 크기 제한"""
    if request.method in ["POST", "PUT", "PATCH"]:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(
                status_code=413,
                content={"detail": f"요청 크기가 너무 큽니다. 최대: {MAX_REQUEST_SIZE // 1024 // 1024}MB"}
            )
    return await call_next(request)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 라우터 등록
app.include_router(auth.router)
app.include_router(photos.router)
app.include_router(albums.router)
app.include_router(admin.router)

# 로컬 스토리지 정적 파일 서빙
if settings.storage_backend == "local":
    get_blob_store()  # 디렉토리 생성
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.local_storage_dir),
        name="uploads"
    )

@app.on_event("startup")
async def startup_event():
    # 마이그레이션 없이 실행할 때를 위한 테이블 생성
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.app_name} 서버 시작 (storage={settings.storage_backend})")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.app_name} 서버 종료")

@app.get("/health")
def health_check():
    """헬스체크"""
    return {
        "status": "healthy",
        "service": settings.app_name
    }
