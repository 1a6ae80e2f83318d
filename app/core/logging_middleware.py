# app/core/logging_middleware.py
import time
import uuid

from fastapi import Request
from app.core.logger import logger

async def log_requests(request: Request, call_next):
    """요청/응답 로깅 (요청 ID 부여, 4xx/5xx는 경고)"""

    request_id = uuid.uuid4().hex[:8]
    started = time.perf_counter()
    client = request.client.host if request.client else "-"

    with logger.contextualize(request_id=request_id):
        logger.info(f"➡️  {request.method} {request.url.path} from {client}")

        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - started) * 1000
            logger.exception(
                f"❌ {request.method} {request.url.path} - {elapsed:.2f}ms"
            )
            raise

        elapsed = (time.perf_counter() - started) * 1000
        level = "WARNING" if response.status_code >= 400 else "INFO"
        logger.log(
            level,
            f"⬅️  {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Time: {elapsed:.2f}ms"
        )

    response.headers["X-Request-ID"] = request_id
    return response
