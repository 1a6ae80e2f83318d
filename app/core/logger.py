# app/core/logger.py
import os
import sys

from loguru import logger

LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# 요청 밖 로그는 request_id "-"
logger.remove()
logger.configure(extra={"request_id": "-"})

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}"

logger.add(sys.stdout, colorize=True, format=CONSOLE_FORMAT, level="INFO")

# 전체 로그 (업로드/삭제 추적용 DEBUG 포함)
logger.add(
    f"{LOG_DIR}/mehndi_album.log",
    rotation="10 MB",
    retention="30 days",
    compression="zip",
    format=FILE_FORMAT,
    level="DEBUG"
)

# 스토리지/DB 실패 등 에러만
logger.add(
    f"{LOG_DIR}/error.log",
    rotation="10 MB",
    retention="30 days",
    compression="zip",
    format=FILE_FORMAT,
    level="ERROR"
)
