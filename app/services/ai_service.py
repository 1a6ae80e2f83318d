# app/services/ai_service.py
import base64
import json
import re
from functools import lru_cache

import httpx
from openai import OpenAI
from openai import APIError, APITimeoutError, RateLimitError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.config import settings
from app.core.logger import logger
from app.core.tags import clean_tags

# 생성 실패 시 고정 기본값
FALLBACK_CAPTION = "Beautiful mehndi design"
FALLBACK_TAGS = ["mehndi", "design"]

IMAGE_FETCH_TIMEOUT = 15.0

PROMPT = """Analyze this mehndi (henna) design image and describe it.
Respond with a single JSON object and nothing else:
{"caption": "short descriptive caption under 20 words", "tags": ["tag1", "tag2", "tag3"]}
Use 3 to 6 lowercase tags."""

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_QUOTED_CAPTION_RE = re.compile(r"""caption["']?\s*[:=]\s*"([^"\n]*)\"""", re.IGNORECASE)
_CAPTION_RE = re.compile(r"""caption["']?\s*[:=]\s*([^\n]+)""", re.IGNORECASE)
_BRACKET_TAGS_RE = re.compile(r"""tags["']?\s*[:=]\s*\[([^\]\n]*)""", re.IGNORECASE)
_TAGS_RE = re.compile(r"""tags["']?\s*[:=]\s*([^\n]+)""", re.IGNORECASE)

@lru_cache
def get_openai_client() -> OpenAI:
    """OpenAI 클라이언트 (타임아웃 30초)"""
    return OpenAI(api_key=settings.openai_api_key, timeout=30.0)

def guess_mime_type(image_url: str) -> str:
    """URL 확장자로 MIME 타입 추론 (기본 jpeg)"""
    path = image_url.split("?", 1)[0].lower()
    if path.endswith(".png"):
        return "image/png"
    if path.endswith(".gif"):
        return "image/gif"
    if path.endswith(".webp"):
        return "image/webp"
    return "image/jpeg"

def fallback_result() -> dict:
    return {"caption": FALLBACK_CAPTION, "tags": list(FALLBACK_TAGS)}

def strip_code_fence(text: str) -> str:
    """```json ... ``` 마크다운 제거"""
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_RE.sub("", text).strip()
    return text

def _clean_caption(caption) -> str:
    if not isinstance(caption, str):
        return ""
    caption = caption.strip().rstrip(",").strip()
    if len(caption) >= 2 and caption[0] == caption[-1] and caption[0] in "\"'":
        caption = caption[1:-1].strip()
    return caption

def _tags_from_value(value) -> list[str]:
    if isinstance(value, list):
        return clean_tags(value)
    if isinstance(value, str):
        return clean_tags(value.strip().strip("[]").split(","))
    return []

def _parse_json(text: str) -> tuple[str, list[str]] | None:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return _clean_caption(data.get("caption")), _tags_from_value(data.get("tags"))

def _parse_key_values(text: str) -> tuple[str, list[str]] | None:
    """JSON이 깨졌을 때 caption/tags 키-값 추출"""
    caption = ""
    match = _QUOTED_CAPTION_RE.search(text) or _CAPTION_RE.search(text)
    if match:
        caption = _clean_caption(match.group(1))

    tags = []
    match = _BRACKET_TAGS_RE.search(text) or _TAGS_RE.search(text)
    if match:
        tags = _tags_from_value(match.group(1))

    if not caption and not tags:
        return None
    return caption, tags

def parse_caption_response(text: str | None) -> dict:
    """
    모델 응답 → {"caption", "tags"}
    - 코드 펜스 제거 후 JSON 파싱
    - 실패하면 키-값 정규식 추출
    - 그래도 없으면 기본값
    """
    if not text:
        return fallback_result()

    body = strip_code_fence(text)
    parsed = _parse_json(body) or _parse_key_values(body)
    if parsed is None:
        logger.warning(f"캡션 응답 파싱 실패, 기본값 사용: {text[:100]!r}")
        return fallback_result()

    caption, tags = parsed
    return {
        "caption": caption or FALLBACK_CAPTION,
        "tags": tags or list(FALLBACK_TAGS)
    }

def encode_image(content: bytes) -> str:
    return base64.b64encode(content).decode('utf-8')

def fetch_image_as_base64(image_url: str) -> str:
    """이미지 다운로드 후 base64 인코딩"""
    response = httpx.get(image_url, timeout=IMAGE_FETCH_TIMEOUT, follow_redirects=True)
    response.raise_for_status()
    return encode_image(response.content)

@retry(
    stop=stop_after_attempt(3),  # 3번 재시도
    wait=wait_exponential(multiplier=1, min=2, max=10),  # 2초, 4초, 8초 대기
    retry=retry_if_exception_type((APIError, APITimeoutError, RateLimitError)),
    reraise=True
)
def request_caption(base64_image: str, mime_type: str) -> str:
    """비전 모델 호출 (일시 오류 재시도)"""
    response = get_openai_client().chat.completions.create(
        model=settings.openai_model,
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{base64_image}"}}
                ]
            }
        ],
        temperature=0.1,
        max_tokens=200
    )
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""

def generate_caption_and_tags(image_url: str, content: bytes | None = None) -> dict:
    """
    이미지 URL → {"caption", "tags"}

    content가 주어지면 다운로드 없이 그 바이트를 사용 (업로드 직후, 로컬 상대 URL)

    예외를 던지지 않음: 네트워크/API 실패, 잘못된 응답 모두 기본값으로 대체
    """
    if not image_url:
        return fallback_result()

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY 미설정, 기본 캡션 사용")
        return fallback_result()

    try:
        if content:
            base64_image = encode_image(content)
        else:
            base64_image = fetch_image_as_base64(image_url)
        text = request_caption(base64_image, guess_mime_type(image_url))
    except Exception as e:
        logger.warning(f"캡션 생성 실패 ({image_url}): {e}")
        return fallback_result()

    return parse_caption_response(text)
