# app/core/tags.py

def clean_tags(tags) -> list[str]:
    """공백 제거, 빈 태그 제거, 중복 제거 (처음 순서 유지)"""
    if not tags:
        return []

    cleaned = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        tag = tag.strip().strip('"\'').strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned

def split_tags(raw: str | None) -> list[str]:
    """쉼표 구분 문자열 → 태그 목록 (업로드 폼 형식)"""
    if not raw:
        return []
    return clean_tags(raw.split(","))
