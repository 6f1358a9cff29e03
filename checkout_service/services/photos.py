import json
from typing import Any, List, Optional


def extract_photo_urls(photo_field: Any) -> List[str]:
    """Каталог хранит фото как список, JSON-массив строкой, строку через запятую или один URL"""
    if not photo_field:
        return []

    if isinstance(photo_field, (list, tuple)):
        return [str(url).strip() for url in photo_field if url and str(url).strip()]

    if isinstance(photo_field, str):
        trimmed = photo_field.strip()
        if not trimmed:
            return []

        try:
            parsed = json.loads(trimmed)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return extract_photo_urls(parsed)

        if "," in trimmed:
            return [part.strip() for part in trimmed.split(",") if part.strip()]

        return [trimmed]

    return []


def primary_photo_url(photo_field: Any) -> Optional[str]:
    urls = extract_photo_urls(photo_field)
    return urls[0] if urls else None
