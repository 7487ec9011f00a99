"""Page metadata for news and FAQ entries.

Pure functions over formatted records; the HTTP layer attaches their output
as meta_title and meta_description.
"""

from collections.abc import Mapping
from typing import Any

from app.infrastructure.config import settings

NEWS_TITLE_MAX = 45
FAQ_CATEGORY_MAX = 20
DESCRIPTION_MAX = 155


def _site_names() -> dict[str, str]:
    return {"TW": settings.site_name_tw, "EN": settings.site_name_en}


def _faq_labels() -> dict[str, str]:
    return {"TW": settings.faq_label_tw, "EN": settings.faq_label_en}


def _truncate(text: str, limit: int, keep: int | None = None) -> str:
    """Cut text longer than limit to keep chars plus an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit if keep is None else keep] + "..."


def _localized(record: Mapping[str, Any], field: str, lang: str) -> str:
    value = record.get(field)
    if not isinstance(value, Mapping):
        return ""
    return value.get(lang) or ""


def _description(record: Mapping[str, Any], field: str) -> dict[str, str]:
    return {
        lang: _truncate(_localized(record, field, lang), DESCRIPTION_MAX, DESCRIPTION_MAX - 3)
        for lang in _site_names()
    }


def news_meta(record: Mapping[str, Any]) -> dict[str, dict[str, str]]:
    """Build meta_title and meta_description for a news entry.

    Args:
        record: Formatted news record.

    Returns:
        {"meta_title": {lang: str}, "meta_description": {lang: str}}
    """
    titles = {}
    for lang, site in _site_names().items():
        title = _truncate(_localized(record, "title", lang), NEWS_TITLE_MAX)
        titles[lang] = f"{title} | {site}" if title else site
    return {"meta_title": titles, "meta_description": _description(record, "summary")}


def faq_meta(record: Mapping[str, Any]) -> dict[str, dict[str, str]]:
    """Build meta_title and meta_description for a FAQ entry.

    The category is a single string shared by all languages.
    """
    category = (record.get("category") or "").strip()
    if category:
        category = _truncate(category, FAQ_CATEGORY_MAX)

    labels = _faq_labels()
    titles = {}
    for lang, site in _site_names().items():
        base = f"{category} | {labels[lang]}" if category else labels[lang]
        titles[lang] = f"{base} | {site}"
    return {"meta_title": titles, "meta_description": _description(record, "question")}
