"""
Shared validation functions for Pydantic schemas.

Length limits come from settings so the API and the bookmark forms agree.
"""
from pydantic import HttpUrl, TypeAdapter, ValidationError

from core.config import get_settings

_http_url = TypeAdapter(HttpUrl)


def parse_tag_csv(raw: str | None) -> list[str]:
    """
    Split a comma-separated tag string (as typed into the add-bookmark form).

    Names are trimmed and empty entries dropped; duplicates are left for the
    tag synchronizer to collapse.
    """
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def validate_tag_names(tags: list[str]) -> list[str]:
    """
    Trim tag names and check their length.

    Tag names are case-sensitive: 'Python' and 'python' are different tags.

    Raises:
        ValueError: If a tag exceeds the maximum length.
    """
    settings = get_settings()
    cleaned = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValueError("Tag names must be strings")
        trimmed = tag.strip()
        if not trimmed:
            continue
        if len(trimmed) > settings.max_tag_length:
            raise ValueError(
                f"Tag '{trimmed[:20]}...' exceeds maximum length of "
                f"{settings.max_tag_length} characters.",
            )
        cleaned.append(trimmed)
    return cleaned


def validate_title(title: str) -> str:
    """Require a non-empty title within the maximum length."""
    settings = get_settings()
    trimmed = title.strip()
    if not trimmed:
        raise ValueError("Title is required.")
    if len(trimmed) > settings.max_title_length:
        raise ValueError(
            f"Title must be {settings.max_title_length} characters or less "
            f"(got {len(trimmed)} characters).",
        )
    return trimmed


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length. Blank becomes None."""
    settings = get_settings()
    if description is None:
        return None
    if not description.strip():
        return None
    if len(description) > settings.max_description_length:
        raise ValueError(
            f"Description must be {settings.max_description_length} characters or less "
            f"(got {len(description)} characters).",
        )
    return description


def validate_url(url: str | None) -> str:
    """
    Require a well-formed http(s) URL and return it trimmed but otherwise as typed.

    The parsed form is only used for validation; storing the typed string keeps
    `https://a.com` and `https://a.com/` as the user entered them.

    Raises:
        ValueError: If the URL is missing or malformed.
    """
    if url is None or not url.strip():
        raise ValueError("URL is required.")
    trimmed = url.strip()
    try:
        _http_url.validate_python(trimmed)
    except ValidationError:
        raise ValueError("Please enter a valid http(s) URL.") from None
    return trimmed
