"""
HTML sanitization for user-authored content.
Post bodies keep a safe subset of HTML; comments are reduced to plain text.
"""

import re
from typing import Optional
from urllib.parse import urlparse

import bleach

# Allowed tags in post content
ALLOWED_TAGS = [
    "p", "br", "hr",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li",
    "blockquote", "pre", "code",
    "a", "img",
    "strong", "b", "em", "i", "u", "s", "del", "ins",
    "table", "thead", "tbody", "tr", "th", "td",
    "figure", "figcaption", "span", "sub", "sup",
]

# Allowed attributes per tag
ALLOWED_ATTRIBUTES = {
    "*": ["class"],
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "width", "height"],
    "td": ["colspan", "rowspan"],
    "th": ["colspan", "rowspan"],
}

DANGEROUS_PREFIXES = ("javascript:", "data:", "vbscript:", "file:")


def _is_safe_url(url: str) -> bool:
    """
    Check if a link or image URL is safe.
    Relative URLs, http:// and https:// are allowed.
    """
    if not url:
        return False

    url_lower = url.lower().strip()
    if url_lower.startswith(DANGEROUS_PREFIXES):
        return False

    if url.startswith("/") or url.startswith("#"):
        return True

    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https", "")
    except ValueError:
        return False


def _filter_attributes(tag: str, name: str, value: str) -> bool:
    """
    Custom filter for attributes.
    Validates URLs in href and src.
    """
    allowed = ALLOWED_ATTRIBUTES.get(tag, [])
    global_allowed = ALLOWED_ATTRIBUTES.get("*", [])

    if name not in allowed and name not in global_allowed:
        return False

    if name in ("href", "src"):
        return _is_safe_url(value)

    return True


def sanitize_html(html: Optional[str]) -> str:
    """
    Sanitize post HTML removing dangerous content.

    Rules:
    - Remove <script> and <style> blocks with their content
    - Strip disallowed tags, keep their text
    - Remove event handlers (onclick, onerror, etc.)
    - Remove javascript:, data:, vbscript: and file: URLs

    Whitespace is preserved so plain-text posts round-trip unchanged
    apart from HTML escaping.
    """
    if not html:
        return ""

    html = re.sub(
        r"<script[^>]*>.*?</script>", "", html, flags=re.DOTALL | re.IGNORECASE
    )
    html = re.sub(
        r"<style[^>]*>.*?</style>", "", html, flags=re.DOTALL | re.IGNORECASE
    )

    cleaner = bleach.Cleaner(
        tags=ALLOWED_TAGS,
        attributes=_filter_attributes,
        strip=True,
        strip_comments=True,
    )
    return cleaner.clean(html).strip()


def extract_text(html: Optional[str]) -> str:
    """
    Extract plain text from HTML (removes all tags).
    Whitespace runs collapse to a single space.
    """
    if not html:
        return ""

    text = bleach.clean(html, tags=[], strip=True)
    text = re.sub(r"\s+", " ", text).strip()
    return text
