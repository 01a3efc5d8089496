"""Slug and URL helpers."""

from __future__ import annotations

import re
import secrets
import string

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 6

# Substring of the affiliate URL -> platform name, first match wins
PLATFORM_HOSTS = (
    (("shopee.vn", "shopee.com"), "shopee"),
    (("lazada.vn", "lazada.com"), "lazada"),
    (("tiki.vn",), "tiki"),
    (("amazon.com", "amazon.vn"), "amazon"),
    (("sendo.vn",), "sendo"),
    (("fptshop.com.vn",), "fptshop"),
    (("thegioididong.com",), "thegioididong"),
    (("cellphones.com.vn",), "cellphones"),
)


def slugify(text: str) -> str:
    """Convert text to a URL-safe slug."""
    text = text.lower().strip()
    # Remove special characters, keep word characters, whitespace and hyphens
    text = re.sub(r'[^\w\s-]', '', text, flags=re.ASCII)
    # Collapse spaces, underscores and hyphens into a single hyphen
    text = re.sub(r'[\s_-]+', '-', text, flags=re.ASCII)
    return text.strip('-')


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and 3 <= len(slug) <= 50 and SLUG_PATTERN.match(slug) is not None


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return ''.join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def with_suffix(base: str) -> str:
    return f"{base}-{random_suffix()}"


def detect_platform(url: str) -> str:
    """Guess the marketplace an affiliate URL points at."""
    for needles, platform in PLATFORM_HOSTS:
        if any(needle in url for needle in needles):
            return platform
    return "other"


__all__ = [
    "slugify",
    "is_valid_slug",
    "random_suffix",
    "with_suffix",
    "detect_platform",
]
