"""
Slug generation for URL-friendly listing identifiers.
"""

import re
from typing import Iterable

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def slugify(text: str) -> str:
    """
    Convert text to a URL slug.

    Lowercases and strips the text, removes non-word characters, collapses
    runs of whitespace, underscores and hyphens into a single hyphen and
    trims leading and trailing hyphens.

    Args:
        text: Source text, typically a title

    Returns:
        Slug string (may be empty if the text has no word characters)
    """
    slug = (text or "").lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def unique_slug(base: str, taken: Iterable[str]) -> str:
    """
    Make a slug unique against existing slugs by appending -2, -3, ...

    Args:
        base: Desired slug
        taken: Slugs already in use

    Returns:
        ``base`` if free, otherwise the first free numbered variant
    """
    existing = set(taken)
    if base not in existing:
        return base

    counter = 2
    while f"{base}-{counter}" in existing:
        counter += 1
    return f"{base}-{counter}"


def is_valid_slug(value: str) -> bool:
    """Check that a slug only contains lowercase letters, digits and hyphens."""
    return bool(value) and bool(SLUG_PATTERN.match(value))
