"""Text processing utilities."""

import re
import secrets

from chronicle.core.constants import MAX_SLUG_LENGTH, SLUG_SUFFIX_LENGTH


def generate_slug(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Generate a URL-safe slug from a name.

    Converts the input string to a URL-friendly slug by:
    - Converting to lowercase
    - Removing special characters
    - Replacing spaces, underscores and hyphens with single hyphens
    - Truncating to max_length

    Args:
        name: The input string to slugify
        max_length: Maximum length of output slug (default 63)

    Returns:
        URL-safe lowercase slug, or "tenant" if nothing usable remains

    Examples:
        >>> generate_slug("My Company Name")
        'my-company-name'
        >>> generate_slug("Hello! World@2024")
        'hello-world2024'
    """
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s_]+", "-", slug)
    slug = slug.strip("-")[:max_length].rstrip("-")
    return slug or "tenant"


def with_random_suffix(slug: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Append a short random suffix, keeping the result within max_length.

    >>> len(with_random_suffix("acme"))
    11
    """
    suffix = secrets.token_hex(SLUG_SUFFIX_LENGTH // 2 + 1)[:SLUG_SUFFIX_LENGTH]
    head = slug[: max_length - SLUG_SUFFIX_LENGTH - 1].rstrip("-")
    return f"{head}-{suffix}"
