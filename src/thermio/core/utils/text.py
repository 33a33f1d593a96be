"""Text processing utilities."""

import re

from thermio.core.constants import MAX_SLUG_LENGTH


def generate_slug(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Generate a URL-safe slug from a name.

    Examples:
        >>> generate_slug("Cold Chain Logistics")
        'cold-chain-logistics'
        >>> generate_slug("Fresh & Frozen! Pty Ltd")
        'fresh-frozen-pty-ltd'
    """
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s_]+", "-", slug)
    return slug[:max_length].strip("-")


def normalize_registration(registration: str) -> str:
    """Canonical plate form: upper case without inner whitespace.

    >>> normalize_registration(" 1abc 234 ")
    '1ABC234'
    """
    return re.sub(r"\s+", "", registration).upper()
