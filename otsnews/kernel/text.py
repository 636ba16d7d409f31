"""
Text normalisation shared by section slugs and article tags.
"""

import re

_WHITESPACE_RUN = re.compile(r"\s+")


def slugify(value: str) -> str:
    """Lowercase, trim, and replace each run of whitespace with one hyphen."""
    return _WHITESPACE_RUN.sub("-", (value or "").strip().lower())


def is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
