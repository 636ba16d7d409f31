"""
Tag normalisation.

Tags are stored in canonical form: trimmed, lowercased, with whitespace runs
collapsed to a single hyphen. Two inputs that normalise to the same string
are the same tag.
"""

from typing import Iterable, List, Optional

from otsnews.kernel.text import slugify


def normalize_tag(raw: Optional[str]) -> str:
    """Normalise one tag: ' Team Building ' -> 'team-building'."""
    return slugify(raw or "")


def normalize_tags(raw_tags: Optional[Iterable[str]]) -> List[str]:
    """Normalise, drop blanks and de-duplicate, keeping first-seen order."""
    seen = {}
    for raw in raw_tags or ():
        tag = normalize_tag(raw)
        if tag and tag not in seen:
            seen[tag] = None
    return list(seen)
