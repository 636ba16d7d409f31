"""
Article Engine - article lifecycle, tags, attachments and search.
"""

from otsnews.engines.articles.article_service import (
    ArticleInput,
    ArticleService,
    AttachmentInput,
)
from otsnews.engines.articles.sanitizer import (
    is_blank_html,
    sanitize_article_html,
    sanitize_comment_html,
)
from otsnews.engines.articles.tags import normalize_tag, normalize_tags

__all__ = [
    "ArticleInput",
    "ArticleService",
    "AttachmentInput",
    "is_blank_html",
    "sanitize_article_html",
    "sanitize_comment_html",
    "normalize_tag",
    "normalize_tags",
]
