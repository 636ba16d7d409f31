"""
HTML sanitising for user-authored rich text.

Article bodies come from a rich-text editor and keep basic formatting;
comments keep only inline emphasis and links. Anything else is stripped.
"""

import html as html_entities

import bleach

ARTICLE_TAGS = frozenset({
    "a", "b", "blockquote", "br", "code", "div", "em", "h1", "h2", "h3", "h4",
    "h5", "h6", "hr", "i", "img", "li", "ol", "p", "pre", "s", "span", "strong",
    "sub", "sup", "table", "tbody", "td", "th", "thead", "tr", "u", "ul",
})

ARTICLE_ATTRIBUTES = {
    "a": ["href", "title", "target", "rel"],
    "img": ["src", "alt", "title", "width", "height"],
    "td": ["colspan", "rowspan"],
    "th": ["colspan", "rowspan"],
}

COMMENT_TAGS = frozenset({"a", "b", "br", "code", "em", "i", "p", "strong", "u"})

COMMENT_ATTRIBUTES = {
    "a": ["href", "title"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})


def sanitize_article_html(html: str) -> str:
    """Clean an article body, keeping editor formatting."""
    return bleach.clean(
        html or "",
        tags=ARTICLE_TAGS,
        attributes=ARTICLE_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )


def sanitize_comment_html(html: str) -> str:
    return bleach.clean(
        html or "",
        tags=COMMENT_TAGS,
        attributes=COMMENT_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    ).strip()


def is_blank_html(markup: str) -> bool:
    """True when the markup renders no visible text (``<p></p>``, ``<br>``, ``&nbsp;``)."""
    text = bleach.clean(markup or "", tags=set(), strip=True)
    return not html_entities.unescape(text).strip()
