"""
Article Service - create, update, delete and read articles.

Publication state machine:
- create: status defaults to published
- draft -> published: timestamp refreshed, readers notified (once)
- published -> draft / published -> published: no notification
"""

import base64
import binascii
import html
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.config import Settings, get_settings
from otsnews.engines.articles.sanitizer import sanitize_article_html
from otsnews.engines.articles.tags import normalize_tag, normalize_tags
from otsnews.engines.notifications.notification_service import NotificationService
from otsnews.kernel.errors import NotFoundError, PermissionDeniedError, ValidationError
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models.article import Article, ArticleStatus, ArticleTag, Attachment
from otsnews.kernel.models.base import utc_now
from otsnews.kernel.models.comment import Comment
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.notification import Notification
from otsnews.kernel.models.user import User
from otsnews.kernel.permissions.permission_service import PermissionService
from otsnews.kernel.sections.section_service import SectionService
from otsnews.kernel.text import is_blank
from otsnews.logging_config import get_logger

logger = get_logger(__name__)


class ArticleInput(BaseModel):
    """Editable fields of an article."""

    title: str
    content: str = ""
    excerpt: str = ""
    section_id: str
    subsection_id: Optional[str] = None
    image_url: Optional[str] = None
    allow_comments: bool = True
    status: Optional[ArticleStatus] = None
    tags: List[str] = Field(default_factory=list)


class AttachmentInput(BaseModel):
    filename: str
    mime_type: str = "application/octet-stream"
    data: str  # base64


class ArticleService:
    """
    Service for the article lifecycle.

    Every mutation checks the access policy first, runs inside the caller's
    transaction and records an audit event.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)
        self.sections = SectionService(session)
        self.notifications = NotificationService(session)

    async def create(self, data: ArticleInput, author: User) -> Article:
        """
        Create an article in a section the author can edit.

        Raises:
            PermissionDeniedError: No editor rights for the section
            NotFoundError: Unknown section
            ValidationError: Blank title or a subsection outside the section
        """
        policy = await self.permissions.policy_for(author)
        policy.require_edit_section(data.section_id)
        self._check_title(data.title)
        await self.sections.validate_placement(data.section_id, data.subsection_id)

        article = Article(
            id=uuid.uuid4(),
            title=data.title.strip(),
            content=sanitize_article_html(data.content),
            excerpt=self._excerpt(data.excerpt),
            section_id=data.section_id,
            subsection_id=data.subsection_id or None,
            author_id=author.id,
            author_name=author.name,
            timestamp=utc_now(),
            image_url=data.image_url or None,
            allow_comments=data.allow_comments,
            status=data.status or ArticleStatus.PUBLISHED,
            tags=[ArticleTag(tag=tag) for tag in sorted(normalize_tags(data.tags))],
            attachments=[],
        )
        self.session.add(article)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ARTICLE_CREATED,
            entity_type="article",
            entity_id=article.id,
            user_id=author.id,
            payload={"section_id": article.section_id, "status": article.status},
        )

        if article.status == ArticleStatus.PUBLISHED:
            await self._publish(article, author)

        logger.info(
            "Article created",
            extra={"article_id": str(article.id), "status": ArticleStatus(article.status).value},
        )
        return article

    async def update(self, article_id: uuid.UUID, data: ArticleInput, requester: User) -> Article:
        """
        Replace the editable fields of an article.

        Allowed for editors of the target section, the author and admins.
        Tags are replaced as a set. ``data.status=None`` keeps the current
        status.
        """
        article = await self._get_for_update(article_id)

        policy = await self.permissions.policy_for(requester)
        if not policy.can_update_article(article, data.section_id):
            raise PermissionDeniedError("You cannot edit this article")
        self._check_title(data.title)
        await self.sections.validate_placement(data.section_id, data.subsection_id)

        previous_status = ArticleStatus(article.status)
        new_status = ArticleStatus(data.status or previous_status)

        article.title = data.title.strip()
        article.content = sanitize_article_html(data.content)
        article.excerpt = self._excerpt(data.excerpt)
        article.section_id = data.section_id
        article.subsection_id = data.subsection_id or None
        article.image_url = data.image_url or None
        article.allow_comments = data.allow_comments
        article.status = new_status
        self._replace_tags(article, data.tags)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ARTICLE_UPDATED,
            entity_type="article",
            entity_id=article.id,
            user_id=requester.id,
            payload={"from_status": previous_status, "to_status": new_status},
        )

        if previous_status == ArticleStatus.DRAFT and new_status == ArticleStatus.PUBLISHED:
            article.timestamp = utc_now()
            await self.session.flush()
            await self._publish(article, requester)
        elif previous_status == ArticleStatus.PUBLISHED and new_status == ArticleStatus.DRAFT:
            await self.event_store.log(
                event_type=EventType.ARTICLE_UNPUBLISHED,
                entity_type="article",
                entity_id=article.id,
                user_id=requester.id,
            )

        return article

    async def delete(self, article_id: uuid.UUID, requester: User) -> None:
        """
        Delete an article with its tags, attachments, comments and the
        notifications that point at it.
        """
        article = await self._get_for_update(article_id)

        policy = await self.permissions.policy_for(requester)
        if not policy.can_delete_article(article):
            raise PermissionDeniedError("You cannot delete this article")

        notifications = await self.session.execute(
            delete(Notification).where(Notification.article_id == article_id)
        )
        comments = await self.session.execute(
            delete(Comment).where(Comment.article_id == article_id)
        )
        await self.session.delete(article)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ARTICLE_DELETED,
            entity_type="article",
            entity_id=article_id,
            user_id=requester.id,
            payload={
                "title": article.title,
                "comments_removed": comments.rowcount or 0,
                "notifications_removed": notifications.rowcount or 0,
            },
        )
        logger.info("Article deleted", extra={"article_id": str(article_id)})

    async def get(self, article_id: uuid.UUID, viewer: Optional[User]) -> Article:
        """Get an article; drafts of others look exactly like missing ones."""
        article = await self.session.get(Article, article_id)
        policy = await self.permissions.policy_for(viewer)
        if not article or not policy.can_view_article(article):
            raise NotFoundError("Article", article_id)
        return article

    async def list_visible(
        self,
        viewer: Optional[User],
        section_id: Optional[str] = None,
        subsection_id: Optional[str] = None,
        tag: Optional[str] = None,
        query: Optional[str] = None,
    ) -> List[Article]:
        """Articles the viewer may see, newest first, with optional filters."""
        stmt = select(Article)
        if section_id:
            stmt = stmt.where(Article.section_id == section_id)
        if subsection_id:
            stmt = stmt.where(Article.subsection_id == subsection_id)
        if tag:
            stmt = stmt.where(
                Article.tags.any(ArticleTag.tag == normalize_tag(tag))
            )
        if not is_blank(query):
            stmt = stmt.where(self._matches(query))
        stmt = stmt.order_by(Article.timestamp.desc())

        result = await self.session.execute(stmt)
        policy = await self.permissions.policy_for(viewer)
        return [a for a in result.scalars().all() if policy.can_view_article(a)]

    async def search(self, query: str) -> List[Article]:
        """Published articles whose title, excerpt or content contain ``query``."""
        if is_blank(query):
            return []
        stmt = (
            select(Article)
            .where(Article.status == ArticleStatus.PUBLISHED, self._matches(query))
            .order_by(Article.timestamp.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_tags(self) -> List[str]:
        result = await self.session.execute(
            select(ArticleTag.tag).distinct().order_by(ArticleTag.tag)
        )
        return list(result.scalars().all())

    async def add_attachment(
        self,
        article_id: uuid.UUID,
        data: AttachmentInput,
        requester: User,
    ) -> Attachment:
        article = await self._get_for_update(article_id)
        await self._require_update(article, requester)

        if is_blank(data.filename):
            raise ValidationError("Attachment filename is required")
        try:
            base64.b64decode(data.data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Attachment data must be base64 encoded")

        attachment = Attachment(
            article_id=article.id,
            filename=data.filename.strip(),
            mime_type=data.mime_type or "application/octet-stream",
            data=data.data,
        )
        article.attachments.append(attachment)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ATTACHMENT_ADDED,
            entity_type="article",
            entity_id=article.id,
            user_id=requester.id,
            payload={"attachment_id": attachment.id, "filename": attachment.filename},
        )
        return attachment

    async def delete_attachment(self, attachment_id: uuid.UUID, requester: User) -> None:
        attachment = await self.session.get(Attachment, attachment_id)
        if not attachment:
            raise NotFoundError("Attachment", attachment_id)
        article = await self._get_for_update(attachment.article_id)
        await self._require_update(article, requester)

        article.attachments.remove(attachment)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.ATTACHMENT_REMOVED,
            entity_type="article",
            entity_id=article.id,
            user_id=requester.id,
            payload={"attachment_id": attachment_id, "filename": attachment.filename},
        )

    async def _publish(self, article: Article, actor: User) -> None:
        result = await self.session.execute(select(User.id))
        recipients = await self.notifications.on_article_published(
            article, result.scalars().all()
        )
        await self.event_store.log(
            event_type=EventType.ARTICLE_PUBLISHED,
            entity_type="article",
            entity_id=article.id,
            user_id=actor.id,
            payload={"recipients": recipients},
        )

    async def _get_for_update(self, article_id: uuid.UUID) -> Article:
        result = await self.session.execute(
            select(Article).where(Article.id == article_id).with_for_update()
        )
        article = result.scalar_one_or_none()
        if not article:
            raise NotFoundError("Article", article_id)
        return article

    async def _require_update(self, article: Article, requester: User) -> None:
        policy = await self.permissions.policy_for(requester)
        if not policy.can_update_article(article, article.section_id):
            raise PermissionDeniedError("You cannot edit this article")

    def _replace_tags(self, article: Article, raw_tags: List[str]) -> None:
        # Reuse surviving rows so the composite key is never re-inserted.
        # Sorted to match the order the relationship loads in.
        existing = {t.tag: t for t in article.tags}
        article.tags = [
            existing.get(tag) or ArticleTag(tag=tag)
            for tag in sorted(normalize_tags(raw_tags))
        ]

    def _excerpt(self, excerpt: Optional[str]) -> str:
        if is_blank(excerpt):
            return self.settings.excerpt_placeholder
        return excerpt.strip()

    @staticmethod
    def _check_title(title: Optional[str]) -> None:
        if is_blank(title):
            raise ValidationError("Title is required")

    @staticmethod
    def _matches(query: str):
        # Content is stored sanitised, so "&" and "<" are entity-escaped there
        needle = query.strip()
        escaped = html.escape(needle, quote=False)
        return or_(
            Article.title.icontains(needle, autoescape=True),
            Article.excerpt.icontains(needle, autoescape=True),
            Article.content.icontains(needle, autoescape=True),
            Article.content.icontains(escaped, autoescape=True),
        )
