"""
Comment Service - posting, moderation and thread reads.
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.config import Settings, get_settings
from otsnews.engines.articles.sanitizer import is_blank_html, sanitize_comment_html
from otsnews.engines.comments.thread import CommentThreadIndex
from otsnews.engines.notifications.notification_service import NotificationService
from otsnews.kernel.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models.article import Article
from otsnews.kernel.models.comment import Comment
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.user import User
from otsnews.kernel.permissions.permission_service import PermissionService
from otsnews.logging_config import get_logger

logger = get_logger(__name__)


class CommentService:
    """
    Threaded comments on articles.

    Anyone who can see an article can read its comments. Posting needs a
    non-guest account and an article that allows comments; deleting needs
    editor rights over the article's section.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)
        self.notifications = NotificationService(session)

    async def post(
        self,
        article_id: uuid.UUID,
        author: User,
        content: str,
        parent_id: Optional[uuid.UUID] = None,
    ) -> Comment:
        """
        Post a comment or a reply.

        Raises:
            PermissionDeniedError: Guests and anonymous visitors
            NotFoundError: The article is missing or hidden from the author
            ConflictError: Comments are disabled on the article
            ValidationError: Blank content, a bad parent or a reply nested too deep
        """
        policy = await self.permissions.policy_for(author)
        policy.require_comment()

        article = await self.session.get(Article, article_id)
        if not article or not policy.can_view_article(article):
            raise NotFoundError("Article", article_id)
        if not article.allow_comments:
            raise ConflictError("Comments are disabled for this article")

        content = sanitize_comment_html(content)
        if is_blank_html(content):
            raise ValidationError("Comment content is required")

        parent = None
        if parent_id is not None:
            thread = await self.thread(article.id)
            parent = thread.get(parent_id)
            if parent is None:
                raise ValidationError("Parent comment does not belong to this article")
            max_depth = self.settings.comment_max_depth
            if max_depth > 0 and thread.depth(parent.id) + 1 > max_depth:
                raise ValidationError(f"Replies cannot be nested more than {max_depth} levels")

        comment = Comment(
            id=uuid.uuid4(),
            article_id=article.id,
            parent_id=parent.id if parent else None,
            author_id=author.id,
            author_name=author.name,
            author_avatar=author.avatar,
            content=content,
        )
        self.session.add(comment)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.COMMENT_ADDED,
            entity_type="comment",
            entity_id=comment.id,
            user_id=author.id,
            payload={"article_id": article.id, "parent_id": comment.parent_id},
        )
        await self.notifications.on_comment_posted(comment, article, parent)

        return comment

    async def delete(self, comment_id: uuid.UUID, requester: User) -> List[uuid.UUID]:
        """
        Delete a comment and every reply below it.

        Returns:
            Ids of all removed comments, the target first
        """
        comment = await self.session.get(Comment, comment_id)
        if not comment:
            raise NotFoundError("Comment", comment_id)
        article = await self.session.get(Article, comment.article_id)
        if not article:
            raise NotFoundError("Article", comment.article_id)

        policy = await self.permissions.policy_for(requester)
        if not policy.can_moderate_comment(article):
            raise PermissionDeniedError("Only editors of this section can delete comments")

        thread = await self.thread(article.id)
        removed = [comment.id] + [c.id for c in thread.descendants(comment.id)]
        await self.session.execute(
            delete(Comment)
            .where(Comment.id.in_(removed))
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.COMMENT_DELETED,
            entity_type="comment",
            entity_id=comment_id,
            user_id=requester.id,
            payload={"article_id": article.id, "removed": len(removed)},
        )
        logger.info(
            "Comment deleted",
            extra={"comment_id": str(comment_id), "removed": len(removed)},
        )
        return removed

    async def list_for_article(
        self,
        article_id: uuid.UUID,
        viewer: Optional[User],
    ) -> Tuple[List[Comment], CommentThreadIndex]:
        """Comments oldest first plus their thread index."""
        article = await self.session.get(Article, article_id)
        policy = await self.permissions.policy_for(viewer)
        if not article or not policy.can_view_article(article):
            raise NotFoundError("Article", article_id)

        thread = await self.thread(article_id)
        return thread.all(), thread

    async def thread(self, article_id: uuid.UUID) -> CommentThreadIndex:
        result = await self.session.execute(
            select(Comment).where(Comment.article_id == article_id)
        )
        return CommentThreadIndex(result.scalars().all())
