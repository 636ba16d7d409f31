"""
Notification Service - fan-out on publication and commenting, plus the
recipient's inbox operations.
"""

import uuid
from typing import Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.kernel.errors import NotFoundError
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models.article import Article
from otsnews.kernel.models.base import utc_now
from otsnews.kernel.models.comment import Comment
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.notification import Notification, NotificationType
from otsnews.kernel.models.user import User
from otsnews.kernel.permissions.permission_service import PermissionService
from otsnews.logging_config import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Creates and serves notifications.

    Fan-out methods are called by the article and comment services inside
    their own transaction, so notifications exist exactly when the change
    that triggered them was committed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)

    async def on_article_published(
        self,
        article: Article,
        recipient_ids: Iterable[uuid.UUID],
    ) -> int:
        """
        Notify every recipient except the author that an article went live.

        Returns:
            Number of notifications created
        """
        recipients = [
            user_id for user_id in dict.fromkeys(recipient_ids)
            if user_id != article.author_id
        ]
        if not recipients:
            return 0

        message = f'{article.author_name} published "{article.title}"'
        now = utc_now()
        self.session.add_all([
            Notification(
                user_id=user_id,
                type=NotificationType.NEW_ARTICLE,
                message=message,
                article_id=article.id,
                timestamp=now,
                read=False,
            )
            for user_id in recipients
        ])
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.NOTIFICATIONS_FANNED_OUT,
            entity_type="article",
            entity_id=article.id,
            user_id=article.author_id,
            payload={"type": NotificationType.NEW_ARTICLE, "recipients": len(recipients)},
        )
        logger.info(
            "Publication notifications created",
            extra={"article_id": str(article.id), "recipients": len(recipients)},
        )
        return len(recipients)

    async def on_comment_posted(
        self,
        comment: Comment,
        article: Article,
        parent: Optional[Comment] = None,
    ) -> List[Notification]:
        """
        Notify the article author, and the parent comment's author for a reply.

        Each rule skips the commenter. The two rules are independent: the
        article author who also wrote the parent comment gets one
        notification for each reason.
        """
        created: List[Notification] = []

        if article.author_id != comment.author_id:
            created.append(Notification(
                user_id=article.author_id,
                type=NotificationType.COMMENT_ON_ARTICLE,
                message=f'{comment.author_name} commented on "{article.title}"',
                article_id=article.id,
            ))

        if parent is not None and parent.author_id != comment.author_id:
            created.append(Notification(
                user_id=parent.author_id,
                type=NotificationType.COMMENT_REPLY,
                message=f"{comment.author_name} replied to your comment",
                article_id=article.id,
            ))

        # Recipients deleted since the article was written get nothing
        live = await self._existing_user_ids([n.user_id for n in created])
        created = [n for n in created if n.user_id in live]
        if created:
            self.session.add_all(created)
            await self.session.flush()
        return created

    async def list_for_user(self, user_id: uuid.UUID, requester: User) -> List[Notification]:
        """A user's notifications, newest first. Only the owner may read them."""
        policy = await self.permissions.policy_for(requester)
        policy.require_self(user_id)

        query = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.timestamp.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def unread_count(self, user_id: uuid.UUID) -> int:
        query = select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.read.is_(False),
        )
        return await self.session.scalar(query) or 0

    async def mark_read(self, notification_id: uuid.UUID, requester: User) -> Notification:
        notification = await self.session.get(Notification, notification_id)
        if not notification:
            raise NotFoundError("Notification", notification_id)

        policy = await self.permissions.policy_for(requester)
        policy.require_self(notification.user_id)

        if not notification.read:
            notification.read = True
            await self.session.flush()
        return notification

    async def mark_all_read(self, user_id: uuid.UUID, requester: User) -> int:
        """Mark every unread notification of the user as read. Idempotent."""
        policy = await self.permissions.policy_for(requester)
        policy.require_self(user_id)

        result = await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        return result.rowcount or 0

    async def _existing_user_ids(self, user_ids: List[uuid.UUID]) -> set:
        if not user_ids:
            return set()
        result = await self.session.execute(select(User.id).where(User.id.in_(user_ids)))
        return set(result.scalars().all())
