"""
Event Store service for append-only audit logging.

Services append an event for every mutation before the unit of work is
committed; the event shares the transaction of the change it records.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.
    
    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.ARTICLE_CREATED,
            entity_type="article",
            entity_id=article.id,
            user_id=current_user.id,
            payload={"title": article.title, "section_id": article.section_id},
        )
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: Union[uuid.UUID, str],
        user_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> EventLog:
        """
        Log an event to the immutable audit log.
        
        Args:
            event_type: The type of event
            entity_type: The type of entity (user, section, article, ...)
            entity_id: The ID of the entity (UUID or section slug)
            user_id: The ID of the user who triggered the event
            payload: Additional event data
            ip_address: Client IP address
            user_agent: Client user agent
            
        Returns:
            The created EventLog record
        """
        event = EventLog(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=str(entity_id),
            user_id=user_id,
            payload=self._serialize_payload(payload or {}),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        
        self.session.add(event)
        # Caller's unit of work flushes/commits
        return event
    
    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: Union[uuid.UUID, str],
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
    ) -> List[EventLog]:
        """Get the event history for a specific entity, newest first."""
        await self.session.flush()
        query = select(EventLog).where(
            EventLog.entity_type == entity_type,
            EventLog.entity_id == str(entity_id),
        )
        if event_types:
            query = query.where(EventLog.event_type.in_(event_types))
        
        query = query.order_by(desc(EventLog.created_at)).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
    
    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert payload values to JSON-serializable types."""
        result = {}
        for key, value in payload.items():
            result[key] = self._serialize_value(value)
        return result
    
    def _serialize_value(self, value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, dict):
            return self._serialize_payload(value)
        if isinstance(value, (list, tuple, set)):
            return [self._serialize_value(v) for v in value]
        if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
            return value.value
        return value
