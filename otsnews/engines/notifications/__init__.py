"""
Notification Engine - publication and comment fan-out, per-user inbox.
"""

from otsnews.engines.notifications.notification_service import NotificationService

__all__ = ["NotificationService"]
