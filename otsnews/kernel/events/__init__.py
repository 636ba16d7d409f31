"""
Append-only audit logging.
"""

from otsnews.kernel.events.event_store import EventStore

__all__ = ["EventStore"]
