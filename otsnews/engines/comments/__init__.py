"""
Comment Engine - threaded comments, moderation and reply fan-out.
"""

from otsnews.engines.comments.comment_service import CommentService
from otsnews.engines.comments.thread import CommentThreadIndex

__all__ = ["CommentService", "CommentThreadIndex"]
