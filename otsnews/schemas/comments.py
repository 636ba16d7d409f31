"""
Comment schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    """Comment creation request. Set parent_id to reply."""
    
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: Optional[uuid.UUID] = None


class CommentResponse(BaseModel):
    """Comment response."""
    
    id: uuid.UUID
    article_id: uuid.UUID
    parent_id: Optional[uuid.UUID] = None
    author_id: uuid.UUID
    author_name: str
    author_avatar: Optional[str] = None
    content: str
    timestamp: datetime
    
    class Config:
        from_attributes = True


class CommentNode(BaseModel):
    comment: CommentResponse
    replies: List["CommentNode"] = []


class CommentThreadResponse(BaseModel):
    """All comments of an article, flat (oldest first) and as a tree."""
    
    article_id: uuid.UUID
    count: int
    comments: List[CommentResponse]
    threads: List[CommentNode]


class CommentDeleteResponse(BaseModel):
    removed: List[uuid.UUID]
