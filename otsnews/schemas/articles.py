"""
Article, tag and attachment schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from otsnews.kernel.models.article import ArticleStatus
from otsnews.schemas.comments import CommentResponse


class ArticleWrite(BaseModel):
    """Article create/update request. Omitting status keeps the current one on update."""
    
    title: str = Field(..., max_length=500)
    content: str = ""
    excerpt: str = ""
    section_id: str = Field(..., min_length=1, max_length=100)
    subsection_id: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=2048)
    allow_comments: bool = True
    status: Optional[ArticleStatus] = None
    tags: List[str] = []


class AttachmentCreate(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field("application/octet-stream", max_length=255)
    data: str = Field(..., min_length=1, description="Base64 encoded file content")


class AttachmentSummary(BaseModel):
    id: uuid.UUID
    filename: str
    mime_type: str
    
    class Config:
        from_attributes = True


class AttachmentResponse(AttachmentSummary):
    article_id: uuid.UUID
    data: str


class ArticleResponse(BaseModel):
    """Article as shown in lists."""
    
    id: uuid.UUID
    title: str
    content: str
    excerpt: str
    section_id: str
    subsection_id: Optional[str] = None
    author_id: uuid.UUID
    author_name: str
    timestamp: datetime
    image_url: Optional[str] = None
    allow_comments: bool
    status: ArticleStatus
    tags: List[str] = []
    attachments: List[AttachmentSummary] = []
    
    @field_validator("tags", mode="before")
    @classmethod
    def tag_strings(cls, v):
        return [getattr(t, "tag", t) for t in v or []]
    
    class Config:
        from_attributes = True


class ArticleDetailResponse(ArticleResponse):
    """A single article with attachment data and its comments."""
    
    attachments: List[AttachmentResponse] = []
    comments: List[CommentResponse] = []
