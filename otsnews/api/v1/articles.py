"""
Article, attachment and tag endpoints.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, status

from otsnews.api.deps import AppSettings, CurrentUser, DbSession, OptionalUser
from otsnews.engines.articles.article_service import ArticleInput, ArticleService, AttachmentInput
from otsnews.engines.comments.comment_service import CommentService
from otsnews.schemas.articles import (
    ArticleDetailResponse,
    ArticleResponse,
    ArticleWrite,
    AttachmentCreate,
    AttachmentResponse,
)
from otsnews.schemas.comments import CommentResponse
from otsnews.schemas.common import MessageResponse

router = APIRouter()


@router.get("/articles", response_model=List[ArticleResponse])
async def list_articles(
    db: DbSession,
    settings: AppSettings,
    user: OptionalUser,
    section_id: Optional[str] = None,
    subsection_id: Optional[str] = None,
    tag: Optional[str] = None,
    q: Optional[str] = Query(None, description="Case-insensitive text match"),
):
    """
    Articles visible to the caller, newest first.
    
    Drafts appear only for their author and for admins.
    """
    articles = await ArticleService(db, settings=settings).list_visible(
        viewer=user,
        section_id=section_id,
        subsection_id=subsection_id,
        tag=tag,
        query=q,
    )
    return [ArticleResponse.model_validate(a) for a in articles]


@router.get("/articles/search", response_model=List[ArticleResponse])
async def search_articles(
    db: DbSession,
    settings: AppSettings,
    q: str = Query("", description="Text to look for in title, excerpt and content"),
):
    """Search published articles."""
    articles = await ArticleService(db, settings=settings).search(q)
    return [ArticleResponse.model_validate(a) for a in articles]


@router.post("/articles", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    data: ArticleWrite,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    article = await ArticleService(db, settings=settings).create(
        ArticleInput(**data.model_dump()),
        author=user,
    )
    return ArticleResponse.model_validate(article)


@router.get("/articles/{article_id}", response_model=ArticleDetailResponse)
async def get_article(
    article_id: uuid.UUID,
    user: OptionalUser,
    db: DbSession,
    settings: AppSettings,
):
    """A single article with its attachments and comments."""
    article = await ArticleService(db, settings=settings).get(article_id, viewer=user)
    comments, _ = await CommentService(db, settings=settings).list_for_article(article_id, viewer=user)

    response = ArticleDetailResponse.model_validate(article)
    response.comments = [CommentResponse.model_validate(c) for c in comments]
    return response


@router.put("/articles/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: uuid.UUID,
    data: ArticleWrite,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    """
    Replace an article's fields.
    
    Moving a draft to published notifies every other user once.
    """
    article = await ArticleService(db, settings=settings).update(
        article_id,
        ArticleInput(**data.model_dump()),
        requester=user,
    )
    return ArticleResponse.model_validate(article)


@router.delete("/articles/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    await ArticleService(db, settings=settings).delete(article_id, requester=user)
    return MessageResponse(message="Article deleted")


@router.post(
    "/articles/{article_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_attachment(
    article_id: uuid.UUID,
    data: AttachmentCreate,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    attachment = await ArticleService(db, settings=settings).add_attachment(
        article_id,
        AttachmentInput(**data.model_dump()),
        requester=user,
    )
    return AttachmentResponse.model_validate(attachment)


@router.delete("/attachments/{attachment_id}", response_model=MessageResponse)
async def delete_attachment(
    attachment_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    await ArticleService(db, settings=settings).delete_attachment(attachment_id, requester=user)
    return MessageResponse(message="Attachment deleted")


@router.get("/tags", response_model=List[str])
async def list_tags(db: DbSession, settings: AppSettings):
    """Every tag in use, sorted."""
    return await ArticleService(db, settings=settings).list_tags()
