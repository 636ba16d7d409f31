"""
Comment endpoints.
"""

import uuid

from fastapi import APIRouter, status

from otsnews.api.deps import AppSettings, CurrentUser, DbSession, OptionalUser
from otsnews.engines.comments.comment_service import CommentService
from otsnews.engines.comments.thread import CommentThreadIndex
from otsnews.schemas.comments import (
    CommentCreate,
    CommentDeleteResponse,
    CommentNode,
    CommentResponse,
    CommentThreadResponse,
)

router = APIRouter()


def _node(tree_node: dict) -> CommentNode:
    return CommentNode(
        comment=CommentResponse.model_validate(tree_node["comment"]),
        replies=[_node(child) for child in tree_node["replies"]],
    )


def _thread_response(article_id: uuid.UUID, thread: CommentThreadIndex) -> CommentThreadResponse:
    return CommentThreadResponse(
        article_id=article_id,
        count=len(thread),
        comments=[CommentResponse.model_validate(c) for c in thread.all()],
        threads=[_node(n) for n in thread.to_tree()],
    )


@router.get("/articles/{article_id}/comments", response_model=CommentThreadResponse)
async def list_comments(
    article_id: uuid.UUID,
    user: OptionalUser,
    db: DbSession,
    settings: AppSettings,
):
    """Comments on an article, flat and threaded."""
    _, thread = await CommentService(db, settings=settings).list_for_article(article_id, viewer=user)
    return _thread_response(article_id, thread)


@router.post(
    "/articles/{article_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_comment(
    article_id: uuid.UUID,
    data: CommentCreate,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    """
    Comment on an article, or reply to a comment with ``parent_id``.
    
    The article author and the parent comment's author are notified.
    """
    comment = await CommentService(db, settings=settings).post(
        article_id=article_id,
        author=user,
        content=data.content,
        parent_id=data.parent_id,
    )
    return CommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", response_model=CommentDeleteResponse)
async def delete_comment(
    comment_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    """Delete a comment together with its replies (section editors and admins)."""
    removed = await CommentService(db, settings=settings).delete(comment_id, requester=user)
    return CommentDeleteResponse(removed=removed)
