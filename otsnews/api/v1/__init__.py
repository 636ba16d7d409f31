"""
API v1 routes.
"""

from fastapi import APIRouter

from otsnews.api.v1 import articles, comments, email_config, notifications, sections, users

router = APIRouter()

router.include_router(users.router, tags=["Users"])
router.include_router(sections.router, tags=["Sections"])
router.include_router(articles.router, tags=["Articles"])
router.include_router(comments.router, tags=["Comments"])
router.include_router(notifications.router, tags=["Notifications"])
router.include_router(email_config.router, tags=["Email"])
