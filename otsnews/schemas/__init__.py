"""
Pydantic schemas for API request/response validation.
"""

from otsnews.schemas.common import ErrorResponse, HealthResponse, MessageResponse
from otsnews.schemas.users import (
    UserCreate,
    UserLogin,
    UserResponse,
    LoginResponse,
    RoleUpdate,
    PasswordReset,
)
from otsnews.schemas.sections import (
    SectionCreate,
    SectionResponse,
    SubsectionCreate,
    SubsectionResponse,
    GrantCreate,
    GrantResponse,
)
from otsnews.schemas.comments import (
    CommentCreate,
    CommentResponse,
    CommentNode,
    CommentThreadResponse,
    CommentDeleteResponse,
)
from otsnews.schemas.articles import (
    ArticleWrite,
    ArticleResponse,
    ArticleDetailResponse,
    AttachmentCreate,
    AttachmentResponse,
    AttachmentSummary,
)
from otsnews.schemas.notifications import (
    NotificationResponse,
    NotificationListResponse,
    MarkAllReadResponse,
    DigestPreferenceResponse,
    DigestPreferenceUpdate,
)
from otsnews.schemas.email_config import EmailConfigResponse, EmailConfigUpdate, EmailTestRequest

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    "MessageResponse",
    # Users
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "LoginResponse",
    "RoleUpdate",
    "PasswordReset",
    # Sections
    "SectionCreate",
    "SectionResponse",
    "SubsectionCreate",
    "SubsectionResponse",
    "GrantCreate",
    "GrantResponse",
    # Comments
    "CommentCreate",
    "CommentResponse",
    "CommentNode",
    "CommentThreadResponse",
    "CommentDeleteResponse",
    # Articles
    "ArticleWrite",
    "ArticleResponse",
    "ArticleDetailResponse",
    "AttachmentCreate",
    "AttachmentResponse",
    "AttachmentSummary",
    # Notifications
    "NotificationResponse",
    "NotificationListResponse",
    "MarkAllReadResponse",
    "DigestPreferenceResponse",
    "DigestPreferenceUpdate",
    # Email
    "EmailConfigResponse",
    "EmailConfigUpdate",
    "EmailTestRequest",
]
