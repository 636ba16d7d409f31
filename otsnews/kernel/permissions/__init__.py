"""
Permission Core - capability decisions over roles and section grants.
"""

from otsnews.kernel.permissions.policy import ANONYMOUS, AccessPolicy
from otsnews.kernel.permissions.permission_service import PermissionService

__all__ = [
    "ANONYMOUS",
    "AccessPolicy",
    "PermissionService",
]
