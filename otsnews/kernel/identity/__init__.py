"""
Identity Core - users, credentials and roles.
"""

from otsnews.kernel.identity.password import PasswordHasher, verify_password, hash_password
from otsnews.kernel.identity.jwt import AccessToken, AccessTokenPayload, JWTManager
from otsnews.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "AccessToken",
    "AccessTokenPayload",
    "JWTManager",
    "IdentityService",
]
