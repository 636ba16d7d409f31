"""
Digest Engine - stored digest preferences.
"""

from otsnews.engines.digest.digest_service import DigestService

__all__ = ["DigestService"]
