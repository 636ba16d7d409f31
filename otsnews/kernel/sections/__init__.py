"""
Section registry: the two-level section tree and per-section editor grants.
"""

from otsnews.kernel.sections.section_service import SectionService
from otsnews.kernel.sections.grant_service import GrantService

__all__ = [
    "SectionService",
    "GrantService",
]
