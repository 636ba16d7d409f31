"""
Section tree and editor grant schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SubsectionResponse(BaseModel):
    id: str
    title: str
    section_id: str
    position: int
    
    class Config:
        from_attributes = True


class SectionResponse(BaseModel):
    """A section with its ordered subsections."""
    
    id: str
    title: str
    position: int
    subsections: List[SubsectionResponse] = []
    
    class Config:
        from_attributes = True


class SectionCreate(BaseModel):
    """Section creation request. The id defaults to the slug of the title."""
    
    title: str = Field(..., min_length=1, max_length=255)
    id: Optional[str] = Field(None, max_length=100)


class SubsectionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    id: Optional[str] = Field(None, max_length=100)


class GrantCreate(BaseModel):
    """Make a user an editor of a section."""
    
    user_id: uuid.UUID
    section_id: str


class GrantResponse(BaseModel):
    user_id: uuid.UUID
    section_id: str
    created_at: datetime
    
    class Config:
        from_attributes = True
