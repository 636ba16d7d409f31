"""
Section tree and editor grant endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from otsnews.api.deps import CurrentUser, DbSession
from otsnews.kernel.sections.grant_service import GrantService
from otsnews.kernel.sections.section_service import SectionService
from otsnews.schemas.common import MessageResponse
from otsnews.schemas.sections import (
    GrantCreate,
    GrantResponse,
    SectionCreate,
    SectionResponse,
    SubsectionCreate,
    SubsectionResponse,
)

router = APIRouter()


@router.get("/sections", response_model=List[SectionResponse])
async def list_sections(db: DbSession):
    """The section tree in display order."""
    sections = await SectionService(db).list_sections()
    return [SectionResponse.model_validate(s) for s in sections]


@router.get("/sections/editable", response_model=List[SectionResponse])
async def list_editable_sections(user: CurrentUser, db: DbSession):
    """Sections the caller may write articles in."""
    sections = await SectionService(db).editable_sections(user)
    return [SectionResponse.model_validate(s) for s in sections]


@router.post("/sections", response_model=SectionResponse, status_code=status.HTTP_201_CREATED)
async def create_section(data: SectionCreate, user: CurrentUser, db: DbSession):
    section = await SectionService(db).create_section(
        title=data.title,
        requester=user,
        section_id=data.id,
    )
    return SectionResponse.model_validate(section)


@router.delete("/sections/{section_id}", response_model=MessageResponse)
async def delete_section(section_id: str, user: CurrentUser, db: DbSession):
    """Delete a section, its subsections and its editor grants."""
    await SectionService(db).delete_section(section_id, requester=user)
    return MessageResponse(message="Section deleted")


@router.post(
    "/sections/{section_id}/subsections",
    response_model=SubsectionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_subsection(
    section_id: str,
    data: SubsectionCreate,
    user: CurrentUser,
    db: DbSession,
):
    subsection = await SectionService(db).create_subsection(
        section_id=section_id,
        title=data.title,
        requester=user,
        subsection_id=data.id,
    )
    return SubsectionResponse.model_validate(subsection)


@router.delete("/subsections/{subsection_id}", response_model=MessageResponse)
async def delete_subsection(subsection_id: str, user: CurrentUser, db: DbSession):
    await SectionService(db).delete_subsection(subsection_id, requester=user)
    return MessageResponse(message="Subsection deleted")


# Editor grants

@router.get("/section-editors", response_model=List[GrantResponse])
async def list_section_editors(user: CurrentUser, db: DbSession):
    grants = await GrantService(db).list_grants(requester=user)
    return [GrantResponse.model_validate(g) for g in grants]


@router.post("/section-editors", response_model=GrantResponse, status_code=status.HTTP_201_CREATED)
async def add_section_editor(data: GrantCreate, user: CurrentUser, db: DbSession):
    grant = await GrantService(db).add_grant(
        user_id=data.user_id,
        section_id=data.section_id,
        requester=user,
    )
    return GrantResponse.model_validate(grant)


@router.delete("/section-editors/{user_id}/{section_id}", response_model=MessageResponse)
async def remove_section_editor(
    user_id: uuid.UUID,
    section_id: str,
    user: CurrentUser,
    db: DbSession,
):
    await GrantService(db).remove_grant(user_id=user_id, section_id=section_id, requester=user)
    return MessageResponse(message="Editor removed")
