"""Notes API endpoints: CRUD, share links and ownership."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.policy import Requester
from ..core.schemas.notes import (
    NoteCreate,
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    NoteSearchResponse,
    NoteUpdate,
    OwnerChangeRequest,
)
from ..core.schemas.sharing import ShareLinkRequest, ShareLinkResponse
from ..core.services import NoteAccessService
from ..core.storage import FileStorage, get_file_storage
from ..database import get_db_session
from ..middleware.auth import get_current_requester, get_optional_requester

router = APIRouter(prefix="/notes", tags=["notes"])


def get_note_service(
    session: AsyncSession = Depends(get_db_session),
    file_storage: FileStorage = Depends(get_file_storage),
) -> NoteAccessService:
    return NoteAccessService(session, file_storage=file_storage)


@router.post("/", response_model=NoteResponse, status_code=201)
async def create_note(
    request: NoteCreate,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Create a new note."""
    return await note_service.create_note(requester, request)


@router.get("/", response_model=NoteListResponse)
async def list_notes(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    only_mine: bool = Query(False),
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """List own and public notes."""
    return await note_service.list_notes(requester, page=page, per_page=per_page, only_mine=only_mine)


@router.get("/search", response_model=NoteSearchResponse)
async def search_notes(
    q: str = Query(..., min_length=1, description="Text to look for in title or content"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Search own and public notes."""
    return await note_service.search_notes(requester, q, page=page, per_page=per_page)


@router.get("/top-rated", response_model=List[NoteListItem])
async def top_rated_notes(
    limit: int = Query(10, ge=1, le=100),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Best rated public notes."""
    return await note_service.top_rated_notes(limit)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: UUID,
    token: Optional[str] = Query(None, description="Share token"),
    requester: Optional[Requester] = Depends(get_optional_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Get a note. Anonymous callers need a public note or a share token."""
    return await note_service.get_note(note_id, requester, token)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: UUID,
    request: NoteUpdate,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Update a note."""
    return await note_service.update_note(note_id, requester, request)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: UUID,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Delete a note with its ratings and attachments."""
    await note_service.delete_note(note_id, requester)
    return Response(status_code=204)


@router.delete("/{note_id}/attachments/{attachment_id}", status_code=204)
async def delete_attachment(
    note_id: UUID,
    attachment_id: UUID,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Remove one attachment from a note."""
    await note_service.delete_attachment(note_id, attachment_id, requester)
    return Response(status_code=204)


@router.put("/{note_id}/owner", response_model=NoteResponse)
async def change_owner(
    note_id: UUID,
    request: OwnerChangeRequest,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Admin only: reassign a note."""
    return await note_service.reassign_owner(note_id, requester, request.new_owner_id)


@router.post("/{note_id}/share", response_model=ShareLinkResponse, status_code=201)
async def create_share_link(
    note_id: UUID,
    request: Optional[ShareLinkRequest] = Body(None),
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Issue a share link. Any previous link stops working."""
    ttl_days = request.ttl_days if request else None
    return await note_service.generate_share_link(note_id, requester, ttl_days)


@router.delete("/{note_id}/share", status_code=204)
async def revoke_share_link(
    note_id: UUID,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Revoke the share link. Safe to repeat."""
    await note_service.revoke_share_link(note_id, requester)
    return Response(status_code=204)
