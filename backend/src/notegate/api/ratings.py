"""Ratings API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from ..core.policy import Requester
from ..core.schemas.ratings import (
    AggregateResponse,
    RatingCreate,
    RatingListResponse,
    RatingResponse,
    RatingResult,
    RatingUpdate,
)
from ..core.services import NoteAccessService
from ..middleware.auth import get_current_requester, get_optional_requester
from .notes import get_note_service

# mounted at /api; note-scoped routes live under /notes/{id}/ratings
router = APIRouter(tags=["ratings"])


@router.post("/notes/{note_id}/ratings", response_model=RatingResult)
async def rate_note(
    note_id: UUID,
    request: RatingCreate,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Rate a note, replacing any earlier rating by the same user."""
    return await note_service.rate_note(note_id, requester, request.value, request.comment)


@router.get("/notes/{note_id}/ratings", response_model=RatingListResponse)
async def list_note_ratings(
    note_id: UUID,
    token: Optional[str] = Query(None, description="Share token"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    requester: Optional[Requester] = Depends(get_optional_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Ratings on a note, newest first."""
    return await note_service.get_ratings(note_id, requester, token, page=page, per_page=per_page)


@router.post("/notes/{note_id}/ratings/recompute", response_model=AggregateResponse)
async def recompute_aggregate(
    note_id: UUID,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Rebuild the note's cached aggregate from its ratings."""
    return await note_service.recompute_aggregate(note_id, requester)


@router.get("/ratings/me", response_model=RatingListResponse)
async def my_ratings(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Ratings written by the caller."""
    return await note_service.list_user_ratings(requester, page=page, per_page=per_page)


@router.get("/ratings/{rating_id}", response_model=RatingResponse)
async def get_rating(
    rating_id: UUID,
    token: Optional[str] = Query(None, description="Share token of the rated note"),
    requester: Optional[Requester] = Depends(get_optional_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    return await note_service.get_rating(rating_id, requester, token)


@router.put("/ratings/{rating_id}", response_model=RatingResult)
async def update_rating(
    rating_id: UUID,
    request: RatingUpdate,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Change your own rating; the note's aggregate is refreshed."""
    return await note_service.update_rating(rating_id, requester, request)


@router.delete("/ratings/{rating_id}", status_code=204)
async def delete_rating(
    rating_id: UUID,
    requester: Requester = Depends(get_current_requester),
    note_service: NoteAccessService = Depends(get_note_service),
):
    """Delete a rating (author or admin)."""
    await note_service.delete_rating(rating_id, requester)
    return Response(status_code=204)
