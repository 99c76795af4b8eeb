"""Note access service implementation."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import Settings, get_settings
from ..exceptions import ForbiddenError, NotFoundError, StorageError, ValidationError
from ..logging import get_logger
from ..models.note import Note
from ..policy import AccessPolicy, Requester
from ..repositories.attachment_repository import AttachmentRepository
from ..repositories.note_repository import NoteRepository
from ..repositories.rating_repository import RatingRepository
from ..repositories.user_repository import UserRepository
from ..schemas.notes import (
    AttachmentResponse,
    NoteCreate,
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    NoteSearchResponse,
    NoteUpdate,
    ShareInfo,
)
from ..schemas.ratings import (
    AggregateResponse,
    RatingListResponse,
    RatingResponse,
    RatingResult,
    RatingUpdate,
)
from ..schemas.sharing import ShareLinkResponse
from ..storage import FileStorage, LocalFileStorage
from .interfaces import INoteAccessService
from .rating_aggregator import RatingAggregator, note_lock
from .share_token_issuer import ShareTokenIssuer
from .transactions import committing

logger = get_logger("notes")

# fields a client may change through update_note
_EDITABLE_FIELDS = ("title", "content", "is_public")


class NoteAccessService(INoteAccessService):
    """Every operation is a guarded transition:

    look up (NotFoundError) -> policy (ForbiddenError) -> mutate -> commit -> projection.
    """

    def __init__(
        self,
        session: AsyncSession,
        file_storage: Optional[FileStorage] = None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.file_storage = file_storage or LocalFileStorage(self.settings.upload_dir)
        self.note_repo = NoteRepository(session)
        self.rating_repo = RatingRepository(session)
        self.attachment_repo = AttachmentRepository(session)
        self.user_repo = UserRepository(session)
        self.aggregator = RatingAggregator(session, self.settings)
        self.issuer = ShareTokenIssuer(session, self.settings)

    # -- guards --------------------------------------------------------------

    async def _get_note_or_404(self, note_id: UUID) -> Note:
        note = await self.note_repo.get_by_id(note_id)
        if not note:
            raise NotFoundError("Note not found")
        return note

    def _deny(self, action: str, note_id: Optional[UUID], requester: Optional[Requester]):
        who = requester.user_id if requester else "anonymous"
        logger.warning(f"Denied {action} on note {note_id} for {who}")
        raise ForbiddenError()

    def _require_requester(self, requester: Optional[Requester], action: str) -> Requester:
        if requester is None:
            self._deny(action, None, None)
        return requester

    def _clamp_page(self, page: int, per_page: int) -> tuple[int, int]:
        page = max(1, page)
        per_page = max(1, min(per_page, self.settings.max_page_size))
        return page, per_page

    async def _delete_file(self, path: str) -> None:
        try:
            await self.file_storage.delete(path)
        except OSError as e:
            logger.error(f"Failed to delete attachment file {path}: {e}")
            raise StorageError() from e

    # -- notes ---------------------------------------------------------------

    async def get_note(
        self, note_id: UUID, requester: Optional[Requester] = None, share_token: Optional[str] = None
    ) -> NoteResponse:
        """Read a note. Every successful read counts exactly one view."""
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_read(note, requester, share_token):
            self._deny("read", note_id, requester)

        async with committing(self.session, "view count"):
            await self.note_repo.increment_view_count(note_id)
        await self.note_repo.refresh(note)

        return await self._note_to_response(note, requester)

    async def create_note(self, requester: Requester, request: NoteCreate) -> NoteResponse:
        """Create new note. Aggregate and view count start at zero, no share link."""
        requester = self._require_requester(requester, "create")

        async with committing(self.session, "note create"):
            note = await self.note_repo.create_note(
                {
                    "title": request.title,
                    "content": request.content,
                    "is_public": request.is_public,
                    "owner_id": requester.user_id,
                    "view_count": 0,
                    "average_rating": 0.0,
                    "rating_count": 0,
                }
            )

        logger.info(f"Note {note.id} created by {requester.user_id}")
        return await self._note_to_response(note, requester)

    async def update_note(
        self, note_id: UUID, requester: Requester, request: NoteUpdate
    ) -> NoteResponse:
        """Update title, content or visibility. Nothing else is client-writable."""
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_write(note, requester):
            self._deny("update", note_id, requester)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        update_data = {k: v for k, v in changes.items() if k in _EDITABLE_FIELDS}
        if update_data:
            async with committing(self.session, "note update"):
                await self.note_repo.update_note(note, update_data)

        return await self._note_to_response(note, requester)

    async def delete_note(self, note_id: UUID, requester: Requester) -> None:
        """Delete a note, its attachments and ratings.

        Attachment files go first; the rows follow in one transaction. If the
        file step fails nothing in the database has changed, so a rerun
        finishes the job.
        """
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_write(note, requester):
            self._deny("delete", note_id, requester)

        attachments = await self.attachment_repo.list_for_note(note_id)
        for attachment in attachments:
            await self._delete_file(attachment.path)

        async with note_lock(note_id):
            async with committing(self.session, "note delete"):
                ratings = await self.rating_repo.delete_for_note(note_id)
                await self.attachment_repo.delete_for_note(note_id)
                await self.note_repo.delete_note(note_id)

        logger.info(
            f"Note {note_id} deleted by {requester.user_id}",
            extra={"attachments": len(attachments), "ratings": ratings},
        )

    async def list_notes(
        self, requester: Requester, page: int = 1, per_page: int = 20, only_mine: bool = False
    ) -> NoteListResponse:
        """Own and public notes (admins see all). Share-token notes are not listed."""
        requester = self._require_requester(requester, "list")
        page, per_page = self._clamp_page(page, per_page)

        notes, total = await self.note_repo.list_readable_notes(
            requester.user_id,
            is_admin=requester.is_admin,
            only_mine=only_mine,
            page=page,
            per_page=per_page,
        )
        items = [self._note_to_list_item(note, requester) for note in notes]
        return NoteListResponse.create(items=items, total=total, page=page, per_page=per_page)

    async def search_notes(
        self, requester: Requester, query: str, page: int = 1, per_page: int = 20
    ) -> NoteSearchResponse:
        """Substring search over the notes the caller could list."""
        requester = self._require_requester(requester, "search")
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query is required", details={"field": "q"})
        page, per_page = self._clamp_page(page, per_page)

        notes, total = await self.note_repo.search_notes(
            requester.user_id,
            query,
            is_admin=requester.is_admin,
            page=page,
            per_page=per_page,
        )
        items = [self._note_to_list_item(note, requester) for note in notes]
        response = NoteSearchResponse.create(items=items, total=total, page=page, per_page=per_page)
        return response.model_copy(update={"query": query})

    async def delete_attachment(
        self, note_id: UUID, attachment_id: UUID, requester: Requester
    ) -> None:
        """Remove one attachment: the file first, then its row."""
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_write(note, requester):
            self._deny("delete attachment", note_id, requester)

        attachment = await self.attachment_repo.get_for_note(note_id, attachment_id)
        if not attachment:
            raise NotFoundError("Attachment not found")

        await self._delete_file(attachment.path)
        async with committing(self.session, "attachment delete"):
            await self.attachment_repo.delete(attachment)

        logger.info(f"Attachment {attachment_id} removed from note {note_id} by {requester.user_id}")

    async def top_rated_notes(self, limit: int = 10) -> List[NoteListItem]:
        limit = max(1, min(limit, self.settings.max_page_size))
        notes = await self.note_repo.top_rated(limit)
        return [self._note_to_list_item(note, None) for note in notes]

    async def reassign_owner(
        self, note_id: UUID, requester: Requester, new_owner_id: UUID
    ) -> NoteResponse:
        """Admin only: hand a note to another existing user."""
        note = await self._get_note_or_404(note_id)
        if requester is None or not requester.is_admin:
            self._deny("reassign", note_id, requester)

        new_owner = await self.user_repo.get_by_id(new_owner_id)
        if not new_owner:
            raise NotFoundError("User not found")

        async with committing(self.session, "owner change"):
            await self.note_repo.update_note(note, {"owner_id": new_owner.id})

        logger.info(f"Note {note_id} reassigned to {new_owner.id} by admin {requester.user_id}")
        return await self._note_to_response(note, requester)

    # -- ratings -------------------------------------------------------------

    async def rate_note(
        self, note_id: UUID, requester: Optional[Requester], value: int, comment: Optional[str] = None
    ) -> RatingResult:
        """Rate a note the caller can read. A second call replaces the first."""
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_rate(note, requester):
            self._deny("rate", note_id, requester)

        rating, note = await self.aggregator.upsert(note_id, requester.user_id, value, comment)
        return RatingResult(
            rating=RatingResponse.model_validate(rating),
            aggregate=self._aggregate(note),
        )

    async def get_ratings(
        self,
        note_id: UUID,
        requester: Optional[Requester] = None,
        share_token: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> RatingListResponse:
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_read(note, requester, share_token):
            self._deny("list ratings", note_id, requester)

        page, per_page = self._clamp_page(page, per_page)
        ratings, total = await self.rating_repo.list_for_note(note_id, page, per_page)
        items = [RatingResponse.model_validate(r) for r in ratings]
        return RatingListResponse.create(items=items, total=total, page=page, per_page=per_page)

    async def _get_rating_or_404(self, rating_id: UUID):
        rating = await self.rating_repo.get_by_id(rating_id)
        if not rating:
            raise NotFoundError("Rating not found")
        return rating

    async def get_rating(
        self,
        rating_id: UUID,
        requester: Optional[Requester] = None,
        share_token: Optional[str] = None,
    ) -> RatingResponse:
        """A single rating, visible to whoever can read its note."""
        rating = await self._get_rating_or_404(rating_id)
        note = await self._get_note_or_404(rating.note_id)
        if not AccessPolicy.can_read(note, requester, share_token):
            self._deny("read rating", note.id, requester)
        return RatingResponse.model_validate(rating)

    async def update_rating(
        self, rating_id: UUID, requester: Requester, request: RatingUpdate
    ) -> RatingResult:
        """Author only. Fields left out of the request keep their stored value."""
        requester = self._require_requester(requester, "update rating")
        rating = await self._get_rating_or_404(rating_id)
        if not rating.is_authored_by(requester.user_id):
            logger.warning(f"Denied rating update {rating_id} for user {requester.user_id}")
            raise ForbiddenError()

        note = await self._get_note_or_404(rating.note_id)
        if not AccessPolicy.can_rate(note, requester):
            self._deny("rate", note.id, requester)

        value = rating.value if request.value is None else request.value
        comment = request.comment if "comment" in request.model_fields_set else rating.comment

        rating, note = await self.aggregator.upsert(note.id, requester.user_id, value, comment)
        return RatingResult(
            rating=RatingResponse.model_validate(rating),
            aggregate=self._aggregate(note),
        )

    async def list_user_ratings(
        self, requester: Requester, page: int = 1, per_page: int = 20
    ) -> RatingListResponse:
        requester = self._require_requester(requester, "list own ratings")
        page, per_page = self._clamp_page(page, per_page)
        ratings, total = await self.rating_repo.list_for_user(requester.user_id, page, per_page)
        items = [RatingResponse.model_validate(r) for r in ratings]
        return RatingListResponse.create(items=items, total=total, page=page, per_page=per_page)

    async def delete_rating(self, rating_id: UUID, requester: Requester) -> AggregateResponse:
        requester = self._require_requester(requester, "delete rating")
        note = await self.aggregator.remove(rating_id, requester)
        return self._aggregate(note)

    async def recompute_aggregate(self, note_id: UUID, requester: Requester) -> AggregateResponse:
        """Repair path: rebuild the cached aggregate from the rating rows."""
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_write(note, requester):
            self._deny("recompute", note_id, requester)

        average, count = await self.aggregator.recompute(note_id)
        return AggregateResponse(note_id=note_id, average_rating=average, rating_count=count)

    # -- sharing -------------------------------------------------------------

    async def generate_share_link(
        self, note_id: UUID, requester: Requester, ttl_days: Optional[int] = None
    ) -> ShareLinkResponse:
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_write(note, requester):
            self._deny("share", note_id, requester)

        token = await self.issuer.issue(note, requester, ttl_days)
        return ShareLinkResponse(
            note_id=note_id,
            token=token.value,
            url=self.issuer.build_share_url(note_id, token.value),
            expires_at=token.expires_at,
        )

    async def revoke_share_link(self, note_id: UUID, requester: Requester) -> None:
        note = await self._get_note_or_404(note_id)
        if not AccessPolicy.can_write(note, requester):
            self._deny("revoke share", note_id, requester)

        await self.issuer.revoke(note, requester)

    # -- projections ---------------------------------------------------------

    def _aggregate(self, note: Note) -> AggregateResponse:
        return AggregateResponse(
            note_id=note.id,
            average_rating=note.average_rating,
            rating_count=note.rating_count,
        )

    async def _note_to_response(self, note: Note, requester: Optional[Requester]) -> NoteResponse:
        """Convert note model to response."""
        access = AccessPolicy.check_note_access(note, requester)
        owner = await self.user_repo.get_by_id(note.owner_id)
        attachments = await self.attachment_repo.list_for_note(note.id)

        share_info = None
        token = note.share
        # the token is a secret, only writers get to see it again
        if access["can_write"] and token is not None:
            share_info = ShareInfo(
                token=token.value,
                url=self.issuer.build_share_url(note.id, token.value),
                expires_at=token.expires_at,
            )

        return NoteResponse(
            id=note.id,
            title=note.title,
            content=note.content,
            is_public=note.is_public,
            owner_id=note.owner_id,
            owner_username=owner.username if owner else None,
            owner_display_name=owner.display_name if owner else None,
            is_owned=access["is_owner"],
            can_edit=access["can_write"],
            can_rate=access["can_rate"],
            view_count=note.view_count,
            average_rating=note.average_rating,
            rating_count=note.rating_count,
            attachments=[AttachmentResponse.model_validate(a) for a in attachments],
            share=share_info,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )

    def _note_to_list_item(self, note: Note, requester: Optional[Requester]) -> NoteListItem:
        return NoteListItem(
            id=note.id,
            title=note.title,
            content_preview=note.preview,
            is_public=note.is_public,
            owner_id=note.owner_id,
            is_owned=AccessPolicy.is_owner(note, requester),
            view_count=note.view_count,
            average_rating=note.average_rating,
            rating_count=note.rating_count,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
