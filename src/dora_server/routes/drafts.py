"""Draft endpoints — save a live session as a draft, list/get/delete drafts.

Saving never changes the live session.  Each save stores a new draft row;
listing hides completed drafts unless ``include_completed`` is set.
"""

import uuid

from fastapi import APIRouter, Depends, Query

from dora_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from dora_server.dependencies import get_draft_store, get_registry
from dora_server.persistence import DatabaseDraftStore, StoredDraft
from dora_server.registry import SessionRegistry

router = APIRouter(tags=["drafts"])


@router.post("/sessions/{session_id}/draft", status_code=201)
async def save_draft(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> StoredDraft:
    """Snapshot the session into a stored draft and return it with its id.

    Raises 400 when the session has already been submitted.
    """
    live = registry.get(session_id)
    if live.controller.is_terminal:
        raise ValueError(
            f"Draft saving is only valid before submission: session_id={session_id}"
        )
    await live.controller.save_draft()
    return live.drafts.last_saved


@router.get("/drafts")
async def list_drafts(
    drafts: DatabaseDraftStore = Depends(get_draft_store),
    user_name: str | None = Query(None),
    provider_name: str | None = Query(None),
    include_completed: bool = Query(False),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> list[StoredDraft]:
    """List stored drafts, most recently drafted first."""
    return await drafts.list(
        user_name=user_name,
        provider_name=provider_name,
        include_completed=include_completed,
        limit=limit,
        offset=offset,
    )


@router.get("/drafts/{draft_id}")
async def get_draft(
    draft_id: uuid.UUID,
    drafts: DatabaseDraftStore = Depends(get_draft_store),
) -> StoredDraft:
    """Return one stored draft (404 if unknown)."""
    stored = await drafts.get(draft_id)
    if stored is None:
        raise ValueError(f"Draft not found: draft_id={draft_id}")
    return stored


@router.delete("/drafts/{draft_id}", status_code=204)
async def delete_draft(
    draft_id: uuid.UUID,
    drafts: DatabaseDraftStore = Depends(get_draft_store),
) -> None:
    """Delete a stored draft.  Returns 204, or 404 if unknown."""
    if not await drafts.delete(draft_id):
        raise ValueError(f"Draft not found: draft_id={draft_id}")
