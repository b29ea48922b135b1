"""
Ideas router — submission and owner-side management.

Endpoints:
    POST   /api/ideas                  → submit a new idea (PENDING)
    GET    /api/ideas                  → caller's ideas, newest first
    GET    /api/ideas/{idea_id}        → one of the caller's ideas
    PATCH  /api/ideas/{idea_id}        → content update or project update
    PATCH  /api/ideas/{idea_id}/progress → progress-only project update
    DELETE /api/ideas/{idea_id}        → delete one of the caller's ideas
"""

import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.idea import Idea
from app.models.user import User
from app.routers.auth import require_user
from app.schemas.idea import (
    FullContentUpdate,
    IdeaCreate,
    IdeaOut,
    IdeaUpdate,
    ProgressUpdate,
    ProjectStatusUpdate,
)
from app.services.idea_updates import apply_content_update, apply_project_update, build_idea
from app.services.store import IdeaStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ideas", tags=["ideas"])

NOT_FOUND = "Idea not found or access denied"


async def _owned_idea(store: IdeaStore, idea_id: int, user: User) -> Idea:
    idea = await store.get_idea(idea_id, owner_id=user.id)
    if not idea:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return idea


@router.post("", response_model=IdeaOut, status_code=status.HTTP_201_CREATED)
async def submit_idea(
    payload: IdeaCreate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await IdeaStore(db).save_idea(build_idea(payload, current_user.id))
    logger.info(f"User {current_user.id} submitted idea {idea.id} ({idea.title!r})")
    return idea


@router.get("", response_model=List[IdeaOut])
async def list_my_ideas(
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Idea)
        .where(Idea.user_id == current_user.id)
        .order_by(Idea.created_at.desc(), Idea.id.desc())
    )
    return result.scalars().all()


@router.get("/{idea_id}", response_model=IdeaOut)
async def get_my_idea(
    idea_id: int,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return await _owned_idea(IdeaStore(db), idea_id, current_user)


@router.patch("/{idea_id}", response_model=IdeaOut)
async def update_idea(
    idea_id: int,
    payload: IdeaUpdate = Body(...),
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Apply either a ``content`` or a ``project`` update, chosen by ``kind``."""
    store = IdeaStore(db)
    idea = await _owned_idea(store, idea_id, current_user)

    if isinstance(payload, FullContentUpdate):
        apply_content_update(idea, payload)
    else:
        apply_project_update(idea, payload)

    idea = await store.save_idea(idea)
    logger.info(f"User {current_user.id} applied {payload.kind} update to idea {idea.id}")
    return idea


@router.patch("/{idea_id}/progress", response_model=IdeaOut)
async def update_progress(
    idea_id: int,
    payload: ProgressUpdate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    store = IdeaStore(db)
    idea = await _owned_idea(store, idea_id, current_user)
    apply_project_update(idea, ProjectStatusUpdate(kind="project", progress=payload.progress))
    return await store.save_idea(idea)


@router.delete("/{idea_id}")
async def delete_idea(
    idea_id: int,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    store = IdeaStore(db)
    idea = await _owned_idea(store, idea_id, current_user)
    await store.delete_idea(idea)
    logger.info(f"User {current_user.id} deleted idea {idea_id}")
    return {"message": "Idea deleted successfully"}
