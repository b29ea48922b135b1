"""
Admin router — idea review, rubric marking, participants, dashboard.

Endpoints:
    GET   /api/admin/ideas              → all ideas (optional status filter)
    PATCH /api/admin/ideas/{idea_id}    → review: status, feedback, score
    GET   /api/admin/users              → participants with idea counts
    PATCH /api/admin/users/{user_id}    → change a user's role
    GET   /api/admin/dashboard-stats    → user and idea counts
    GET   /api/admin/scores             → rubric rows (optional idea filter)
    POST  /api/admin/scores             → submit / overwrite own rubric
    GET   /api/admin/scores/summary     → marking board for completed ideas
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.models.idea import Idea, IdeaStatus
from app.models.user import User, UserRole
from app.routers.auth import require_admin
from app.schemas.idea import IdeaOut, IdeaReview
from app.schemas.score import MarkingBoard, MarkingRow, ScoreAdmin, ScoreOut, ScoreSubmit
from app.schemas.user import AdminUserOut, LatestIdea, RoleUpdate, UserOut
from app.services.scoring import aggregate_rubric
from app.services.store import IdeaStore
from app.services.transitions import check_review_transition, parse_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ═══════════════════════════════════════════════════════════════
#  Idea review
# ═══════════════════════════════════════════════════════════════

@router.get("/ideas", response_model=List[IdeaOut])
async def list_ideas(
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(Idea).order_by(Idea.created_at.desc(), Idea.id.desc())
    if status_filter:
        query = query.where(Idea.status == parse_status(status_filter))
    result = await db.execute(query)
    return result.scalars().all()


@router.patch("/ideas/{idea_id}", response_model=IdeaOut)
async def review_idea(
    idea_id: int,
    payload: IdeaReview,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Set an idea's status, feedback and score.

    Admins may move an idea to any status except out of COMPLETED; the
    forward-only lifecycle is not enforced here.
    """
    store = IdeaStore(db)
    idea = await store.get_idea(idea_id)
    if not idea:
        raise HTTPException(status_code=404, detail="Idea not found")

    previous = idea.status
    idea.status = check_review_transition(idea.status, payload.status)
    idea.feedback = payload.feedback or None
    idea.score = payload.score if payload.score else None
    idea = await store.save_idea(idea)

    logger.info(
        f"Admin {admin.id} reviewed idea {idea.id}: "
        f"{previous.value} -> {idea.status.value}"
    )
    return idea


# ═══════════════════════════════════════════════════════════════
#  Participants
# ═══════════════════════════════════════════════════════════════

@router.get("/users", response_model=List[AdminUserOut])
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(User)
        .options(selectinload(User.ideas))
        .order_by(User.created_at.desc(), User.id.desc())
    )
    users = result.scalars().all()

    rows = []
    for user in users:
        ideas = sorted(user.ideas, key=lambda i: (i.created_at, i.id), reverse=True)
        row = AdminUserOut.model_validate(user)
        row.ideas_count = len(ideas)
        row.latest_idea = LatestIdea.model_validate(ideas[0]) if ideas else None
        rows.append(row)
    return rows


@router.patch("/users/{user_id}", response_model=UserOut)
async def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not payload.role:
        raise HTTPException(status_code=400, detail="Missing userId or role")
    if payload.role not in {r.value for r in UserRole}:
        raise HTTPException(status_code=400, detail="Invalid role")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.role = UserRole(payload.role)
    await db.flush()
    await db.refresh(user)
    logger.info(f"Admin {admin.id} set role of user {user.id} to {user.role.value}")
    return user


# ═══════════════════════════════════════════════════════════════
#  Dashboard
# ═══════════════════════════════════════════════════════════════

@router.get("/dashboard-stats")
async def dashboard_stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    role_counts = dict(
        (await db.execute(select(User.role, func.count(User.id)).group_by(User.role))).all()
    )
    status_counts: Dict[IdeaStatus, int] = dict(
        (await db.execute(select(Idea.status, func.count(Idea.id)).group_by(Idea.status))).all()
    )

    return {
        "total_users": role_counts.get(UserRole.USER, 0),
        "total_admins": role_counts.get(UserRole.ADMIN, 0),
        "total_ideas": sum(status_counts.values()),
        "pending_ideas": status_counts.get(IdeaStatus.PENDING, 0),
        "approved_ideas": status_counts.get(IdeaStatus.APPROVED, 0),
        "in_progress_ideas": status_counts.get(IdeaStatus.IN_PROGRESS, 0),
        "completed_ideas": status_counts.get(IdeaStatus.COMPLETED, 0),
        "rejected_ideas": status_counts.get(IdeaStatus.REJECTED, 0),
    }


# ═══════════════════════════════════════════════════════════════
#  Rubric marking
# ═══════════════════════════════════════════════════════════════

@router.get("/scores", response_model=List[ScoreOut])
async def list_scores(
    idea_id: Optional[int] = Query(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await IdeaStore(db).list_scores(idea_id)


@router.post("/scores", response_model=ScoreOut)
async def submit_score(
    payload: ScoreSubmit,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if payload.idea_id is None:
        raise HTTPException(status_code=400, detail="ideaId is required")

    store = IdeaStore(db)
    if not await store.get_idea(payload.idea_id):
        raise HTTPException(status_code=404, detail="Idea not found")

    rubric = aggregate_rubric(payload.model_dump())
    row = await store.upsert_score(payload.idea_id, admin.id, rubric, payload.comment)
    logger.info(f"Admin {admin.id} scored idea {payload.idea_id}: {rubric.total}/100")
    return row


@router.get("/scores/summary", response_model=MarkingBoard)
async def marking_board(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Completed ideas as rows, admins as columns, totals out of 100."""
    admins_result = await db.execute(
        select(User).where(User.role == UserRole.ADMIN).order_by(User.id)
    )
    admins = admins_result.scalars().all()

    ideas_result = await db.execute(
        select(Idea).where(Idea.status == IdeaStatus.COMPLETED).order_by(Idea.id)
    )
    ideas = ideas_result.scalars().all()

    totals: Dict[int, Dict[int, int]] = {}
    for score in await IdeaStore(db).list_scores():
        totals.setdefault(score.idea_id, {})[score.admin_id] = score.score

    rows = []
    for idea in ideas:
        idea_totals = totals.get(idea.id, {})
        average = (
            round(sum(idea_totals.values()) / len(idea_totals), 2) if idea_totals else None
        )
        rows.append(MarkingRow(idea_id=idea.id, title=idea.title, totals=idea_totals, average=average))

    return MarkingBoard(admins=[ScoreAdmin.model_validate(a) for a in admins], rows=rows)
