"""Storage collaborator for ideas and rubric scores."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.idea import Idea
from app.models.idea_score import IdeaScore
from app.services.scoring import RubricResult


class IdeaStore:
    """Thin wrapper over the request session; commits are left to ``get_db``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_idea(self, idea_id: int, owner_id: Optional[int] = None) -> Optional[Idea]:
        """Fetch an idea, optionally only if ``owner_id`` owns it."""
        query = select(Idea).where(Idea.id == idea_id)
        if owner_id is not None:
            query = query.where(Idea.user_id == owner_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def save_idea(self, idea: Idea) -> Idea:
        self.session.add(idea)
        await self.session.flush()
        await self.session.refresh(idea)
        return idea

    async def delete_idea(self, idea: Idea) -> None:
        await self.session.delete(idea)
        await self.session.flush()

    async def upsert_score(
        self,
        idea_id: int,
        admin_id: int,
        rubric: RubricResult,
        comment: Optional[str] = None,
    ) -> IdeaScore:
        """Create or overwrite the single score row for (idea, admin)."""
        result = await self.session.execute(
            select(IdeaScore).where(
                IdeaScore.idea_id == idea_id,
                IdeaScore.admin_id == admin_id,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = IdeaScore(idea_id=idea_id, admin_id=admin_id)
            self.session.add(row)

        for column, value in rubric.components.items():
            setattr(row, column, value)
        row.score = rubric.total
        row.comment = comment

        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def list_scores(self, idea_id: Optional[int] = None) -> List[IdeaScore]:
        query = select(IdeaScore).order_by(IdeaScore.idea_id, IdeaScore.admin_id)
        if idea_id is not None:
            query = query.where(IdeaScore.idea_id == idea_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
