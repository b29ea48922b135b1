"""Rubric scoring schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScoreSubmit(BaseModel):
    """
    One admin's rubric for one idea.

    Category values are left untyped on purpose: out-of-range or non-numeric
    entries are clamped by the aggregator rather than rejected.
    """
    model_config = ConfigDict(populate_by_name=True)

    idea_id: Optional[int] = Field(None, alias="ideaId")
    innovation: Any = None
    ai_integration: Any = Field(None, alias="aiIntegration")
    design_ux: Any = Field(None, alias="designUx")
    problem_solving: Any = Field(None, alias="problemSolving")
    code_quality: Any = Field(None, alias="codeQuality")
    performance: Any = None
    scalability: Any = None
    documentation: Any = None
    presentation: Any = None
    completeness: Any = None
    comment: Optional[str] = None


class ScoreAdmin(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str

    model_config = {"from_attributes": True}


class ScoreOut(BaseModel):
    id: int
    idea_id: int
    admin_id: int
    innovation: int
    ai_integration: int
    design_ux: int
    problem_solving: int
    code_quality: int
    performance: int
    scalability: int
    documentation: int
    presentation: int
    completeness: int
    score: int
    comment: Optional[str] = None
    admin: Optional[ScoreAdmin] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MarkingRow(BaseModel):
    """One completed idea on the marking board."""
    idea_id: int
    title: str
    totals: Dict[int, int] = {}
    average: Optional[float] = None


class MarkingBoard(BaseModel):
    admins: List[ScoreAdmin] = []
    rows: List[MarkingRow] = []
