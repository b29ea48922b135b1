"""Idea Pydantic schemas — submission, tagged updates, review, output."""

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.idea import IdeaStatus


class IdeaCreate(BaseModel):
    """Fields submitted on the idea submission form. Accepts snake_case or camelCase."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    problem_statement: Optional[str] = None
    solution: Optional[str] = None
    target_audience: Optional[str] = None
    tech_stack: List[str] = []
    expected_outcome: Optional[str] = None
    timeline: Optional[str] = None
    resources: Optional[str] = None
    attachments: List[str] = []


class FullContentUpdate(IdeaCreate):
    """Owner edit of the descriptive idea fields."""
    kind: Literal["content"]
    attachments: Optional[List[str]] = None
    github_url: Optional[str] = None
    demo_url: Optional[str] = None
    documentation_url: Optional[str] = None
    video_url: Optional[str] = None


class ProjectStatusUpdate(BaseModel):
    """Owner update of links, progress and status. Absent fields are left alone."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    kind: Literal["project"]
    github_url: Optional[str] = None
    demo_url: Optional[str] = None
    documentation_url: Optional[str] = None
    video_url: Optional[str] = None
    progress: Optional[Union[int, float, str]] = None
    status: Optional[str] = None


# The caller picks the variant through the required `kind` tag.
IdeaUpdate = Union[FullContentUpdate, ProjectStatusUpdate]


class ProgressUpdate(BaseModel):
    progress: Optional[Union[int, float, str]] = None


class IdeaReview(BaseModel):
    """Admin review decision."""
    status: Optional[str] = None
    feedback: Optional[str] = None
    score: Optional[float] = None


class IdeaOwner(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    department: Optional[str] = None
    employee_id: Optional[str] = None

    model_config = {"from_attributes": True}


class IdeaOut(BaseModel):
    """Public idea representation returned by the API."""
    id: int
    title: str
    description: str
    category: str
    problem_statement: str
    solution: str
    target_audience: Optional[str] = None
    tech_stack: List[str] = []
    expected_outcome: Optional[str] = None
    timeline: Optional[str] = None
    resources: Optional[str] = None
    attachments: List[str] = []
    status: IdeaStatus
    progress: int
    score: Optional[float] = None
    feedback: Optional[str] = None
    github_url: Optional[str] = None
    demo_url: Optional[str] = None
    documentation_url: Optional[str] = None
    video_url: Optional[str] = None
    user_id: int
    user: Optional[IdeaOwner] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
