"""
Apply owner writes to an Idea.

Each function validates the whole request first and only then touches the
model, so a rejected request never leaves a half-updated row behind.
"""

from typing import Any, Dict

from app.models.idea import Idea, IdeaStatus
from app.schemas.idea import FullContentUpdate, IdeaCreate, ProjectStatusUpdate
from app.services.transitions import check_project_transition
from app.services.validation import (
    LINK_FIELDS,
    check_required_fields,
    check_urls,
    clean_text,
    parse_progress,
)


def _supplied(update) -> Dict[str, Any]:
    """Fields the caller actually sent, minus the variant tag."""
    return {name: getattr(update, name) for name in update.model_fields_set if name != "kind"}


def build_idea(payload: IdeaCreate, owner_id: int) -> Idea:
    """Validate a submission and return a new PENDING idea (not yet persisted)."""
    check_required_fields(payload.model_dump())
    return Idea(
        user_id=owner_id,
        title=clean_text(payload.title),
        description=clean_text(payload.description),
        category=clean_text(payload.category),
        problem_statement=clean_text(payload.problem_statement),
        solution=clean_text(payload.solution),
        target_audience=payload.target_audience or "",
        tech_stack=payload.tech_stack,
        expected_outcome=payload.expected_outcome or "",
        timeline=payload.timeline or "",
        resources=payload.resources or "",
        attachments=payload.attachments,
        status=IdeaStatus.PENDING,
        progress=0,
    )


def apply_content_update(idea: Idea, update: FullContentUpdate) -> Idea:
    """Replace the descriptive fields; links are only touched when supplied."""
    check_required_fields(update.model_dump())
    supplied = _supplied(update)
    links = {field: supplied[field] for field in LINK_FIELDS if field in supplied}
    check_urls(links)

    idea.title = clean_text(update.title)
    idea.description = clean_text(update.description)
    idea.category = clean_text(update.category)
    idea.problem_statement = clean_text(update.problem_statement)
    idea.solution = clean_text(update.solution)
    idea.target_audience = update.target_audience or ""
    idea.tech_stack = update.tech_stack
    idea.expected_outcome = update.expected_outcome or ""
    idea.timeline = update.timeline or ""
    idea.resources = update.resources or ""
    if update.attachments is not None:
        idea.attachments = update.attachments
    for field, value in links.items():
        setattr(idea, field, value or "")
    return idea


def apply_project_update(idea: Idea, update: ProjectStatusUpdate) -> Idea:
    """Update links, progress and status; absent fields are left unchanged."""
    supplied = _supplied(update)
    links = {field: supplied[field] for field in LINK_FIELDS if field in supplied}
    check_urls(links)

    progress = parse_progress(supplied["progress"]) if "progress" in supplied else None

    new_status = None
    if "status" in supplied:
        effective_links = {**idea.evidence_links, **links}
        new_status = check_project_transition(idea.status, supplied["status"], effective_links)

    for field, value in links.items():
        setattr(idea, field, value or "")
    if progress is not None:
        idea.progress = progress
    if new_status is not None:
        idea.status = new_status
    return idea
