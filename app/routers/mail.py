"""
Admin mail router — reusable templates and bulk sending.

Endpoints:
    GET    /api/admin/mail-templates        → list templates, newest first
    POST   /api/admin/mail-templates        → create a template
    PATCH  /api/admin/mail-templates/{id}   → edit a template
    DELETE /api/admin/mail-templates/{id}   → delete a template
    POST   /api/admin/send-mail             → send to an audience
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from jinja2 import TemplateError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.mail_template import MailTemplate
from app.models.user import User, UserRole
from app.routers.auth import require_admin
from app.schemas.mail import MailTemplateCreate, MailTemplateOut, MailTemplateUpdate, SendMailRequest
from app.services.notifications import Mailer, check_template_syntax, get_mailer, render_placeholders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["mail"])


def _check_syntax(*sources: Optional[str]) -> None:
    for source in sources:
        if source:
            error = check_template_syntax(source)
            if error:
                raise HTTPException(status_code=400, detail=error)


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> bool:
    query = select(MailTemplate.id).where(MailTemplate.name == name)
    if exclude_id is not None:
        query = query.where(MailTemplate.id != exclude_id)
    return (await db.execute(query)).first() is not None


async def _get_template(db: AsyncSession, template_id: int) -> MailTemplate:
    result = await db.execute(select(MailTemplate).where(MailTemplate.id == template_id))
    tpl = result.scalar_one_or_none()
    if not tpl:
        raise HTTPException(status_code=404, detail="Template not found")
    return tpl


# ═══════════════════════════════════════════════════════════════
#  Templates
# ═══════════════════════════════════════════════════════════════

@router.get("/mail-templates", response_model=List[MailTemplateOut])
async def list_templates(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(MailTemplate).order_by(MailTemplate.created_at.desc(), MailTemplate.id.desc())
    )
    return result.scalars().all()


@router.post("/mail-templates", response_model=MailTemplateOut, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: MailTemplateCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not payload.name or not payload.subject or not payload.body_html:
        raise HTTPException(status_code=400, detail="name, subject, body_html are required")
    _check_syntax(payload.subject, payload.body_html)
    if await _name_taken(db, payload.name):
        raise HTTPException(status_code=400, detail="Template name must be unique")

    tpl = MailTemplate(
        name=payload.name,
        subject=payload.subject,
        body_html=payload.body_html,
        created_by_id=admin.id,
    )
    db.add(tpl)
    await db.flush()
    await db.refresh(tpl)
    logger.info(f"Admin {admin.id} created mail template {tpl.id} ({tpl.name!r})")
    return tpl


@router.patch("/mail-templates/{template_id}", response_model=MailTemplateOut)
async def update_template(
    template_id: int,
    payload: MailTemplateUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    tpl = await _get_template(db, template_id)
    _check_syntax(payload.subject, payload.body_html)
    if payload.name and await _name_taken(db, payload.name, exclude_id=tpl.id):
        raise HTTPException(status_code=400, detail="Template name must be unique")

    if payload.name:
        tpl.name = payload.name
    if payload.subject:
        tpl.subject = payload.subject
    if payload.body_html:
        tpl.body_html = payload.body_html
    await db.flush()
    await db.refresh(tpl)
    return tpl


@router.delete("/mail-templates/{template_id}")
async def delete_template(
    template_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    tpl = await _get_template(db, template_id)
    await db.delete(tpl)
    await db.flush()
    return {"message": "Deleted"}


# ═══════════════════════════════════════════════════════════════
#  Bulk send
# ═══════════════════════════════════════════════════════════════

@router.post("/send-mail")
async def send_mail(
    payload: SendMailRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    if payload.audience in ("USERS", "ADMINS"):
        role = UserRole.USER if payload.audience == "USERS" else UserRole.ADMIN
        result = await db.execute(
            select(User.email).where(User.role == role, User.is_active.is_(True))
        )
        candidates = [row[0] for row in result.all()]
    else:
        candidates = [e.strip() for e in payload.emails if isinstance(e, str) and "@" in e]
    # dedupe, first-seen order
    recipients = list(dict.fromkeys(candidates))

    subject, body_html = payload.subject, payload.body_html
    if payload.template_id is not None:
        tpl = await _get_template(db, payload.template_id)
        subject, body_html = tpl.subject, tpl.body_html
    if not subject or not body_html:
        raise HTTPException(status_code=400, detail="subject/body required or templateId")
    _check_syntax(subject, body_html)

    people: Dict[str, User] = {}
    if recipients:
        result = await db.execute(select(User).where(User.email.in_(recipients)))
        people = {u.email: u for u in result.scalars().all()}

    # Every message is rendered before the first one is sent
    outgoing = []
    for to in recipients:
        person = people.get(to)
        context = {
            "firstName": person.first_name if person else "",
            "lastName": person.last_name if person else "",
            "email": to,
            "appUrl": settings.APP_URL,
        }
        try:
            outgoing.append((
                to,
                render_placeholders(subject, context, html=False),
                render_placeholders(body_html, context),
            ))
        except TemplateError as e:
            raise HTTPException(status_code=400, detail=f"Template error: {e}")

    for to, rendered_subject, rendered_body in outgoing:
        await mailer.send(to, rendered_subject, rendered_body)

    logger.info(f"Admin {admin.id} sent {len(recipients)} email(s) to {payload.audience}")
    return {"sent": len(recipients)}
