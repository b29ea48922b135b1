"""Mail template and bulk-send schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class MailTemplateCreate(BaseModel):
    name: Optional[str] = None
    subject: Optional[str] = None
    body_html: Optional[str] = None


class MailTemplateUpdate(BaseModel):
    name: Optional[str] = None
    subject: Optional[str] = None
    body_html: Optional[str] = None


class MailTemplateOut(BaseModel):
    id: int
    name: str
    subject: str
    body_html: str
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SendMailRequest(BaseModel):
    audience: Literal["USERS", "ADMINS", "CUSTOM"]
    emails: List[str] = []
    template_id: Optional[int] = None
    subject: Optional[str] = None
    body_html: Optional[str] = None
