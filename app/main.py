"""
Idea Portal — FastAPI application entry-point.

Run with:
    uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import init_models
from app.services.notifications import MailDeliveryError, Mailer
from app.services.validation import IdeaValidationError

# ── Import models so metadata knows every table ──
from app import models  # noqa: F401

# ── Import routers ──
from app.routers import admin, auth, ideas, mail

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: create tables, open the mailer; close it on shutdown ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    app.state.mailer = Mailer.from_settings(settings)
    if not app.state.mailer.configured:
        logger.warning("SMTP credentials not set; outgoing mail will only be logged")
    yield
    app.state.mailer.close()


app = FastAPI(
    title=settings.APP_NAME,
    description="Hackathon idea submission, review and project marking.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)


# ── Error mapping ──
@app.exception_handler(IdeaValidationError)
async def idea_validation_error(request: Request, exc: IdeaValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(MailDeliveryError)
async def mail_delivery_error(request: Request, exc: MailDeliveryError):
    return JSONResponse(status_code=502, content={"detail": "Failed to send email"})


# ── Register API routers ──
app.include_router(auth.router)
app.include_router(ideas.router)
app.include_router(admin.router)
app.include_router(mail.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "app": settings.APP_NAME}
