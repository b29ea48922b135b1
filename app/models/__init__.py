"""
Idea Portal – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them through a single
``import app.models``.
"""

from app.models.user import User                                   # noqa: F401
from app.models.idea import Idea                                   # noqa: F401
from app.models.idea_score import IdeaScore                        # noqa: F401
from app.models.mail_template import MailTemplate                  # noqa: F401
from app.models.password_reset_token import PasswordResetToken    # noqa: F401
