"""Email delivery over SMTP with a logged simulation fallback.

The :class:`Mailer` is created once in the application lifespan, kept on
``app.state.mailer`` and handed to routes through :func:`get_mailer`.
"""

import asyncio
import logging
import smtplib
import threading
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, Optional

from fastapi import Request
from jinja2 import ChainableUndefined, Environment, TemplateSyntaxError, select_autoescape
from jinja2.sandbox import SandboxedEnvironment

from app.config import Settings

logger = logging.getLogger(__name__)

HTML_TEMPLATE_BASE = """
<!DOCTYPE html>
<html>
<head>
    <style>
        body { font-family: 'Inter', -apple-system, sans-serif; background-color: #f8f9fa; color: #333; margin: 0; padding: 0; }
        .container { max-width: 600px; margin: 40px auto; background: #ffffff; border-radius: 12px; overflow: hidden; }
        .header { background: #2563eb; padding: 30px 40px; text-align: center; }
        .header h1 { color: #ffffff; margin: 0; font-size: 24px; }
        .content { padding: 40px; line-height: 1.6; }
        .code { background: #f3f4f6; border-radius: 8px; padding: 20px; text-align: center; font-size: 36px; letter-spacing: 8px; color: #2563eb; }
        .btn { display: inline-block; background: #2563eb; color: #ffffff; text-decoration: none; padding: 10px 16px; border-radius: 6px; }
        .footer { background: #f1f3f5; padding: 20px; text-align: center; color: #6c757d; font-size: 13px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header"><h1>{{ app_name }}</h1></div>
        <div class="content">{{ body | safe }}</div>
        <div class="footer"><p>You received this email because you are registered on {{ app_name }}.</p></div>
    </div>
</body>
</html>
"""

PASSWORD_RESET_BODY = """
<h2>Reset your password</h2>
<p>We received a request to reset your password. Click the button below to set a new password.</p>
<p><a href="{{ reset_url }}" class="btn">Reset Password</a></p>
<p>Or paste this link into your browser:</p>
<p><a href="{{ reset_url }}">{{ reset_url }}</a></p>
<p>This link expires in {{ expires_minutes }} minutes. If you didn't request this, you can ignore this email.</p>
"""

OTP_BODY = """
<h2>Email Verification</h2>
<p>Thank you for registering! Please verify your email address using the code below:</p>
<div class="code">{{ otp }}</div>
<p>This code will expire in {{ expires_minutes }} minutes. If you didn't request this, you can ignore this email.</p>
"""

_layout_env = Environment(autoescape=select_autoescape(default_for_string=True))
_base_template = _layout_env.from_string(HTML_TEMPLATE_BASE)
_reset_template = _layout_env.from_string(PASSWORD_RESET_BODY)
_otp_template = _layout_env.from_string(OTP_BODY)

# Admin-authored templates are untrusted input.
_sandbox = SandboxedEnvironment(autoescape=True, undefined=ChainableUndefined)
_sandbox_text = SandboxedEnvironment(autoescape=False, undefined=ChainableUndefined)


class MailDeliveryError(RuntimeError):
    """SMTP refused or failed to deliver a message."""


def check_template_syntax(source: str) -> Optional[str]:
    """Return a human-readable error if ``source`` is not a valid template."""
    try:
        _sandbox.parse(source)
    except TemplateSyntaxError as e:
        return f"Template error on line {e.lineno}: {e.message}"
    return None


def render_placeholders(source: str, context: Dict[str, str], html: bool = True) -> str:
    """
    Fill ``{{firstName}}``-style placeholders. Unknown names, and attribute
    lookups on them, render empty.

    Values are HTML-escaped unless ``html`` is False (e.g. for subjects).
    """
    env = _sandbox if html else _sandbox_text
    return env.from_string(source).render(**context)


class Mailer:
    """SMTP sender holding at most one open connection."""

    def __init__(
        self,
        server: str,
        port: int,
        username: str = "",
        password: str = "",
        sender: str = "",
        app_name: str = "Idea Portal",
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.app_name = app_name
        self._connection: Optional[smtplib.SMTP] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            server=settings.SMTP_SERVER,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            sender=settings.MAIL_FROM,
            app_name=settings.APP_NAME,
        )

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    def wrap(self, body_html: str) -> str:
        return _base_template.render(app_name=self.app_name, body=body_html)

    # ── Connection lifecycle ──

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            conn = smtplib.SMTP_SSL(self.server, self.port, timeout=10)
        else:
            conn = smtplib.SMTP(self.server, self.port, timeout=10)
            conn.starttls()
        conn.login(self.username, self.password)
        return conn

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                try:
                    self._connection.quit()
                except smtplib.SMTPException as e:
                    logger.warning(f"Error while closing SMTP connection: {e}")
                finally:
                    self._connection = None

    # ── Sending ──

    def _send_sync(self, recipient_email: str, subject: str, html_body: str) -> None:
        """Synchronous function to actually send or simulate the email."""
        if not self.configured:
            logger.info(f"Simulated email to {recipient_email}: {subject}")
            logger.debug(html_body)
            return

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.app_name} <{self.sender}>"
        msg["To"] = recipient_email
        msg.attach(MIMEText(html_body, "html"))

        with self._lock:
            try:
                self._deliver(msg)
            except (smtplib.SMTPException, OSError) as e:
                self._connection = None
                logger.error(f"Failed to send email to {recipient_email}: {e}")
                raise MailDeliveryError(str(e)) from e
        logger.info(f"Email sent to {recipient_email}")

    def _deliver(self, msg: MIMEMultipart) -> None:
        """Send on the cached connection, reconnecting once if the server dropped it."""
        if self._connection is not None:
            try:
                self._connection.send_message(msg)
                return
            except smtplib.SMTPServerDisconnected:
                logger.info("SMTP connection was closed by the server; reconnecting")
                self._connection = None
        self._connection = self._connect()
        self._connection.send_message(msg)

    async def send(self, recipient_email: str, subject: str, html_body: str, wrap: bool = True) -> None:
        html = self.wrap(html_body) if wrap else html_body
        # Run synchronous SMTP in a threadpool to avoid blocking the event loop
        await asyncio.to_thread(self._send_sync, recipient_email, subject, html)

    async def send_password_reset(self, recipient_email: str, reset_url: str, expires_minutes: int) -> None:
        body = _reset_template.render(reset_url=reset_url, expires_minutes=expires_minutes)
        await self.send(recipient_email, "Reset your password", body)

    async def send_otp(self, recipient_email: str, otp: str, expires_minutes: int) -> None:
        body = _otp_template.render(otp=otp, expires_minutes=expires_minutes)
        await self.send(recipient_email, "Verify your email address - OTP", body)


def get_mailer(request: Request) -> Mailer:
    """FastAPI dependency returning the process-wide mailer."""
    return request.app.state.mailer
