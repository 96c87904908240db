"""Outbound email over SMTP (aiosmtplib) for contact form notifications."""
import html
import logging
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailConfig:
    host: str
    port: int
    username: str = ""
    password: str = ""
    use_tls: bool = True
    from_name: str = "Portfolio Contact"
    owner_email: str = ""
    timeout: float = 10.0


class Mailer:
    """Thin async SMTP sender. One connection per message."""

    def __init__(self, config: MailConfig):
        self.config = config

    @property
    def sender(self) -> str:
        return f"{self.config.from_name} <{self.config.username or self.config.owner_email}>"

    async def send(self, to: str, subject: str, html_body: str) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(html_body, subtype="html")

        await aiosmtplib.send(
            message,
            hostname=self.config.host,
            port=self.config.port,
            username=self.config.username or None,
            password=self.config.password or None,
            start_tls=self.config.use_tls,
            timeout=self.config.timeout,
        )
        logger.info("Email sent to %s: %s", to, subject)


# ── Templates ──

_STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.header { background: #14b8a6; color: white; padding: 20px; border-radius: 8px 8px 0 0; }
.content { background: #f9fafb; padding: 20px; border: 1px solid #e5e7eb; }
.label { font-weight: bold; color: #14b8a6; }
"""


def render_owner_notification(name: str, email: str, subject: str, message: str) -> str:
    body = html.escape(message).replace("\n", "<br>")
    return f"""<!DOCTYPE html>
<html><head><style>{_STYLE}</style></head>
<body><div class="container">
  <div class="header"><h2>New Contact Form Submission</h2></div>
  <div class="content">
    <p><span class="label">From:</span> {html.escape(name)}</p>
    <p><span class="label">Email:</span> {html.escape(email)}</p>
    <p><span class="label">Subject:</span> {html.escape(subject)}</p>
    <p class="label">Message:</p>
    <p>{body}</p>
  </div>
</div></body></html>
"""


def render_auto_reply(name: str) -> str:
    return f"""<!DOCTYPE html>
<html><head><style>{_STYLE}</style></head>
<body><div class="container">
  <div class="header"><h2>Message Received!</h2></div>
  <div class="content">
    <p>Hi {html.escape(name)},</p>
    <p>Thank you for reaching out! I've received your message and will get back to you as soon as possible.</p>
    <p>I typically respond within 24-48 hours on business days.</p>
  </div>
</div></body></html>
"""


# ── Background tasks: each runs independently and logs its own outcome ──

async def send_owner_notification(mailer: Mailer, name: str, email: str, subject: str, message: str) -> None:
    if not mailer.config.owner_email:
        logger.warning("No owner address configured, skipping contact notification")
        return
    try:
        await mailer.send(
            mailer.config.owner_email,
            f"New Contact Form Submission: {subject}",
            render_owner_notification(name, email, subject, message),
        )
    except Exception:
        logger.exception("Owner notification for contact from %s failed", email)


async def send_auto_reply(mailer: Mailer, name: str, email: str) -> None:
    try:
        await mailer.send(email, "Thank You for Contacting Me!", render_auto_reply(name))
    except Exception:
        logger.exception("Auto-reply to %s failed", email)
