"""
Email notification for new contact form submissions.

Uses SMTP with an app password. Sender and recipient are both EMAIL_USER.
"""
import os
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

logger = logging.getLogger(__name__)


class SMTPNotificationSink:
    """Sends inquiry notifications through an SMTP server."""

    def __init__(self, user: str, password: str, smtp_server: str = "smtp.gmail.com", smtp_port: int = 587):
        self.user = user
        # Gmail app passwords are shown with spaces
        self.password = password.replace(" ", "")
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port

    def build_message(self, inquiry: dict) -> MIMEMultipart:
        def field(key, fallback=""):
            return html.escape(str(inquiry.get(key) or fallback))

        body = (
            f"New Lead from SMMA Website\n\n"
            f"Name: {inquiry.get('name')}\n"
            f"Email: {inquiry.get('email')}\n"
            f"Phone: {inquiry.get('phone') or 'Not provided'}\n"
            f"Service: {inquiry.get('service') or 'Not specified'}\n"
            f"Message: {inquiry.get('message')}\n"
        )
        markup = f"""
            <h2>New Lead from SMMA Website</h2>
            <p><strong>Name:</strong> {field('name')}</p>
            <p><strong>Email:</strong> {field('email')}</p>
            <p><strong>Phone:</strong> {field('phone', 'Not provided')}</p>
            <p><strong>Service:</strong> {field('service', 'Not specified')}</p>
            <p><strong>Message:</strong> {field('message')}</p>
        """

        msg = MIMEMultipart("alternative")
        msg["From"] = self.user
        msg["To"] = self.user
        msg["Subject"] = "New Contact Form Submission"
        msg.attach(MIMEText(body, "plain"))
        msg.attach(MIMEText(markup, "html"))
        return msg

    def notify_inquiry(self, inquiry: dict) -> None:
        msg = self.build_message(inquiry)
        with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=10) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.send_message(msg)
        logger.info("Inquiry notification sent to %s", self.user)


def get_notifier() -> Optional[SMTPNotificationSink]:
    """Return the configured sink, or None when email is not configured."""
    user = os.getenv("EMAIL_USER")
    password = os.getenv("EMAIL_PASS")
    if not user or not password:
        return None
    return SMTPNotificationSink(
        user,
        password,
        smtp_server=os.getenv("SMTP_HOST", "smtp.gmail.com"),
        smtp_port=int(os.getenv("SMTP_PORT", "587")),
    )
