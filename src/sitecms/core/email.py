"""
Outgoing mail: admin invitations and the public contact form.
"""
import html
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

from fastapi import Request

from src.sitecms.core.config import Settings

logger = logging.getLogger(__name__)


class EmailService:

    def __init__(self, settings: Settings):
        self.smtp_server = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.username = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.from_email = settings.EMAIL_FROM
        self.contact_recipient = settings.CONTACT_RECIPIENT
        self.frontend_url = settings.FRONTEND_URL
        self.invite_hours = settings.INVITE_TOKEN_EXPIRE_HOURS

    def send_email(
        self,
        to_emails: List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> None:
        """Send a multipart message. SMTP errors propagate to the caller."""
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.from_email
        message["To"] = ", ".join(to_emails)
        if reply_to:
            message["Reply-To"] = reply_to

        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))

        with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=30) as server:
            if self.use_tls:
                server.starttls(context=ssl.create_default_context())
            if self.username:
                server.login(self.username, self.password or "")
            server.sendmail(self.from_email, to_emails, message.as_string())

        logger.info("Email '%s' sent to %s", subject, to_emails)

    def invite_link(self, reset_token: str) -> str:
        return f"{self.frontend_url.rstrip('/')}/set-password?token={reset_token}"

    def send_password_invite_email(self, to_email: str, reset_token: str) -> None:
        link = self.invite_link(reset_token)
        html_content = f"""
        <h2>Welcome!</h2>
        <p>An administrator account has been created for you.</p>
        <p>Follow the link below to choose your password:</p>
        <p><a href="{link}">{link}</a></p>
        <p>This link expires in {self.invite_hours} hours.</p>
        <p>If you did not expect this invitation, you can ignore this email.</p>
        """
        text_content = (
            "An administrator account has been created for you.\n"
            f"Choose your password here: {link}\n"
            f"This link expires in {self.invite_hours} hours."
        )
        self.send_email([to_email], "Welcome - set your password", html_content, text_content)

    def send_contact_email(self, name: str, sender_email: str, body: str) -> None:
        html_content = f"""
        <h2>New contact message</h2>
        <p><strong>Name:</strong> {html.escape(name)}</p>
        <p><strong>Email:</strong> {html.escape(sender_email)}</p>
        <p>{html.escape(body).replace(chr(10), "<br>")}</p>
        """
        text_content = f"From: {name} <{sender_email}>\n\n{body}"
        self.send_email(
            [self.contact_recipient],
            f"Contact form: {name}",
            html_content,
            text_content,
            reply_to=sender_email,
        )


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service
