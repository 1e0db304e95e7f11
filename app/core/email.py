import ssl
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
import logging

import aiosmtplib

from app.core.config import settings

logger = logging.getLogger(__name__)


def is_mail_configured() -> bool:
    return bool(settings.MAIL_SERVER and settings.MAIL_SERVER.strip())


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    is_html: bool = False
) -> bool:
    """
    Send an email asynchronously.

    Returns True if the email was sent, False if mail is not configured or sending failed.
    """
    if not is_mail_configured():
        logger.info("Mail not configured; skipping email to %s (%s)", to_email, subject)
        return False
    try:
        message = MIMEMultipart("alternative")
        message["From"] = f"{settings.MAIL_FROM_NAME} <{settings.MAIL_FROM}>"
        message["To"] = to_email
        message["Subject"] = subject
        message.attach(MIMEText(body, "html" if is_html else "plain"))

        # Port 465 uses SSL/TLS, anything else STARTTLS
        if settings.MAIL_PORT == 465:
            await aiosmtplib.send(
                message,
                hostname=settings.MAIL_SERVER,
                port=settings.MAIL_PORT,
                username=settings.MAIL_USERNAME or None,
                password=settings.MAIL_PASSWORD or None,
                use_tls=True,
                tls_context=ssl.create_default_context(),
            )
        else:
            await aiosmtplib.send(
                message,
                hostname=settings.MAIL_SERVER,
                port=settings.MAIL_PORT,
                username=settings.MAIL_USERNAME or None,
                password=settings.MAIL_PASSWORD or None,
                start_tls=True,
            )

        logger.info(f"Email sent successfully to {to_email}")
        return True

    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {to_email}: {e}", exc_info=True)
        return False


async def send_onboarding_link_email(email: str, link: str, expires_at: datetime) -> bool:
    """Send the driver onboarding magic link."""
    subject = "FleetSync - Complete your driver application"
    expires_str = expires_at.strftime("%d/%m/%Y %H:%M UTC")

    html_body = f"""
<html>
  <body>
    <h2>Welcome to FleetSync</h2>
    <p>You have been invited to apply as a rideshare driver.</p>
    <p>Use the link below to upload your licence and passport details:</p>
    <p><a href="{link}">{link}</a></p>
    <p><em>This link can be used once and expires on {expires_str}.</em></p>
    <p>Best regards,<br>FleetSync Team</p>
  </body>
</html>
"""
    return await send_email(to_email=email, subject=subject, body=html_body, is_html=True)
