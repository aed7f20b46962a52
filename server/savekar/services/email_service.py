# server/savekar/services/email_service.py

import html
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from flask import current_app

from savekar.utils.helpers import mask_email

logger = logging.getLogger(__name__)

REMINDER_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 20px; border-radius: 10px 10px 0 0; }}
    .content {{ background: #f9f9f9; padding: 20px; border-radius: 0 0 10px 10px; }}
    .card {{ background: white; padding: 15px; border-radius: 8px; margin: 15px 0; border-left: 4px solid #667eea; }}
    .button {{ display: inline-block; background: #667eea; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px; margin: 10px 0; }}
    .footer {{ text-align: center; margin-top: 20px; color: #666; font-size: 12px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>SaveKar Reminder</h1>
      <p>Your scheduled content is ready for review!</p>
    </div>
    <div class="content">
      <h2>Hi {user_name}!</h2>
      <p>You scheduled a reminder for this {website_type}:</p>
      <div class="card">
        <h3 style="margin: 0 0 10px 0;">{title}</h3>
        <p style="color: #666; margin: 0;">Scheduled for: {scheduled_for}</p>
      </div>
      <a href="{url}" class="button">View Content</a>
      <p>Or open your dashboard to manage all your saved content.</p>
      <a href="{app_url}" class="button" style="background: #764ba2;">Open SaveKar</a>
    </div>
    <div class="footer">
      <p>This reminder was sent from SaveKar. You can manage your reminders in your dashboard.</p>
    </div>
  </div>
</body>
</html>
"""


class EmailService:

    def __init__(self, server: str, port: int, username: Optional[str], password: Optional[str],
                 use_tls: bool = True, sender: Optional[str] = None, app_url: str = ""):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender or username
        self.app_url = app_url

    @property
    def is_configured(self) -> bool:
        return bool(self.server and self.username and self.password)

    def render_reminder(self, user_name: str, website) -> str:
        scheduled_for = website.scheduled_for.strftime("%b %d, %Y") if website.scheduled_for else ""
        return REMINDER_TEMPLATE.format(
            user_name=html.escape(user_name),
            website_type=html.escape(website.type.value),
            title=html.escape(website.title),
            scheduled_for=scheduled_for,
            url=html.escape(website.url, quote=True),
            app_url=html.escape(self.app_url, quote=True),
        )

    def send_reminder_email(self, user_email: str, user_name: str, website) -> bool:
        message = EmailMessage()
        message["Subject"] = f"Reminder: {website.title}"
        message["From"] = f"SaveKar <{self.sender}>"
        message["To"] = user_email
        message.set_content(f"Hi {user_name}, you scheduled a reminder for {website.title}: {website.url}")
        message.add_alternative(self.render_reminder(user_name, website), subtype="html")

        return self.send(message)

    def send(self, message: EmailMessage) -> bool:
        if not self.is_configured:
            logger.warning("Email not configured, skipping send")
            return False

        try:
            with smtplib.SMTP(self.server, self.port, timeout=30) as smtp:
                if self.use_tls:
                    smtp.starttls()
                smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {mask_email(message['To'])} failed: {e}")
            return False

        logger.info(f"Email sent to {mask_email(message['To'])}: {message['Subject']}")
        return True


def get_email_service() -> EmailService:
    config = current_app.config
    return EmailService(
        server=config.get("MAIL_SERVER"),
        port=config.get("MAIL_PORT", 587),
        username=config.get("MAIL_USERNAME"),
        password=config.get("MAIL_PASSWORD"),
        use_tls=config.get("MAIL_USE_TLS", True),
        sender=config.get("MAIL_DEFAULT_SENDER"),
        app_url=config.get("APP_URL", ""),
    )
