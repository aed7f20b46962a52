# server/savekar/services/reminder_service.py

import logging
from datetime import datetime
from typing import Optional, List

from sqlalchemy.exc import SQLAlchemyError

from savekar.extensions import db
from savekar.models.website import Website
from savekar.services.email_service import get_email_service

logger = logging.getLogger(__name__)


class ReminderService:

    @staticmethod
    def due_reminders(now: Optional[datetime] = None) -> List[Website]:
        now = now or datetime.utcnow()
        return (
            Website.query.filter(
                Website.scheduled_for.isnot(None),
                Website.scheduled_for <= now,
                Website.reminder_sent.is_(False),
            )
            .order_by(Website.scheduled_for.asc())
            .all()
        )

    @staticmethod
    def send_due_reminders(now: Optional[datetime] = None, email_service=None) -> dict:
        """Email every owner whose reminder is due; one failure never stops the batch.

        Each reminder is claimed (``reminder_sent`` committed) before its email
        goes out, so a reminder is never mailed twice. A send that reports
        failure or raises releases the claim and is retried on the next run; a
        crash between the send and the release leaves it claimed and unsent.
        """
        email_service = email_service or get_email_service()
        websites = ReminderService.due_reminders(now)

        emails_sent = 0
        errors = 0

        for website in websites:
            website_id = website.id

            try:
                website.mark_reminder_sent()
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error(f"Could not claim reminder for website {website_id}: {e}")
                errors += 1
                continue

            try:
                user_name = website.user_id.split("@")[0]
                sent = email_service.send_reminder_email(website.user_id, user_name, website)
            except Exception as e:
                logger.error(f"Error sending reminder for website {website_id}: {e}", exc_info=True)
                sent = False

            if sent:
                emails_sent += 1
                continue

            errors += 1
            ReminderService._release(website)

        logger.info(f"Reminder run: {len(websites)} due, {emails_sent} sent, {errors} failed")

        return {
            "message": f"Processed {len(websites)} reminders",
            "emails_sent": emails_sent,
            "errors": errors,
        }

    @staticmethod
    def _release(website: Website) -> None:
        website_id = website.id
        try:
            website.reminder_sent = False
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Could not release reminder for website {website_id}: {e}")
