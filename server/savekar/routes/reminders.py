# server/savekar/routes/reminders.py

import logging

from flask import Blueprint, current_app

from savekar.services.reminder_service import ReminderService
from savekar.utils.auth import cron_secret_required

reminders_bp = Blueprint("reminders", __name__)
logger = logging.getLogger(__name__)


@reminders_bp.route("/send", methods=["POST"])
@cron_secret_required
def send_reminders():
    result = ReminderService.send_due_reminders()
    return current_app.api_response.success(data=result, message=result["message"])
