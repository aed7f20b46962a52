# server/savekar/services/__init__.py

from savekar.services.redis_service import RedisService
from savekar.services.summary_service import SummaryService
from savekar.services.metadata_service import MetadataService
from savekar.services.tag_service import TagService
from savekar.services.folder_service import FolderService
from savekar.services.website_service import WebsiteService
from savekar.services.email_service import EmailService, get_email_service
from savekar.services.reminder_service import ReminderService

__all__ = [
    "RedisService",
    "SummaryService",
    "MetadataService",
    "TagService",
    "FolderService",
    "WebsiteService",
    "EmailService",
    "get_email_service",
    "ReminderService",
]
