# server/savekar/routes/__init__.py

from savekar.routes.auth import auth_bp
from savekar.routes.folders import folders_bp
from savekar.routes.websites import websites_bp
from savekar.routes.tags import tags_bp
from savekar.routes.reminders import reminders_bp

__all__ = [
    "auth_bp",
    "folders_bp",
    "websites_bp",
    "tags_bp",
    "reminders_bp",
]
