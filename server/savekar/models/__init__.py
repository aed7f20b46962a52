# server/savekar/models/__init__.py

from savekar.models.folder import Folder
from savekar.models.website import Website, WebsiteType
from savekar.models.tag import Tag

__all__ = [
    "Folder",
    "Website",
    "WebsiteType",
    "Tag",
]
