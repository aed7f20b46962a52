# server/savekar/models/website.py

import enum
import uuid
from datetime import datetime
from typing import Optional, List

from savekar.extensions import db


class WebsiteType(enum.Enum):
    YOUTUBE = "youtube"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    WEBSITE = "website"
    NOTE = "note"


class Website(db.Model):
    __tablename__ = "websites"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(255), nullable=False, index=True)

    url = db.Column(db.Text, nullable=False)
    type = db.Column(db.Enum(WebsiteType), nullable=False, default=WebsiteType.WEBSITE)
    embed_id = db.Column(db.String(255), nullable=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    thumbnail = db.Column(db.Text, nullable=False, default="")
    tags = db.Column(db.JSON, nullable=False, default=list)

    is_favorite = db.Column(db.Boolean, default=False, nullable=False)
    view_count = db.Column(db.Integer, default=0, nullable=False)

    folder_id = db.Column(db.String(36), db.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True)

    scheduled_for = db.Column(db.DateTime, nullable=True)
    reminder_sent = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    folder = db.relationship("Folder", back_populates="websites")

    __table_args__ = (
        db.UniqueConstraint("user_id", "url", name="uq_website_user_url"),
        db.Index("idx_websites_user_folder_created", "user_id", "folder_id", "created_at"),
        db.Index("idx_websites_user_type", "user_id", "type"),
        db.Index("idx_websites_user_favorite", "user_id", "is_favorite"),
        db.Index("idx_websites_reminders", "scheduled_for", "reminder_sent"),
    )

    def __init__(
        self,
        user_id: str,
        url: str,
        title: str,
        type: WebsiteType = WebsiteType.WEBSITE,
        embed_id: Optional[str] = None,
        description: str = "",
        thumbnail: str = "",
        tags: Optional[List[str]] = None,
        folder_id: Optional[str] = None,
        scheduled_for: Optional[datetime] = None,
    ):
        self.user_id = user_id
        self.url = url.strip()
        self.title = title
        self.type = type
        self.embed_id = embed_id or None
        self.description = description or ""
        self.thumbnail = thumbnail or ""
        self.tags = list(tags or [])
        self.folder_id = folder_id
        self.scheduled_for = scheduled_for
        self.is_favorite = False
        self.view_count = 0
        self.reminder_sent = False

    def mark_reminder_sent(self) -> None:
        self.reminder_sent = True

    def record_view(self) -> None:
        self.view_count = (self.view_count or 0) + 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "type": self.type.value if self.type else None,
            "embed_id": self.embed_id,
            "title": self.title,
            "description": self.description,
            "thumbnail": self.thumbnail,
            "tags": list(self.tags or []),
            "is_favorite": self.is_favorite,
            "view_count": self.view_count,
            "folder_id": self.folder_id,
            "scheduled_for": self.scheduled_for.isoformat() if self.scheduled_for else None,
            "reminder_sent": self.reminder_sent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Website {self.id[:8] if self.id else self.url}>"
