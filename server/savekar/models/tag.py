# server/savekar/models/tag.py

import uuid
from datetime import datetime
from typing import Optional

from savekar.extensions import db


class Tag(db.Model):
    __tablename__ = "tags"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(255), nullable=False, index=True)

    name = db.Column(db.String(50), nullable=False)
    color = db.Column(db.String(7), nullable=False, default="#3b82f6")
    usage_count = db.Column(db.Integer, default=1, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("user_id", "name", name="uq_tag_user_name"),
        db.Index("idx_tag_user_usage", "user_id", "usage_count"),
    )

    def __init__(self, user_id: str, name: str, color: Optional[str] = None, usage_count: int = 1):
        self.user_id = user_id
        self.name = name.strip().lower()
        self.color = color or "#3b82f6"
        self.usage_count = usage_count

    def increment_usage(self) -> None:
        self.usage_count = (self.usage_count or 0) + 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "usage_count": self.usage_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Tag {self.name}>"
