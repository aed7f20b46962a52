# server/savekar/models/folder.py

import uuid
from datetime import datetime
from typing import Optional

from savekar.extensions import db


class Folder(db.Model):
    __tablename__ = "folders"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(255), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(7), nullable=False, default="#3b82f6")
    icon = db.Column(db.String(50), nullable=False, default="folder")

    parent_id = db.Column(db.String(36), db.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True)
    path = db.Column(db.Text, nullable=False)
    level = db.Column(db.Integer, default=0, nullable=False)

    is_expanded = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    websites = db.relationship("Website", back_populates="folder", lazy="dynamic")

    __table_args__ = (
        db.UniqueConstraint("user_id", "name", "parent_id", name="uq_folder_user_name_parent"),
        # NULL parents never collide in a plain unique constraint
        db.Index(
            "uq_folder_user_root_name",
            "user_id",
            "name",
            unique=True,
            sqlite_where=db.text("parent_id IS NULL"),
            postgresql_where=db.text("parent_id IS NULL"),
        ),
        db.Index("idx_folder_user_parent", "user_id", "parent_id"),
        db.Index("idx_folder_user_path", "user_id", "path"),
    )

    def __init__(
        self,
        user_id: str,
        name: str,
        path: str,
        level: int = 0,
        parent_id: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
        is_expanded: bool = True,
    ):
        self.user_id = user_id
        self.name = name.strip()
        self.parent_id = parent_id
        self.path = path
        self.level = level
        self.color = color or "#3b82f6"
        self.icon = icon or "folder"
        self.is_expanded = is_expanded

    @property
    def website_count(self) -> int:
        return self.websites.filter_by(user_id=self.user_id).count()

    @property
    def subfolder_count(self) -> int:
        return Folder.query.filter_by(user_id=self.user_id, parent_id=self.id).count()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "color": self.color,
            "icon": self.icon,
            "path": self.path,
            "level": self.level,
            "is_expanded": self.is_expanded,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"<Folder {self.path}>"
