# server/biolink/models/link.py

import uuid
from datetime import datetime
from typing import Optional

from biolink.extensions import db
from biolink.models.preview import Preview, PreviewKind, preview_from_dict, preview_to_dict
from biolink.utils.visibility import schedule_state


class Link(db.Model):
    __tablename__ = "links"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    url = db.Column(db.Text, nullable=False)

    # creation time in epoch ms until the first reorder rewrites it to a position
    order = db.Column("order", db.BigInteger, nullable=False, default=0)

    folder_id = db.Column(db.String(36), db.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True)

    preview_kind = db.Column(db.Enum(PreviewKind), nullable=True)
    preview_data = db.Column(db.JSON, nullable=True)

    scheduled_at = db.Column(db.BigInteger, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    folder = db.relationship("Folder", back_populates="links", lazy="joined")
    music_links = db.relationship(
        "MusicLink",
        back_populates="link",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="MusicLink.position",
    )

    __table_args__ = (
        db.Index("idx_links_user_order", "user_id", "order"),
        db.Index("idx_links_user_folder", "user_id", "folder_id"),
    )

    def __init__(
        self,
        user_id: str,
        title: str,
        url: str,
        order: int = 0,
        folder_id: Optional[str] = None,
        scheduled_at: Optional[int] = None,
        preview: Optional[Preview] = None,
    ):
        self.user_id = user_id
        self.title = title
        self.url = url.strip()
        self.order = order
        self.folder_id = folder_id
        self.scheduled_at = scheduled_at
        self.preview = preview

    @property
    def preview(self) -> Optional[Preview]:
        if self.preview_kind is None or not self.preview_data:
            return None
        return preview_from_dict(dict(self.preview_data, kind=self.preview_kind.value))

    @preview.setter
    def preview(self, value: Optional[Preview]) -> None:
        if value is None:
            self.preview_kind = None
            self.preview_data = None
            return
        data = preview_to_dict(value)
        data.pop("kind")
        self.preview_kind = value.kind
        self.preview_data = data

    def to_dict(self, include_schedule: bool = False, now: Optional[int] = None) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "order": self.order,
            "folder_id": self.folder_id,
            "music_links": [m.to_dict() for m in self.music_links],
            "preview": preview_to_dict(self.preview),
            "scheduled_at": self.scheduled_at,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_schedule:
            data["schedule"] = schedule_state(self, now)

        return data

    def __repr__(self) -> str:
        return f"<Link {self.id[:8]}>"
