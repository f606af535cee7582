# server/biolink/models/folder.py

import uuid
from datetime import datetime

from biolink.extensions import db


class Folder(db.Model):
    __tablename__ = "folders"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    links = db.relationship("Link", back_populates="folder", lazy="dynamic")

    __table_args__ = (
        db.Index("idx_folder_user_position", "user_id", "position"),
    )

    def __init__(self, user_id: str, name: str, position: int = 0):
        self.user_id = user_id
        self.name = name.strip()
        self.position = position

    @property
    def link_count(self) -> int:
        return self.links.count()

    def to_dict(self, include_counts: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_counts:
            data["link_count"] = self.link_count

        return data

    def __repr__(self) -> str:
        return f"<Folder {self.name}>"
