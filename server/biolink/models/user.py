# server/biolink/models/user.py

import uuid
from datetime import datetime
from typing import Optional

from biolink.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(30), unique=True, nullable=True, index=True)
    display_name = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    links = db.relationship("Link", backref="owner", lazy="dynamic", cascade="all, delete-orphan")
    folders = db.relationship("Folder", backref="owner", lazy="dynamic", cascade="all, delete-orphan")

    def __init__(self, id: Optional[str] = None, username: Optional[str] = None, display_name: Optional[str] = None):
        if id:
            self.id = id
        self.username = username.strip().lower() if username else None
        self.display_name = display_name

    @classmethod
    def find_by_ref(cls, owner_ref: str) -> Optional["User"]:
        """Resolve a public page reference: a username first, then a raw user id."""
        if not owner_ref:
            return None
        user = cls.query.filter_by(username=owner_ref.strip().lower()).first()
        if user:
            return user
        return db.session.get(cls, owner_ref)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
        }

    def __repr__(self) -> str:
        return f"<User {self.username or self.id[:8]}>"
