# server/biolink/models/music_link.py

import uuid
from typing import Optional

from biolink.extensions import db


class MusicLink(db.Model):
    __tablename__ = "music_links"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    link_id = db.Column(db.String(36), db.ForeignKey("links.id", ondelete="CASCADE"), nullable=False, index=True)

    platform = db.Column(db.String(32), nullable=False)
    link_type = db.Column(db.String(16), nullable=False)
    url = db.Column(db.Text, nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)

    track_title = db.Column(db.String(255), nullable=True)
    artist_name = db.Column(db.String(255), nullable=True)
    album_art_url = db.Column(db.String(1024), nullable=True)

    link = db.relationship("Link", back_populates="music_links")

    __table_args__ = (
        db.UniqueConstraint("link_id", "platform", name="uq_music_link_platform"),
    )

    def __init__(
        self,
        platform: str,
        link_type: str,
        url: str,
        position: int = 0,
        track_title: Optional[str] = None,
        artist_name: Optional[str] = None,
        album_art_url: Optional[str] = None,
    ):
        self.platform = platform
        self.link_type = link_type
        self.url = url
        self.position = position
        self.track_title = track_title or None
        self.artist_name = artist_name or None
        self.album_art_url = album_art_url or None

    def to_dict(self) -> dict:
        return {
            "platform": self.platform,
            "type": self.link_type,
            "url": self.url,
            "track_title": self.track_title,
            "artist_name": self.artist_name,
            "album_art_url": self.album_art_url,
        }

    def __repr__(self) -> str:
        return f"<MusicLink {self.platform}:{self.link_type}>"
