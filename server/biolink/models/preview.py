# server/biolink/models/preview.py
"""
Card previews a link can carry. A link holds at most one of them, stored as
a (kind, data) pair on the links table.
"""

import enum
from dataclasses import asdict, dataclass, field
from typing import List, Optional, Union

from biolink.errors import ValidationError


class PreviewKind(enum.Enum):
    MEDIA = "media"
    PLAYLIST = "playlist"
    HIGHLIGHT = "highlight"


@dataclass
class MediaPreview:
    url: str
    video_id: str
    title: str
    thumbnail_url: str
    platform: str = "youtube"

    kind = PreviewKind.MEDIA


@dataclass
class PlaylistTrack:
    name: str
    artist: str
    duration: Optional[str] = None
    preview_url: Optional[str] = None


@dataclass
class PlaylistPreview:
    platform: str
    url: str
    playlist_id: str
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    track_count: Optional[int] = None
    owner_name: Optional[str] = None
    tracks: List[PlaylistTrack] = field(default_factory=list)

    kind = PreviewKind.PLAYLIST


@dataclass
class HighlightPreview:
    url: str
    text: str
    image_url: Optional[str] = None

    kind = PreviewKind.HIGHLIGHT


Preview = Union[MediaPreview, PlaylistPreview, HighlightPreview]

_REQUIRED = {
    PreviewKind.MEDIA: ("url", "video_id", "title", "thumbnail_url"),
    PreviewKind.PLAYLIST: ("platform", "url", "playlist_id", "title"),
    PreviewKind.HIGHLIGHT: ("url", "text"),
}


def _require(kind: PreviewKind, data: dict) -> None:
    missing = [name for name in _REQUIRED[kind] if not data.get(name)]
    if missing:
        raise ValidationError(
            f"{kind.value.title()} preview is missing: {', '.join(missing)}",
            details={"missing": missing},
        )


def preview_from_dict(data: Optional[dict]) -> Optional[Preview]:
    if not data:
        return None

    if not isinstance(data, dict):
        raise ValidationError("Preview must be an object")

    try:
        kind = PreviewKind(data.get("kind"))
    except ValueError:
        raise ValidationError("Preview kind must be one of: media, playlist, highlight")

    _require(kind, data)

    if kind == PreviewKind.MEDIA:
        return MediaPreview(
            url=data["url"],
            video_id=data["video_id"],
            title=data["title"],
            thumbnail_url=data["thumbnail_url"],
            platform=data.get("platform") or "youtube",
        )

    if kind == PreviewKind.PLAYLIST:
        tracks = []
        for track in data.get("tracks") or []:
            if not isinstance(track, dict) or not track.get("name"):
                continue
            tracks.append(PlaylistTrack(
                name=track["name"],
                artist=track.get("artist") or "",
                duration=track.get("duration"),
                preview_url=track.get("preview_url"),
            ))
        return PlaylistPreview(
            platform=data["platform"],
            url=data["url"],
            playlist_id=data["playlist_id"],
            title=data["title"],
            description=data.get("description"),
            thumbnail_url=data.get("thumbnail_url"),
            track_count=data.get("track_count"),
            owner_name=data.get("owner_name"),
            tracks=tracks,
        )

    return HighlightPreview(url=data["url"], text=data["text"], image_url=data.get("image_url"))


def preview_to_dict(preview: Optional[Preview]) -> Optional[dict]:
    if preview is None:
        return None
    data = asdict(preview)
    data["kind"] = preview.kind.value
    return data


def preview_link_url(preview: Optional[Preview]) -> Optional[str]:
    """URL a preview contributes as the link's primary URL (highlights contribute none)."""
    if isinstance(preview, (MediaPreview, PlaylistPreview)):
        return preview.url
    return None
