# server/biolink/models/__init__.py

from biolink.models.user import User
from biolink.models.folder import Folder
from biolink.models.link import Link
from biolink.models.music_link import MusicLink
from biolink.models.preview import (
    HighlightPreview,
    MediaPreview,
    PlaylistPreview,
    PlaylistTrack,
    PreviewKind,
)

__all__ = [
    "User",
    "Folder",
    "Link",
    "MusicLink",
    "PreviewKind",
    "MediaPreview",
    "PlaylistPreview",
    "PlaylistTrack",
    "HighlightPreview",
]
