# server/biolink/routes/__init__.py

from biolink.routes.links import links_bp
from biolink.routes.folders import folders_bp
from biolink.routes.music import music_bp
from biolink.routes.media import media_bp
from biolink.routes.playlist import playlist_bp
from biolink.routes.public import public_bp

__all__ = [
    "links_bp",
    "folders_bp",
    "music_bp",
    "media_bp",
    "playlist_bp",
    "public_bp",
]
