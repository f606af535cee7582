# server/biolink/services/__init__.py

from biolink.services.redis_service import RedisService
from biolink.services.metadata_service import MetadataService
from biolink.services.media_service import MediaService
from biolink.services.playlist_service import PlaylistService
from biolink.services.ordering_service import OrderingService, OrderingResult
from biolink.services.link_service import LinkService
from biolink.services.folder_service import FolderService

__all__ = [
    "RedisService",
    "MetadataService",
    "MediaService",
    "PlaylistService",
    "OrderingService",
    "OrderingResult",
    "LinkService",
    "FolderService",
]
