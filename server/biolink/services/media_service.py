# server/biolink/services/media_service.py

import logging
import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

import requests

from biolink.errors import ValidationError
from biolink.models.preview import MediaPreview
from biolink.services.metadata_service import MetadataService

logger = logging.getLogger(__name__)

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com", "youtu.be")


def extract_youtube_video_id(url: str) -> Optional[str]:
    if not url:
        return None

    url = url.strip()
    if VIDEO_ID_RE.match(url):
        return url

    try:
        parsed = urlparse(url if "://" in url else f"https://{url}")
    except ValueError:
        return None

    host = (parsed.hostname or "").lower()
    if host not in YOUTUBE_HOSTS:
        return None

    candidate = None
    segments = [s for s in parsed.path.split("/") if s]

    if host == "youtu.be":
        candidate = segments[0] if segments else None
    elif parsed.path == "/watch":
        candidate = (parse_qs(parsed.query).get("v") or [None])[0]
    elif len(segments) >= 2 and segments[0] in ("shorts", "embed", "live", "v"):
        candidate = segments[1]

    if candidate and VIDEO_ID_RE.match(candidate):
        return candidate
    return None


class MediaService:

    OEMBED_URL = "https://www.youtube.com/oembed"

    @staticmethod
    def build_preview(url: str, title: Optional[str] = None) -> MediaPreview:
        video_id = extract_youtube_video_id(url)
        if not video_id:
            raise ValidationError("Could not extract a YouTube video id from this URL", code="INVALID_MEDIA_URL")

        watch_url = f"https://www.youtube.com/watch?v={video_id}"

        try:
            data = MetadataService._get_json(MediaService.OEMBED_URL, {"url": watch_url, "format": "json"})
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"YouTube oEmbed failed for {video_id}: {e}")
            data = None

        data = data or {}
        resolved_title = (title or "").strip() or (data.get("title") or "").strip()
        thumbnail = data.get("thumbnail_url")

        if not resolved_title or not thumbnail:
            raise ValidationError("YouTube did not return enough data for this video", code="MEDIA_UNAVAILABLE")

        return MediaPreview(
            url=watch_url,
            video_id=video_id,
            title=resolved_title,
            thumbnail_url=thumbnail,
        )
