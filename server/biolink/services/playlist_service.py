# server/biolink/services/playlist_service.py

import logging
import re
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup
from flask import current_app

from biolink.errors import ValidationError
from biolink.models.preview import PlaylistPreview, PlaylistTrack
from biolink.services.metadata_service import (
    APPLE_TITLE_SUFFIX_RE,
    PLATFORM_SUFFIX_RE,
    MetadataService,
)
from biolink.utils.helpers import safe_get
from biolink.utils.platforms import platform_for_url

logger = logging.getLogger(__name__)

TRACK_COUNT_RE = re.compile(r"(\d+)\s*(?:songs?|tracks?|músicas?|faixas?|titres?)\b", re.IGNORECASE)
YOUTUBE_TRACK_COUNT_RE = re.compile(r'"(?:trackCount|numVideos|videoCount)":\s*"?(\d+)')
CHANNEL_NAME_RE = re.compile(r'"channelName":\s*"([^"]+)"')
APPLE_PLAYLIST_ID_RE = re.compile(r"/(pl\.[\w-]+)")
APPLE_PLAYLIST_BY_RE = re.compile(r"\s*(?:[|\-—]\s*)?playlist\s+(?:by|de|von)\b.*$", re.IGNORECASE)
PAGE_BRANDING_RE = re.compile(
    r"\s*(?:[|\-—]\s*|\bon\s+)(?:TIDAL|Amazon(?:\s+Music)?|Deezer|YouTube\s+Music)\b.*$",
    re.IGNORECASE,
)


def _path_segments(url: str) -> List[str]:
    return [s for s in urlparse(url).path.split("/") if s]


def _duration(ms) -> Optional[str]:
    if not isinstance(ms, int) or ms < 0:
        return None
    minutes, seconds = divmod(ms // 1000, 60)
    return f"{minutes}:{seconds:02d}"


class PlaylistService:

    SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
    SPOTIFY_API_URL = "https://api.spotify.com/v1"
    YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"

    @staticmethod
    def _fetch(fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Playlist fetch {fn.__name__} failed: {e}")
            return None

    @staticmethod
    def _page(url: str, headers: Optional[dict] = None) -> Optional[BeautifulSoup]:
        html = PlaylistService._fetch(MetadataService._get_html, url, headers=headers)
        return BeautifulSoup(html, "html.parser") if html else None

    @staticmethod
    def _track_count(soup: BeautifulSoup) -> Optional[int]:
        ld = MetadataService._ld_json(soup)
        for key in ("numTracks", "trackCount", "numberOfItems"):
            value = ld.get(key)
            if isinstance(value, int):
                return value
            if isinstance(value, str) and value.isdigit():
                return int(value)

        match = TRACK_COUNT_RE.search(soup.get_text(" "))
        return int(match.group(1)) if match else None

    # -- Spotify --------------------------------------------------------

    @staticmethod
    def _spotify_token() -> Optional[str]:
        client_id = current_app.config.get("SPOTIFY_CLIENT_ID")
        client_secret = current_app.config.get("SPOTIFY_CLIENT_SECRET")
        if not (client_id and client_secret):
            return None

        response = requests.post(
            PlaylistService.SPOTIFY_TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(client_id, client_secret),
            timeout=MetadataService._timeout(),
        )
        if not response.ok:
            logger.warning(f"Spotify token request responded {response.status_code}")
            return None
        return response.json().get("access_token")

    @staticmethod
    def spotify(url: str) -> Optional[PlaylistPreview]:
        segments = _path_segments(url)
        if "playlist" not in segments or segments.index("playlist") + 1 >= len(segments):
            return None
        playlist_id = segments[segments.index("playlist") + 1]

        token = PlaylistService._fetch(PlaylistService._spotify_token)
        if token:
            data = PlaylistService._fetch(
                MetadataService._get_json,
                f"{PlaylistService.SPOTIFY_API_URL}/playlists/{playlist_id}",
                headers={"Authorization": f"Bearer {token}"},
            )
            if data and data.get("name"):
                return PlaylistService._spotify_preview(url, playlist_id, data)

        # without API credentials only the title and cover are available
        data = PlaylistService._fetch(MetadataService._get_json, "https://open.spotify.com/oembed", {"url": url})
        if not data or not data.get("title"):
            return None
        return PlaylistPreview(
            platform="spotify",
            url=url,
            playlist_id=playlist_id,
            title=data["title"],
            thumbnail_url=data.get("thumbnail_url"),
        )

    @staticmethod
    def _spotify_preview(url: str, playlist_id: str, data: dict) -> PlaylistPreview:
        limit = current_app.config.get("PLAYLIST_PREVIEW_TRACKS", 10)

        tracks = []
        for item in safe_get(data, "tracks", "items") or []:
            track = item.get("track") if isinstance(item, dict) else None
            if not isinstance(track, dict) or not track.get("name"):
                continue
            tracks.append(PlaylistTrack(
                name=track["name"],
                artist=safe_get(track, "artists", 0, "name") or "",
                duration=_duration(track.get("duration_ms")),
                preview_url=track.get("preview_url"),
            ))
            if len(tracks) >= limit:
                break

        return PlaylistPreview(
            platform="spotify",
            url=url,
            playlist_id=playlist_id,
            title=data["name"],
            description=data.get("description") or None,
            thumbnail_url=safe_get(data, "images", 0, "url"),
            track_count=safe_get(data, "tracks", "total"),
            owner_name=safe_get(data, "owner", "display_name"),
            tracks=tracks,
        )

    # -- Apple Music ----------------------------------------------------

    @staticmethod
    def apple_music(url: str) -> Optional[PlaylistPreview]:
        match = APPLE_PLAYLIST_ID_RE.search(url)
        if not match:
            return None

        segments = _path_segments(url)
        headers = {"Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8"} if segments[:1] == ["br"] else None
        soup = PlaylistService._page(url, headers=headers)
        if soup is None:
            return None

        title = MetadataService._meta_content(soup, property="og:title") or MetadataService._title_text(soup) or ""
        title = PLATFORM_SUFFIX_RE.sub("", APPLE_TITLE_SUFFIX_RE.sub("", APPLE_PLAYLIST_BY_RE.sub("", title)))

        return PlaylistPreview(
            platform="apple_music",
            url=url,
            playlist_id=match.group(1),
            title=title.strip(),
            description=MetadataService._meta_content(soup, property="og:description"),
            thumbnail_url=MetadataService._meta_content(soup, property="og:image"),
            track_count=PlaylistService._track_count(soup),
            owner_name="Apple Music",
        )

    # -- YouTube Music --------------------------------------------------

    @staticmethod
    def youtube_music(url: str) -> Optional[PlaylistPreview]:
        playlist_id = (parse_qs(urlparse(url).query).get("list") or [None])[0]
        if not playlist_id:
            return None

        data = PlaylistService._fetch(MetadataService._get_json, PlaylistService.YOUTUBE_OEMBED_URL, {
            "url": f"https://www.youtube.com/playlist?list={playlist_id}",
            "format": "json",
        }) or {}

        html = PlaylistService._fetch(MetadataService._get_html, url)
        soup = BeautifulSoup(html or "", "html.parser")
        if not data and not html:
            return None

        title = data.get("title") or MetadataService._meta_content(soup, property="og:title") or ""
        channel = CHANNEL_NAME_RE.search(html or "")
        count = YOUTUBE_TRACK_COUNT_RE.search(html or "")

        return PlaylistPreview(
            platform="youtube_music",
            url=url,
            playlist_id=playlist_id,
            title=PAGE_BRANDING_RE.sub("", title).strip(),
            description=MetadataService._meta_content(soup, property="og:description"),
            thumbnail_url=data.get("thumbnail_url") or MetadataService._meta_content(soup, property="og:image"),
            track_count=int(count.group(1)) if count else PlaylistService._track_count(soup),
            owner_name=(
                data.get("author_name")
                or (channel.group(1) if channel else None)
                or MetadataService._meta_content(soup, name="author")
            ),
        )

    # -- Tidal, Amazon Music, Deezer ------------------------------------

    @staticmethod
    def page_preview(platform, url: str) -> Optional[PlaylistPreview]:
        segments = _path_segments(url)
        soup = PlaylistService._page(url)
        if soup is None or not segments:
            return None

        title = MetadataService._meta_content(soup, property="og:title") or MetadataService._title_text(soup) or ""

        return PlaylistPreview(
            platform=platform.key,
            url=url,
            playlist_id=segments[-1],
            title=PAGE_BRANDING_RE.sub("", title).strip(),
            description=MetadataService._meta_content(soup, property="og:description"),
            thumbnail_url=MetadataService._meta_content(soup, property="og:image"),
            track_count=PlaylistService._track_count(soup),
            owner_name=platform.name,
        )

    @staticmethod
    def build_preview(url: str) -> PlaylistPreview:
        url = (url or "").strip()
        platform = platform_for_url(url)
        if platform is None:
            raise ValidationError("Unsupported playlist platform", code="UNSUPPORTED_PLAYLIST")

        builders = {
            "spotify": PlaylistService.spotify,
            "apple_music": PlaylistService.apple_music,
            "youtube_music": PlaylistService.youtube_music,
        }
        builder = builders.get(platform.key)
        if builder is not None:
            preview = builder(url)
        else:
            preview = PlaylistService.page_preview(platform, url)

        if preview is None:
            raise ValidationError(
                f"Could not load this {platform.name} playlist",
                code="PLAYLIST_UNAVAILABLE",
                details={"platform": platform.key},
            )

        if not preview.title:
            preview.title = f"{platform.name} Playlist"

        logger.info(f"Playlist preview built for {platform.key}:{preview.playlist_id}")
        return preview
