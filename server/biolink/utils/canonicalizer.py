# server/biolink/utils/canonicalizer.py
"""
Turns whatever a user pastes for a music platform (a bare id or a full URL)
into the one canonical URL stored on a music link.

Only Apple Music, Amazon Music and Deezer have special rules; every other
platform is validated as-is against its registered pattern.
"""

import logging
import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from biolink.errors import InvalidLinkFormat
from biolink.utils.platforms import (
    AMAZON_MUSIC,
    APPLE_MUSIC,
    DEEZER,
    REGION_DEFAULTS,
    LinkKind,
    LinkTypeDescriptor,
    PlatformDescriptor,
    get_link_type,
    get_platform,
)

logger = logging.getLogger(__name__)

SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
APPLE_REGION_RE = re.compile(r"^[a-z]{2,3}$")
AMAZON_HOST_RE = re.compile(r"^(?:music|www)\.amazon\.([a-z]{2,3}(?:\.[a-z]{2})?)$")

APPLE_PATH_SEGMENT = {
    LinkKind.TRACK: "song",
    LinkKind.ALBUM: "album",
    LinkKind.PLAYLIST: "playlist",
}


def has_scheme(value: str) -> bool:
    return bool(SCHEME_RE.match(value))


def canonicalize(platform, link_type, raw_input: str) -> str:
    descriptor = platform if isinstance(platform, PlatformDescriptor) else get_platform(platform)
    type_descriptor = get_link_type(descriptor, link_type)

    value = (raw_input or "").strip()
    if not value:
        raise InvalidLinkFormat(descriptor.name, type_descriptor.kind.value, raw_input or "")

    is_full_url = has_scheme(value)
    candidate = value if is_full_url else type_descriptor.base_url + value

    if descriptor is APPLE_MUSIC:
        candidate = _shorten_apple_music(candidate, type_descriptor.kind) or candidate
    elif descriptor is AMAZON_MUSIC:
        candidate = _rebuild_amazon_music(candidate, type_descriptor.kind) or candidate
    elif descriptor is DEEZER and is_full_url:
        # Deezer only exposes the link.deezer.com redirector; nothing to rewrite
        candidate = value

    if not type_descriptor.matches(candidate):
        logger.debug(f"Rejected {descriptor.name} {type_descriptor.kind.value} input: {value[:100]}")
        raise InvalidLinkFormat(descriptor.name, type_descriptor.kind.value, value)

    return candidate


def extract_id(platform, link_type, url: str) -> str:
    """Inverse of id composition: the short id when the URL starts with the type's base URL."""
    type_descriptor = get_link_type(platform, link_type)
    if url and url.startswith(type_descriptor.base_url):
        return url[len(type_descriptor.base_url):]
    return url or ""


def _apple_region(segments: list) -> str:
    if segments and APPLE_REGION_RE.match(segments[0]):
        return segments[0]
    return REGION_DEFAULTS[APPLE_MUSIC.key]


def _last_numeric(segments: list) -> Optional[str]:
    return next((s for s in reversed(segments) if s.isdigit()), None)


def _shorten_apple_music(url: str, kind: LinkKind) -> Optional[str]:
    """Reduce an Apple Music URL to region/type/id; None when the path is not of the requested type."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return None

    if parts.hostname != "music.apple.com":
        return None

    segments = [s for s in parts.path.split("/") if s]
    region = _apple_region(segments)
    query = parse_qs(parts.query)

    rest = segments[1:] if segments and segments[0] == region else segments
    path_type = rest[0] if rest else None
    track_ids = [v for v in query.get("i", []) if v.isdigit()]

    item_id = None
    if kind == LinkKind.TRACK:
        # song links shared from an album page carry the album id in the path
        if path_type == "album" and track_ids:
            item_id = track_ids[0]
        elif path_type == "song":
            item_id = track_ids[0] if track_ids else _last_numeric(rest)
    elif kind == LinkKind.ALBUM and path_type == "album":
        item_id = _last_numeric(rest)
    elif kind == LinkKind.PLAYLIST and path_type == "playlist":
        item_id = next((s for s in reversed(rest) if s.startswith("pl.")), None)

    if not item_id:
        return None

    return f"https://music.apple.com/{region}/{APPLE_PATH_SEGMENT[kind]}/{item_id}"


def _amazon_region(hostname: str) -> str:
    match = AMAZON_HOST_RE.match(hostname or "")
    if match:
        return match.group(1)
    return REGION_DEFAULTS[AMAZON_MUSIC.key]


def _segment_after(segments: list, name: str) -> Optional[str]:
    for index, segment in enumerate(segments[:-1]):
        if segment == name:
            return segments[index + 1]
    return None


def _rebuild_amazon_music(url: str, kind: LinkKind) -> Optional[str]:
    try:
        parts = urlsplit(url)
    except ValueError:
        return None

    if not parts.hostname or "amazon." not in parts.hostname:
        return None

    region = _amazon_region(parts.hostname)
    segments = [s for s in parts.path.split("/") if s]
    base = f"https://music.amazon.{region}"

    if kind == LinkKind.TRACK:
        album_id = _segment_after(segments, "albums")
        track_asin = parse_qs(parts.query).get("trackAsin", [None])[0]
        if not album_id or not track_asin:
            return None
        return f"{base}/albums/{album_id}?trackAsin={track_asin}"

    section = "albums" if kind == LinkKind.ALBUM else "playlists"
    item_id = _segment_after(segments, section)
    if not item_id:
        return None
    return f"{base}/{section}/{item_id}"
