# server/biolink/utils/platforms.py

import enum
import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple

from biolink.errors import UnsupportedPlatform


class LinkKind(enum.Enum):
    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"


@dataclass(frozen=True)
class LinkTypeDescriptor:
    kind: LinkKind
    url_pattern: Pattern
    base_url: str
    sample_id: str

    def matches(self, url: str) -> bool:
        return bool(url) and self.url_pattern.match(url) is not None

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "base_url": self.base_url,
            "placeholder": self.sample_id,
        }


@dataclass(frozen=True)
class PlatformDescriptor:
    key: str
    name: str
    domains: Tuple[str, ...]
    link_types: Tuple[LinkTypeDescriptor, ...]

    def link_type(self, kind: LinkKind) -> Optional[LinkTypeDescriptor]:
        for descriptor in self.link_types:
            if descriptor.kind == kind:
                return descriptor
        return None

    @property
    def kinds(self) -> Tuple[LinkKind, ...]:
        return tuple(d.kind for d in self.link_types)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "link_types": [d.to_dict() for d in self.link_types],
        }


def _lt(kind: LinkKind, pattern: str, base_url: str, sample_id: str) -> LinkTypeDescriptor:
    return LinkTypeDescriptor(kind, re.compile(pattern), base_url, sample_id)


AMAZON_REGION = r"[a-z]{2,3}(?:\.[a-z]{2})?"

SPOTIFY = PlatformDescriptor(
    key="spotify",
    name="Spotify",
    domains=("open.spotify.com", "spotify.com"),
    link_types=(
        _lt(LinkKind.TRACK, r"^https?://open\.spotify\.com/track/[a-zA-Z0-9]+(?=\?|$)",
            "https://open.spotify.com/track/", "3Fuqn0M6R7z8hBvB22K1jR"),
        _lt(LinkKind.ALBUM, r"^https?://open\.spotify\.com/album/[a-zA-Z0-9]+(?=\?|$)",
            "https://open.spotify.com/album/", "4aawyAB9vmqN3uQ7FjRGTy"),
        _lt(LinkKind.PLAYLIST, r"^https?://open\.spotify\.com/playlist/[a-zA-Z0-9]+(?=\?|$)",
            "https://open.spotify.com/playlist/", "37i9dQZF1DXcBWIGoYBM5M"),
    ),
)

APPLE_MUSIC = PlatformDescriptor(
    key="apple_music",
    name="Apple Music",
    domains=("music.apple.com", "itunes.apple.com"),
    link_types=(
        _lt(LinkKind.TRACK, r"^https?://music\.apple\.com/[a-z]{2,3}/song/(?:[^/?#]+/)?\d+(?:\?i=\d+)?$",
            "https://music.apple.com/br/song/", "1440843433"),
        _lt(LinkKind.ALBUM, r"^https?://music\.apple\.com/[a-z]{2,3}/album/(?:[^/?#]+/)?\d+$",
            "https://music.apple.com/br/album/", "1440843428"),
        _lt(LinkKind.PLAYLIST, r"^https?://music\.apple\.com/[a-z]{2,3}/playlist/(?:[^/?#]+/)?pl\.[A-Za-z0-9-]+$",
            "https://music.apple.com/br/playlist/", "pl.u-Ldbq5Zru2d9"),
    ),
)

DEEZER = PlatformDescriptor(
    key="deezer",
    name="Deezer",
    domains=("deezer.com", "deezer.page.link"),
    link_types=tuple(
        _lt(kind, r"^https?://link\.deezer\.com/s/[A-Za-z0-9]+$",
            "https://link.deezer.com/s/", "311Fv9DVZMHdRO7ZALTU0")
        for kind in (LinkKind.TRACK, LinkKind.ALBUM, LinkKind.PLAYLIST)
    ),
)

TIDAL = PlatformDescriptor(
    key="tidal",
    name="Tidal",
    domains=("tidal.com",),
    link_types=(
        _lt(LinkKind.TRACK, r"^https?://(?:www\.)?tidal\.com/track/[A-Za-z0-9]+(?:[/?].*)?$",
            "https://tidal.com/track/", "123456789"),
        _lt(LinkKind.ALBUM, r"^https?://(?:www\.)?tidal\.com/album/[A-Za-z0-9]+(?:[/?].*)?$",
            "https://tidal.com/album/", "987654321"),
        _lt(LinkKind.PLAYLIST, r"^https?://(?:www\.)?tidal\.com/playlist/[A-Za-z0-9-]+(?:[/?].*)?$",
            "https://tidal.com/playlist/", "543219876"),
    ),
)

AMAZON_MUSIC = PlatformDescriptor(
    key="amazon_music",
    name="Amazon Music",
    domains=("music.amazon.", "amazon."),
    link_types=(
        # Amazon addresses tracks through their containing album
        _lt(LinkKind.TRACK,
            rf"^https?://music\.amazon\.{AMAZON_REGION}/albums/[A-Za-z0-9]+\?trackAsin=[A-Za-z0-9]+$",
            "https://music.amazon.com/albums/", "B08Z2Y2G3X?trackAsin=B08Z2XYJ7D"),
        _lt(LinkKind.ALBUM, rf"^https?://music\.amazon\.{AMAZON_REGION}/albums/[A-Za-z0-9]+$",
            "https://music.amazon.com/albums/", "B08Z2Y2G3X"),
        _lt(LinkKind.PLAYLIST, rf"^https?://music\.amazon\.{AMAZON_REGION}/playlists/[A-Za-z0-9]+$",
            "https://music.amazon.com/playlists/", "B07H8QJ2TC"),
    ),
)

YOUTUBE_MUSIC = PlatformDescriptor(
    key="youtube_music",
    name="YouTube Music",
    domains=("music.youtube.com",),
    link_types=(
        _lt(LinkKind.TRACK, r"^https?://music\.youtube\.com/watch\?v=[A-Za-z0-9_-]{11}(?:&.*)?$",
            "https://music.youtube.com/watch?v=", "dQw4w9WgXcQ"),
        _lt(LinkKind.ALBUM, r"^https?://music\.youtube\.com/browse/MPREb_[A-Za-z0-9_-]+$",
            "https://music.youtube.com/browse/", "MPREb_4pL8gzRtw1p"),
        _lt(LinkKind.PLAYLIST, r"^https?://music\.youtube\.com/playlist\?list=[A-Za-z0-9_-]+(?:&.*)?$",
            "https://music.youtube.com/playlist?list=", "PLFgquLnL59alCl_2TQvOiD5Vgm1hCaGSI"),
    ),
)

PLATFORMS: Dict[str, PlatformDescriptor] = {
    p.key: p for p in (SPOTIFY, APPLE_MUSIC, DEEZER, TIDAL, AMAZON_MUSIC, YOUTUBE_MUSIC)
}

REGION_DEFAULTS = {
    APPLE_MUSIC.key: "br",
    AMAZON_MUSIC.key: "com",
}

# YouTube Music must be tested before anything that could match a bare domain
_URL_DISPATCH_ORDER = (YOUTUBE_MUSIC, SPOTIFY, APPLE_MUSIC, DEEZER, TIDAL, AMAZON_MUSIC)


def get_platform(name_or_key: str) -> PlatformDescriptor:
    if not name_or_key:
        raise UnsupportedPlatform(str(name_or_key))

    wanted = name_or_key.strip().lower()
    platform = PLATFORMS.get(wanted.replace(" ", "_"))
    if platform:
        return platform

    for candidate in PLATFORMS.values():
        if candidate.name.lower() == wanted:
            return candidate

    raise UnsupportedPlatform(name_or_key)


def parse_kind(value) -> Optional[LinkKind]:
    if isinstance(value, LinkKind):
        return value
    try:
        return LinkKind(str(value).strip().lower())
    except ValueError:
        return None


def get_link_type(platform, kind) -> LinkTypeDescriptor:
    descriptor = platform if isinstance(platform, PlatformDescriptor) else get_platform(platform)
    parsed = parse_kind(kind)
    link_type = descriptor.link_type(parsed) if parsed else None
    if link_type is None:
        raise UnsupportedPlatform(descriptor.name, str(getattr(kind, "value", kind)))
    return link_type


def platform_for_url(url: str) -> Optional[PlatformDescriptor]:
    if not url:
        return None
    lowered = url.lower()
    for platform in _URL_DISPATCH_ORDER:
        if any(domain in lowered for domain in platform.domains):
            return platform
    return None


def list_platforms() -> list:
    return [p.to_dict() for p in PLATFORMS.values()]
