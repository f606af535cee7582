# server/biolink/services/metadata_service.py

import json
import logging
import re
from collections import namedtuple
from html import unescape
from typing import Dict, Iterable, List, Optional
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup
from flask import current_app, has_app_context

from biolink.services.redis_service import RedisService
from biolink.utils.helpers import clean_dict, hash_string, safe_get

logger = logging.getLogger(__name__)

FIELDS = ("title", "artist", "artwork_url")

# fetch(url) -> partial metadata dict, or None when the provider has nothing
Provider = namedtuple("Provider", ["name", "fields", "fetch"])

SPOTIFY_ARTISTS_RE = re.compile(r'"artists":\[\{"name":"([^"]+)"')
SPOTIFY_ARTIST_RE = re.compile(r'"artist":"([^"]+)"')
PLATFORM_SUFFIX_RE = re.compile(r"\s*[|\-—]\s*(spotify|deezer|apple\s*music).*$", re.IGNORECASE)
APPLE_ARTIST_RES = [
    re.compile(r"—\s*(?:music|album|playlist)\s*by\s*([^|—]+)", re.IGNORECASE),
    re.compile(r"—\s*(?:música|álbum|playlist|musique)\s*de\s*([^|—]+)", re.IGNORECASE),
    re.compile(r"—\s*musik\s*von\s*([^|—]+)", re.IGNORECASE),
]
APPLE_TITLE_SUFFIX_RE = re.compile(
    r"\s*—\s*(?:music|album|playlist|música|álbum|musique|musik)\s*(?:by|de|von)\b.*$",
    re.IGNORECASE,
)
ARTWORK_SIZE_RE = re.compile(r"/\d{2,4}x\d{2,4}(?=[a-z]*\.\w+$)")
PERSON_ARTIST_RE = re.compile(r'"(?:artist|byArtist)":\s*\{\s*"@type":\s*"Person",\s*"name":\s*"([^"]+)"')
UPLOADER_RE = re.compile(r'"uploader":\s*"([^"]+)"')
YOUTUBE_MUSIC_SUFFIX_RE = re.compile(r"\s*[|\-]\s*YouTube Music\s*$", re.IGNORECASE)
TOPIC_SUFFIX_RE = re.compile(r"\s*-\s*Topic$")
TIDAL_SUFFIX_RE = re.compile(r"\s*(?:[|\-—]\s*|\bon\s+)TIDAL\s*$", re.IGNORECASE)
TIDAL_ARTIST_RES = [
    re.compile(r"\bby\s+(.+?)\s+(?:on\s+|[—|\-]\s*)TIDAL", re.IGNORECASE),
    re.compile(r"\bby\s+([^|—]+?)\s*(?:\||$)", re.IGNORECASE),
    re.compile(r"—\s*([^—]+?)\s+(?:—\s*|on\s+)TIDAL", re.IGNORECASE),
]
TIDAL_TITLE_SPLIT_RE = re.compile(r"\s+(?:by|—)\s+", re.IGNORECASE)
AMAZON_SUFFIX_RE = re.compile(r"\s*(?:[|\-—:]\s*|\bon\s+)Amazon(?:\.\w+)?(?:\s+Music)?.*$", re.IGNORECASE)
AMAZON_RELEASE_WORD_RE = re.compile(r"\b(?:track|song|single|ep|album)\b", re.IGNORECASE)
AMAZON_OEMBED_ENDPOINTS = (
    "https://noembed.com/embed",
    "https://publish.twitter.com/oembed",
    "https://www.facebook.com/plugins/post/oembed.json/",
)


def _clean(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.replace("\\u0026", "&").strip()
    return value or None


def _metadata(title=None, artist=None, artwork_url=None) -> Optional[dict]:
    data = clean_dict({
        "title": _clean(title),
        "artist": _clean(artist),
        "artwork_url": _clean(artwork_url),
    })
    return data or None


class MetadataService:

    REQUEST_TIMEOUT = 8
    MAX_CONTENT_LENGTH = 1024 * 1024
    USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
    )

    # -- HTTP plumbing --------------------------------------------------

    @staticmethod
    def _timeout() -> float:
        if has_app_context():
            return current_app.config.get("METADATA_REQUEST_TIMEOUT", MetadataService.REQUEST_TIMEOUT)
        return MetadataService.REQUEST_TIMEOUT

    @staticmethod
    def _get_json(endpoint: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> Optional[dict]:
        response = requests.get(
            endpoint,
            params=params,
            timeout=MetadataService._timeout(),
            headers=dict({"Accept": "application/json"}, **(headers or {})),
        )
        if not response.ok:
            logger.debug(f"{endpoint} responded {response.status_code}")
            return None
        data = response.json()
        return data if isinstance(data, dict) else None

    @staticmethod
    def _get_html(url: str, headers: Optional[dict] = None) -> Optional[str]:
        response = requests.get(
            url,
            timeout=MetadataService._timeout(),
            headers=dict({
                "User-Agent": MetadataService.USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,*/*",
                "Accept-Language": "en-US,en;q=0.9",
            }, **(headers or {})),
            allow_redirects=True,
        )
        if not response.ok:
            logger.debug(f"{url} responded {response.status_code}")
            return None
        return response.text[:MetadataService.MAX_CONTENT_LENGTH]

    @staticmethod
    def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
        tag = soup.find("meta", attrs=attrs)
        return _clean(tag.get("content")) if tag else None

    @staticmethod
    def _title_text(soup: BeautifulSoup) -> Optional[str]:
        tag = soup.find("title")
        return _clean(tag.get_text()) if tag else None

    @staticmethod
    def _ld_json(soup: BeautifulSoup) -> dict:
        tag = soup.find("script", attrs={"type": "application/ld+json"})
        if not tag or not tag.string:
            return {}
        try:
            data = json.loads(tag.string)
        except ValueError:
            return {}
        if isinstance(data, list):
            data = data[0] if data else {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _page_artist(soup: BeautifulSoup, html: str) -> Optional[str]:
        """Artist from musician meta tags or structured data."""
        artist = (
            MetadataService._meta_content(soup, property="music:musician")
            or MetadataService._meta_content(soup, name="music:musician")
        )
        if artist:
            return artist

        ld = MetadataService._ld_json(soup)
        for key in ("byArtist", "author"):
            value = ld.get(key)
            if isinstance(value, list):
                value = value[0] if value else None
            if isinstance(value, dict):
                value = value.get("name")
            if _clean(value):
                return _clean(value)

        match = PERSON_ARTIST_RE.search(html)
        return _clean(match.group(1)) if match else None

    @staticmethod
    def _oembed_result(data: Optional[dict]) -> Optional[dict]:
        if not data or data.get("error"):
            return None
        title, author = data.get("title"), data.get("author_name")
        if not (title or author):
            return None
        return _metadata(
            unescape(title) if isinstance(title, str) else None,
            unescape(author) if isinstance(author, str) else None,
            data.get("thumbnail_url"),
        )

    # -- Spotify --------------------------------------------------------

    @staticmethod
    def spotify_oembed(url: str) -> Optional[dict]:
        data = MetadataService._get_json("https://open.spotify.com/oembed", {"url": url})
        if not data:
            return None
        return _metadata(data.get("title"), data.get("author_name"), data.get("thumbnail_url"))

    @staticmethod
    def spotify_embed_artist(url: str) -> Optional[dict]:
        embed_url = url.replace("open.spotify.com/", "open.spotify.com/embed/", 1)
        html = MetadataService._get_html(embed_url)
        if not html:
            return None

        for pattern in (SPOTIFY_ARTISTS_RE, SPOTIFY_ARTIST_RE):
            match = pattern.search(html)
            if match:
                return _metadata(artist=match.group(1))

        soup = BeautifulSoup(html, "html.parser")

        title_text = MetadataService._title_text(soup)
        if title_text:
            by_index = title_text.lower().find(" by ")
            if by_index != -1:
                artist = PLATFORM_SUFFIX_RE.sub("", title_text[by_index + 4:])
                if _clean(artist):
                    return _metadata(artist=artist)

        return _metadata(artist=MetadataService._meta_content(soup, name="music:musician"))

    # -- Deezer ---------------------------------------------------------

    @staticmethod
    def deezer_oembed(url: str) -> Optional[dict]:
        data = MetadataService._get_json("https://api.deezer.com/oembed", {"format": "json", "url": url})
        if not data or not (data.get("title") or data.get("author_name")):
            return None
        return _metadata(
            data.get("title"),
            data.get("author_name"),
            data.get("thumbnail") or data.get("thumbnail_url"),
        )

    @staticmethod
    def deezer_page(url: str) -> Optional[dict]:
        if "link.deezer.com" not in url:
            return None

        html = MetadataService._get_html(url)
        if not html:
            return None

        soup = BeautifulSoup(html, "html.parser")
        artwork = MetadataService._meta_content(soup, property="og:image")

        if not artwork:
            image = MetadataService._ld_json(soup).get("image")
            artwork = image[0] if isinstance(image, list) and image else image

        title, artist = None, None
        page_title = MetadataService._title_text(soup)
        if page_title:
            page_title = PLATFORM_SUFFIX_RE.sub("", page_title)
            if " by " in page_title:
                title, artist = page_title.split(" by ", 1)
            elif " - " in page_title:
                title, artist = page_title.split(" - ", 1)
            else:
                title = page_title

        return _metadata(title, artist, artwork)

    # -- Apple Music ----------------------------------------------------

    @staticmethod
    def itunes_lookup(url: str) -> Optional[dict]:
        data = MetadataService._get_json("https://itunes.apple.com/lookup", {"url": url})
        item = safe_get(data or {}, "results", 0)
        if not isinstance(item, dict):
            return None

        title = item.get("trackName") or item.get("collectionName") or item.get("playlistName")
        artwork = item.get("artworkUrl100") or item.get("artworkUrl60") or item.get("artworkUrl512")
        if isinstance(artwork, str):
            artwork = ARTWORK_SIZE_RE.sub("/600x600", artwork)

        return _metadata(title, item.get("artistName"), artwork)

    @staticmethod
    def apple_page(url: str) -> Optional[dict]:
        html = MetadataService._get_html(url)
        if not html:
            return None

        soup = BeautifulSoup(html, "html.parser")
        page_title = MetadataService._title_text(soup) or ""

        artist = None
        for pattern in APPLE_ARTIST_RES:
            match = pattern.search(page_title)
            if match:
                artist = match.group(1)
                break

        title = MetadataService._meta_content(soup, property="og:title") or page_title
        title = PLATFORM_SUFFIX_RE.sub("", APPLE_TITLE_SUFFIX_RE.sub("", title))

        return _metadata(title, artist, MetadataService._meta_content(soup, property="og:image"))

    # -- YouTube Music --------------------------------------------------

    @staticmethod
    def youtube_music_page(url: str) -> Optional[dict]:
        html = MetadataService._get_html(url)
        if not html:
            return None

        soup = BeautifulSoup(html, "html.parser")

        title = YOUTUBE_MUSIC_SUFFIX_RE.sub("", MetadataService._title_text(soup) or "")
        if not _clean(title) or title.strip().lower() == "youtube music":
            heading = soup.find("h1")
            title = (
                MetadataService._ld_json(soup).get("name")
                or MetadataService._meta_content(soup, property="og:title")
                or (heading.get_text() if heading else None)
            )

        artist = MetadataService._page_artist(soup, html)
        if not artist and isinstance(title, str) and " - " in title:
            title, artist = title.rsplit(" - ", 1)
        if not artist:
            match = UPLOADER_RE.search(html)
            artist = match.group(1) if match else None

        return _metadata(title, artist, MetadataService._meta_content(soup, property="og:image"))

    @staticmethod
    def youtube_oembed(url: str) -> Optional[dict]:
        video_id = parse_qs(urlparse(url).query).get("v", [None])[0]
        if not video_id:
            return None

        data = MetadataService._get_json("https://www.youtube.com/oembed", {
            "url": f"https://www.youtube.com/watch?v={video_id}",
            "format": "json",
        })
        if not data:
            return None

        author = data.get("author_name")
        if isinstance(author, str):
            author = TOPIC_SUFFIX_RE.sub("", author)
        return _metadata(data.get("title"), author, data.get("thumbnail_url"))

    # -- Tidal ----------------------------------------------------------

    @staticmethod
    def tidal_page(url: str) -> Optional[dict]:
        html = MetadataService._get_html(url)
        if not html:
            return None

        soup = BeautifulSoup(html, "html.parser")
        page_title = MetadataService._title_text(soup) or ""

        artist = None
        for pattern in TIDAL_ARTIST_RES:
            match = pattern.search(page_title)
            if match:
                artist = match.group(1)
                break
        artist = _clean(artist) or MetadataService._page_artist(soup, html)

        title = MetadataService._meta_content(soup, property="og:title") or page_title
        title = TIDAL_TITLE_SPLIT_RE.split(TIDAL_SUFFIX_RE.sub("", title), maxsplit=1)[0]

        return _metadata(title, artist, MetadataService._meta_content(soup, property="og:image"))

    # -- Amazon Music ---------------------------------------------------

    AMAZON_PAGE_HEADERS = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Cache-Control": "no-cache",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Upgrade-Insecure-Requests": "1",
    }

    @staticmethod
    def amazon_oembed(url: str) -> Optional[dict]:
        for endpoint in AMAZON_OEMBED_ENDPOINTS:
            try:
                result = MetadataService._oembed_result(MetadataService._get_json(endpoint, {"url": url}))
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.debug(f"{endpoint} failed for {url}: {e}")
                continue
            if result:
                return result
        return None

    @staticmethod
    def _split_title_artist(text: str):
        if " by " in text:
            title, artist = text.split(" by ", 1)
            return title, artist

        if " - " not in text:
            return text, None

        first, second = text.split(" - ", 1)
        # "Artist - Release" when the second half names the release kind or is the shorter one
        if AMAZON_RELEASE_WORD_RE.search(second) or len(first) > len(second):
            return second, first
        return first, second

    @staticmethod
    def amazon_page(url: str) -> Optional[dict]:
        html = MetadataService._get_html(url, headers=MetadataService.AMAZON_PAGE_HEADERS)
        if not html:
            return None

        soup = BeautifulSoup(html, "html.parser")
        page_title = MetadataService._title_text(soup) or MetadataService._meta_content(soup, property="og:title")
        title, artist = MetadataService._split_title_artist(AMAZON_SUFFIX_RE.sub("", page_title or ""))
        artist = _clean(artist) or MetadataService._page_artist(soup, html)

        title, artist = _clean(title), _clean(artist)
        if not title or not artist:
            return None
        if title.lower() == "amazon music" or artist.lower() == "unknown artist":
            return None

        return _metadata(title, artist, MetadataService._meta_content(soup, property="og:image"))

    # -- Everything else ------------------------------------------------

    @staticmethod
    def noembed(url: str) -> Optional[dict]:
        return MetadataService._oembed_result(MetadataService._get_json("https://noembed.com/embed", {"url": url}))

    # -- Chains ---------------------------------------------------------

    @staticmethod
    def chain_for(url: str) -> List[Provider]:
        lowered = (url or "").lower()

        if "spotify.com" in lowered:
            return [
                Provider("spotify_oembed", FIELDS, MetadataService.spotify_oembed),
                Provider("spotify_embed", ("artist",), MetadataService.spotify_embed_artist),
            ]

        if "deezer.com" in lowered:
            return [
                Provider("deezer_oembed", FIELDS, MetadataService.deezer_oembed),
                Provider("deezer_page", FIELDS, MetadataService.deezer_page),
            ]

        if "music.apple.com" in lowered:
            return [
                Provider("itunes_lookup", FIELDS, MetadataService.itunes_lookup),
                Provider("apple_page", FIELDS, MetadataService.apple_page),
            ]

        if "music.youtube.com" in lowered:
            return [
                Provider("youtube_music_page", FIELDS, MetadataService.youtube_music_page),
                Provider("youtube_oembed", FIELDS, MetadataService.youtube_oembed),
            ]

        if "tidal.com" in lowered:
            return [
                Provider("noembed", FIELDS, MetadataService.noembed),
                Provider("tidal_page", FIELDS, MetadataService.tidal_page),
            ]

        if "amazon." in lowered:
            return [
                Provider("amazon_oembed", FIELDS, MetadataService.amazon_oembed),
                Provider("amazon_page", FIELDS, MetadataService.amazon_page),
            ]

        return [Provider("noembed", FIELDS, MetadataService.noembed)]

    @staticmethod
    def _call(provider: Provider, url: str) -> Optional[dict]:
        try:
            result = provider.fetch(url)
        except requests.exceptions.Timeout:
            logger.warning(f"Metadata provider {provider.name} timed out for {url}")
            return None
        except requests.exceptions.RequestException as e:
            logger.warning(f"Metadata provider {provider.name} failed for {url}: {e}")
            return None
        except Exception as e:
            logger.error(f"Metadata provider {provider.name} parsing error for {url}: {e}")
            return None

        return result if isinstance(result, dict) else None

    @staticmethod
    def run_chain(providers: Iterable[Provider], url: str, seed: Optional[dict] = None) -> dict:
        result = dict(seed or {})

        for provider in providers:
            missing = [f for f in provider.fields if not result.get(f)]
            if not missing:
                continue

            found = MetadataService._call(provider, url)
            if not found:
                continue

            for field in missing:
                if found.get(field):
                    result[field] = found[field]

            if all(result.get(f) for f in FIELDS):
                break

        return result

    @staticmethod
    def resolve_metadata(url: str, overrides: Optional[Dict[str, str]] = None, refresh: bool = False) -> dict:
        overrides = {
            f: _clean(v) for f, v in (overrides or {}).items() if f in FIELDS and _clean(v)
        }

        if not url or all(overrides.get(f) for f in FIELDS):
            return overrides

        url = url.strip()
        url_hash = hash_string(url, "md5")
        cache = None

        try:
            cache = RedisService()
            if refresh:
                cache.invalidate_metadata(url_hash)
            else:
                cached = cache.get_cached_metadata(url_hash)
                if cached:
                    return dict(cached, **overrides)
        except Exception as e:
            logger.debug(f"Metadata cache unavailable: {e}")
            cache = None

        result = MetadataService.run_chain(MetadataService.chain_for(url), url, overrides)

        if not result:
            logger.info(f"No metadata available for {url}")

        fetched = {f: v for f, v in result.items() if f not in overrides}
        if cache and fetched and not overrides:
            cache.cache_metadata(url_hash, fetched)

        return result

    @staticmethod
    def fill_music_link(item: dict) -> dict:
        """Fill blank track/artist/artwork fields of a music link payload."""
        resolved = MetadataService.resolve_metadata(item.get("url"), {
            "title": item.get("track_title"),
            "artist": item.get("artist_name"),
            "artwork_url": item.get("album_art_url"),
        })
        return dict(
            item,
            track_title=resolved.get("title"),
            artist_name=resolved.get("artist"),
            album_art_url=resolved.get("artwork_url"),
        )
