# server/biolink/client/editor.py

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from biolink.utils.canonicalizer import canonicalize, extract_id
from biolink.utils.platforms import get_link_type, get_platform

logger = logging.getLogger(__name__)

METADATA_FIELDS = ("title", "artist", "artwork_url")

ResolverFn = Callable[[str, dict], dict]


class EditSession:
    """Tickets for in-flight work started from the music link modal."""

    def __init__(self):
        self._generation = 0
        self._open = False

    def begin(self) -> int:
        self._generation += 1
        self._open = True
        return self._generation

    def dismiss(self) -> None:
        self._generation += 1
        self._open = False

    def is_current(self, ticket: int) -> bool:
        return self._open and ticket == self._generation


@dataclass(frozen=True)
class MusicLinkDraft:
    platform: str
    link_type: str
    url: str
    track_title: Optional[str] = None
    artist_name: Optional[str] = None
    album_art_url: Optional[str] = None

    def to_payload(self) -> dict:
        return {
            "platform": self.platform,
            "type": self.link_type,
            "url": self.url,
            "track_title": self.track_title,
            "artist_name": self.artist_name,
            "album_art_url": self.album_art_url,
        }


class MusicLinksEditor:
    """Draft music links of one link, at most one per platform."""

    def __init__(self, resolver: Optional[ResolverFn] = None, music_links: Optional[List[dict]] = None):
        self.resolver = resolver
        self.session = EditSession()
        self._drafts: Dict[str, MusicLinkDraft] = {}

        for item in music_links or []:
            draft = MusicLinkDraft(
                platform=item["platform"],
                link_type=item.get("type") or item.get("link_type"),
                url=item["url"],
                track_title=item.get("track_title"),
                artist_name=item.get("artist_name"),
                album_art_url=item.get("album_art_url"),
            )
            self._drafts[draft.platform] = draft

    @property
    def drafts(self) -> List[MusicLinkDraft]:
        return list(self._drafts.values())

    @property
    def primary_url(self) -> Optional[str]:
        drafts = self.drafts
        return drafts[0].url if drafts else None

    def open(self) -> int:
        return self.session.begin()

    def input_for(self, platform: str) -> Optional[Tuple[str, str]]:
        """(link_type, input) to prefill the form when an existing draft is reopened."""
        draft = self._drafts.get(get_platform(platform).key)
        if draft is None:
            return None
        return draft.link_type, extract_id(draft.platform, draft.link_type, draft.url)

    def close(self) -> None:
        self.session.dismiss()

    def save(
        self,
        platform: str,
        link_type: str,
        raw_input: str,
        overrides: Optional[dict] = None,
        ticket: Optional[int] = None,
    ) -> Optional[MusicLinkDraft]:
        descriptor = get_platform(platform)
        kind = get_link_type(descriptor, link_type).kind
        url = canonicalize(descriptor, kind, raw_input)

        if ticket is None:
            ticket = self.session.begin()

        known = {f: v.strip() for f, v in (overrides or {}).items()
                 if f in METADATA_FIELDS and isinstance(v, str) and v.strip()}

        metadata = dict(known)
        if self.resolver and not all(known.get(f) for f in METADATA_FIELDS):
            resolved = self.resolver(url, known) or {}
            for f in METADATA_FIELDS:
                if not metadata.get(f) and resolved.get(f):
                    metadata[f] = resolved[f]

        if not self.session.is_current(ticket):
            logger.info(f"Dropping stale {descriptor.name} metadata for {url}")
            return None

        draft = MusicLinkDraft(
            platform=descriptor.key,
            link_type=kind.value,
            url=url,
            track_title=metadata.get("title"),
            artist_name=metadata.get("artist"),
            album_art_url=metadata.get("artwork_url"),
        )

        # re-saving a platform replaces its draft in place
        self._drafts[descriptor.key] = draft
        return draft

    def remove(self, platform: str) -> bool:
        return self._drafts.pop(get_platform(platform).key, None) is not None

    def to_payload(self) -> List[dict]:
        return [d.to_payload() for d in self._drafts.values()]
