# server/biolink/services/link_service.py

import logging
from typing import List, Optional

from flask import current_app

from biolink.errors import NotFound, Unauthorized, ValidationError
from biolink.extensions import db
from biolink.models.folder import Folder
from biolink.models.link import Link
from biolink.models.music_link import MusicLink
from biolink.models.preview import Preview, preview_from_dict, preview_link_url
from biolink.models.user import User
from biolink.services.metadata_service import MetadataService
from biolink.services.ordering_service import ALL, TOP_LEVEL, OrderingService
from biolink.utils.canonicalizer import canonicalize
from biolink.utils.platforms import get_link_type, get_platform
from biolink.utils.validators import InputValidator, URLValidator
from biolink.utils.visibility import filter_visible

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET = _Unset()


class LinkService:

    @staticmethod
    def ensure_user(user_id: str) -> User:
        user = db.session.get(User, user_id)
        if user is None:
            user = User(id=user_id)
            db.session.add(user)
            db.session.flush()
            logger.info(f"Provisioned user {user_id}")
        return user

    @staticmethod
    def get_link(user_id: str, link_id: str) -> Link:
        link = db.session.get(Link, link_id)
        if link is None:
            raise NotFound("Link not found")
        if link.user_id != user_id:
            raise Unauthorized()
        return link

    @staticmethod
    def _check_folder(user_id: str, folder_id: Optional[str]) -> None:
        if not folder_id:
            return
        folder = db.session.get(Folder, folder_id)
        if folder is None:
            raise NotFound("Folder not found", code="FOLDER_NOT_FOUND")
        if folder.user_id != user_id:
            raise Unauthorized()

    @staticmethod
    def build_music_links(items: Optional[List[dict]], fetch_metadata: bool = True) -> List[MusicLink]:
        if not items:
            return []

        if not isinstance(items, list):
            raise ValidationError("music_links must be a list")

        max_links = current_app.config.get("MAX_MUSIC_LINKS", 6)
        if len(items) > max_links:
            raise ValidationError(f"A link can carry at most {max_links} music links", code="TOO_MANY_MUSIC_LINKS")

        music_links = []
        seen_platforms = set()

        for position, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValidationError("Each music link must be an object")

            platform = get_platform(item.get("platform") or "")
            link_type = get_link_type(platform, item.get("type") or item.get("link_type"))

            if platform.key in seen_platforms:
                raise ValidationError(
                    f"Only one {platform.name} link is allowed",
                    code="DUPLICATE_PLATFORM",
                    details={"platform": platform.key},
                )
            seen_platforms.add(platform.key)

            url = canonicalize(platform, link_type.kind, item.get("url") or item.get("input") or "")

            payload = {
                "url": url,
                "track_title": item.get("track_title"),
                "artist_name": item.get("artist_name"),
                "album_art_url": item.get("album_art_url"),
            }
            if fetch_metadata and not all(payload[k] for k in ("track_title", "artist_name", "album_art_url")):
                payload = MetadataService.fill_music_link(payload)

            music_links.append(MusicLink(
                platform=platform.key,
                link_type=link_type.kind.value,
                url=url,
                position=position,
                track_title=payload.get("track_title"),
                artist_name=payload.get("artist_name"),
                album_art_url=payload.get("album_art_url"),
            ))

        return music_links

    @staticmethod
    def _parse_preview(preview) -> Optional[Preview]:
        if preview is None or preview is UNSET:
            return None
        if isinstance(preview, dict):
            return preview_from_dict(preview)
        return preview

    @staticmethod
    def _primary_url(url: Optional[str], music_links: List[MusicLink], preview: Optional[Preview]) -> str:
        if music_links:
            return music_links[0].url

        derived = preview_link_url(preview) or url
        is_valid, normalized, error = URLValidator.validate(derived or "")
        if not is_valid:
            raise ValidationError(error, code="INVALID_URL")
        return normalized

    @staticmethod
    def _check_exclusive(music_links: list, preview: Optional[Preview]) -> None:
        if music_links and preview is not None:
            raise ValidationError(
                "A link cannot carry both music links and a preview",
                code="PREVIEW_CONFLICT",
            )

    @staticmethod
    def _parse_schedule(scheduled_at) -> Optional[int]:
        if scheduled_at is None or scheduled_at is UNSET:
            return None
        is_valid, value, error = InputValidator.validate_timestamp_ms(scheduled_at)
        if not is_valid:
            raise ValidationError(error, code="INVALID_SCHEDULE")
        return value

    @staticmethod
    def create_link(
        user_id: str,
        title: str,
        url: Optional[str] = None,
        music_links: Optional[List[dict]] = None,
        preview=None,
        folder_id: Optional[str] = None,
        scheduled_at: Optional[int] = None,
        fetch_metadata: bool = True,
    ) -> Link:
        is_valid, title, error = InputValidator.validate_title(title)
        if not is_valid:
            raise ValidationError(error, code="INVALID_TITLE")

        preview = LinkService._parse_preview(preview)
        LinkService._check_exclusive(music_links, preview)

        built = LinkService.build_music_links(music_links, fetch_metadata=fetch_metadata)
        primary_url = LinkService._primary_url(url, built, preview)
        scheduled_at = LinkService._parse_schedule(scheduled_at)

        LinkService._check_folder(user_id, folder_id)
        LinkService.ensure_user(user_id)

        link = Link(
            user_id=user_id,
            title=title,
            url=primary_url,
            order=OrderingService.next_order_key(),
            folder_id=folder_id,
            scheduled_at=scheduled_at,
            preview=preview,
        )
        link.music_links = built

        db.session.add(link)
        db.session.commit()

        logger.info(f"Link created: {link.id} by user {user_id}")
        return link

    @staticmethod
    def update_link(
        user_id: str,
        link_id: str,
        title=UNSET,
        url=UNSET,
        music_links=UNSET,
        preview=UNSET,
        scheduled_at=UNSET,
        clear_schedule: bool = False,
        fetch_metadata: bool = True,
    ) -> Link:
        link = LinkService.get_link(user_id, link_id)

        # everything is validated before the link is touched
        updates = {}

        if title is not UNSET and title is not None:
            is_valid, title, error = InputValidator.validate_title(title)
            if not is_valid:
                raise ValidationError(error, code="INVALID_TITLE")
            updates["title"] = title

        new_preview = link.preview if preview is UNSET else LinkService._parse_preview(preview)

        if music_links is UNSET:
            LinkService._check_exclusive(link.music_links, new_preview)
            new_music_links = link.music_links
        else:
            LinkService._check_exclusive(music_links, new_preview)
            new_music_links = LinkService.build_music_links(music_links, fetch_metadata=fetch_metadata)
            updates["music_links"] = new_music_links

        if preview is not UNSET:
            updates["preview"] = new_preview

        if url is not UNSET or music_links is not UNSET or preview is not UNSET:
            fallback = link.url if url is UNSET or url is None else url
            updates["url"] = LinkService._primary_url(fallback, new_music_links, new_preview)

        if clear_schedule:
            updates["scheduled_at"] = None
        elif scheduled_at is not UNSET and scheduled_at is not None:
            updates["scheduled_at"] = LinkService._parse_schedule(scheduled_at)

        if "music_links" in updates:
            # old rows must be gone before new ones reuse their (link_id, platform)
            link.music_links = []
            db.session.flush()

        for name, value in updates.items():
            setattr(link, name, value)
        changes = list(updates)

        db.session.commit()

        logger.info(f"Link updated: {link.id} by user {user_id} ({', '.join(changes) or 'no changes'})")
        return link

    @staticmethod
    def update_link_folder(user_id: str, link_id: str, folder_id: Optional[str] = None) -> Link:
        link = LinkService.get_link(user_id, link_id)
        LinkService._check_folder(user_id, folder_id)

        link.folder_id = folder_id or None
        db.session.commit()

        logger.info(f"Link {link.id} moved to folder {folder_id or 'top level'}")
        return link

    @staticmethod
    def delete_link(user_id: str, link_id: str) -> None:
        link = LinkService.get_link(user_id, link_id)

        db.session.delete(link)
        db.session.commit()

        logger.info(f"Link deleted: {link_id} by user {user_id}")

    @staticmethod
    def list_links(user_id: str, scope: Optional[str] = ALL) -> List[Link]:
        query = Link.query.filter_by(user_id=user_id)
        if scope == TOP_LEVEL:
            query = query.filter(Link.folder_id.is_(None))
        elif scope is not ALL:
            query = query.filter(Link.folder_id == scope)
        return OrderingService.ordered_query(query).all()

    @staticmethod
    def get_links_by_owner(owner_ref: str, public: bool = True, now: Optional[int] = None) -> List[Link]:
        user = User.find_by_ref(owner_ref)
        user_id = user.id if user else owner_ref

        links = LinkService.list_links(user_id)
        if public:
            links = filter_visible(links, now)
        return links
