# server/biolink/services/ordering_service.py

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from biolink.extensions import db
from biolink.models.folder import Folder
from biolink.models.link import Link
from biolink.utils.visibility import now_ms

logger = logging.getLogger(__name__)

# Scope markers for an order batch. A folder id string scopes to that folder.
ALL = None
TOP_LEVEL = "__top_level__"


@dataclass
class OrderingResult:
    applied: List[str] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.dropped)

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "dropped": self.dropped,
            "partial": self.partial,
        }


def _in_scope(link: Link, scope: Optional[str]) -> bool:
    if scope is ALL:
        return True
    if scope == TOP_LEVEL:
        return link.folder_id is None
    return link.folder_id == scope


def _dedupe(ids: Iterable) -> tuple:
    seen = set()
    kept, duplicates = [], []
    for item in ids:
        if not isinstance(item, str) or item in seen:
            duplicates.append(item)
            continue
        seen.add(item)
        kept.append(item)
    return kept, duplicates


class OrderingService:

    @staticmethod
    def next_order_key() -> int:
        """Order key for a new link: creation time in epoch ms, so it sorts after every reordered position."""
        return now_ms()

    @staticmethod
    def ordered_query(query):
        return query.order_by(Link.order.asc(), Link.created_at.asc(), Link.id.asc())

    @staticmethod
    def update_link_order(user_id: str, link_ids: List[str], scope: Optional[str] = ALL) -> OrderingResult:
        candidate_ids, dropped = _dedupe(link_ids or [])

        links = {}
        if candidate_ids:
            links = {
                link.id: link
                for link in Link.query.filter(Link.id.in_(candidate_ids)).all()
            }

        result = OrderingResult(dropped=dropped)

        for link_id in candidate_ids:
            link = links.get(link_id)
            if link is None or link.user_id != user_id or not _in_scope(link, scope):
                result.dropped.append(link_id)
                continue

            link.order = len(result.applied)
            result.applied.append(link_id)

        db.session.commit()

        if result.partial:
            logger.info(
                f"Link order partially applied for user {user_id}: "
                f"{len(result.applied)} applied, {len(result.dropped)} dropped"
            )
        else:
            logger.info(f"Link order updated for user {user_id}: {len(result.applied)} links")

        return result

    @staticmethod
    def update_folder_order(user_id: str, folder_ids: List[str]) -> OrderingResult:
        candidate_ids, dropped = _dedupe(folder_ids or [])

        folders = {}
        if candidate_ids:
            folders = {
                folder.id: folder
                for folder in Folder.query.filter(Folder.id.in_(candidate_ids)).all()
            }

        result = OrderingResult(dropped=dropped)

        for folder_id in candidate_ids:
            folder = folders.get(folder_id)
            if folder is None or folder.user_id != user_id:
                result.dropped.append(folder_id)
                continue

            folder.position = len(result.applied)
            result.applied.append(folder_id)

        db.session.commit()

        logger.info(f"Folder order updated for user {user_id}: {len(result.applied)} applied, {len(result.dropped)} dropped")

        return result
