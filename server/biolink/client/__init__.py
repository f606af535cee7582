# server/biolink/client/__init__.py

from biolink.client.api import ApiError, BiolinkClient
from biolink.client.editor import EditSession, MusicLinkDraft, MusicLinksEditor
from biolink.client.order_cache import (
    DragPhase,
    OrderCache,
    OrderState,
    TOP_LEVEL,
    apply_move,
    array_move,
    cancel_drag,
    mark_persist_failed,
    reconcile,
    scope_ids,
    start_drag,
)

__all__ = [
    "ApiError",
    "BiolinkClient",
    "EditSession",
    "MusicLinkDraft",
    "MusicLinksEditor",
    "DragPhase",
    "OrderCache",
    "OrderState",
    "TOP_LEVEL",
    "apply_move",
    "array_move",
    "cancel_drag",
    "mark_persist_failed",
    "reconcile",
    "scope_ids",
    "start_drag",
]
