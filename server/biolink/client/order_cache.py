# server/biolink/client/order_cache.py
"""
Dashboard-side ordering state.

A drag session moves through IDLE -> DRAGGING -> REORDERING -> RECONCILING -> IDLE.
The local id list is rearranged as soon as an item is dropped and is only
replaced when an authoritative list is read back from the server. A failed
persist does not roll the list back.
"""

import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Scope of an ordering view: None is the top level, a folder id is that folder
TOP_LEVEL = None


class DragPhase(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    REORDERING = "reordering"
    RECONCILING = "reconciling"


@dataclass(frozen=True)
class OrderState:
    owner: str
    scope: Optional[str] = TOP_LEVEL
    ids: Tuple[str, ...] = ()
    phase: DragPhase = DragPhase.IDLE
    last_error: Optional[str] = None


def array_move(items: Sequence, old_index: int, new_index: int) -> list:
    """Remove the item at old_index and insert it at new_index."""
    result = list(items)
    if old_index == new_index:
        return result
    if not (0 <= old_index < len(result)) or not (0 <= new_index < len(result)):
        raise IndexError(f"Cannot move {old_index} -> {new_index} in a list of {len(result)}")
    item = result.pop(old_index)
    result.insert(new_index, item)
    return result


def _field(link, name: str):
    if isinstance(link, dict):
        return link.get(name)
    return getattr(link, name, None)


def scope_ids(links: Iterable, scope: Optional[str] = TOP_LEVEL) -> Tuple[str, ...]:
    return tuple(_field(link, "id") for link in links if _field(link, "folder_id") == scope)


def start_drag(state: OrderState) -> OrderState:
    return replace(state, phase=DragPhase.DRAGGING)


def cancel_drag(state: OrderState) -> OrderState:
    if state.phase != DragPhase.DRAGGING:
        return state
    return replace(state, phase=DragPhase.IDLE)


def apply_move(state: OrderState, old_index: int, new_index: int) -> OrderState:
    if old_index == new_index:
        return replace(state, phase=DragPhase.IDLE)
    return replace(
        state,
        ids=tuple(array_move(state.ids, old_index, new_index)),
        phase=DragPhase.REORDERING,
        last_error=None,
    )


def mark_persisted(state: OrderState) -> OrderState:
    return replace(state, phase=DragPhase.RECONCILING)


def mark_persist_failed(state: OrderState, error: str) -> OrderState:
    # the optimistic ids stay in place until the next authoritative read
    return replace(state, phase=DragPhase.RECONCILING, last_error=error)


def reconcile(state: OrderState, authoritative_links: Iterable) -> OrderState:
    phase = DragPhase.DRAGGING if state.phase == DragPhase.DRAGGING else DragPhase.IDLE
    return replace(
        state,
        ids=scope_ids(authoritative_links, state.scope),
        phase=phase,
        last_error=None,
    )


PersistFn = Callable[[List[str], Optional[str]], Any]


class OrderCache:
    """Per-owner ordering state, passed explicitly to whoever renders or mutates it."""

    def __init__(self, persist: Optional[PersistFn] = None):
        self.persist = persist
        self._states: Dict[str, OrderState] = {}

    def get(self, owner: str) -> Optional[OrderState]:
        return self._states.get(owner)

    def load(self, owner: str, links: Iterable, scope: Optional[str] = TOP_LEVEL) -> OrderState:
        state = OrderState(owner=owner, scope=scope, ids=scope_ids(links, scope))
        self._states[owner] = state
        return state

    def begin_drag(self, owner: str) -> OrderState:
        state = start_drag(self._require(owner))
        self._states[owner] = state
        return state

    def cancel(self, owner: str) -> OrderState:
        state = cancel_drag(self._require(owner))
        self._states[owner] = state
        return state

    def drop(self, owner: str, old_index: int, new_index: int) -> OrderState:
        state = apply_move(self._require(owner), old_index, new_index)
        self._states[owner] = state

        if state.phase != DragPhase.REORDERING or self.persist is None:
            return state

        try:
            self.persist(list(state.ids), state.scope)
        except Exception as e:
            logger.warning(f"Persisting order for {owner} failed: {e}")
            state = mark_persist_failed(state, str(e))
        else:
            state = mark_persisted(state)

        self._states[owner] = state
        return state

    def reconcile(self, owner: str, authoritative_links: Iterable) -> OrderState:
        current = self._states.get(owner) or OrderState(owner=owner)
        state = reconcile(current, authoritative_links)
        self._states[owner] = state
        return state

    def _require(self, owner: str) -> OrderState:
        state = self._states.get(owner)
        if state is None:
            raise KeyError(f"No ordering state loaded for {owner}")
        return state
