from biolink.extensions import db
from biolink.models import Folder, Link
from biolink.services.ordering_service import TOP_LEVEL, OrderingService
from biolink.utils.visibility import now_ms


def _orders(ids):
    return [db.session.get(Link, link_id).order for link_id in ids]


def test_foreign_id_is_dropped_and_survivors_are_renumbered(make_link) -> None:
    mine = [make_link(title=f"L{i}", order=1000 + i).id for i in range(4)]
    foreign = make_link(user_id="user-2", title="Theirs", order=7).id

    batch = [mine[0], mine[1], foreign, mine[2], mine[3]]
    result = OrderingService.update_link_order("user-1", batch)

    assert result.applied == mine
    assert result.dropped == [foreign]
    assert result.partial
    assert _orders(mine) == [0, 1, 2, 3]
    assert db.session.get(Link, foreign).order == 7


def test_move_to_front(make_link) -> None:
    ids = [make_link(title=f"L{i}", order=i).id for i in range(3)]

    reordered = [ids[2], ids[0], ids[1]]
    result = OrderingService.update_link_order("user-1", reordered)

    assert not result.partial
    assert _orders(reordered) == [0, 1, 2]
    assert db.session.get(Link, ids[2]).order == 0


def test_missing_and_duplicate_ids_are_dropped(make_link) -> None:
    a = make_link(title="A", order=5).id
    b = make_link(title="B", order=6).id

    result = OrderingService.update_link_order("user-1", [b, "does-not-exist", a, b])

    assert result.applied == [b, a]
    assert result.dropped == [b, "does-not-exist"]
    assert _orders([b, a]) == [0, 1]


def test_empty_batch(app) -> None:
    result = OrderingService.update_link_order("user-1", [])

    assert result.applied == [] and result.dropped == []
    assert not result.partial


def test_folder_scope_leaves_other_links_alone(make_link, make_folder) -> None:
    folder = make_folder()
    top = [make_link(title=f"T{i}", order=10 + i).id for i in range(2)]
    inside = [make_link(title=f"F{i}", order=20 + i, folder_id=folder.id).id for i in range(3)]

    result = OrderingService.update_link_order("user-1", [inside[2], top[0], inside[0], inside[1]], scope=folder.id)

    assert result.applied == [inside[2], inside[0], inside[1]]
    assert result.dropped == [top[0]]
    assert _orders([inside[2], inside[0], inside[1]]) == [0, 1, 2]
    assert _orders(top) == [10, 11]


def test_top_level_scope_drops_folder_members(make_link, make_folder) -> None:
    folder = make_folder()
    top = make_link(title="Top", order=3).id
    nested = make_link(title="Nested", order=4, folder_id=folder.id).id

    result = OrderingService.update_link_order("user-1", [nested, top], scope=TOP_LEVEL)

    assert result.applied == [top]
    assert result.dropped == [nested]
    assert db.session.get(Link, nested).order == 4


def test_next_order_key_sorts_after_reordered_positions(app) -> None:
    before = now_ms()
    key = OrderingService.next_order_key()

    assert key >= before
    assert key > 10_000


def test_update_folder_order(make_folder) -> None:
    first = make_folder(name="One", position=0).id
    second = make_folder(name="Two", position=1).id
    foreign = make_folder(user_id="user-2", name="Other", position=0).id

    result = OrderingService.update_folder_order("user-1", [second, foreign, first])

    assert result.applied == [second, first]
    assert result.dropped == [foreign]
    assert db.session.get(Folder, second).position == 0
    assert db.session.get(Folder, first).position == 1
    assert db.session.get(Folder, foreign).position == 0


def test_ordering_result_to_dict(make_link) -> None:
    link = make_link().id

    result = OrderingService.update_link_order("user-1", [link, "ghost"])

    assert result.to_dict() == {"applied": [link], "dropped": ["ghost"], "partial": True}
