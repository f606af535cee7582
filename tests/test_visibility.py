from biolink.utils.visibility import filter_visible, is_visible, schedule_state

NOW = 1_700_000_000_000


def test_unscheduled_links_are_visible() -> None:
    assert is_visible({"scheduled_at": None}, NOW)
    assert is_visible({}, NOW)


def test_boundary() -> None:
    assert is_visible({"scheduled_at": NOW}, NOW)
    assert not is_visible({"scheduled_at": NOW + 1}, NOW)
    assert is_visible({"scheduled_at": NOW - 1}, NOW)


def test_filter_preserves_order() -> None:
    links = [
        {"id": "a", "scheduled_at": None},
        {"id": "b", "scheduled_at": NOW + 10},
        {"id": "c", "scheduled_at": NOW},
        {"id": "d", "scheduled_at": NOW - 10},
    ]

    assert [link["id"] for link in filter_visible(links, NOW)] == ["a", "c", "d"]


def test_works_on_objects() -> None:
    class Item:
        scheduled_at = NOW + 5

    assert not is_visible(Item(), NOW)


def test_schedule_state() -> None:
    assert schedule_state({"scheduled_at": NOW + 5}, NOW) == {
        "scheduled_at": NOW + 5,
        "is_scheduled": True,
        "is_visible": False,
    }
    assert schedule_state({"scheduled_at": None}, NOW) == {
        "scheduled_at": None,
        "is_scheduled": False,
        "is_visible": True,
    }
