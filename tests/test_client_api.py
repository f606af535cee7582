import pytest
import requests

from biolink.client.api import ApiError, BiolinkClient
from biolink.client.order_cache import OrderCache
from conftest import FakeResponse


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_token_is_sent_as_bearer() -> None:
    session = FakeSession([])
    BiolinkClient("http://api.test/", token="abc", session=session)

    assert session.headers["Authorization"] == "Bearer abc"


def test_persist_order_for_top_level() -> None:
    session = FakeSession([FakeResponse(json_data={"success": True, "data": {"applied": ["a"], "dropped": []}})])
    client = BiolinkClient("http://api.test", session=session)

    result = client.persist_order(["a"], None)

    assert result["applied"] == ["a"]
    assert session.requests == [
        ("POST", "http://api.test/api/links/order", {"json": {"link_ids": ["a"], "folder_id": "none"}}),
    ]


def test_error_body_raises_api_error() -> None:
    session = FakeSession([FakeResponse(status_code=400, json_data={
        "success": False, "error": "Please enter a valid Spotify track URL or ID", "code": "INVALID_LINK_FORMAT",
    })])
    client = BiolinkClient("http://api.test", session=session)

    with pytest.raises(ApiError) as exc:
        client.canonicalize("spotify", "track", "nope")

    assert exc.value.status == 400
    assert exc.value.code == "INVALID_LINK_FORMAT"


def test_metadata_failure_falls_back_to_overrides() -> None:
    session = FakeSession([requests.exceptions.ConnectionError("down")])
    client = BiolinkClient("http://api.test", session=session)

    assert client.resolve_metadata("https://tidal.com/track/1", {"title": "Mine"}) == {"title": "Mine"}


def test_cache_persists_through_client() -> None:
    session = FakeSession([FakeResponse(status_code=500, json_data={"success": False, "error": "Failed to reorder links"})])
    client = BiolinkClient("http://api.test", session=session)
    cache = OrderCache(persist=client.persist_order)
    cache.load("user-1", [{"id": "a", "folder_id": None}, {"id": "b", "folder_id": None}])

    state = cache.drop("user-1", 1, 0)

    assert state.ids == ("b", "a")
    assert state.last_error == "Failed to reorder links"
