import pytest
import requests

from biolink.services.metadata_service import MetadataService, Provider
from biolink.services.redis_service import RedisService
from conftest import FakeResponse

SPOTIFY_TRACK = "https://open.spotify.com/track/3Fuqn0M6R7z8hBvB22K1jR"


@pytest.fixture
def fake_get(monkeypatch):
    """Route outbound GETs by URL prefix; unrouted URLs fail like a dead network."""
    routes = {}
    calls = []

    def get(url, params=None, **kwargs):
        calls.append(url)
        for prefix, handler in routes.items():
            if url.startswith(prefix):
                return handler(url, params or {})
        raise requests.exceptions.ConnectionError(f"unrouted {url}")

    monkeypatch.setattr("biolink.services.metadata_service.requests.get", get)
    get.routes = routes
    get.calls = calls
    return get


def test_spotify_oembed_fills_everything(app, fake_get) -> None:
    fake_get.routes["https://open.spotify.com/oembed"] = lambda url, params: FakeResponse(
        json_data={"title": "X", "author_name": "Y", "thumbnail_url": "Z"}
    )

    assert MetadataService.resolve_metadata(SPOTIFY_TRACK) == {"title": "X", "artist": "Y", "artwork_url": "Z"}
    assert not any("/embed/" in url for url in fake_get.calls)


def test_spotify_artist_comes_from_embed_page(app, fake_get) -> None:
    fake_get.routes["https://open.spotify.com/oembed"] = lambda url, params: FakeResponse(
        json_data={"title": "X", "thumbnail_url": "Z"}
    )
    fake_get.routes["https://open.spotify.com/embed/"] = lambda url, params: FakeResponse(
        text='<script>{"entity":{"artists":[{"name":"Y","uri":"spotify:artist:1"}]}}</script>'
    )

    assert MetadataService.resolve_metadata(SPOTIFY_TRACK) == {"title": "X", "artist": "Y", "artwork_url": "Z"}


def test_spotify_embed_title_fallback_when_oembed_times_out(app, fake_get) -> None:
    def timeout(url, params):
        raise requests.exceptions.Timeout("slow")

    fake_get.routes["https://open.spotify.com/oembed"] = timeout
    fake_get.routes["https://open.spotify.com/embed/"] = lambda url, params: FakeResponse(
        text="<html><head><title>Song by Some Artist | Spotify</title></head></html>"
    )

    assert MetadataService.resolve_metadata(SPOTIFY_TRACK) == {"artist": "Some Artist"}


def test_spotify_musician_meta_is_last_resort(app, fake_get) -> None:
    fake_get.routes["https://open.spotify.com/oembed"] = lambda url, params: FakeResponse(status_code=404)
    fake_get.routes["https://open.spotify.com/embed/"] = lambda url, params: FakeResponse(
        text='<html><head><title>Spotify</title><meta name="music:musician" content="Meta Artist"></head></html>'
    )

    assert MetadataService.resolve_metadata(SPOTIFY_TRACK) == {"artist": "Meta Artist"}


def test_every_provider_failing_yields_empty_result(app) -> None:
    assert MetadataService.resolve_metadata(SPOTIFY_TRACK) == {}
    assert MetadataService.resolve_metadata("https://link.deezer.com/s/311Fv9DVZMHdRO7ZALTU0") == {}
    assert MetadataService.resolve_metadata("https://music.apple.com/br/song/1440843433") == {}
    assert MetadataService.resolve_metadata("https://tidal.com/track/123456789") == {}


def test_malformed_json_counts_as_no_data(app, fake_get) -> None:
    fake_get.routes["https://noembed.com/embed"] = lambda url, params: FakeResponse(json_data=None, text="<html>")

    assert MetadataService.resolve_metadata("https://tidal.com/track/123456789") == {}


def test_noembed_error_field_means_no_data(app, fake_get) -> None:
    fake_get.routes["https://noembed.com/embed"] = lambda url, params: FakeResponse(
        json_data={"error": "no matching providers found", "title": "ignored"}
    )

    assert MetadataService.resolve_metadata("https://music.amazon.com/albums/B08Z2Y2G3X") == {}


def test_noembed_success(app, fake_get) -> None:
    fake_get.routes["https://noembed.com/embed"] = lambda url, params: FakeResponse(
        json_data={"title": "Album", "author_name": "Band", "thumbnail_url": "https://img/1.jpg"}
    )

    assert MetadataService.resolve_metadata("https://tidal.com/album/987654321") == {
        "title": "Album", "artist": "Band", "artwork_url": "https://img/1.jpg",
    }


def test_itunes_lookup_upgrades_artwork(app, fake_get) -> None:
    fake_get.routes["https://itunes.apple.com/lookup"] = lambda url, params: FakeResponse(json_data={
        "resultCount": 1,
        "results": [{
            "collectionName": "The Album",
            "artistName": "The Artist",
            "artworkUrl100": "https://is1.mzstatic.com/image/100x100bb.jpg",
        }],
    })

    result = MetadataService.resolve_metadata("https://music.apple.com/br/album/1440843428")

    assert result == {
        "title": "The Album",
        "artist": "The Artist",
        "artwork_url": "https://is1.mzstatic.com/image/600x600bb.jpg",
    }


def test_apple_page_scrape_when_lookup_is_empty(app, fake_get) -> None:
    fake_get.routes["https://itunes.apple.com/lookup"] = lambda url, params: FakeResponse(
        json_data={"resultCount": 0, "results": []}
    )
    fake_get.routes["https://music.apple.com/"] = lambda url, params: FakeResponse(text=(
        "<html><head><title>Night Drive — Album by Neon Lights — Apple Music</title>"
        '<meta property="og:image" content="https://is1.mzstatic.com/cover.jpg"></head></html>'
    ))

    result = MetadataService.resolve_metadata("https://music.apple.com/br/album/1440843428")

    assert result["title"] == "Night Drive"
    assert result["artist"].strip() == "Neon Lights"
    assert result["artwork_url"] == "https://is1.mzstatic.com/cover.jpg"


def test_deezer_oembed(app, fake_get) -> None:
    fake_get.routes["https://api.deezer.com/oembed"] = lambda url, params: FakeResponse(
        json_data={"title": "Track", "author_name": "Artist", "thumbnail": "https://cdn/d.jpg"}
    )

    assert MetadataService.resolve_metadata("https://link.deezer.com/s/311Fv9DVZMHdRO7ZALTU0") == {
        "title": "Track", "artist": "Artist", "artwork_url": "https://cdn/d.jpg",
    }


def test_deezer_page_scrape_fills_gaps(app, fake_get) -> None:
    fake_get.routes["https://api.deezer.com/oembed"] = lambda url, params: FakeResponse(json_data={})
    fake_get.routes["https://link.deezer.com/"] = lambda url, params: FakeResponse(text=(
        "<html><head><title>Blue Monday - New Order | Deezer</title>"
        '<meta property="og:image" content="https://cdn/cover.jpg"></head></html>'
    ))

    assert MetadataService.resolve_metadata("https://link.deezer.com/s/311Fv9DVZMHdRO7ZALTU0") == {
        "title": "Blue Monday", "artist": "New Order", "artwork_url": "https://cdn/cover.jpg",
    }


def test_overrides_win_over_providers(app, fake_get) -> None:
    fake_get.routes["https://open.spotify.com/oembed"] = lambda url, params: FakeResponse(
        json_data={"title": "X", "author_name": "Y", "thumbnail_url": "Z"}
    )

    result = MetadataService.resolve_metadata(SPOTIFY_TRACK, {"title": "My Title", "artist": "  "})

    assert result == {"title": "My Title", "artist": "Y", "artwork_url": "Z"}


def test_fully_overridden_skips_network(app, fake_get) -> None:
    overrides = {"title": "T", "artist": "A", "artwork_url": "https://img/a.jpg"}

    assert MetadataService.resolve_metadata(SPOTIFY_TRACK, overrides) == overrides
    assert fake_get.calls == []


def test_run_chain_skips_providers_with_nothing_to_add() -> None:
    called = []

    def artist_only(url):
        called.append("artist_only")
        return {"artist": "never used"}

    def everything(url):
        called.append("everything")
        return {"title": "T", "artist": "other", "artwork_url": "W"}

    result = MetadataService.run_chain(
        [Provider("artist_only", ("artist",), artist_only), Provider("everything", ("title", "artist", "artwork_url"), everything)],
        "https://example.com",
        seed={"artist": "Known"},
    )

    assert called == ["everything"]
    assert result == {"title": "T", "artist": "Known", "artwork_url": "W"}


def test_run_chain_isolates_provider_errors() -> None:
    def broken(url):
        raise KeyError("boom")

    def working(url):
        return {"title": "T"}

    result = MetadataService.run_chain(
        [Provider("broken", ("title",), broken), Provider("working", ("title",), working)],
        "https://example.com",
    )

    assert result == {"title": "T"}


def test_cached_metadata_is_reused(app, fake_get, monkeypatch) -> None:
    monkeypatch.setattr(RedisService, "get_cached_metadata", lambda self, url_hash: {"title": "Cached", "artist": "C"})

    result = MetadataService.resolve_metadata(SPOTIFY_TRACK, {"artist": "Mine"})

    assert result == {"title": "Cached", "artist": "Mine"}
    assert fake_get.calls == []


def test_fill_music_link(app, fake_get) -> None:
    fake_get.routes["https://open.spotify.com/oembed"] = lambda url, params: FakeResponse(
        json_data={"title": "X", "author_name": "Y", "thumbnail_url": "Z"}
    )

    filled = MetadataService.fill_music_link({"url": SPOTIFY_TRACK, "track_title": "Kept", "artist_name": None})

    assert filled["track_title"] == "Kept"
    assert filled["artist_name"] == "Y"
    assert filled["album_art_url"] == "Z"


def test_itunes_small_artwork_is_upgraded_too(app, fake_get) -> None:
    fake_get.routes["https://itunes.apple.com/lookup"] = lambda url, params: FakeResponse(json_data={
        "results": [{
            "trackName": "Song",
            "artistName": "Artist",
            "artworkUrl60": "https://is1.mzstatic.com/image/thumb/Music/60x60bb.jpg",
        }],
    })

    result = MetadataService.resolve_metadata("https://music.apple.com/br/song/1440843433")

    assert result["artwork_url"] == "https://is1.mzstatic.com/image/thumb/Music/600x600bb.jpg"


def test_noembed_entities_are_unescaped(app, fake_get) -> None:
    fake_get.routes["https://noembed.com/embed"] = lambda url, params: FakeResponse(
        json_data={"title": "Rock &amp; Roll", "author_name": "Simon &amp; Garfunkel", "thumbnail_url": "https://img/t.jpg"}
    )

    result = MetadataService.resolve_metadata("https://tidal.com/track/123456789")

    assert result["title"] == "Rock & Roll"
    assert result["artist"] == "Simon & Garfunkel"


def test_tidal_page_fills_what_noembed_lacks(app, fake_get) -> None:
    fake_get.routes["https://noembed.com/embed"] = lambda url, params: FakeResponse(
        json_data={"error": "no matching providers found"}
    )
    fake_get.routes["https://tidal.com/"] = lambda url, params: FakeResponse(text=(
        "<html><head><title>Midnight City by M83 on TIDAL</title>"
        '<meta property="og:image" content="https://resources.tidal.com/cover.jpg"></head></html>'
    ))

    assert MetadataService.resolve_metadata("https://tidal.com/track/123456789") == {
        "title": "Midnight City", "artist": "M83", "artwork_url": "https://resources.tidal.com/cover.jpg",
    }


def test_tidal_page_dash_separated_title(app, fake_get) -> None:
    fake_get.routes["https://tidal.com/"] = lambda url, params: FakeResponse(
        text="<html><head><title>Midnight City — M83 — TIDAL</title></head></html>"
    )

    assert MetadataService.resolve_metadata("https://tidal.com/album/987654321") == {
        "title": "Midnight City", "artist": "M83",
    }


def test_youtube_music_page_scrape(app, fake_get) -> None:
    fake_get.routes["https://music.youtube.com/"] = lambda url, params: FakeResponse(text=(
        "<html><head><title>Blinding Lights - YouTube Music</title>"
        '<meta property="og:image" content="https://i.ytimg.com/vi/4NRXx6U8ABQ/hq.jpg"></head>'
        '<body><script>{"artist":{"@type":"Person","name":"The Weeknd"}}</script></body></html>'
    ))

    result = MetadataService.resolve_metadata("https://music.youtube.com/watch?v=4NRXx6U8ABQ")

    assert result == {
        "title": "Blinding Lights", "artist": "The Weeknd", "artwork_url": "https://i.ytimg.com/vi/4NRXx6U8ABQ/hq.jpg",
    }
    assert not any(url.startswith("https://www.youtube.com/oembed") for url in fake_get.calls)


def test_youtube_music_generic_title_falls_back_to_oembed(app, fake_get) -> None:
    seen = {}

    def oembed(url, params):
        seen.update(params)
        return FakeResponse(json_data={
            "title": "Blinding Lights",
            "author_name": "The Weeknd - Topic",
            "thumbnail_url": "https://i.ytimg.com/vi/4NRXx6U8ABQ/hqdefault.jpg",
        })

    fake_get.routes["https://music.youtube.com/"] = lambda url, params: FakeResponse(
        text="<html><head><title>YouTube Music</title></head></html>"
    )
    fake_get.routes["https://www.youtube.com/oembed"] = oembed

    result = MetadataService.resolve_metadata("https://music.youtube.com/watch?v=4NRXx6U8ABQ&list=RDAMVM")

    assert result == {
        "title": "Blinding Lights",
        "artist": "The Weeknd",
        "artwork_url": "https://i.ytimg.com/vi/4NRXx6U8ABQ/hqdefault.jpg",
    }
    assert seen["url"] == "https://www.youtube.com/watch?v=4NRXx6U8ABQ"


def test_amazon_tries_oembed_endpoints_in_turn(app, fake_get) -> None:
    fake_get.routes["https://noembed.com/embed"] = lambda url, params: FakeResponse(status_code=500)
    fake_get.routes["https://publish.twitter.com/oembed"] = lambda url, params: FakeResponse(
        json_data={"title": "Night Drive", "author_name": "Neon Lights", "thumbnail_url": "https://m.media-amazon.com/a.jpg"}
    )

    result = MetadataService.resolve_metadata("https://music.amazon.com/albums/B08Z2Y2G3X")

    assert result == {"title": "Night Drive", "artist": "Neon Lights", "artwork_url": "https://m.media-amazon.com/a.jpg"}
    assert not any("facebook.com" in url for url in fake_get.calls)


def test_amazon_page_scrape(app, fake_get) -> None:
    fake_get.routes["https://music.amazon.com/"] = lambda url, params: FakeResponse(text=(
        "<html><head><title>Night Drive by Neon Lights | Amazon Music</title>"
        '<meta property="og:image" content="https://m.media-amazon.com/cover.jpg"></head></html>'
    ))

    assert MetadataService.resolve_metadata("https://music.amazon.com/albums/B08Z2Y2G3X") == {
        "title": "Night Drive", "artist": "Neon Lights", "artwork_url": "https://m.media-amazon.com/cover.jpg",
    }


def test_amazon_artist_first_title_is_swapped(app, fake_get) -> None:
    fake_get.routes["https://music.amazon.com/"] = lambda url, params: FakeResponse(
        text="<html><head><title>Neon Lights - Night Drive (Single) | Amazon Music</title></head></html>"
    )

    assert MetadataService.resolve_metadata("https://music.amazon.com/albums/B08Z2Y2G3X") == {
        "title": "Night Drive (Single)", "artist": "Neon Lights",
    }


def test_amazon_page_needs_title_and_artist(app, fake_get) -> None:
    fake_get.routes["https://music.amazon.com/"] = lambda url, params: FakeResponse(
        text='<html><head><title>Amazon Music</title><meta property="og:image" content="https://m.media-amazon.com/logo.jpg"></head></html>'
    )

    assert MetadataService.resolve_metadata("https://music.amazon.com/albums/B08Z2Y2G3X") == {}
