import pytest

from biolink.errors import ValidationError
from biolink.models.preview import (
    HighlightPreview,
    PlaylistPreview,
    preview_from_dict,
    preview_link_url,
    preview_to_dict,
)


def test_playlist_preview_from_dict() -> None:
    preview = preview_from_dict({
        "kind": "playlist",
        "platform": "spotify",
        "url": "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M",
        "playlist_id": "37i9dQZF1DXcBWIGoYBM5M",
        "title": "Hits",
        "tracks": [{"name": "One", "artist": "A"}, {"artist": "no name"}],
    })

    assert isinstance(preview, PlaylistPreview)
    assert [t.name for t in preview.tracks] == ["One"]
    assert preview_link_url(preview) == "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M"


def test_highlight_serializes_with_kind() -> None:
    data = preview_to_dict(HighlightPreview(url="https://x.com", text="Hi", image_url="https://x.com/i.png"))

    assert data == {"kind": "highlight", "url": "https://x.com", "text": "Hi", "image_url": "https://x.com/i.png"}
    assert preview_link_url(preview_from_dict(data)) is None


def test_unknown_kind() -> None:
    with pytest.raises(ValidationError):
        preview_from_dict({"kind": "gallery"})


def test_missing_required_fields() -> None:
    with pytest.raises(ValidationError) as exc:
        preview_from_dict({"kind": "media", "url": "https://youtu.be/x"})
    assert exc.value.details["missing"] == ["video_id", "title", "thumbnail_url"]


def test_empty_preview_is_none() -> None:
    assert preview_from_dict(None) is None
    assert preview_to_dict(None) is None
