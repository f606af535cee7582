# server/biolink/routes/music.py

import logging

from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required

from biolink.errors import ValidationError
from biolink.extensions import limiter
from biolink.services.metadata_service import FIELDS, MetadataService
from biolink.utils.canonicalizer import canonicalize
from biolink.utils.platforms import get_link_type, get_platform, list_platforms, platform_for_url
from biolink.utils.validators import URLValidator

music_bp = Blueprint("music", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


@music_bp.route("/platforms", methods=["GET"])
def get_platforms():
    return api_response().success(data={"platforms": list_platforms()})


@music_bp.route("/canonicalize", methods=["POST"])
@jwt_required()
def canonicalize_link():
    data = request.get_json() or {}

    platform = get_platform(data.get("platform") or "")
    link_type = get_link_type(platform, data.get("type") or data.get("link_type"))
    url = canonicalize(platform, link_type.kind, data.get("input") or data.get("url") or "")

    return api_response().success(data={
        "platform": platform.key,
        "type": link_type.kind.value,
        "url": url,
    })


@music_bp.route("/metadata", methods=["POST"])
@jwt_required()
@limiter.limit("30 per minute")
def resolve_metadata():
    data = request.get_json() or {}

    url = (data.get("url") or "").strip()
    is_valid, url, error = URLValidator.validate(url)
    if not is_valid:
        raise ValidationError(error, code="INVALID_URL")

    overrides = data.get("overrides") or {}
    if not isinstance(overrides, dict):
        raise ValidationError("overrides must be an object")

    metadata = MetadataService.resolve_metadata(url, overrides, refresh=bool(data.get("refresh")))
    platform = platform_for_url(url)

    return api_response().success(data={
        "url": url,
        "platform": platform.key if platform else None,
        "metadata": metadata,
        "metadata_available": any(metadata.get(f) for f in FIELDS),
    })
