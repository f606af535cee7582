# server/biolink/routes/media.py

from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required

from biolink.errors import ValidationError
from biolink.extensions import limiter
from biolink.models.preview import preview_to_dict
from biolink.services.media_service import MediaService

media_bp = Blueprint("media", __name__)


def api_response():
    return current_app.api_response


@media_bp.route("/preview", methods=["POST"])
@jwt_required()
@limiter.limit("30 per minute")
def media_preview():
    data = request.get_json() or {}

    url = (data.get("url") or "").strip()
    if not url:
        raise ValidationError("URL is required")

    preview = MediaService.build_preview(url, title=data.get("title"))
    return api_response().success(data={"preview": preview_to_dict(preview)})
