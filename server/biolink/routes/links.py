# server/biolink/routes/links.py

import logging

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from biolink.errors import BiolinkError, ValidationError
from biolink.extensions import db, limiter
from biolink.services.link_service import UNSET, LinkService
from biolink.services.ordering_service import ALL, TOP_LEVEL, OrderingService
from biolink.utils.visibility import now_ms

links_bp = Blueprint("links", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def _scope_arg(value):
    if value is None or value == "":
        return ALL
    if value in ("none", "null"):
        return TOP_LEVEL
    return value


@links_bp.route("", methods=["POST"])
@jwt_required()
@limiter.limit("30 per minute")
def create_link():
    user_id = get_jwt_identity()
    data = request.get_json() or {}

    try:
        link = LinkService.create_link(
            user_id=user_id,
            title=data.get("title"),
            url=data.get("url"),
            music_links=data.get("music_links"),
            preview=data.get("preview"),
            folder_id=data.get("folder_id"),
            scheduled_at=data.get("scheduled_at"),
            fetch_metadata=data.get("fetch_metadata", True),
        )
    except BiolinkError:
        raise
    except Exception as e:
        db.session.rollback()
        logger.error(f"Link creation failed: {e}")
        return api_response().error("Failed to create link", 500)

    return api_response().success(
        data={"link": link.to_dict(include_schedule=True)},
        message="Link created",
        status=201,
    )


@links_bp.route("", methods=["GET"])
@jwt_required()
def get_links():
    user_id = get_jwt_identity()
    scope = _scope_arg(request.args.get("folder_id"))
    now = now_ms()

    links = LinkService.list_links(user_id, scope)

    return api_response().success(data={
        "links": [link.to_dict(include_schedule=True, now=now) for link in links],
        "total": len(links),
    })


@links_bp.route("/order", methods=["POST"])
@jwt_required()
@limiter.limit("60 per minute")
def update_link_order():
    user_id = get_jwt_identity()
    data = request.get_json() or {}

    link_ids = data.get("link_ids")
    if not isinstance(link_ids, list):
        raise ValidationError("link_ids must be a list")

    # folder_id absent: no scope filter; null or "none": top level only
    scope = ALL
    if "folder_id" in data:
        scope = TOP_LEVEL if data["folder_id"] is None else _scope_arg(data["folder_id"])

    try:
        result = OrderingService.update_link_order(user_id, link_ids, scope)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Link reorder failed: {e}")
        return api_response().error("Failed to reorder links", 500)

    return api_response().success(
        data=result.to_dict(),
        message="Order partially applied" if result.partial else "Order updated",
    )


@links_bp.route("/<link_id>", methods=["GET"])
@jwt_required()
def get_link(link_id: str):
    user_id = get_jwt_identity()
    link = LinkService.get_link(user_id, link_id)
    return api_response().success(data={"link": link.to_dict(include_schedule=True)})


@links_bp.route("/<link_id>", methods=["PUT"])
@jwt_required()
def update_link(link_id: str):
    user_id = get_jwt_identity()
    data = request.get_json() or {}

    try:
        link = LinkService.update_link(
            user_id,
            link_id,
            title=data.get("title", UNSET),
            url=data.get("url", UNSET),
            music_links=data.get("music_links", UNSET),
            preview=data.get("preview", UNSET),
            scheduled_at=data.get("scheduled_at", UNSET),
            clear_schedule=bool(data.get("clear_schedule", False)),
            fetch_metadata=data.get("fetch_metadata", True),
        )
    except BiolinkError:
        raise
    except Exception as e:
        db.session.rollback()
        logger.error(f"Link update failed: {e}")
        return api_response().error("Failed to update link", 500)

    return api_response().success(
        data={"link": link.to_dict(include_schedule=True)},
        message="Link updated",
    )


@links_bp.route("/<link_id>/folder", methods=["PUT"])
@jwt_required()
def update_link_folder(link_id: str):
    user_id = get_jwt_identity()
    data = request.get_json() or {}

    try:
        link = LinkService.update_link_folder(user_id, link_id, data.get("folder_id"))
    except BiolinkError:
        raise
    except Exception as e:
        db.session.rollback()
        logger.error(f"Link move failed: {e}")
        return api_response().error("Failed to move link", 500)

    return api_response().success(data={"link": link.to_dict()}, message="Link moved")


@links_bp.route("/<link_id>", methods=["DELETE"])
@jwt_required()
def delete_link(link_id: str):
    user_id = get_jwt_identity()

    try:
        LinkService.delete_link(user_id, link_id)
    except BiolinkError:
        raise
    except Exception as e:
        db.session.rollback()
        logger.error(f"Link deletion failed: {e}")
        return api_response().error("Failed to delete link", 500)

    return api_response().success(message="Link deleted")
