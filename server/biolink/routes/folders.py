# server/biolink/routes/folders.py

import logging

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from biolink.errors import BiolinkError, ValidationError
from biolink.extensions import db
from biolink.services.folder_service import FolderService
from biolink.services.ordering_service import OrderingService

folders_bp = Blueprint("folders", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


@folders_bp.route("", methods=["POST"])
@jwt_required()
def create_folder():
    user_id = get_jwt_identity()
    data = request.get_json() or {}

    try:
        folder = FolderService.create_folder(user_id, data.get("name"))
    except BiolinkError:
        raise
    except Exception as e:
        db.session.rollback()
        logger.error(f"Folder creation failed: {e}")
        return api_response().error("Failed to create folder", 500)

    return api_response().success(
        data={"folder": folder.to_dict()},
        message="Folder created",
        status=201,
    )


@folders_bp.route("", methods=["GET"])
@jwt_required()
def get_folders():
    user_id = get_jwt_identity()
    folders = FolderService.list_folders(user_id)
    return api_response().success(data={"folders": [f.to_dict() for f in folders]})


@folders_bp.route("/order", methods=["POST"])
@jwt_required()
def update_folder_order():
    user_id = get_jwt_identity()
    data = request.get_json() or {}

    folder_ids = data.get("folder_ids")
    if not isinstance(folder_ids, list):
        raise ValidationError("folder_ids must be a list")

    try:
        result = OrderingService.update_folder_order(user_id, folder_ids)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Folder reorder failed: {e}")
        return api_response().error("Failed to reorder folders", 500)

    return api_response().success(data=result.to_dict(), message="Folder order updated")


@folders_bp.route("/<folder_id>", methods=["PUT"])
@jwt_required()
def update_folder(folder_id: str):
    user_id = get_jwt_identity()
    data = request.get_json() or {}

    try:
        folder = FolderService.update_folder(user_id, folder_id, data.get("name"))
    except BiolinkError:
        raise
    except Exception as e:
        db.session.rollback()
        logger.error(f"Folder update failed: {e}")
        return api_response().error("Failed to update folder", 500)

    return api_response().success(data={"folder": folder.to_dict()}, message="Folder updated")


@folders_bp.route("/<folder_id>", methods=["DELETE"])
@jwt_required()
def delete_folder(folder_id: str):
    user_id = get_jwt_identity()

    try:
        moved = FolderService.delete_folder(user_id, folder_id)
    except BiolinkError:
        raise
    except Exception as e:
        db.session.rollback()
        logger.error(f"Folder deletion failed: {e}")
        return api_response().error("Failed to delete folder", 500)

    return api_response().success(data={"links_moved": moved}, message="Folder deleted")
