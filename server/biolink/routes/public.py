# server/biolink/routes/public.py

import logging

from flask import Blueprint, current_app

from biolink.extensions import limiter
from biolink.models.user import User
from biolink.services.folder_service import FolderService
from biolink.services.link_service import LinkService
from biolink.utils.visibility import now_ms

public_bp = Blueprint("public", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


@public_bp.route("/<owner_ref>", methods=["GET"])
@limiter.limit("120 per minute")
def get_public_page(owner_ref: str):
    user = User.find_by_ref(owner_ref)
    user_id = user.id if user else owner_ref

    links = LinkService.get_links_by_owner(owner_ref, public=True, now=now_ms())
    folders = FolderService.list_folders(user_id)

    return api_response().success(data={
        "owner": user.to_dict() if user else {"id": owner_ref, "username": None, "display_name": None},
        "links": [link.to_dict() for link in links],
        "folders": [f.to_dict(include_counts=False) for f in folders],
    })
