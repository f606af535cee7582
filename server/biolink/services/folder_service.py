# server/biolink/services/folder_service.py

import logging
from typing import List

from biolink.errors import NotFound, Unauthorized, ValidationError
from biolink.extensions import db
from biolink.models.folder import Folder
from biolink.models.link import Link
from biolink.services.link_service import LinkService
from biolink.utils.validators import InputValidator

logger = logging.getLogger(__name__)


class FolderService:

    @staticmethod
    def get_folder(user_id: str, folder_id: str) -> Folder:
        folder = db.session.get(Folder, folder_id)
        if folder is None:
            raise NotFound("Folder not found", code="FOLDER_NOT_FOUND")
        if folder.user_id != user_id:
            raise Unauthorized()
        return folder

    @staticmethod
    def create_folder(user_id: str, name: str) -> Folder:
        is_valid, name, error = InputValidator.validate_folder_name(name)
        if not is_valid:
            raise ValidationError(error, code="INVALID_FOLDER_NAME")

        LinkService.ensure_user(user_id)

        position = Folder.query.filter_by(user_id=user_id).count()
        folder = Folder(user_id=user_id, name=name, position=position)

        db.session.add(folder)
        db.session.commit()

        logger.info(f"Folder created: {folder.id} by user {user_id}")
        return folder

    @staticmethod
    def update_folder(user_id: str, folder_id: str, name: str) -> Folder:
        folder = FolderService.get_folder(user_id, folder_id)

        is_valid, name, error = InputValidator.validate_folder_name(name)
        if not is_valid:
            raise ValidationError(error, code="INVALID_FOLDER_NAME")

        folder.name = name
        db.session.commit()

        logger.info(f"Folder renamed: {folder.id}")
        return folder

    @staticmethod
    def delete_folder(user_id: str, folder_id: str) -> int:
        """Delete a folder, moving its links back to the top level. Returns how many links moved."""
        folder = FolderService.get_folder(user_id, folder_id)

        moved = Link.query.filter_by(folder_id=folder.id).update(
            {Link.folder_id: None}, synchronize_session="fetch"
        )
        db.session.delete(folder)
        db.session.commit()

        logger.info(f"Folder deleted: {folder_id} by user {user_id}, {moved} links moved to top level")
        return moved

    @staticmethod
    def list_folders(user_id: str) -> List[Folder]:
        return Folder.query.filter_by(user_id=user_id).order_by(Folder.position.asc(), Folder.created_at.asc()).all()
