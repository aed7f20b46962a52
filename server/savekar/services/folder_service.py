# server/savekar/services/folder_service.py

import logging
from typing import Optional, List, Dict

from sqlalchemy.exc import IntegrityError

from savekar.errors import BadRequestError, NotFoundError, ConflictError, FolderNotEmptyError
from savekar.extensions import db
from savekar.models.folder import Folder
from savekar.models.website import Website
from savekar.utils.helpers import random_color
from savekar.utils.validators import InputValidator

logger = logging.getLogger(__name__)

ROOT_BREADCRUMB = {"id": None, "name": "Home", "path": "/"}


def get_user_folder(folder_id: Optional[str], user_id: str) -> Optional[Folder]:
    if not folder_id:
        return None
    return Folder.query.filter_by(id=folder_id, user_id=user_id).first()


class FolderService:

    @staticmethod
    def get_folder(user_id: str, folder_id: str) -> Folder:
        folder = get_user_folder(folder_id, user_id)
        if not folder:
            raise NotFoundError("Folder not found")
        return folder

    @staticmethod
    def _sibling_exists(user_id: str, name: str, parent_id: Optional[str], exclude_id: Optional[str] = None) -> bool:
        query = Folder.query.filter(
            Folder.user_id == user_id,
            Folder.name == name,
        )
        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None))
        else:
            query = query.filter(Folder.parent_id == parent_id)
        if exclude_id:
            query = query.filter(Folder.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    @staticmethod
    def create_folder(
        user_id: str,
        name: Optional[str],
        parent_id: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Folder:
        is_valid, name, error = InputValidator.validate_folder_name(name)
        if not is_valid:
            raise BadRequestError(error)

        is_valid, color, error = InputValidator.validate_color(color)
        if not is_valid:
            raise BadRequestError(error)

        is_valid, icon, error = InputValidator.validate_text(icon, "Icon", max_length=50)
        if not is_valid:
            raise BadRequestError(error)

        parent_id = parent_id or None
        path = f"/{name}"
        level = 0

        if parent_id:
            parent = get_user_folder(parent_id, user_id)
            if not parent:
                raise NotFoundError("Parent folder not found", "PARENT_NOT_FOUND")
            path = f"{parent.path}/{name}"
            level = parent.level + 1

        if FolderService._sibling_exists(user_id, name, parent_id):
            raise ConflictError("Folder with this name already exists", "FOLDER_EXISTS")

        folder = Folder(
            user_id=user_id,
            name=name,
            parent_id=parent_id,
            color=color or random_color(),
            icon=icon or "folder",
            path=path,
            level=level,
            is_expanded=True,
        )

        try:
            db.session.add(folder)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Folder with this name already exists", "FOLDER_EXISTS")

        logger.info(f"Folder created: {folder.id} ({folder.path}) by user {user_id}")
        return folder

    @staticmethod
    def list_folders(user_id: str, parent_id: Optional[str] = None) -> List[dict]:
        query = Folder.query.filter_by(user_id=user_id)
        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None))
        else:
            query = query.filter(Folder.parent_id == parent_id)

        folders = query.order_by(Folder.name.asc()).all()

        results = []
        for folder in folders:
            data = folder.to_dict()
            data["website_count"] = folder.website_count
            data["subfolder_count"] = folder.subfolder_count
            results.append(data)
        return results

    @staticmethod
    def _website_counts(user_id: str) -> Dict[Optional[str], int]:
        rows = (
            db.session.query(Website.folder_id, db.func.count(Website.id))
            .filter(Website.user_id == user_id)
            .group_by(Website.folder_id)
            .all()
        )
        return {folder_id: count for folder_id, count in rows}

    @staticmethod
    def build_tree(user_id: str) -> dict:
        """Assemble the owner's folder forest.

        Every folder appears exactly once: under the folder its parent_id
        names, or at the root when it has no parent or the parent is not
        among the owner's folders.
        """
        folders = (
            Folder.query.filter_by(user_id=user_id)
            .order_by(Folder.level.asc(), Folder.name.asc())
            .all()
        )
        counts = FolderService._website_counts(user_id)

        nodes: Dict[str, dict] = {}
        for folder in folders:
            node = folder.to_dict()
            node["website_count"] = counts.get(folder.id, 0)
            node["children"] = []
            nodes[folder.id] = node

        tree = []
        for folder in folders:
            node = nodes[folder.id]
            parent = nodes.get(folder.parent_id) if folder.parent_id else None
            if parent is not None and folder.parent_id != folder.id:
                parent["children"].append(node)
            else:
                tree.append(node)

        return {
            "tree": tree,
            "root_website_count": counts.get(None, 0),
        }

    @staticmethod
    def update_folder(user_id: str, folder_id: str, updates: dict) -> Folder:
        folder = FolderService.get_folder(user_id, folder_id)

        if "name" in updates:
            is_valid, name, error = InputValidator.validate_folder_name(updates["name"])
            if not is_valid:
                raise BadRequestError(error)
            if name != folder.name and FolderService._sibling_exists(user_id, name, folder.parent_id, exclude_id=folder.id):
                raise ConflictError("Folder with this name already exists", "FOLDER_EXISTS")
            # descendants keep the path computed when they were created
            folder.name = name

        if "color" in updates:
            is_valid, color, error = InputValidator.validate_color(updates["color"])
            if not is_valid:
                raise BadRequestError(error)
            if color:
                folder.color = color

        if "icon" in updates:
            is_valid, icon, error = InputValidator.validate_text(updates["icon"], "Icon", max_length=50)
            if not is_valid:
                raise BadRequestError(error)
            folder.icon = icon or folder.icon

        if "is_expanded" in updates:
            folder.is_expanded = bool(updates["is_expanded"])

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Folder with this name already exists", "FOLDER_EXISTS")

        logger.info(f"Folder updated: {folder.id} by user {user_id}")
        return folder

    @staticmethod
    def delete_folder(user_id: str, folder_id: str) -> None:
        folder = FolderService.get_folder(user_id, folder_id)

        subfolder_count = Folder.query.filter_by(user_id=user_id, parent_id=folder.id).count()
        if subfolder_count > 0:
            raise FolderNotEmptyError()

        moved = Website.query.filter_by(user_id=user_id, folder_id=folder.id).update(
            {"folder_id": None}, synchronize_session="fetch"
        )

        db.session.delete(folder)
        db.session.commit()

        logger.info(f"Folder deleted: {folder_id} by user {user_id}, {moved} website(s) moved to root")

    @staticmethod
    def breadcrumb(user_id: str, folder_id: Optional[str]) -> List[dict]:
        if not folder_id:
            return [dict(ROOT_BREADCRUMB)]

        chain = FolderService._find_chain(FolderService.build_tree(user_id)["tree"], folder_id)
        if chain is None:
            raise NotFoundError("Folder not found")

        return [dict(ROOT_BREADCRUMB)] + [
            {"id": node["id"], "name": node["name"], "path": node["path"]}
            for node in chain
        ]

    @staticmethod
    def _find_chain(nodes: List[dict], target_id: str) -> Optional[List[dict]]:
        for node in nodes:
            if node["id"] == target_id:
                return [node]
            child_chain = FolderService._find_chain(node["children"], target_id)
            if child_chain is not None:
                return [node] + child_chain
        return None
