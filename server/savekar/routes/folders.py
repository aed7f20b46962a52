# server/savekar/routes/folders.py

import logging
from typing import Optional

from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from savekar.services.folder_service import FolderService
from savekar.utils.auth import current_owner_id

folders_bp = Blueprint("folders", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def _parent_arg(name: str) -> Optional[str]:
    value = request.args.get(name)
    if not value or value == "null":
        return None
    return value


@folders_bp.route("", methods=["GET"])
@jwt_required()
def list_folders():
    user_id = current_owner_id()
    folders = FolderService.list_folders(user_id, parent_id=_parent_arg("parent_id"))
    return api_response().success(data={"folders": folders})


@folders_bp.route("", methods=["POST"])
@jwt_required()
def create_folder():
    user_id = current_owner_id()
    data = request.get_json(silent=True) or {}

    folder = FolderService.create_folder(
        user_id,
        name=data.get("name"),
        parent_id=data.get("parent_id"),
        color=data.get("color"),
        icon=data.get("icon"),
    )

    return api_response().success(
        data={"folder": folder.to_dict()},
        message="Folder created successfully",
        status=201,
    )


@folders_bp.route("/tree", methods=["GET"])
@jwt_required()
def folder_tree():
    user_id = current_owner_id()
    return api_response().success(data=FolderService.build_tree(user_id))


@folders_bp.route("/breadcrumb", methods=["GET"])
@jwt_required()
def folder_breadcrumb():
    user_id = current_owner_id()
    breadcrumb = FolderService.breadcrumb(user_id, _parent_arg("folder_id"))
    return api_response().success(data={"breadcrumb": breadcrumb})


@folders_bp.route("/<folder_id>", methods=["PUT"])
@jwt_required()
def update_folder(folder_id: str):
    user_id = current_owner_id()
    data = request.get_json(silent=True) or {}

    folder = FolderService.update_folder(user_id, folder_id, data)

    return api_response().success(
        data={"folder": folder.to_dict()},
        message="Folder updated successfully",
    )


@folders_bp.route("/<folder_id>", methods=["DELETE"])
@jwt_required()
def delete_folder(folder_id: str):
    user_id = current_owner_id()
    FolderService.delete_folder(user_id, folder_id)
    return api_response().success(message="Folder deleted successfully")
