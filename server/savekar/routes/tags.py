# server/savekar/routes/tags.py

import logging

from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from savekar.services.tag_service import TagService
from savekar.utils.auth import current_owner_id

tags_bp = Blueprint("tags", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


@tags_bp.route("", methods=["GET"])
@jwt_required()
def list_tags():
    user_id = current_owner_id()
    tags = TagService.list_tags(user_id, search=request.args.get("search"))
    return api_response().success(data={"tags": [t.to_dict() for t in tags]})


@tags_bp.route("", methods=["POST"])
@jwt_required()
def create_tag():
    user_id = current_owner_id()
    data = request.get_json(silent=True) or {}

    tag = TagService.create_or_increment(user_id, data.get("name"), color=data.get("color"))

    return api_response().success(data={"tag": tag.to_dict()})
