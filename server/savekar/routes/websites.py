# server/savekar/routes/websites.py

import logging
from typing import Optional

from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from savekar.extensions import limiter
from savekar.services.website_service import WebsiteService
from savekar.utils.auth import current_owner_id
from savekar.utils.helpers import parse_bool

websites_bp = Blueprint("websites", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def _folder_arg() -> Optional[str]:
    value = request.args.get("folder_id")
    if not value or value == "null":
        return None
    return value


def _create_kwargs(data: dict) -> dict:
    return {
        "title": data.get("title"),
        "description": data.get("description"),
        "tags": data.get("tags"),
        "scheduled_for": data.get("scheduled_for"),
        "folder_id": data.get("folder_id"),
    }


@websites_bp.route("", methods=["GET"])
@jwt_required()
def list_websites():
    user_id = current_owner_id()

    websites = WebsiteService.list_websites(
        user_id,
        website_type=request.args.get("type"),
        search=request.args.get("search"),
        favorites=parse_bool(request.args.get("favorites")),
        folder_id=_folder_arg(),
    )

    return api_response().success(data={"websites": [w.to_dict() for w in websites]})


@websites_bp.route("", methods=["POST"])
@jwt_required()
@limiter.limit("30 per minute")
def create_website():
    user_id = current_owner_id()
    data = request.get_json(silent=True) or {}

    website = WebsiteService.create_website(user_id, data.get("url"), **_create_kwargs(data))

    return api_response().success(
        data={"website": website.to_dict()},
        message="Website saved successfully",
        status=201,
    )


@websites_bp.route("/replace", methods=["POST"])
@jwt_required()
@limiter.limit("30 per minute")
def replace_website():
    user_id = current_owner_id()
    data = request.get_json(silent=True) or {}

    website = WebsiteService.replace_website(
        user_id, data.get("url"), data.get("replace_id"), **_create_kwargs(data)
    )

    return api_response().success(
        data={"website": website.to_dict()},
        message="Website replaced successfully",
        status=201,
    )


@websites_bp.route("/preview", methods=["POST"])
@jwt_required()
@limiter.limit("20 per minute")
def preview_website():
    data = request.get_json(silent=True) or {}
    return api_response().success(data=WebsiteService.preview(data.get("url")))


@websites_bp.route("/<website_id>", methods=["PUT"])
@jwt_required()
def update_website(website_id: str):
    user_id = current_owner_id()
    data = request.get_json(silent=True) or {}

    website = WebsiteService.update_website(user_id, website_id, data)

    return api_response().success(
        data={"website": website.to_dict()},
        message="Website updated successfully",
    )


@websites_bp.route("/<website_id>/view", methods=["POST"])
@jwt_required()
def record_view(website_id: str):
    user_id = current_owner_id()
    website = WebsiteService.record_view(user_id, website_id)
    return api_response().success(data={"website": website.to_dict()})


@websites_bp.route("/<website_id>", methods=["DELETE"])
@jwt_required()
def delete_website(website_id: str):
    user_id = current_owner_id()
    WebsiteService.delete_website(user_id, website_id)
    return api_response().success(message="Website deleted successfully")

