# server/savekar/routes/auth.py

import logging

import requests
from flask import Blueprint, request, current_app
from flask_jwt_extended import create_access_token, jwt_required

from savekar.errors import BadRequestError, UnauthorizedError
from savekar.extensions import limiter
from savekar.utils.auth import current_user_info
from savekar.utils.helpers import mask_email, parse_bool
from savekar.utils.validators import InputValidator

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def _issue_token(email: str, name: str, is_guest: bool = False) -> dict:
    access_token = create_access_token(
        identity=email,
        additional_claims={"name": name, "is_guest": is_guest},
    )
    return {
        "access_token": access_token,
        "user": {"email": email, "name": name, "is_guest": is_guest},
    }


def verify_google_token(id_token: str) -> dict:
    """Check a Google ID token with the tokeninfo endpoint and return its claims"""
    try:
        response = requests.get(
            current_app.config["GOOGLE_TOKENINFO_URL"],
            params={"id_token": id_token},
            timeout=10,
        )
    except requests.RequestException as e:
        logger.error(f"Google token verification request failed: {e}")
        raise UnauthorizedError("Could not verify Google token", "GOOGLE_VERIFY_FAILED")

    if response.status_code != 200:
        raise UnauthorizedError("Invalid Google token", "INVALID_GOOGLE_TOKEN")

    claims = response.json()

    if claims.get("aud") != current_app.config.get("GOOGLE_CLIENT_ID"):
        raise UnauthorizedError("Google token was issued for another client", "INVALID_GOOGLE_TOKEN")

    if not claims.get("email") or not parse_bool(claims.get("email_verified")):
        raise UnauthorizedError("Google account email is not verified", "EMAIL_NOT_VERIFIED")

    return claims


@auth_bp.route("/guest", methods=["POST"])
@limiter.limit("10 per minute")
def guest_login():
    data = request.get_json(silent=True) or {}
    name = InputValidator.sanitize_string(data.get("name"), max_length=100)

    if not name:
        raise BadRequestError("Name is required", "NAME_REQUIRED")

    email = current_app.config["GUEST_EMAIL"]
    logger.info(f"Guest session issued for {name}")

    return current_app.api_response.success(
        data=_issue_token(email, name, is_guest=True),
        message="Signed in as guest",
    )


@auth_bp.route("/google", methods=["POST"])
@limiter.limit("10 per minute")
def google_login():
    data = request.get_json(silent=True) or {}
    id_token = data.get("id_token")

    if not id_token or not isinstance(id_token, str):
        raise BadRequestError("id_token is required", "TOKEN_REQUIRED")

    claims = verify_google_token(id_token)
    email = claims["email"].strip().lower()
    name = claims.get("name") or email.split("@")[0]

    logger.info(f"Google sign-in for {mask_email(email)}")

    return current_app.api_response.success(
        data=_issue_token(email, name),
        message="Signed in with Google",
    )


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def get_current_user():
    return current_app.api_response.success(data={"user": current_user_info()})
