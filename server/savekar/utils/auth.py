# server/savekar/utils/auth.py

import hmac
import logging
from functools import wraps
from typing import Optional

from flask import request, current_app
from flask_jwt_extended import get_jwt, get_jwt_identity

from savekar.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def extract_token_from_header() -> Optional[str]:
    """Extract Bearer token from Authorization header"""
    auth_header = request.headers.get("Authorization", "")

    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()

    return None


def current_owner_id() -> str:
    """Owner id of the authenticated caller; only valid under @jwt_required()"""
    owner_id = get_jwt_identity()
    if not owner_id:
        raise UnauthorizedError("Authentication required", "MISSING_IDENTITY")
    return owner_id


def current_user_info() -> dict:
    claims = get_jwt()
    return {
        "email": claims.get("sub"),
        "name": claims.get("name"),
        "is_guest": bool(claims.get("is_guest", False)),
    }


def cron_secret_required(f):
    """Decorator for scheduler-triggered endpoints, authorised by CRON_SECRET"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("CRON_SECRET")
        token = extract_token_from_header()

        if not expected or not token or not hmac.compare_digest(token, expected):
            logger.warning(f"Rejected cron request from {request.remote_addr}")
            return current_app.api_response.error("Unauthorized", 401, "INVALID_CRON_SECRET")

        return f(*args, **kwargs)

    return decorated_function
