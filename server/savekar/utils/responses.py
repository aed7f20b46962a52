# server/savekar/utils/responses.py

from typing import Any, Optional

from flask import jsonify


class ApiResponse:
    """Builds the JSON envelope every endpoint answers with.

    Attached to the application as ``app.api_response`` so routes can call
    ``current_app.api_response.success(...)`` without importing this module.
    """

    @staticmethod
    def success(data: Any = None, message: Optional[str] = None, status: int = 200):
        body = {"success": True}
        if data is not None:
            body["data"] = data
        if message:
            body["message"] = message
        return jsonify(body), status

    @staticmethod
    def error(message: str, status: int = 400, code: Optional[str] = None, data: Any = None):
        body = {
            "success": False,
            "error": message,
        }
        if code:
            body["code"] = code
        if data is not None:
            body["data"] = data
        return jsonify(body), status
