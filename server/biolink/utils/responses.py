# server/biolink/utils/responses.py

from typing import Optional

from flask import jsonify


class ApiResponse:

    @staticmethod
    def success(data: Optional[dict] = None, message: Optional[str] = None, status: int = 200):
        body = {"success": True}
        if message:
            body["message"] = message
        if data is not None:
            body["data"] = data
        return jsonify(body), status

    @staticmethod
    def error(message: str, status: int = 400, code: Optional[str] = None, details: Optional[dict] = None):
        body = {"success": False, "error": message}
        if code:
            body["code"] = code
        if details:
            body["details"] = details
        return jsonify(body), status
