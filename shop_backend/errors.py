"""
Error kinds raised by repositories and route handlers.

Each error knows the HTTP status and envelope ``code`` it maps to; the
handlers registered in ``shop_backend.app`` turn them into
``{"code": ..., "message": ...}`` responses.
"""

from __future__ import annotations


class ApiError(Exception):
    status_code = 500
    code = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(ApiError):
    status_code = 400
    code = "Bad Request"


class NotFoundError(ApiError):
    status_code = 404
    code = "Not Found"
