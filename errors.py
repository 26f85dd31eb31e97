"""
API error taxonomy. Every error renders as ``{"success": false, "message": ...}``.
"""
from typing import Optional


class ApiError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(ApiError):
    status_code = 400
    message = "Invalid request"


class Unauthenticated(ApiError):
    # Same text for missing, bad or expired tokens and for deleted admins.
    status_code = 401
    message = "Please authenticate"


class InvalidCredentials(ApiError):
    status_code = 401
    message = "Invalid credentials"


class Conflict(ApiError):
    status_code = 400
    message = "Admin already exists"


class RegistrationClosed(ApiError):
    status_code = 403
    message = "Admin registration is closed"


class ServerError(ApiError):
    status_code = 500
    message = "Server error"
