from __future__ import annotations


class ModerationError(Exception):
    """Base for errors a coordinator raises synchronously to its caller."""

    code = "MODERATION_ERROR"
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFound(ModerationError):
    code = "NOT_FOUND"
    http_status = 404


class InvalidTransition(ModerationError):
    code = "INVALID_TRANSITION"
    http_status = 400

    def __init__(self, current: str, requested: str):
        super().__init__(f"Invalid status transition from {current} to {requested}")
        self.current = current
        self.requested = requested


class ReasonRequired(ModerationError):
    code = "REASON_REQUIRED"
    http_status = 400

    def __init__(self, message: str = "Reason is required for rejection or suspension"):
        super().__init__(message)


class NotPending(ModerationError):
    code = "NOT_PENDING"
    http_status = 409

    def __init__(self, message: str = "Version is not pending moderation"):
        super().__init__(message)


class Forbidden(ModerationError):
    code = "FORBIDDEN"
    http_status = 403


class Conflict(ModerationError):
    code = "CONFLICT"
    http_status = 409


class InvalidRequest(ModerationError):
    code = "INVALID_REQUEST"
    http_status = 400
