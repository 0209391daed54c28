"""
Error taxonomy shared by services and routers.

Services raise these; the handler registered in app.main turns them into
JSON responses so no error escapes an operation unhandled.
"""


class AppError(Exception):
    """Base class for caller-visible failures"""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class UnauthenticatedError(AppError):
    """Missing, malformed or expired identity token"""

    status_code = 401
    default_detail = "Invalid or expired token"


class ForbiddenError(AppError):
    """Valid identity holding the wrong role"""

    status_code = 403
    default_detail = "Access denied"


class NotFoundError(AppError):
    """
    Entity does not exist, or exists outside the caller's scope or
    precondition. Ownership and state failures share this error so that
    other suppliers' orders are not revealed.
    """

    status_code = 404
    default_detail = "Not found"


class InvalidStateError(AppError):
    """Transition not permitted from the entity's current state"""

    status_code = 409
    default_detail = "Operation not permitted in the current state"


class ValidationError(AppError):
    """Missing or malformed required input"""

    status_code = 400
    default_detail = "Invalid request"


class StoreError(AppError):
    """Persistence failure; detail is logged, never returned"""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail=None):
        # Callers always see the generic message
        super().__init__(None)
        self.internal_detail = detail
