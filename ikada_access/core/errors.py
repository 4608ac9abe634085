"""
Domain errors raised by the access-control engine.

Services raise these; ``ikada_access.main`` maps them onto HTTP responses.
A denial from the enforcement gate is not an error inside the engine, it only
becomes ``NotAuthorizedError`` at the route guard.
"""


class AccessError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(AccessError):
    """A referenced role, permission, actor, branch or record does not exist."""

    status_code = 404


class ConflictError(AccessError):
    """A unique name or key is already taken."""

    status_code = 409


class ValidationError(AccessError):
    """Input is malformed; raised before any state is changed."""

    status_code = 400


class NotAuthorizedError(AccessError):
    """The gate denied the action. The detail never names the missing permission."""

    status_code = 403

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(detail)
