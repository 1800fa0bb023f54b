"""Service-layer exceptions.

Services raise these; route handlers translate them to HTTP responses
using the status_code each class carries. Anything raised before a
commit aborts the request with no email and no push.
"""


class HireboardError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400


class NotFoundError(HireboardError):
    status_code = 404


class PermissionDeniedError(HireboardError):
    status_code = 403


class AlreadyExistsError(HireboardError):
    """The thing being created exists already (profile, review, saved job)."""

    status_code = 400


class DuplicateApplicationError(AlreadyExistsError):
    pass


class InvalidTransitionError(HireboardError):
    """Raised when a status transition is not allowed (strict mode only)."""

    status_code = 409


class ValidationError(HireboardError):
    status_code = 400
