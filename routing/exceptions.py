class RoutingError(Exception):
    """Base class for rejected routing operations. `reason` is shown to the user."""
    status_code = 400
    default_reason = "Routing operation failed"

    def __init__(self, reason=None):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class FileNotFound(RoutingError):
    status_code = 404
    default_reason = "File not found"


class AuthorizationError(RoutingError):
    status_code = 403
    default_reason = "You are not allowed to perform this action"


class InactiveProfileError(AuthorizationError):
    default_reason = "Current user not found in e-filing system"


class MarkPermissionError(AuthorizationError):
    default_reason = "You do not have permission to mark this file"


class SignatureRequiredError(AuthorizationError):
    default_reason = "E-signature required before marking forward"


class EligibilityError(RoutingError):
    default_reason = "Selected user is not allowed based on SLA matrix/location rules"


class GeographicMismatchError(RoutingError):

    def __init__(self, scope):
        self.scope = scope
        super().__init__(f"Geographic mismatch: required scope {scope}")
