"""Error taxonomy shared by the gateway, services and pages."""


class GatewayError(Exception):
    """Raised when a backend call fails.

    ``kind`` tags the failure: ``network``, ``constraint``, ``not_found``
    or ``backend``.
    """

    kind = "backend"

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class NotFoundError(GatewayError):
    """Raised when a record addressed by identity does not exist."""

    kind = "not_found"


class ValidationError(Exception):
    """Raised before submission when input fails client-side checks."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(summary or "Invalid input")


class CapacityExceededError(Exception):
    """Raised when a bounded slot set (featured, comparison) is full."""

    def __init__(self, message: str, limit: int):
        super().__init__(message)
        self.limit = limit
