"""Error taxonomy shared by the services and the API layer."""


class BloodLinkError(Exception):
    """Base class; ``kind`` is the machine-readable name sent to clients."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(BloodLinkError):
    kind = "conflict"


class NotFoundError(BloodLinkError):
    kind = "not_found"


class ValidationError(BloodLinkError, ValueError):
    kind = "validation_error"
