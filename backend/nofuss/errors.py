"""
Error Taxonomy

Domain exceptions raised by stores and state machines.
Each carries the HTTP status and machine code the API renders.
"""


class NoFussError(Exception):
    """Base exception for domain errors."""
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class Unauthorized(NoFussError):
    """No session, or the session could not be validated."""
    status_code = 401
    code = "unauthorized"


class NotFound(NoFussError):
    """Missing resource, or one owned by someone else."""
    status_code = 404
    code = "not_found"


class InvalidInput(NoFussError):
    """Missing required field or invalid value."""
    status_code = 400
    code = "invalid_input"


class InvalidStatus(InvalidInput):
    """Deployment status outside the enumerated values."""
    code = "invalid_status"


class InsufficientConversation(InvalidInput):
    """Too few user turns to finalize an idea."""
    code = "insufficient_conversation"


class MalformedSpecification(NoFussError):
    """Extraction produced unparsable or incomplete JSON."""
    status_code = 422
    code = "malformed_specification"


class ConcurrentModification(NoFussError):
    """The project row changed underneath an in-flight update."""
    status_code = 409
    code = "concurrent_modification"


class UpstreamUnavailable(NoFussError):
    """Completion service, build environment or storage unreachable."""
    status_code = 500
    code = "upstream_unavailable"

    public_message = "A required service is unavailable. Please try again."
