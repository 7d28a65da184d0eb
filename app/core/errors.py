"""Error taxonomy for the agent service."""


class AgentServiceError(Exception):
    """Base exception for the agent service."""
    pass


class ValidationError(AgentServiceError, ValueError):
    """Missing or malformed input (400)."""
    pass


class ConflictError(AgentServiceError, ValueError):
    """Duplicate submission or duplicate record (400)."""
    pass


class InvalidStateError(AgentServiceError, ValueError):
    """Operation not allowed from the record's current state (400)."""
    pass


class NotFoundError(AgentServiceError, LookupError):
    """No matching profile or property (404)."""
    pass


class UploadError(AgentServiceError):
    """Object storage or video platform upload failed (500)."""
    pass


class UpstreamUnavailableError(AgentServiceError):
    """Remote identity call failed (network error, timeout, non-2xx)."""
    pass
