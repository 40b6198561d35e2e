"""Domain exceptions."""


class AuthzError(Exception):
    """Base exception for authzcore."""

    pass


class ConfigurationError(AuthzError):
    """A policy document or pattern set is malformed."""

    pass


class InvalidDocument(ConfigurationError):
    """Policy document failed to parse or validate."""

    pass


class NotFound(AuthzError):
    """Requested entity was not found."""

    def __init__(self, entity: str, identifier: str) -> None:
        super().__init__(f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class PermissionDenied(AuthzError):
    """Principal does not have permission for the requested action."""

    pass


class SystemPolicyError(AuthzError):
    """System-managed policies cannot be detached or deleted."""

    pass


class ValidationError(AuthzError):
    """Validation failed for input data."""

    pass
