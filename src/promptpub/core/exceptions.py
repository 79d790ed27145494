"""Custom exceptions for PromptPub."""


class PromptPubError(Exception):
    """Base exception for PromptPub errors."""

    status_code: int = 500

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class NotFoundError(PromptPubError):
    """Exception raised when a prompt or version does not exist."""

    status_code = 404

    def __init__(self, message: str, resource: str = None, resource_id: str = None):
        super().__init__(
            message,
            error_code="NOT_FOUND",
            details={"resource": resource, "resource_id": resource_id}
        )
        self.resource = resource
        self.resource_id = resource_id


class InvalidInputError(PromptPubError):
    """Exception raised for input the versioning engine refuses."""

    status_code = 422

    def __init__(self, message: str, field: str = None, value: str = None):
        super().__init__(
            message,
            error_code="INVALID_INPUT",
            details={"field": field, "value": value}
        )
        self.field = field
        self.value = value


class VersionConflictError(PromptPubError):
    """Exception raised when the current-version pointer moved underneath a write."""

    status_code = 409

    def __init__(self, message: str, prompt_id: str = None, expected_version_id: str = None):
        super().__init__(
            message,
            error_code="VERSION_CONFLICT",
            details={"prompt_id": prompt_id, "expected_version_id": expected_version_id}
        )
        self.prompt_id = prompt_id
        self.expected_version_id = expected_version_id


class DatabaseError(PromptPubError):
    """Exception raised for database errors."""

    status_code = 503

    def __init__(self, message: str, operation: str = None):
        super().__init__(
            message,
            error_code="DATABASE_ERROR",
            details={"operation": operation}
        )
        self.operation = operation


class AuthenticationError(PromptPubError):
    """Exception raised when the caller identity is missing."""

    status_code = 401

    def __init__(self, message: str, auth_type: str = None):
        super().__init__(
            message,
            error_code="AUTHENTICATION_ERROR",
            details={"auth_type": auth_type}
        )
        self.auth_type = auth_type


class PermissionDeniedError(PromptPubError):
    """Exception raised for authorization errors."""

    status_code = 403

    def __init__(self, message: str, resource: str = None, action: str = None):
        super().__init__(
            message,
            error_code="PERMISSION_DENIED",
            details={"resource": resource, "action": action}
        )
        self.resource = resource
        self.action = action
