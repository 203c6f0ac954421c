"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DomainException):
    """Input is malformed or outside the allowed ranges"""

    pass


class NotFoundError(DomainException):
    """Referenced product, application or document does not exist"""

    pass


class UnauthorizedError(DomainException):
    """Credential missing, malformed or expired"""

    pass


class ForbiddenError(DomainException):
    """Valid identity without the role required for the operation"""

    pass


class StorageError(DomainException):
    """Database or file system operation failed unexpectedly"""

    pass
