"""Custom exception classes for Quiz Hub.

This module defines the error taxonomy shared by every manager. Storage
exceptions never leave the manager layer; they are translated into one of
the classes below.
"""


class QuizHubError(Exception):
    """Base exception for all Quiz Hub errors."""

    def __init__(self, message: str):
        """Initialize the exception.

        Args:
            message: User-facing description of the failure.
        """
        self.message = message
        super().__init__(message)


class ValidationError(QuizHubError):
    """Raised when input is malformed or out of range."""

    pass


class ConflictError(QuizHubError):
    """Raised on unique-constraint or state-guard violations."""

    pass


class NotFoundError(QuizHubError):
    """Raised when a referenced entity does not exist."""

    pass


class ForbiddenError(QuizHubError):
    """Raised when the caller is not allowed to perform an operation."""

    pass


class InvalidCredentialsError(ForbiddenError):
    """Raised when sign-in fails, whatever the underlying cause."""

    def __init__(self):
        super().__init__("Invalid credentials.")


class StorageError(QuizHubError):
    """Raised when the underlying database fails."""

    def __init__(self, message: str = "Storage operation failed."):
        super().__init__(message)
