"""Custom exception classes for the Mustang Stride tracker.

This module defines application-specific exceptions following Google Python
Style Guide.
"""


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    pass


class ValidationError(TrackerError):
    """Raised when a request is declined before any store mutation."""

    pass


class EmptySubmissionError(ValidationError):
    """Raised when a submission carries no files."""

    def __init__(self, assignment_id: str):
        """Initialize the exception.

        Args:
            assignment_id: The assignment the empty submission targeted.
        """
        self.assignment_id = assignment_id
        super().__init__(
            "You must attach at least one file to submit this assignment."
        )


class InvalidCredentialsError(TrackerError):
    """Raised when a login attempt does not match any user."""

    def __init__(self):
        super().__init__("sorry, wrong credentials")


class PermissionDeniedError(TrackerError):
    """Raised when the session user lacks the role for an action."""

    pass


class NotHydratedError(TrackerError):
    """Raised when state is accessed before hydration has finished."""

    def __init__(self):
        super().__init__("State has not been loaded yet")


class FileReadError(TrackerError):
    """Raised when a file cannot be read into an encoded payload."""

    def __init__(self, name: str, reason: str):
        """Initialize the exception.

        Args:
            name: Name of the file that failed.
            reason: Underlying error message.
        """
        self.name = name
        super().__init__(f"Failed to read file '{name}': {reason}")


class ConfigurationError(TrackerError):
    """Raised when there is a configuration error."""

    pass
