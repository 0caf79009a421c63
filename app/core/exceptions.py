"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class AppointmentNotEditableException(BadRequestException):
    """Appointment can no longer be modified in its current state."""

    def __init__(self, message: str = "Appointment is not editable in its current state"):
        """Initialize with 400 status code."""
        super().__init__(message)


class InvalidStatusTransitionException(BadRequestException):
    """Requested status change is not a legal lifecycle move."""

    def __init__(self, current: str, target: str):
        """Initialize with the rejected transition."""
        self.current = current
        self.target = target
        super().__init__(f"Cannot change appointment status from '{current}' to '{target}'")


class ConfigurationException(AppException):
    """Inconsistent account state, e.g. an employee without a clinic."""

    def __init__(self, message: str = "Account configuration error"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)
