class AttendanceError(Exception):
    """Base class for errors surfaced to API clients as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AttendanceError):
    """Malformed or missing request fields, or a business rule violation."""

    status_code = 400


class NotFoundError(AttendanceError):
    """Unknown id or RFID card."""

    status_code = 404


class ConflictError(AttendanceError):
    """RFID card already assigned to a different owner."""

    status_code = 400


class PersistenceError(AttendanceError):
    """Storage unavailable or a write failed."""

    status_code = 500
