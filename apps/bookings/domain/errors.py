"""
Booking Domain Errors

Business-rule violations raised by the booking aggregate and its use
cases. Each error carries an ``ErrorKind`` tag; the service facade turns
them into ``Result`` failures. None of them is ever retried, except
``StaleBookingError`` which only signals a lost optimistic-lock race.
"""

from shared.application.result import ErrorKind


class BookingError(Exception):
    """Base class for booking business errors"""
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingError):
    """Referenced booking or item does not exist"""
    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(BookingError):
    """Actor is not allowed to perform the operation on this booking"""
    kind = ErrorKind.UNAUTHORIZED


class InvalidStateTransition(BookingError):
    """Current status does not allow the requested transition"""
    kind = ErrorKind.INVALID_STATE_TRANSITION

    def __init__(self, message: str, current_status=None):
        super().__init__(message)
        self.current_status = current_status


class ConflictError(BookingError):
    """Requested dates overlap an active booking of the same item"""
    kind = ErrorKind.CONFLICT


class BookingValidationError(BookingError):
    """Malformed input or an unmet precondition (self-booking, no messages, ...)"""
    kind = ErrorKind.VALIDATION


class StaleBookingError(ConflictError):
    """The booking row changed between read and write (version mismatch)"""

    def __init__(self, booking_id, expected_version: int):
        super().__init__(
            "Rezervacija je u međuvremenu izmenjena. Pokušajte ponovo."
        )
        self.booking_id = booking_id
        self.expected_version = expected_version
