"""Scheduling domain errors.

Services raise these; the exception handlers in ``app.main`` turn them into
the ``{success, message, error}`` envelope with the matching status code.
"""


class SchedulingError(Exception):
    """Base class for every error the scheduling core reports to callers."""

    code = "SchedulingError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidReference(SchedulingError):
    """A doctor, patient, calendar or slot-day id does not resolve."""

    code = "InvalidReference"
    status_code = 404


class InvalidDate(SchedulingError):
    code = "InvalidDate"
    status_code = 400


class SlotUnavailable(SchedulingError):
    """Booking hit a slot that is not ``available`` (or does not exist)."""

    code = "SlotUnavailable"
    status_code = 409


class NotReserved(SchedulingError):
    code = "NotReserved"
    status_code = 409


class Unauthorized(SchedulingError):
    code = "Unauthorized"
    status_code = 403


class NotFound(SchedulingError):
    code = "NotFound"
    status_code = 404


class ValidationFailed(SchedulingError):
    """Request shape is wrong; raised before any store access."""

    code = "ValidationError"
    status_code = 422
