"""Domain errors raised by the services and rendered by the API exception handler.

Each error carries the HTTP status code it maps to and a stable ``kind`` string
that clients can switch on (for example to refresh availability after
``SlotTakenError``).
"""


class AppError(Exception):
    status_code: int = 400
    kind: str = "AppError"
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BookingValidationError(AppError):
    kind = "ValidationError"
    default_message = "Psychiatrist ID, date, and time slot are required"


class NotFoundError(AppError):
    status_code = 404
    kind = "NotFoundError"
    default_message = "Resource not found"


class PastDateError(AppError):
    kind = "PastDateError"
    default_message = "Cannot book appointments for past dates"


class PastTimeError(AppError):
    kind = "PastTimeError"
    default_message = "Cannot book appointments for past time slots"


class ProviderUnavailableError(AppError):
    kind = "ProviderUnavailableError"
    default_message = "Psychiatrist is not available on this day"


class SlotTakenError(AppError):
    kind = "SlotTakenError"
    default_message = "This time slot is already booked"


class DoublyBookedError(AppError):
    kind = "DoublyBookedError"
    default_message = "You already have an appointment at this time"


class ForbiddenError(AppError):
    status_code = 403
    kind = "ForbiddenError"
    default_message = "Not authorized to perform this action"


class InvalidStateError(AppError):
    kind = "InvalidStateError"
    default_message = "Appointment can no longer be changed"


class AvailabilitySettingsError(AppError):
    kind = "ValidationError"
    default_message = "Start time and end time are required"
