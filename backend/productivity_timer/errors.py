"""Domain errors raised by the timer, stats and auth layers.

Routers never build HTTP errors for these themselves; the application maps
each class to a status code in one place (see ``productivity_timer.__init__``).
"""
from fastapi import status


class TimerAppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthError(TimerAppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"


class NotFoundError(TimerAppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationError(TimerAppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class ClockAnomalyError(TimerAppError):
    """Elapsed time came out negative; the stored timestamps are ahead of now."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Elapsed time is negative"


class PersistenceError(TimerAppError):
    default_detail = "Storage operation failed"
