from fastapi import Request, status
from fastapi.responses import JSONResponse


class BookingPlatformError(Exception):
    """Base class for failures that map onto an HTTP status"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingPlatformError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(BookingPlatformError):
    status_code = status.HTTP_403_FORBIDDEN


class BadRequestError(BookingPlatformError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(BadRequestError):
    """Raised when a booking cannot move from its current status to the target"""

    def __init__(self, current, target, message: str = None):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot transition from {current.value} to {target.value}")


class ConflictError(BookingPlatformError):
    status_code = status.HTTP_409_CONFLICT


class CapacityExceededError(ConflictError):
    pass


async def platform_error_handler(request: Request, exc: BookingPlatformError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
