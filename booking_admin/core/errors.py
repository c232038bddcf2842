"""Error taxonomy shared by the handlers and services"""
from typing import Optional


class BookingAdminError(Exception):
    status_code = 500
    message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthenticationError(BookingAdminError):
    status_code = 401
    message = "Authorization header required"


class PermissionDeniedError(BookingAdminError):
    status_code = 403
    message = "Admin permissions required"


class RequestValidationFailed(BookingAdminError):
    status_code = 400
    message = "Missing required parameters"


class NotFoundError(BookingAdminError):
    status_code = 404

    def __init__(self, resource_name: str = "Resource", resource_id: Optional[str] = None):
        self.resource_name = resource_name
        self.resource_id = resource_id
        if resource_id:
            message = f"{resource_name} with id {resource_id} not found"
        else:
            message = f"{resource_name} not found"
        super().__init__(message)


class StoreFailure(BookingAdminError):
    status_code = 500
    message = "Database operation failed"


class StoreTimeoutError(StoreFailure):
    status_code = 504

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("Database operation timed out")


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[str] = None) -> None:
    if not item:
        raise NotFoundError(resource_name, resource_id)
