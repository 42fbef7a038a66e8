from queue_desk.core.error_codes import ErrorCode


class DomainException(Exception):
    """Business rule violation raised by the service layer."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class InputValidationError(DomainException):
    """Field-level input errors, collected before any write."""

    def __init__(self, fields: dict[str, str], message: str = "Request is invalid."):
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)
        self.fields = fields


class BookingValidationError(InputValidationError):
    def __init__(self, fields: dict[str, str]):
        super().__init__(fields=fields, message="Booking request is invalid.")


class CatalogError(DomainException):
    """Unknown service code or variant: a configuration problem, not user input."""

    def __init__(self, message: str):
        super().__init__(code=ErrorCode.CONFIGURATION_ERROR, message=message)
