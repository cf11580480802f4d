class PrintflowError(Exception):
    """Base class for domain errors raised by the service layer."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(PrintflowError):
    pass


class NotFoundError(PrintflowError):
    status_code = 404


class DuplicateCodeError(PrintflowError):
    status_code = 409

    def __init__(self, code):
        super().__init__(f"Code already exists: {code}")
        self.code = code


class DiscountInvalidError(PrintflowError):
    """Raised when a discount code cannot be applied (missing, inactive, expired or used up)."""

    def __init__(self, message, reason):
        super().__init__(message)
        self.reason = reason
