"""Error kinds raised by the service layer and mapped to HTTP responses in main."""


class VezirError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(VezirError):
    status_code = 400


class NotFoundError(VezirError):
    status_code = 404


class ConflictError(VezirError):
    status_code = 409
