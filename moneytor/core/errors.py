# moneytor/core/errors.py


class MoneytorError(Exception):
    """Base error carrying a message that is safe to show to the client."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DatabaseError(MoneytorError):
    """A hosted database call failed."""


class NotFoundError(MoneytorError):
    status_code = 404


class InvariantError(MoneytorError):
    """A request-time check on the data model failed."""

    status_code = 400


class ConflictError(MoneytorError):
    status_code = 409
