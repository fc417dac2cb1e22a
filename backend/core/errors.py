"""Errors raised by the quality engine.

All of them are recoverable and carry a message meant for the operator.
"""


class QualityError(Exception):
    """Base class for engine errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(QualityError):
    """A measurement value or request field has the wrong type or shape."""


class UnknownParameter(QualityError):
    """A measurement references a parameter missing from the control plan."""


class InvalidState(QualityError):
    """An operation is not allowed in the entity's current status."""


class NoActiveControlPlan(QualityError):
    """The part has no Active control plan to sample against."""


class NotFound(QualityError):
    """No record with the requested id exists."""


class PartNotFound(NotFound):
    """No Active part matches the requested id or part code."""
