"""
Error taxonomy for activity log scheduling, grouping and authorization.
"""


class ActivityLogError(Exception):
    """Base class for all activity log errors."""


class InvalidDateError(ActivityLogError, ValueError):
    """Date input could not be parsed."""


class InvalidTimeFormatError(ActivityLogError, ValueError):
    """Time input is not a valid 24-hour HH:MM string."""


class InvalidInputError(ActivityLogError, ValueError):
    """Payload is missing required data or tries to change an immutable field."""


class UnauthenticatedError(ActivityLogError):
    """No signed-in user."""


class ForbiddenError(ActivityLogError):
    """Actor lacks the ownership or role for the action."""


class EditWindowExpiredError(ActivityLogError):
    """Mutation attempted on a date outside the editable window."""


class NotFoundError(ActivityLogError):
    """Requested activity or user does not exist."""
