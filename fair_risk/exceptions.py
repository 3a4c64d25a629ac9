"""Exceptions raised by the FAIR risk engine."""


class InvalidParameterError(ValueError):
    """Raised when estimates, counts or statistical parameters are out of range.

    Always raised before any random draw is made, so a failed call leaves the
    random generator untouched.
    """
