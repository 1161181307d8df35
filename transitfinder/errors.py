class TransitFinderError(Exception):
    """Base exception for transitfinder errors."""


class InputError(TransitFinderError, ValueError):
    """Raised for invalid user input (dates, coordinates, constraints, sites)."""


class TargetDataError(TransitFinderError):
    """Raised when the target list cannot be read."""


class SunEventRangeError(TransitFinderError):
    """Raised when a sunset/sunrise lookup falls outside the precomputed range.

    This signals an internal invariant violation (the margin around the
    requested window was too small), not a problem with user input.
    """
