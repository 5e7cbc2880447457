"""
Engine errors.

Validation problems never surface as exceptions from the public API;
these are raised internally and caught at the API boundary.
"""


class CoupError(Exception):
    """Base class for engine errors."""


class EmptyDeck(CoupError):
    """Raised when drawing from an empty court deck."""


class InvalidStateError(CoupError):
    """Raised when a snapshot violates a structural invariant."""


class OracleError(CoupError):
    """Raised when a decision oracle returns an unusable answer."""


class Rejected(CoupError):
    """
    Raised when a request is not legal right now.

    The API boundary turns it into a log entry on the unchanged state.
    """
