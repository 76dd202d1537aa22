"""Error taxonomy for the tracker."""


class TrackerError(Exception):
    """Base class for tracker errors."""


class ValidationError(TrackerError):
    """Required input is missing or malformed."""


class InvalidInputError(ValidationError):
    """An estimation request carried neither an image nor a description."""


class PersistenceError(TrackerError):
    """The key-value store failed to read or write."""


class RemoteServiceError(TrackerError):
    """The estimation API was unreachable or returned an error."""


class ParseError(TrackerError):
    """A remote response could not be parsed into the expected shape."""
