"""Exception hierarchy for the relay."""


class RelayError(Exception):
    """Base class for all relay errors."""
    pass


class EntityValidationError(RelayError, ValueError):
    """Entity spans are out of range, overlap without nesting, or lack metadata."""
    pass


class NotesAPIError(RelayError):
    """Notes backend answered with something we can't use."""
    pass


class ReaderError(RelayError):
    """Web-content extraction returned an unusable payload."""
    pass


class FileTooLargeError(RelayError):
    """Attachment exceeds the Telegram Bot API download limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"File is {size} bytes, limit is {limit} bytes")
        self.size = size
        self.limit = limit
