class StError(Exception):
    """Base class for errors raised by st."""


class StorageError(StError):
    """The link database could not be opened, queried or written."""


class DuplicateLinkError(StorageError):
    """A link with the requested name already exists."""

    def __init__(self, name: str):
        super().__init__(f"link {name!r} already exists")
        self.name = name


class TokenGenerationError(StError):
    """No random bytes were available for a new anti-forgery token."""


class ValidationError(StError):
    """A submitted form was rejected (bad token or missing fields)."""
