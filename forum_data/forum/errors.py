"""
Forum Errors

Failures raised by forum operations. Transport and cache errors are not
wrapped; they propagate as WebServiceError / ResponseCacheError.
"""


class ForumError(Exception):
    """Base exception for forum operations."""

    def __init__(self, message: str, response=None):
        super().__init__(message)
        self.message = message
        self.response = response


class EmptyResponseError(ForumError):
    """The service returned no usable payload."""


class ForumNotFoundError(ForumError):
    """No forum in the course matches the requested course module."""


class CreateRejectedError(ForumError):
    """A new discussion was not created (no discussion id returned)."""


class ReplyRejectedError(ForumError):
    """A reply was not created (no post id returned)."""


class StatusUnavailableError(ForumError):
    """A capability check returned nothing usable."""
