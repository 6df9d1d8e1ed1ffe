from typing import Optional


class MoodFlixError(Exception):
    """Base class of every error the client raises"""


class FunctionError(MoodFlixError):
    """A remote call failed: transport error, non-2xx status or an error body"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthRequiredError(MoodFlixError):
    """The operation needs a signed-in user"""


class StorageError(MoodFlixError):
    """Local storage could not be read or written"""
