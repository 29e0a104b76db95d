"""
Exception types raised by learnpath.

- ApiError: any failed exchange with the platform API
- CurriculumLoadError: curriculum missing or unusable
"""

from typing import Optional


class LearnPathError(Exception):
    """Base class for learnpath errors."""


class ApiError(LearnPathError):
    """A request to the platform API failed or returned an error envelope."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.endpoint = endpoint

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status {self.status_code})"
        return self.message


class CurriculumLoadError(LearnPathError):
    """The curriculum could not be loaded or contains no modules."""
