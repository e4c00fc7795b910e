"""
Exception hierarchy for the satellite classification system.

Every error carries an HTTP status code so the API layer can map it to a
response without knowing the concrete type.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import List, Optional, Sequence

HTTP_400_BAD_REQUEST = HTTPStatus.BAD_REQUEST.value
HTTP_401_UNAUTHORIZED = HTTPStatus.UNAUTHORIZED.value
HTTP_404_NOT_FOUND = HTTPStatus.NOT_FOUND.value
HTTP_422_UNPROCESSABLE_ENTITY = HTTPStatus.UNPROCESSABLE_ENTITY.value


class SatClassError(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, status_code: int = HTTP_400_BAD_REQUEST):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def detail(self):
        return self.message


# Input exceptions
class ValidationError(SatClassError):
    """Raised when an orbital sample violates one or more input rules."""

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        message = "Input validation failed:\n" + "\n".join(self.errors)
        super().__init__(message, status_code=HTTP_422_UNPROCESSABLE_ENTITY)

    @property
    def detail(self):
        return self.errors


class ParseError(SatClassError):
    """Raised when a CSV row cannot be turned into an orbital sample."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Line {line_number}: {reason}", status_code=HTTP_400_BAD_REQUEST)


class DegenerateInputError(SatClassError):
    """Raised when derived features would be non-finite."""

    def __init__(self, message: str = "Derived features are not finite."):
        super().__init__(message, status_code=HTTP_422_UNPROCESSABLE_ENTITY)


class DimensionMismatchError(SatClassError):
    """Raised when a feature vector does not line up with scaler parameters."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Feature vector has {actual} elements, expected {expected}.",
            status_code=HTTP_400_BAD_REQUEST,
        )


# Processing exceptions
class BatchProcessingError(SatClassError):
    """Raised when a whole batch is unusable (empty or no valid rows)."""

    def __init__(self, message: str = "Batch processing failed.", failures: Optional[list] = None):
        self.failures = list(failures or [])
        super().__init__(message, status_code=HTTP_400_BAD_REQUEST)


class UnknownClassError(SatClassError):
    """Raised when a class label is not part of the configuration."""

    def __init__(self, class_name: str):
        self.class_name = class_name
        super().__init__(f"Class '{class_name}' is not configured.", status_code=HTTP_404_NOT_FOUND)


# Session exceptions
class AuthenticationError(SatClassError):
    """Raised when a protected operation is attempted without a session."""

    def __init__(self, message: str = "Authentication required."):
        super().__init__(message, status_code=HTTP_401_UNAUTHORIZED)
