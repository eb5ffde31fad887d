"""Decode errors."""
from typing import Optional


class DecodeError(Exception):
    """Base exception for all schematic decode failures."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset

    def __str__(self) -> str:
        message = super().__str__()
        if self.offset is None:
            return message
        return f"{message} (at byte {self.offset})"


class TransportError(DecodeError):
    """Raised when the byte source or its gzip envelope cannot be read."""
    pass


class TruncatedInput(DecodeError):
    """Raised when fewer bytes remain than a value requires."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 requested: int = 0, received: int = 0):
        super().__init__(message, offset)
        self.requested = requested
        self.received = received


class SchemaViolation(DecodeError):
    """Raised when well-framed tag data does not match the schematic schema."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 name: Optional[str] = None, kind=None):
        super().__init__(message, offset)
        self.name = name
        self.kind = kind


class MalformedLength(SchemaViolation):
    """Raised when a length prefix is negative or exceeds the allowed bound."""

    def __init__(self, message: str, offset: Optional[int] = None, length: int = 0,
                 name: Optional[str] = None, kind=None):
        super().__init__(message, offset, name=name, kind=kind)
        self.length = length
