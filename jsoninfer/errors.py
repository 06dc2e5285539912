"""Exceptions raised by jsoninfer."""

from typing import List, Optional, Union

PathSegment = Union[int, str]


class SchemaDecodeError(ValueError):
    """
    Exception raised when a sample is not well-formed JSON.

    Attributes:
        message: Human-readable error description, prefixed by every
            enclosing array item and property
        path: Array indices and property names leading to the failure,
            outermost first
        cause: Optional underlying decoder exception
    """

    def __init__(self, message: str, path: Optional[List[PathSegment]] = None,
                 cause: Optional[Exception] = None) -> None:
        self.message = message
        self.path: List[PathSegment] = path or []
        self.cause = cause
        super().__init__(message)

    def wrap(self, context: str, segment: Optional[PathSegment] = None) -> 'SchemaDecodeError':
        """Returns a new error with `context` prepended to the message."""
        path = [segment] + self.path if segment is not None else list(self.path)
        return SchemaDecodeError(f"{context}: {self.message}", path, self.cause)


class SchemaValidationError(ValueError):
    """Exception raised when a raw schema uses a value outside the type vocabulary."""

    def __init__(self, message: str, pointer: str = ''):
        self.message = message
        self.pointer = pointer
        super().__init__(f"{message} at {pointer or '#'}")
