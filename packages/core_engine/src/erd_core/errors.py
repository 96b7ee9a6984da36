from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    EMPTY_INPUT = "EmptyInput"
    MALFORMED_SOURCE = "MalformedSource"
    NO_DEFINITIONS_FOUND = "NoDefinitionsFound"
    CONVERSION_INTERNAL = "ConversionInternal"


class ConversionError(Exception):
    """Base class for failures reported back to the caller as a typed result."""

    kind: ErrorKind = ErrorKind.CONVERSION_INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedFormatError(ConversionError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class EmptyInputError(ConversionError):
    kind = ErrorKind.EMPTY_INPUT


class MalformedSourceError(ConversionError):
    kind = ErrorKind.MALFORMED_SOURCE

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class NoDefinitionsFoundError(ConversionError):
    kind = ErrorKind.NO_DEFINITIONS_FOUND


class ConversionInternalError(ConversionError):
    kind = ErrorKind.CONVERSION_INTERNAL
