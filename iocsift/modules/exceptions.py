#!/usr/bin/env python3

"""
Custom exceptions for iocsift
"""

from __future__ import annotations


class IOCSiftError(Exception):
    """Base exception for iocsift."""


class ExtractionError(IOCSiftError):
    """Exception raised when IOC extraction fails."""


class ValidationError(IOCSiftError):
    """Exception raised for input validation errors."""


class ConfigurationError(IOCSiftError):
    """Exception raised for invalid configuration values."""

    def __init__(self, option: str, value: object, reason: str) -> None:
        self.option = option
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for {option}: {reason}")


class InvalidInputError(ValidationError):
    """Exception raised when the text to scan is missing or not a string."""

    def __init__(self, value: object) -> None:
        self.value_type = type(value).__name__
        super().__init__(f"Expected text to scan, got {self.value_type}")


class UnknownCategoryError(ValidationError):
    """Exception raised for an unknown indicator category name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown indicator category: {name}")


class InputTooLargeError(ValidationError):
    """Exception raised when the text exceeds the configured maximum length."""

    def __init__(self, length: int, max_length: int) -> None:
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"Input length ({length} characters) exceeds "
            f"maximum allowed length ({max_length} characters)"
        )


class PatternTimeoutError(ExtractionError):
    """Exception raised when a matcher exceeds its match timeout."""

    def __init__(self, category: str, timeout: float) -> None:
        self.category = category
        self.timeout = timeout
        super().__init__(f"Matching {category} indicators timed out after {timeout:g}s")


class FileParsingError(IOCSiftError):
    """Exception raised when file parsing fails."""


class PDFParsingError(FileParsingError):
    """Exception raised when PDF parsing fails."""


class HTMLParsingError(FileParsingError):
    """Exception raised when HTML parsing fails."""


class FileSizeError(ValidationError):
    """Exception raised when file size exceeds limits."""

    def __init__(self, actual_size_mb: float, max_size_mb: float, item_type: str = "File") -> None:
        self.actual_size_mb = actual_size_mb
        self.max_size_mb = max_size_mb
        self.item_type = item_type
        message = (
            f"{item_type} size ({actual_size_mb:.2f}MB) exceeds "
            f"maximum allowed size ({max_size_mb:.2f}MB)"
        )
        super().__init__(message)


class IOCFileNotFoundError(IOCSiftError):
    """Exception raised when file is not found."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"File not found: {file_path}")


class FileExistenceError(IOCFileNotFoundError):
    """Exception raised when file does not exist or is not accessible."""

    def __init__(self, file_path: str) -> None:
        super().__init__(file_path)
        self.args = (f"The file {file_path} does not exist or is not accessible",)


class UnsupportedFileTypeError(ValidationError):
    """Exception raised for unsupported file types."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"Unsupported file type: {file_path}")


class FileProcessingError(FileParsingError):
    """Exception raised when file processing fails."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Failed to process {file_path}: {reason}")


class PDFProcessingError(PDFParsingError):
    """Exception raised when PDF processing fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Error processing PDF: {reason}")


class HTMLProcessingError(HTMLParsingError):
    """Exception raised when HTML processing fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Error processing HTML: {reason}")
