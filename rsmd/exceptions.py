"""Custom exceptions for research-software-metadata."""


class RsmdError(Exception):
    """Base exception for all rsmd operations."""


class ConfigurationError(RsmdError):
    """Raised when configuration validation fails."""


class ParseError(RsmdError):
    """Raised when a metadata file is present but malformed for its format.

    Fatal: the crosswalk aborts before writing anything.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class FileProcessingError(RsmdError):
    """Raised when file operations fail."""
