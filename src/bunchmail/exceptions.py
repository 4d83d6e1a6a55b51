"""Custom exceptions for bunchmail."""


class BunchmailError(Exception):
    """Base exception for all bunchmail errors."""


class ConfigurationError(BunchmailError):
    """Exception raised when the run is not configured well enough to start."""


class MaildirError(BunchmailError):
    """Exception raised for filesystem faults while reading or writing maildirs."""


class MessageLoadError(MaildirError):
    """Exception raised when a message file cannot be read or parsed."""


class OutputWriteError(MaildirError):
    """Exception raised when the output maildir cannot be created or written."""
