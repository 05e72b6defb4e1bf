# ============================================================================
# mime_text/exceptions.py
# ============================================================================
"""
Exceptions raised while decoding MIME structure and selecting body text.

Every error carries a human readable message plus optional structured
details.  Errors raised while building a part also carry the partially
built node so callers can inspect what was decoded before the failure.
"""

from typing import Dict, Any, Optional
import functools
import logging

logger = logging.getLogger(__name__)


class MimeTextError(Exception):
    """Base exception for all mime_text errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_exception = original_exception
        # Best-effort node for failures raised by the tree builder
        self.node = None

    def __str__(self) -> str:
        base_msg = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base_msg} (Details: {details_str})"
        return base_msg


class MessageParsingError(MimeTextError):
    """Raised when a message or part cannot be tokenized."""
    pass


class StreamReadError(MessageParsingError):
    """Raised when reading a message or part body fails."""
    pass


class TransferEncodingError(MimeTextError):
    """Raised when a Content-Transfer-Encoding payload cannot be decoded."""
    pass


class UnsupportedEncodingError(TransferEncodingError):
    """Raised for Content-Transfer-Encoding names we do not know."""
    pass


class CharsetError(MimeTextError):
    """Raised when text cannot be converted from its declared charset."""
    pass


class UnknownCharsetError(CharsetError):
    pass


class InvalidEncodingError(CharsetError):
    pass


class MalformedMediaTypeError(MimeTextError):
    """Raised when a Content-Type value cannot be parsed."""
    pass


class MultipartError(MimeTextError):
    """Raised when multipart framing is broken."""
    pass


class BoundaryMissingError(MultipartError):
    pass


class MalformedHTMLError(MimeTextError):
    pass


class TextPartNotFoundError(MimeTextError):
    """Raised when no usable text part exists anywhere in the tree."""
    pass


class SecurityViolationError(MimeTextError):
    """Raised when security limits are exceeded."""
    pass


class NestingTooDeepError(SecurityViolationError):
    pass


def wrap_processing_error(original_error: Exception, context: str,
                          details: Optional[Dict[str, Any]] = None) -> MimeTextError:
    """
    Convert generic exceptions to the matching MimeTextError type.

    Args:
        original_error: The original exception that occurred
        context: Context string describing where the error occurred
        details: Additional details about the error

    Returns:
        Appropriate MimeTextError subclass
    """
    error_type = type(original_error).__name__
    error_msg = str(original_error)

    enhanced_details = {
        "original_error_type": error_type,
        "context": context,
        **(details or {})
    }

    if isinstance(original_error, OSError):
        return StreamReadError(
            f"Read failed in {context}: {error_msg}",
            enhanced_details,
            original_error
        )
    elif isinstance(original_error, UnicodeError):
        return InvalidEncodingError(
            f"Invalid encoding in {context}: {error_msg}",
            enhanced_details,
            original_error
        )
    else:
        return MimeTextError(
            f"Unexpected error in {context}: {error_msg}",
            enhanced_details,
            original_error
        )


def handle_processing_errors(context: str):
    """
    Decorator turning stray exceptions into MimeTextError subclasses.

    Args:
        context: Description of the operation being performed

    Usage:
        @handle_processing_errors("message parsing")
        def parse(message):
            ...
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except MimeTextError:
                raise
            except Exception as e:
                wrapped_error = wrap_processing_error(e, context, {"function": func.__name__})
                logger.error(f"Error in {context}: {wrapped_error}", exc_info=True)
                raise wrapped_error from e
        return wrapper
    return decorator


def raise_file_too_large(filename: str, size_mb: float, max_size_mb: float):
    """Raise SecurityViolationError for messages that are too large."""
    raise SecurityViolationError(
        f"File '{filename}' exceeds size limit",
        {
            "filename": filename,
            "size_mb": round(size_mb, 2),
            "max_size_mb": max_size_mb,
            "violation_type": "file_size_limit"
        }
    )


def raise_nesting_too_deep(depth: int, max_depth: int):
    """Raise NestingTooDeepError for multipart nesting that's too deep."""
    raise NestingTooDeepError(
        f"MIME nesting too deep: {depth} exceeds limit of {max_depth}",
        {
            "current_depth": depth,
            "max_depth": max_depth,
            "violation_type": "nesting_depth_limit"
        }
    )
