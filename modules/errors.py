"""
errors.py — Exception taxonomy for snapshot capture and process termination.

Only CaptureError ever escapes a ClosePolicy run; termination errors are
absorbed into the per-process outcome.
"""

PERMISSION_DENIED = "permission-denied"
INVALID_IDENTIFIER = "invalid-identifier"

# What Android prints when the shell user may not dump or stop something.
# Matched case-insensitively.
PERMISSION_MARKERS = ("permission denial", "securityexception")


def is_permission_denial(output: str) -> bool:
    text = output.lower()
    return any(marker in text for marker in PERMISSION_MARKERS)


class BoosterError(Exception):
    """Base class for every error raised by this package."""


class AdbError(RuntimeError, BoosterError):
    """ADB is missing, timed out, or reported an error on stderr."""


class CaptureError(BoosterError):
    """The snapshot provider could not enumerate running processes."""


class InvalidMode(ValueError, BoosterError):
    """A termination mode string is neither Normal nor Extreme."""


class TerminationError(BoosterError):
    """A terminator could not close one process.

    ``reason`` is the text that ends up in the ``failed:<reason>`` tag.
    """

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


class PermissionDenied(TerminationError):
    """The platform refused to close this process."""

    def __init__(self, identifier: str, detail: str = ""):
        super().__init__(identifier, PERMISSION_DENIED)
        self.detail = detail


class TerminationFailure(TerminationError):
    """Any other terminator-side failure."""
