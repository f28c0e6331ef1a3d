"""Error definitions for s3v2sign.

Every failure raised by the signer carries a short code and the process exit
status the command-line layer reports for it. The signing core raises these
and never handles them itself.
"""

# Exit statuses, following the BSD sysexits convention.
EX_USAGE = 64
EX_DATAERR = 65
EX_UNAVAILABLE = 69
EX_SOFTWARE = 70
EX_CONFIG = 78


class SigningError(Exception):
    """A signing failure with a code, message, and exit status.

    Attributes:
        code: Short machine-readable error code (e.g. "InputDataError").
        message: Human-readable error description.
        exit_status: The process exit status the CLI reports.
    """

    def __init__(self, code: str, message: str, exit_status: int = EX_SOFTWARE) -> None:
        """Initialize the signing error.

        Args:
            code: Error code.
            message: Error description.
            exit_status: Process exit status (default EX_SOFTWARE).
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.exit_status = exit_status


# -- User data ----------------------------------------------------------------


class InputDataError(SigningError):
    """Malformed or disallowed request data."""

    def __init__(self, message: str = "Invalid request data.") -> None:
        super().__init__(code="InputDataError", message=message, exit_status=EX_DATAERR)


class UnsupportedKeyLengthError(InputDataError):
    """The secret key is longer than the hash block size and policy forbids it."""

    def __init__(self, length: int = 0, block_size: int = 64) -> None:
        super().__init__(
            f"Secret key of {length} bytes exceeds the {block_size}-byte block size."
        )
        self.code = "UnsupportedKeyLength"
        self.length = length
        self.block_size = block_size


# -- Invocation ---------------------------------------------------------------


class InvalidOption(SigningError):
    """An invalid or conflicting command-line option was given."""

    def __init__(self, message: str = "Invalid option.") -> None:
        super().__init__(code="InvalidOption", message=message, exit_status=EX_USAGE)


class InternalError(SigningError):
    """An unexpected internal failure."""

    def __init__(self, message: str = "Internal Error") -> None:
        super().__init__(code="InternalError", message=message, exit_status=EX_SOFTWARE)


# -- Environment --------------------------------------------------------------


class InvalidEnvironment(SigningError):
    """The runtime environment cannot support signing (missing settings or primitives)."""

    def __init__(self, message: str = "Invalid environment.") -> None:
        super().__init__(code="InvalidEnvironment", message=message, exit_status=EX_CONFIG)


class PrimitiveFailure(InvalidEnvironment):
    """The hash or base64 primitive could not be invoked."""

    def __init__(self, message: str = "A cryptographic primitive failed.") -> None:
        super().__init__(message)
        self.code = "PrimitiveFailure"


class TransportError(SigningError):
    """The signed request could not be dispatched or was refused."""

    def __init__(self, message: str = "Request dispatch failed.", status: int | None = None) -> None:
        super().__init__(code="TransportError", message=message, exit_status=EX_UNAVAILABLE)
        self.status = status
