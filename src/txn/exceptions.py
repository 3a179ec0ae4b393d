"""
txnctl Custom Exceptions

This module defines the exception classes raised while collecting and
submitting a transaction. Every exception carries the process exit code
the command line reports when it aborts.
"""

import enum
from typing import Optional


class ExitCode(enum.IntEnum):
    """Process exit codes, compatible with etcdctl."""
    SUCCESS = 0
    ERROR = 1
    BAD_CONNECTION = 2
    INVALID_INPUT = 3            # txn line grammar or truncated input
    BAD_FEATURE = 4
    INTERRUPTED = 5
    IO = 6
    BAD_ARGS = 128


class TxnCtlException(Exception):
    """
    Base exception class for all txnctl errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        exit_code: ExitCode = ExitCode.ERROR,
        details: Optional[str] = None,
    ):
        """
        Initialize TxnCtlException.

        Args:
            message: Human-readable error message
            exit_code: Process exit code to report
            details: Additional error details (optional)
        """
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.details = details

    def to_dict(self) -> dict:
        """Convert exception to dict for structured logging."""
        result = {
            "error": self.message,
            "exit_code": int(self.exit_code),
        }
        if self.details:
            result["details"] = self.details
        return result


class InvalidInputLine(TxnCtlException):
    """
    Exception raised when an input line does not match its grammar.

    Covers wrong field counts, unknown tokens and non-numeric integer fields.
    The offending raw line is kept on the exception.
    """

    def __init__(
        self,
        line: str,
        message: str = "invalid input line",
        details: Optional[str] = None,
    ):
        super().__init__(
            message=f"{message}: {line}",
            exit_code=ExitCode.INVALID_INPUT,
            details=details,
        )
        self.line = line


class InputReadFailure(TxnCtlException):
    """Exception raised when the input ends or errors while a line is expected."""

    def __init__(
        self,
        message: str = "failed to read input line",
        details: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            exit_code=ExitCode.INVALID_INPUT,
            details=details,
        )


class ConnectionFailure(TxnCtlException):
    """Exception raised when the store connection cannot be established."""

    def __init__(
        self,
        endpoint: str,
        message: str = "Failed to connect to store",
        details: Optional[str] = None,
    ):
        super().__init__(
            message=f"{message}: {endpoint}" + (f" ({details})" if details else ""),
            exit_code=ExitCode.BAD_CONNECTION,
            details=details,
        )
        self.endpoint = endpoint


class SubmissionFailure(TxnCtlException):
    """
    Exception raised when the transaction RPC returns an error.

    The transaction is never retried after this error.
    """

    def __init__(
        self,
        message: str = "Transaction submission failed",
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(
            message=message + (f": {details}" if details else ""),
            exit_code=ExitCode.ERROR,
            details=details,
        )
        self.status_code = status_code


class BadArgumentsError(TxnCtlException):
    """Exception raised when a command is invoked with unsupported arguments."""

    def __init__(
        self,
        message: str = "bad arguments",
        details: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            exit_code=ExitCode.BAD_ARGS,
            details=details,
        )
