"""
Result object for error handling at the r2dice boundaries.

The evaluator itself raises exceptions. Callers that prefer a value they
can inspect (the CLI, the HTTP API, scripts) go through DiceEngine.roll,
which returns a Result object instead of raising.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """
    Standard error codes for Result objects.

    Provides machine-readable error classification for better error handling.
    """

    # Expression errors
    SYNTAX_ERROR = "syntax_error"
    INVALID_DIE = "invalid_die"
    UNSUPPORTED_SUFFIX = "unsupported_suffix"
    DIVISION_BY_ZERO = "division_by_zero"
    LIMIT_EXCEEDED = "limit_exceeded"
    EVALUATION_ERROR = "evaluation_error"

    # Request errors
    INVALID_INPUT = "invalid_input"

    # Generic errors
    UNEXPECTED_ERROR = "unexpected_error"

    def __str__(self) -> str:
        """Return the error code value."""
        return self.value


@dataclass
class Result:
    """
    Represents the result of an operation that can succeed or fail.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        error: Error message if failed
        error_code: Machine-readable error code if failed
        details: Extra machine-readable context for failures (e.g. position)

    Examples:
        >>> result = engine.roll("2d6+3")
        >>> if result.success:
        ...     print(result.data['result'].value)

        >>> result = Result.fail("Unexpected token", ErrorCode.SYNTAX_ERROR)
        >>> if not result.success:
        ...     print(f"Error: {result.error}")
    """
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    details: Optional[dict] = None

    @staticmethod
    def ok(data: Any = None) -> 'Result':
        """
        Create a successful result.

        Args:
            data: Optional data to return

        Returns:
            Result with success=True
        """
        return Result(success=True, data=data)

    @staticmethod
    def fail(
        error: str,
        code: Optional[str | ErrorCode] = None,
        details: Optional[dict] = None
    ) -> 'Result':
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            code: Machine-readable error code (ErrorCode enum or string)
            details: Optional extra context

        Returns:
            Result with success=False

        Examples:
            >>> Result.fail("Division by zero", ErrorCode.DIVISION_BY_ZERO)
            >>> Result.fail("Bad request", "CUSTOM_ERROR")
        """
        error_code_str = code.value if isinstance(code, ErrorCode) else code
        return Result(success=False, error=error, error_code=error_code_str, details=details)

    def __bool__(self) -> bool:
        """Allow using Result in boolean context: if result: ..."""
        return self.success
