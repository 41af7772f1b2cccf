"""
Exceptions raised while parsing or evaluating dice expressions.

Every error derives from EvaluationError so callers can catch one type.
"""

from r2dice.core.result import ErrorCode


class EvaluationError(Exception):
    """Raised when an expression cannot be evaluated."""

    code = ErrorCode.EVALUATION_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DiceSyntaxError(EvaluationError):
    """Raised when expression text does not match the grammar."""

    code = ErrorCode.SYNTAX_ERROR

    def __init__(self, position: int, message: str):
        super().__init__(f"Syntax error at position {position}: {message}")
        self.position = position
        self.reason = message


class InvalidDieError(EvaluationError):
    """Raised when a die with fewer than one side is requested."""

    code = ErrorCode.INVALID_DIE

    def __init__(self, sides: int):
        super().__init__(f"Die must have at least 1 side, got {sides}")
        self.sides = sides


class UnsupportedSuffixError(EvaluationError):
    """Raised when a parsed suffix has no evaluation rule."""

    code = ErrorCode.UNSUPPORTED_SUFFIX


class DivisionByZeroError(EvaluationError):
    """Raised on division or modulo by zero."""

    code = ErrorCode.DIVISION_BY_ZERO


class DiceLimitError(EvaluationError):
    """Raised when an expression exceeds a configured limit."""

    code = ErrorCode.LIMIT_EXCEEDED


__all__ = [
    'EvaluationError',
    'DiceSyntaxError',
    'InvalidDieError',
    'UnsupportedSuffixError',
    'DivisionByZeroError',
    'DiceLimitError',
]
