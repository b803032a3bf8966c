"""Error kinds raised by the evaluation pipeline."""
from enum import Enum


class ErrorKind(str, Enum):
    """Reason an expression could not be evaluated."""

    MALFORMED_TOKEN = "MalformedToken"
    UNBALANCED_PARENTHESES = "UnbalancedParentheses"
    INVALID_EXPRESSION = "InvalidExpression"
    DIVISION_BY_ZERO = "DivisionByZero"
    NEGATIVE_SQUARE_ROOT = "NegativeSquareRoot"


class CalculatorError(ValueError):
    """Base class for every evaluation failure. Subclasses set ``kind``."""

    kind: ErrorKind = ErrorKind.INVALID_EXPRESSION


class MalformedTokenError(CalculatorError):
    kind = ErrorKind.MALFORMED_TOKEN


class UnbalancedParenthesesError(CalculatorError):
    kind = ErrorKind.UNBALANCED_PARENTHESES


class InvalidExpressionError(CalculatorError):
    kind = ErrorKind.INVALID_EXPRESSION


class DivisionByZeroError(CalculatorError):
    kind = ErrorKind.DIVISION_BY_ZERO


class NegativeSquareRootError(CalculatorError):
    kind = ErrorKind.NEGATIVE_SQUARE_ROOT
