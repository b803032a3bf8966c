"""
Public calculator API consumed by the keypad and the command line.

Every failure inside the pipeline collapses to a single outcome here:
``evaluate`` returns NaN and ``format_result`` turns that into "Error".
``evaluate_result`` keeps the failure reason for callers that want it.
"""
import math

from pocket_calculator.common.errors import CalculatorError
from pocket_calculator.common.logger import logger
from pocket_calculator.common.models import EvaluationResult
from pocket_calculator.engine.formatter import DEFAULT_FORMATTER
from pocket_calculator.engine.parser import ExpressionParser


def evaluate_result(expression: str) -> EvaluationResult:
    """
    Evaluate an expression and report either its value or the error kind.

    A blank expression evaluates to 0.

    :param str expression: Expression as typed (display symbols allowed)

    :return: Tagged evaluation result
    :rtype: EvaluationResult
    """
    if not expression.strip():
        return EvaluationResult(expression=expression, value=0.0)

    try:
        value = ExpressionParser.evaluate(expression)
    except CalculatorError as exc:
        logger.warning("Could not evaluate %r (%s): %s", expression, exc.kind.value, exc)
        return EvaluationResult(expression=expression, error=exc.kind)

    return EvaluationResult(expression=expression, value=value)


def evaluate(expression: str) -> float:
    """Evaluate an expression, returning NaN when it is invalid."""
    return evaluate_result(expression).as_float()


def format_result(value: float) -> str:
    """Format a result for display with the default formatter."""
    return DEFAULT_FORMATTER.format(value)


def is_valid_expression(expression: str) -> bool:
    """
    Check that parentheses are balanced.

    Returns False as soon as a ')' closes more groups than were opened,
    and True only if every '(' is closed by the end.
    """
    depth = 0
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def is_error(value: float) -> bool:
    """True when ``value`` is the error sentinel returned by ``evaluate``."""
    return math.isnan(value)
