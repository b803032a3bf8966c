"""Tokenize, convert and evaluate canonical arithmetic expressions."""
import math
import operator
import re
from typing import Callable, Dict, List, Tuple

from pocket_calculator.common.errors import (
    DivisionByZeroError,
    InvalidExpressionError,
    MalformedTokenError,
    NegativeSquareRootError,
    UnbalancedParenthesesError,
)
from pocket_calculator.common.logger import logger
from pocket_calculator.common.models import Token, TokenType
from pocket_calculator.engine.preprocessor import preprocess


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise DivisionByZeroError("Division by zero")
    return a / b


def _power(a: float, b: float) -> float:
    if a == 0 and b < 0:
        raise DivisionByZeroError("Zero raised to a negative power")
    try:
        return math.pow(a, b)
    except (ValueError, OverflowError) as exc:
        raise InvalidExpressionError(f"Cannot raise {a} to {b}: {exc}") from exc


def _sqrt(a: float) -> float:
    if a < 0:
        raise NegativeSquareRootError(f"Square root of negative number: {a}")
    return math.sqrt(a)


# Mapping of operator symbols to (precedence, function)
OPERATORS: Dict[str, Tuple[int, Callable[[float, float], float]]] = {
    "+": (1, operator.add),
    "-": (1, operator.sub),
    "*": (2, operator.mul),
    "/": (2, _divide),
    "^": (3, _power),
}

# Unary functions. "neg" is never typed; the tokenizer emits it for a unary
# minus in front of a parenthesis or a square root.
FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "sqrt": _sqrt,
    "neg": operator.neg,
}

SQRT_KEYWORD = "sqrt"
NUMBER_PATTERN = re.compile(r"[0-9]*\.?[0-9]*")
DIGITS = frozenset("0123456789.")


class ExpressionParser:
    """
    Parse and evaluate canonical arithmetic expressions safely.

    Algorithm:
        1. Preprocess display symbols and percentages
        2. Tokenize by scanning characters left to right
        3. Convert to postfix (Reverse Polish Notation) with the Shunting-yard algorithm
        4. Evaluate the postfix sequence on a stack

    Examples:
        - Infix expression: 3+4*2
        - Postfix tokens: 3 4 2 * +

    Every stage raises a ``CalculatorError`` subclass on bad input.
    """

    @staticmethod
    def _number_token(text: str) -> Token:
        """
        Build a NUMBER token, rejecting literals that are not finite floats.

        :param str text: Literal digits, optionally signed

        :return: NUMBER token
        :rtype: Token
        :raises MalformedTokenError: If the literal does not parse to a finite value
        """
        try:
            value = float(text)
        except ValueError:
            raise MalformedTokenError(f"Malformed number: {text!r}") from None
        if not math.isfinite(value):
            raise MalformedTokenError(f"Number out of range: {text!r}")
        return Token(type=TokenType.NUMBER, text=text)

    @staticmethod
    def _is_unary_position(tokens: List[Token]) -> bool:
        """A '-' is unary at the start, after '(' or after an operator or function."""
        return not tokens or tokens[-1].type in (
            TokenType.OPERATOR,
            TokenType.FUNCTION,
            TokenType.LEFT_PAREN,
        )

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split a canonical expression into tokens.

        Whitespace is ignored. A unary minus directly before a number is folded
        into the number literal; before '(' or 'sqrt' it becomes the internal
        ``neg`` function.

        :param str expr: Canonical expression (e.g. "3+sqrt(4)*2")

        :return: List of tokens
        :rtype: List[Token]
        :raises MalformedTokenError: If part of the expression is not a valid token
        """
        expr = "".join(expr.split())
        tokens: List[Token] = []
        i = 0

        while i < len(expr):
            char = expr[i]

            if char in DIGITS:
                run = NUMBER_PATTERN.match(expr, i).group()
                tokens.append(ExpressionParser._number_token(run))
                i += len(run)

            elif char == "-" and ExpressionParser._is_unary_position(tokens):
                rest = expr[i + 1:]
                if rest[:1] and rest[0] in DIGITS:
                    run = NUMBER_PATTERN.match(rest).group()
                    tokens.append(ExpressionParser._number_token("-" + run))
                    i += 1 + len(run)
                elif rest.startswith("(") or rest.startswith(SQRT_KEYWORD):
                    tokens.append(Token(type=TokenType.FUNCTION, text="neg"))
                    i += 1
                else:
                    raise MalformedTokenError(f"Dangling minus sign at position {i}: {expr!r}")

            elif char in OPERATORS:
                tokens.append(Token(type=TokenType.OPERATOR, text=char))
                i += 1

            elif char == "(":
                tokens.append(Token(type=TokenType.LEFT_PAREN, text=char))
                i += 1

            elif char == ")":
                tokens.append(Token(type=TokenType.RIGHT_PAREN, text=char))
                i += 1

            elif expr.startswith(SQRT_KEYWORD, i):
                tokens.append(Token(type=TokenType.FUNCTION, text=SQRT_KEYWORD))
                i += len(SQRT_KEYWORD)

            else:
                raise MalformedTokenError(f"Unexpected character {char!r} at position {i}: {expr!r}")

        logger.debug("Tokenized %r into %s", expr, [t.text for t in tokens])
        return tokens

    @staticmethod
    def to_postfix(tokens: List[Token]) -> List[Token]:
        """
        Convert tokens to postfix order using the Shunting-yard algorithm.

        Equal-precedence operators associate to the left. A function binds to
        the parenthesized group or the single operand that follows it.

        :param List[Token] tokens: Infix tokens

        :return: Tokens in postfix order
        :rtype: List[Token]
        :raises UnbalancedParenthesesError: If a ')' has no matching '(' or a '(' is never closed
        """
        output: List[Token] = []
        stack: List[Token] = []

        for token in tokens:
            if token.type is TokenType.NUMBER:
                output.append(token)

            elif token.type in (TokenType.FUNCTION, TokenType.LEFT_PAREN):
                stack.append(token)

            elif token.type is TokenType.RIGHT_PAREN:
                while stack and stack[-1].type is not TokenType.LEFT_PAREN:
                    output.append(stack.pop())
                if not stack:
                    raise UnbalancedParenthesesError("Closing parenthesis without a matching opener")
                stack.pop()
                # Function application completes when its argument group closes
                if stack and stack[-1].type is TokenType.FUNCTION:
                    output.append(stack.pop())

            else:
                prec = OPERATORS[token.text][0]
                # A pending function takes only the operand just read, so √4+5 is 7 (the Android app gave 3)
                while stack and (
                    stack[-1].type is TokenType.FUNCTION
                    or (stack[-1].type is TokenType.OPERATOR and OPERATORS[stack[-1].text][0] >= prec)
                ):
                    output.append(stack.pop())
                stack.append(token)

        while stack:
            top = stack.pop()
            if top.type is TokenType.LEFT_PAREN:
                raise UnbalancedParenthesesError("Opening parenthesis is never closed")
            output.append(top)

        return output

    @staticmethod
    def evaluate_postfix(tokens: List[Token]) -> float:
        """
        Evaluate a postfix token sequence on a stack.

        :param List[Token] tokens: Tokens in postfix order

        :return: Finite numeric result
        :rtype: float
        :raises InvalidExpressionError: On operand count mismatch or a non-finite intermediate result
        :raises DivisionByZeroError: On division by zero
        :raises NegativeSquareRootError: On the square root of a negative number
        """
        stack: List[float] = []

        for token in tokens:
            if token.type is TokenType.NUMBER:
                stack.append(token.value)
                continue

            if token.type is TokenType.OPERATOR:
                if len(stack) < 2:
                    raise InvalidExpressionError(f"Not enough operands for {token.text!r}")
                b = stack.pop()
                a = stack.pop()
                result = OPERATORS[token.text][1](a, b)
            elif token.type is TokenType.FUNCTION:
                if not stack:
                    raise InvalidExpressionError(f"Missing operand for {token.text!r}")
                result = FUNCTIONS[token.text](stack.pop())
            else:
                raise InvalidExpressionError(f"Unexpected {token.text!r} in postfix sequence")

            if not math.isfinite(result):
                raise InvalidExpressionError(f"Result of {token.text!r} is out of range")
            stack.append(result)

        if len(stack) != 1:
            raise InvalidExpressionError(f"Expected one result, found {len(stack)} values")

        return stack[0]

    @staticmethod
    def evaluate(expr: str) -> float:
        """
        Evaluate a display expression through the whole pipeline.

        :param str expr: Expression as typed (display symbols allowed)

        :return: Computed result as float
        :rtype: float
        :raises CalculatorError: If any stage rejects the expression
        """
        canonical = preprocess(expr)
        tokens = ExpressionParser.tokenize(canonical)
        postfix = ExpressionParser.to_postfix(tokens)
        logger.debug("Postfix for %r: %s", expr, " ".join(t.text for t in postfix))
        return ExpressionParser.evaluate_postfix(postfix)
