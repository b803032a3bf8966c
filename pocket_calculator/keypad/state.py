"""
Keypad editing rules as pure transitions over an immutable display state.

Each ``press_*`` function takes the current ``CalculatorState`` and returns the
next one; nothing is mutated in place. The text uses display symbols
(``+ − × ÷ √ ² %``) and is handed to the calculator only on ``=``.
"""
import re
from typing import Callable, Dict

from pydantic import BaseModel, ConfigDict, Field

from pocket_calculator.common.logger import logger
from pocket_calculator.engine.calculator import evaluate, format_result, is_error, is_valid_expression
from pocket_calculator.engine.formatter import DEFAULT_FORMATTER

DISPLAY_OPERATORS = "+−×÷"
# Characters after which a new operand is expected
OPENERS = "(√"
OPERAND_ENDINGS = "0123456789)"
INVALID_MARKER = "Invalid expression"

_TRAILING_NUMBER = re.compile(r"[0-9.]*$")


class CalculatorState(BaseModel):
    """Snapshot of the keypad buffer."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="0", description="Expression or result currently shown")
    awaiting_new_expression: bool = Field(
        default=True, description="True right after a reset or a computed result"
    )
    error: bool = Field(default=False, description="True after a failed computation until reset")

    @property
    def display(self) -> str:
        return self.text or "0"


def _last(text: str) -> str:
    return text[-1:]


def _current_number(text: str) -> str:
    """The numeric run at the end of ``text`` (possibly empty)."""
    return _TRAILING_NUMBER.search(text).group()


def _editing(text: str) -> CalculatorState:
    return CalculatorState(text=text, awaiting_new_expression=False)


def clear() -> CalculatorState:
    """Return the initial state."""
    return CalculatorState()


def press_digit(state: CalculatorState, digit: str) -> CalculatorState:
    """
    Append a digit, replacing a lone "0" so no number starts with a double zero.

    A digit after an error or a result starts a new expression.

    :param CalculatorState state: Current state
    :param str digit: One of "0" to "9"

    :return: Next state
    :rtype: CalculatorState
    :raises ValueError: If ``digit`` is not a single decimal digit
    """
    if len(digit) != 1 or digit not in "0123456789":
        raise ValueError(f"Not a digit: {digit!r}")
    if state.error:
        state = clear()

    text = "" if state.awaiting_new_expression else state.text
    if _current_number(text) == "0":
        # No leading double zero: "0" followed by a digit is replaced
        text = text[:-1]
    return _editing(text + digit)


def press_operator(state: CalculatorState, op: str) -> CalculatorState:
    """
    Append a binary operator, replacing a trailing one.

    After a result the expression continues from that result. Only "−" may
    follow "(" or "√".

    :param CalculatorState state: Current state
    :param str op: One of "+", "−", "×", "÷"

    :return: Next state
    :rtype: CalculatorState
    :raises ValueError: If ``op`` is not a display operator
    """
    if op not in DISPLAY_OPERATORS:
        raise ValueError(f"Not an operator: {op!r}")
    if state.error:
        return state

    text = state.text or "0"
    last = _last(text)

    if last in OPENERS:
        # Only a minus sign may start an operand
        return _editing(text + op) if op == "−" else state
    if last in DISPLAY_OPERATORS:
        prefix = text[:-1]
        if _last(prefix) in OPENERS and op != "−":
            return state
        return _editing(prefix + op)
    return _editing(text + op)


def press_decimal(state: CalculatorState) -> CalculatorState:
    """Add a decimal point unless the current number already has one; "0." starts an empty number."""
    if state.error:
        return state
    if state.awaiting_new_expression:
        return _editing("0.")

    text = state.text
    if _last(text) in ")%²":
        return state
    number = _current_number(text)
    if "." in number:
        return state
    return _editing(text + ("." if number else "0."))


def _press_suffix(state: CalculatorState, symbol: str) -> CalculatorState:
    if state.error:
        return state
    text = state.text
    if text and _last(text) in OPERAND_ENDINGS:
        return _editing(text + symbol)
    return state


def press_percent(state: CalculatorState) -> CalculatorState:
    """Append "%" after a digit or ")"."""
    return _press_suffix(state, "%")


def press_square(state: CalculatorState) -> CalculatorState:
    """Append "²" after a digit or ")"."""
    return _press_suffix(state, "²")


def press_square_root(state: CalculatorState) -> CalculatorState:
    """Append "√", inserting "×" when it follows an operand."""
    if state.error:
        return state
    text = "" if state.awaiting_new_expression else state.text
    last = _last(text)
    if not text or last in DISPLAY_OPERATORS or last in OPENERS:
        return _editing(text + "√")
    # Implicit multiplication before the root
    return _editing(text + "×√")


def press_parentheses(state: CalculatorState) -> CalculatorState:
    """Open a group where an operand is expected, otherwise close the innermost one."""
    if state.error:
        return state
    text = "" if state.awaiting_new_expression else state.text
    last = _last(text)
    expects_operand = not text or last in DISPLAY_OPERATORS or last in OPENERS

    if expects_operand:
        return _editing(text + "(")
    if text.count("(") <= text.count(")"):
        return _editing(text + "×(")
    return _editing(text + ")")


def press_delete(state: CalculatorState) -> CalculatorState:
    """Remove the last character; an emptied buffer or the error state resets."""
    if state.error:
        return clear()
    text = state.text[:-1]
    if not text:
        return clear()
    return _editing(text)


def press_equals(state: CalculatorState) -> CalculatorState:
    """Evaluate the buffer; a failure leaves the keypad in the error state."""
    if state.error or not state.text:
        return state

    if not is_valid_expression(state.text):
        logger.info("Unbalanced parentheses in %r", state.text)
        return CalculatorState(text=INVALID_MARKER, awaiting_new_expression=False, error=True)

    value = evaluate(state.text)
    if is_error(value):
        return CalculatorState(text=DEFAULT_FORMATTER.error_marker, awaiting_new_expression=False, error=True)

    return CalculatorState(text=format_result(value), awaiting_new_expression=True)


KEY_ALIASES: Dict[str, str] = {
    "-": "−",
    "*": "×",
    "/": "÷",
}

KEY_ACTIONS: Dict[str, Callable[[CalculatorState], CalculatorState]] = {
    ".": press_decimal,
    "%": press_percent,
    "²": press_square,
    "√": press_square_root,
    "()": press_parentheses,
    "C": lambda state: clear(),
    "⌫": press_delete,
    "=": press_equals,
}


def press(state: CalculatorState, key: str) -> CalculatorState:
    """
    Apply one key press by its label.

    :param CalculatorState state: Current state
    :param str key: Key label, e.g. "7", "×", "()", "=" (ASCII "-", "*", "/" accepted)

    :return: Next state
    :rtype: CalculatorState
    :raises ValueError: If the key label is unknown
    """
    key = KEY_ALIASES.get(key, key)
    if len(key) == 1 and key in "0123456789":
        new_state = press_digit(state, key)
    elif len(key) == 1 and key in DISPLAY_OPERATORS:
        new_state = press_operator(state, key)
    elif key in KEY_ACTIONS:
        new_state = KEY_ACTIONS[key](state)
    else:
        raise ValueError(f"Unknown key: {key!r}")

    logger.debug("Key %r: %r -> %r", key, state.text, new_state.text)
    return new_state
