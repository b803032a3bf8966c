"""Test the keypad state transitions."""
from pydantic import ValidationError
import pytest

from pocket_calculator.keypad.state import (
    INVALID_MARKER,
    CalculatorState,
    clear,
    press,
    press_decimal,
    press_digit,
    press_equals,
    press_operator,
)


def type_keys(*keys, state=None):
    state = state or clear()
    for key in keys:
        state = press(state, key)
    return state


def test_initial_state():
    """A fresh keypad shows 0 and waits for a new expression."""
    state = clear()
    assert state.display == "0"
    assert state.awaiting_new_expression
    assert not state.error


def test_state_is_immutable():
    """Transitions return new snapshots instead of mutating."""
    state = clear()
    new_state = press_digit(state, "7")
    assert state.text == "0"
    assert new_state.text == "7"
    with pytest.raises(ValidationError):
        new_state.text = "8"


@pytest.mark.parametrize("keys,expected", [
    (["0", "0"], "0"),
    (["0", "5"], "5"),
    (["1", "0", "0"], "100"),
    (["5", "+", "0", "0"], "5+0"),
    (["5", "+", "0", "7"], "5+7"),
    (["0", ".", "0", "5"], "0.05"),
])
def test_digits_without_leading_double_zero(keys, expected):
    """A lone leading zero is replaced instead of repeated."""
    assert type_keys(*keys).text == expected


@pytest.mark.parametrize("keys,expected", [
    (["+"], "0+"),
    (["5", "+", "×"], "5×"),
    (["5", "−", "+", "÷"], "5÷"),
    (["5", "-"], "5−"),
    (["5", "*"], "5×"),
    (["5", "/"], "5÷"),
    (["()", "−"], "(−"),
    (["()", "+"], "("),
    (["()", "−", "×"], "(−"),
    (["√", "−", "4"], "√−4"),
])
def test_operators_never_duplicate(keys, expected):
    """A new operator replaces a trailing one; only minus may follow '(' or '√'."""
    assert type_keys(*keys).text == expected


@pytest.mark.parametrize("keys,expected", [
    (["."], "0."),
    (["3", ".", "."], "3."),
    (["3", ".", "5", "."], "3.5"),
    (["3", ".", "5", "+", "."], "3.5+0."),
    (["3", ".", "5", "+", "2", "."], "3.5+2."),
    (["()", "."], "(0."),
    (["5", "%", "."], "5%"),
])
def test_one_decimal_point_per_number(keys, expected):
    """Each numeric run accepts a single decimal point."""
    assert type_keys(*keys).text == expected


@pytest.mark.parametrize("keys,expected", [
    (["()"], "("),
    (["2", "()"], "2×("),
    (["()", "2", "()"], "(2)"),
    (["()", "2", "()", "()"], "(2)×("),
    (["2", "+", "()", "()"], "2+(("),
    (["√"], "√"),
    (["9", "√"], "9×√"),
    (["()", "2", "()", "√"], "(2)×√"),
    (["2", "×", "√"], "2×√"),
    (["()", "√"], "(√"),
])
def test_implicit_multiplication(keys, expected):
    """'×' is inserted before '(' or '√' following a number or ')'."""
    assert type_keys(*keys).text == expected


@pytest.mark.parametrize("keys,expected", [
    (["4", "²"], "4²"),
    (["4", "%"], "4%"),
    (["²"], "0²"),  # the shown zero is continued like any result
    (["+", "²"], "0+"),
    (["+", "%"], "0+"),
    (["()", "3", "()", "²"], "(3)²"),
])
def test_square_and_percent_follow_operands(keys, expected):
    """'²' and '%' are only appended after a digit or ')'."""
    assert type_keys(*keys).display == expected


@pytest.mark.parametrize("keys,expected", [
    (["1", "+", "2", "="], "3"),
    (["2", "+", "3", "×", "4", "="], "14"),
    (["8", "−", "3", "−", "2", "="], "3"),
    (["()", "2", "+", "3", "()", "×", "4", "="], "20"),
    (["1", "0", "0", "+", "5", "0", "%", "="], "100.5"),
    (["√", "1", "6", "="], "4"),
    (["3", "²", "="], "9"),
    (["1", "÷", "4", "="], "0.25"),
    (["2", "√", "9", "="], "6"),
])
def test_equals_computes_result(keys, expected):
    """'=' evaluates the buffer and shows the formatted result."""
    state = type_keys(*keys)
    assert state.display == expected
    assert state.awaiting_new_expression
    assert not state.error


def test_result_can_be_continued_with_operator():
    """An operator after a result continues from that result."""
    state = type_keys("1", "+", "2", "=", "×", "5", "=")
    assert state.display == "15"


def test_digit_after_result_starts_new_expression():
    """A digit after a result replaces it."""
    state = type_keys("1", "+", "2", "=", "7")
    assert state.text == "7"
    assert not state.awaiting_new_expression


def test_negative_result_can_be_continued():
    """A negative result feeds back into the next expression."""
    state = type_keys("2", "−", "5", "=", "+", "1", "=")
    assert state.display == "-2"


def test_division_by_zero_enters_error_state():
    """A failed evaluation shows 'Error' and locks the keypad."""
    state = type_keys("5", "÷", "0", "=")
    assert state.error
    assert state.display == "Error"
    for key in ["+", ".", "%", "²", "√", "()", "="]:
        assert press(state, key) == state


def test_unbalanced_parentheses_show_invalid_marker():
    """'=' with an open group reports an invalid expression."""
    state = type_keys("()", "2", "+", "3", "=")
    assert state.error
    assert state.display == INVALID_MARKER


def test_digit_after_error_resets():
    """Typing a digit in the error state starts over."""
    state = type_keys("5", "÷", "0", "=", "4")
    assert not state.error
    assert state.text == "4"


def test_delete_after_error_resets():
    """Delete in the error state resets the keypad."""
    state = type_keys("5", "÷", "0", "=", "⌫")
    assert state == clear()


def test_delete_removes_last_character():
    """Delete removes one character and resets when the buffer empties."""
    state = type_keys("1", "2", "+")
    state = press(state, "⌫")
    assert state.text == "12"
    state = type_keys("⌫", "⌫", state=state)
    assert state == clear()


def test_clear_resets_everything():
    """'C' returns to the initial state from anywhere."""
    assert type_keys("9", "×", "C") == clear()
    assert type_keys("5", "÷", "0", "=", "C") == clear()


def test_equals_on_empty_buffer_is_noop():
    """'=' with nothing to evaluate leaves the state unchanged."""
    state = CalculatorState(text="", awaiting_new_expression=False)
    assert press_equals(state) == state
    assert state.display == "0"


def test_equals_on_fresh_state_shows_zero():
    """'=' right after a reset evaluates the shown zero."""
    assert press_equals(clear()).display == "0"


@pytest.mark.parametrize("key", ["a", "", "12", "=="])
def test_unknown_key_rejected(key):
    """Unknown key labels raise ValueError."""
    with pytest.raises(ValueError):
        press(clear(), key)


def test_direct_transitions_validate_arguments():
    """press_digit and press_operator reject labels of the wrong kind."""
    with pytest.raises(ValueError):
        press_digit(clear(), "+")
    with pytest.raises(ValueError):
        press_operator(clear(), "7")


def test_decimal_after_result_starts_new_number():
    """'.' after a result starts a fresh '0.'."""
    state = press_decimal(type_keys("4", "="))
    assert state.text == "0."
