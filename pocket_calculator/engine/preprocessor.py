"""Normalize display symbols into the canonical calculation syntax."""
import re
from typing import Dict

# Display symbol -> canonical text. The key sets are disjoint, so order does not matter.
DISPLAY_SYMBOLS: Dict[str, str] = {
    "×": "*",
    "÷": "/",
    "−": "-",
    "√": "sqrt",
    "²": "^2",
}

# A digit run with at most one decimal point, directly followed by '%'
PERCENT_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)%")


def replace_symbols(raw: str) -> str:
    """
    Replace every display-only symbol by its canonical counterpart.

    :param str raw: Expression as shown on the display

    :return: Expression using only ASCII calculation symbols
    :rtype: str
    """
    for symbol, canonical in DISPLAY_SYMBOLS.items():
        raw = raw.replace(symbol, canonical)
    return raw


def expand_percentages(expr: str) -> str:
    """
    Rewrite ``<run>%`` as ``(<run>/100)``.

    The substitution is purely textual: ``100+50%`` becomes ``100+(50/100)``,
    not fifty percent of a hundred. A '%' without a preceding digit run is
    left untouched and rejected later by the tokenizer.

    :param str expr: Expression after symbol replacement

    :return: Expression with percentages expanded
    :rtype: str
    """
    return PERCENT_PATTERN.sub(r"(\1/100)", expr)


def preprocess(raw: str) -> str:
    """Symbol substitution followed by percentage expansion. Never fails."""
    return expand_percentages(replace_symbols(raw))
