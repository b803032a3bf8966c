"""
Command line entry point.

Subcommands:
- eval: evaluate expressions given as arguments
- keys: replay key presses on the keypad and print the display
"""
import argparse
import logging
import sys
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from pocket_calculator.common.logger import configure_logging, logger
from pocket_calculator.common.models import EvaluationResult
from pocket_calculator.engine.calculator import evaluate_result, format_result
from pocket_calculator.keypad.state import clear, press


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    command : str
        Selected subcommand.
    verbose : bool
        Enable debug logging.
    expressions : list of str
        Expressions for ``eval``.
    keys : list of str
        Key labels for ``keys``.
    """

    command: Literal["eval", "keys"]
    verbose: bool = False
    expressions: List[str] = Field(default_factory=list)
    keys: List[str] = Field(default_factory=list)

    @field_validator("expressions")
    def expressions_must_not_be_blank(cls, v: List[str]) -> List[str]:
        """Ensure that every expression has something to evaluate."""
        if any(not expression.strip() for expression in v):
            raise ValueError("Expressions cannot be empty")
        return v


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser with its ``eval`` and ``keys`` subcommands.

    :return: Configured parser
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="pocket-calculator",
        description="Evaluate calculator expressions",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    eval_parser = subparsers.add_parser("eval", help="Evaluate expressions")
    eval_parser.add_argument("expressions", nargs="+", help="Expressions such as '2+3×4' or '√(16)'")

    keys_parser = subparsers.add_parser("keys", help="Replay key presses on the keypad")
    keys_parser.add_argument("keys", nargs="+", help="Key labels, e.g. 1 + 2 =")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments without the program name, defaults to ``sys.argv[1:]``
    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return CliArgs(**vars(args))
    except ValidationError as exc:
        parser.error(str(exc))


def format_line(result: EvaluationResult) -> str:
    """
    Render a result as ``expr = value`` or ``expr -> ERROR: kind``.

    :param EvaluationResult result: Outcome of one evaluation
    :return: Line to print
    :rtype: str
    """
    if result.ok:
        return f"{result.expression} = {format_result(result.value)}"
    return f"{result.expression} -> ERROR: {result.error.value}"


def run_eval(expressions: List[str]) -> int:
    """
    Evaluate each expression and print one line per result.

    :param List[str] expressions: Expressions as typed (display symbols allowed)
    :return: 0 if every expression evaluated, 1 otherwise
    :rtype: int
    """
    failures = 0
    for expression in expressions:
        result = evaluate_result(expression)
        if not result.ok:
            failures += 1
        print(format_line(result))
    return 1 if failures else 0


def run_keys(keys: List[str]) -> int:
    """
    Replay key presses from a cleared keypad and print the final display.

    :param List[str] keys: Key labels in press order
    :return: 0 on success, 1 if the keypad ends in the error state, 2 on an unknown key
    :rtype: int
    """
    state = clear()
    for key in keys:
        try:
            state = press(state, key)
        except ValueError as exc:
            logger.error(f"Rejected key press: {exc}")
            return 2
    print(state.display)
    return 1 if state.error else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function executed by the console script.

    :return: Process exit status, 0 when every evaluation succeeded
    """
    cli_args = parse_args(argv)
    configure_logging(logging.DEBUG if cli_args.verbose else logging.WARNING)

    if cli_args.command == "eval":
        return run_eval(cli_args.expressions)
    return run_keys(cli_args.keys)


if __name__ == "__main__":
    sys.exit(main())
