"""Test the shared package logger."""
import logging

from pocket_calculator.common.logger import configure_logging, logger
from pocket_calculator.main import main


def stream_handlers():
    return [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]


def test_configure_logging_adds_one_handler() -> None:
    """Repeated calls keep a single stream handler and update the level."""
    configure_logging(logging.INFO)
    configure_logging(logging.DEBUG)
    assert len(stream_handlers()) == 1
    assert logger.level == logging.DEBUG


def test_main_attaches_stream_handler(capsys) -> None:
    """main() attaches a stream handler bound to the captured stderr."""
    assert main(["eval", "1÷0"]) == 1
    assert len(stream_handlers()) == 1
    assert "DivisionByZero" in capsys.readouterr().err


def test_no_stream_handler_left_from_earlier_tests() -> None:
    """The handler from the previous test is gone, so warnings cannot hit a closed stream."""
    assert stream_handlers() == []
    assert logger.level == logging.NOTSET
