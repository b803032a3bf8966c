"""Pydantic models shared by the evaluation pipeline and its callers."""
from enum import Enum
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pocket_calculator.common.errors import ErrorKind


class TokenType(str, Enum):
    """Category of a lexical token."""

    NUMBER = "number"
    OPERATOR = "operator"
    FUNCTION = "function"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"


class Token(BaseModel):
    """A single lexical unit of a canonical expression."""

    model_config = ConfigDict(frozen=True)

    type: TokenType = Field(..., description="Token category")
    text: str = Field(..., min_length=1, description="Literal text of the token")

    @property
    def value(self) -> float:
        """Numeric value of a NUMBER token."""
        return float(self.text)

    def __str__(self) -> str:
        return self.text


class EvaluationResult(BaseModel):
    """
    Outcome of evaluating one expression: either a value or an error kind.

    Exactly one of ``value`` and ``error`` is set.
    """

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="Expression as typed by the user")
    value: Optional[float] = Field(default=None, description="Finite result when evaluation succeeded")
    error: Optional[ErrorKind] = Field(default=None, description="Failure reason when evaluation failed")

    @model_validator(mode="after")
    def exactly_one_outcome(self) -> "EvaluationResult":
        """Reject results carrying both or neither of value and error."""
        if (self.value is None) == (self.error is None):
            raise ValueError("EvaluationResult needs exactly one of value or error")
        if self.value is not None and not math.isfinite(self.value):
            raise ValueError("EvaluationResult value must be finite")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_float(self) -> float:
        """Degrade to the numeric sentinel: the value, or NaN on error."""
        return self.value if self.value is not None else math.nan
