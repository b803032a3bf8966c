"""Render numeric results for the display."""
import math

from pydantic import BaseModel, ConfigDict, Field


class ResultFormatter(BaseModel):
    """
    Convert a float into the string shown on the calculator display.

    - Non-finite values become the error marker
    - Integral values are printed without a decimal point
    - Other values are rounded to ``decimal_places`` and trimmed of trailing zeros
    """

    model_config = ConfigDict(frozen=True)

    decimal_places: int = Field(default=10, ge=0, le=17, description="Maximum number of fractional digits")
    error_marker: str = Field(default="Error", min_length=1, description="Text shown for invalid results")

    def format(self, value: float) -> str:
        """
        Format a numeric result.

        :param float value: Result of an evaluation, possibly NaN

        :return: Display string or the error marker
        :rtype: str
        """
        if not math.isfinite(value):
            return self.error_marker

        if float(value).is_integer():
            return str(int(value))

        text = f"{value:.{self.decimal_places}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        # Tiny negative values round to "-0"
        if text in ("-0", "-"):
            return "0"
        return text


DEFAULT_FORMATTER = ResultFormatter()
