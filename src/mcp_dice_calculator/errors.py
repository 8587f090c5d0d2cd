from __future__ import annotations


class CalcError(ValueError):
    """User-facing calculation errors. ``str()`` starts with ``[CODE]``."""

    code: str = "CALC_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"[{self.code}] {message}")


class ParseError(CalcError):
    code = "UNPARSEABLE_INPUT"

    def __init__(self, text: str, position: int | None = None) -> None:
        self.text = text
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Could not parse {text!r}{where}. Example: '10d10-5+2/(2d2+6)'.")


class TransformError(CalcError):
    """The expression parsed but could not be reduced to a value."""

    code = "UNCOMPUTABLE"


class DivisionByZero(TransformError):
    code = "DIVISION_BY_ZERO"


class InvalidDieError(TransformError):
    code = "INVALID_DIE"


class ExpressionLimitError(TransformError):
    code = "LIMIT_EXCEEDED"


class RandomSourceExhausted(TransformError):
    code = "RANDOM_SOURCE_EXHAUSTED"
