from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from .calculator import calculate as calculate_text
from .calculator import calculate_detailed as calculate_record
from .config import get_settings
from .errors import CalcError
from .logging_config import setup_logging


mcp = FastMCP("mcp-dice-calculator")


@mcp.tool()
def calculate(expression: str) -> str:
    """Evaluate a dice arithmetic expression such as '10d10-5+2/(2d2+6)'.

    Input: expression (string, no whitespace)
    Output: one line per dice roll, then '<expression> => <exact result>'

    Unary minus negates everything after it: '-2+3' is -(2+3).
    """

    return calculate_text(expression, limits=get_settings().limits())


@mcp.tool()
def calculate_detailed(expression: str):
    """Evaluate a dice arithmetic expression and return an auditable record.

    Input: expression (string)
    Output: structured JSON with every roll, the exact value and the rendered text

    Raises a hard error (exception) on invalid input.
    """

    try:
        return calculate_record(expression, limits=get_settings().limits())
    except CalcError as e:
        # Fail-fast: surface stable error codes in the message.
        raise ValueError(str(e)) from None


def run() -> None:
    setup_logging(get_settings().log_level)
    # Default transport is stdio.
    mcp.run()


if __name__ == "__main__":
    run()
