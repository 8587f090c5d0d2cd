from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from .errors import CalcError, DivisionByZero, ExpressionLimitError, InvalidDieError, ParseError, TransformError
from .evaluator import evaluate
from .models import Accumulator, Limits, Node, int_to_digits
from .parser import depth, dice_terms, parse
from .random_source import RandomSource, default_random_source


logger = logging.getLogger(__name__)


PARSE_FAILURE = "`{text}` => could not be parsed"
COMPUTE_FAILURE = "`{text}` => parsed but could not be computed"


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def check_limits(tree: Node, limits: Limits) -> None:
    """Raise ExpressionLimitError if the tree is larger than the limits allow."""
    if limits.max_depth is not None:
        tree_depth = depth(tree)
        if tree_depth > limits.max_depth:
            raise ExpressionLimitError(f"Expression nests {tree_depth} deep (max {limits.max_depth}).")

    total_dice = 0
    for term in dice_terms(tree):
        if limits.max_sides is not None and term.sides > limits.max_sides:
            raise ExpressionLimitError(f"Too many sides: {term.sides_digits} (max {limits.max_sides}).")
        total_dice += term.count
        if limits.max_dice is not None and total_dice > limits.max_dice:
            raise ExpressionLimitError(f"Too many dice: {int_to_digits(total_dice)} (max {limits.max_dice}).")


def compute(text: str, rng: RandomSource | None = None, limits: Limits | None = None) -> Accumulator:
    """Parse, bound and evaluate ``text``. Raises CalcError subclasses."""
    tree = parse(text)
    try:
        if limits is not None:
            check_limits(tree, limits)
        return evaluate(tree, rng if rng is not None else default_random_source())
    except CalcError:
        raise
    except RecursionError:
        raise TransformError("Expression nested too deeply to evaluate.") from None
    except ValueError as e:
        raise TransformError(str(e)) from e


def render(text: str, result: Accumulator) -> str:
    lines = result.render_rolls()
    lines.append(f"{text} => {result.display_value}")
    return "\n".join(lines)


def calculate(text: str, rng: RandomSource | None = None, limits: Limits | None = None) -> str:
    """Evaluate ``text`` and return display text; never raises for bad input."""
    try:
        result = compute(text, rng, limits)
        return render(text, result)
    except ParseError:
        logger.info("Could not parse %r", text)
        return PARSE_FAILURE.format(text=text)
    except (DivisionByZero, InvalidDieError, ExpressionLimitError) as e:
        logger.info("Could not compute %r: %s", text, e)
        return COMPUTE_FAILURE.format(text=text)
    except TransformError as e:
        logger.warning("Unexpected evaluation failure for %r: %s", text, e)
        return COMPUTE_FAILURE.format(text=text)
    except ValueError as e:
        logger.warning("Could not render result for %r: %s", text, e)
        return COMPUTE_FAILURE.format(text=text)


def calculate_detailed(
    text: str, rng: RandomSource | None = None, limits: Limits | None = None
) -> dict[str, Any]:
    """Evaluate ``text`` and return an auditable record. Raises CalcError for invalid input."""
    rng = rng if rng is not None else default_random_source()
    result = compute(text, rng, limits)

    return {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "input": text,
        "rng": {"source": getattr(rng, "name", type(rng).__name__)},
        "rolls": [record.to_dict() for record in result.rolls],
        "value": result.display_value,
        "numerator": result.value.numerator,
        "denominator": result.value.denominator,
        "is_integer": result.value.denominator == 1,
        "text": render(text, result),
    }
