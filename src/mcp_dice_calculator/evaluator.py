from __future__ import annotations

import logging
import operator
from fractions import Fraction
from typing import Callable

from .errors import DivisionByZero, InvalidDieError, TransformError
from .models import Accumulator, BinaryOp, DiceTerm, IntegerLiteral, Negated, Node, RollRecord
from .random_source import RandomSource


logger = logging.getLogger(__name__)


def _divide(a: Fraction, b: Fraction) -> Fraction:
    if b == 0:
        raise DivisionByZero("Cannot divide by zero.")
    return a / b


_COMBINERS: dict[str, Callable[[Fraction, Fraction], Fraction]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
}


def roll_dice(term: DiceTerm, rng: RandomSource) -> Accumulator:
    count, sides = term.count, term.sides
    if sides <= 0:
        raise InvalidDieError(f"A die needs at least one side, got '{term.count_digits}d{term.sides_digits}'.")

    rolls = tuple(rng.roll(sides) for _ in range(count))
    total = sum(rolls)
    logger.debug("Rolled %sd%s", term.count_digits, term.sides_digits)
    return Accumulator(total, (RollRecord(dice_count=count, sides=sides, rolls=rolls, total=total),))


def evaluate(tree: Node, rng: RandomSource) -> Accumulator:
    """Reduce a parse tree to one Accumulator.

    Left operands are fully evaluated before right operands, which fixes both
    the order of draws from ``rng`` and the order of the roll log.

    Raises:
        DivisionByZero: If a ``/`` has a right operand equal to zero.
        InvalidDieError: If a dice term has zero sides.
        TransformError: If the tree contains an unknown node.
    """
    if isinstance(tree, IntegerLiteral):
        return Accumulator(tree.value)
    if isinstance(tree, DiceTerm):
        return roll_dice(tree, rng)
    if isinstance(tree, Negated):
        return evaluate(tree.inner, rng).map_value(operator.neg)
    if isinstance(tree, BinaryOp):
        combine = _COMBINERS.get(tree.op)
        if combine is None:
            raise TransformError(f"Unknown operator {tree.op!r}.")
        left = evaluate(tree.left, rng)
        right = evaluate(tree.right, rng)
        return left.merge_with(right, combine)

    raise TransformError(f"Unknown expression node {type(tree).__name__}.")
