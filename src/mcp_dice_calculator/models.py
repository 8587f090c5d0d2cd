from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Callable, Literal, TypeAlias


Operator: TypeAlias = Literal["+", "-", "*", "/"]

# Digit groups are converted in pieces below the interpreter's int<->str limit.
_CHUNK = 4000
_CHUNK_BASE = 10**_CHUNK


def digits_to_int(digits: str) -> int:
    value = 0
    for start in range(0, len(digits), _CHUNK):
        piece = digits[start : start + _CHUNK]
        value = value * 10 ** len(piece) + int(piece)
    return value


def int_to_digits(n: int) -> str:
    if n < 0:
        return "-" + int_to_digits(-n)
    pieces = []
    while n >= _CHUNK_BASE:
        n, rest = divmod(n, _CHUNK_BASE)
        pieces.append(str(rest).zfill(_CHUNK))
    pieces.append(str(n))
    return "".join(reversed(pieces))


@dataclass(frozen=True)
class IntegerLiteral:
    digits: str

    @property
    def value(self) -> int:
        return digits_to_int(self.digits)


@dataclass(frozen=True)
class DiceTerm:
    count_digits: str
    sides_digits: str

    @property
    def count(self) -> int:
        return digits_to_int(self.count_digits)

    @property
    def sides(self) -> int:
        return digits_to_int(self.sides_digits)


@dataclass(frozen=True)
class Negated:
    inner: Node


@dataclass(frozen=True)
class BinaryOp:
    op: Operator
    left: Node
    right: Node


Node: TypeAlias = IntegerLiteral | DiceTerm | Negated | BinaryOp


@dataclass(frozen=True)
class RollRecord:
    dice_count: int
    sides: int
    rolls: tuple[int, ...]
    total: int

    def render(self) -> str:
        rolls = "+".join(int_to_digits(r) for r in self.rolls)
        return f"{int_to_digits(self.dice_count)}d{int_to_digits(self.sides)} => {rolls} => {int_to_digits(self.total)}"

    def to_dict(self) -> dict[str, object]:
        return {
            "dice_count": self.dice_count,
            "sides": self.sides,
            "rolls": list(self.rolls),
            "total": self.total,
        }


@dataclass(frozen=True)
class Accumulator:
    """An exact value together with the ordered log of rolls behind it."""

    value: Fraction
    rolls: tuple[RollRecord, ...] = field(default=())

    def __post_init__(self) -> None:
        # Only exact values are accepted; ints are promoted.
        if isinstance(self.value, float) or not isinstance(self.value, (int, Fraction)):
            raise TypeError(f"Accumulator value must be int or Fraction, got {type(self.value).__name__}")
        if not isinstance(self.value, Fraction):
            object.__setattr__(self, "value", Fraction(self.value))
        if not isinstance(self.rolls, tuple):
            object.__setattr__(self, "rolls", tuple(self.rolls))

    def merge_with(
        self, other: Accumulator, combine: Callable[[Fraction, Fraction], Fraction]
    ) -> Accumulator:
        return Accumulator(combine(self.value, other.value), self.rolls + other.rolls)

    def map_value(self, f: Callable[[Fraction], Fraction]) -> Accumulator:
        return Accumulator(f(self.value), self.rolls)

    @property
    def display_value(self) -> str:
        """Plain integer when the denominator reduces to 1, else ``n/d``."""
        if self.value.denominator == 1:
            return int_to_digits(self.value.numerator)
        return f"{int_to_digits(self.value.numerator)}/{int_to_digits(self.value.denominator)}"

    def render_rolls(self) -> list[str]:
        return [record.render() for record in self.rolls]


@dataclass(frozen=True)
class Limits:
    """Caller-side bounds checked against a parsed tree before it is evaluated."""

    max_dice: int | None = None
    max_sides: int | None = None
    max_depth: int | None = None
