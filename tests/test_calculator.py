from math import gcd

import pytest

from mcp_dice_calculator.calculator import calculate, calculate_detailed, check_limits, compute
from mcp_dice_calculator.errors import DivisionByZero, ExpressionLimitError, ParseError
from mcp_dice_calculator.models import Limits
from mcp_dice_calculator.parser import parse
from mcp_dice_calculator.random_source import SequenceRandomSource


def fixed(*values):
    return SequenceRandomSource(values)


def test_roll_line_and_result():
    assert calculate("3d6", fixed(4, 2, 6)) == "3d6 => 4+2+6 => 12\n3d6 => 12"


def test_one_sided_die():
    assert calculate("1d1", fixed(1)) == "1d1 => 1 => 1\n1d1 => 1"


def test_one_sided_die_with_default_source():
    assert calculate("1d1") == "1d1 => 1 => 1\n1d1 => 1"


def test_zero_dice():
    assert calculate("0d6", fixed()) == "0d6 =>  => 0\n0d6 => 0"


def test_full_expression():
    rolls = list(range(1, 11)) + [1, 2]
    assert calculate("10d10-5+2/(2d2+6)", fixed(*rolls)) == "\n".join(
        [
            "10d10 => 1+2+3+4+5+6+7+8+9+10 => 55",
            "2d2 => 1+2 => 3",
            "10d10-5+2/(2d2+6) => 452/9",
        ]
    )


@pytest.mark.parametrize(("first", "second"), [(3, 5), (4, 1)])
def test_roll_log_follows_expression_order(first, second):
    lines = calculate("(1d4)+(1d6)", fixed(first, second)).split("\n")
    assert lines == [
        f"1d4 => {first} => {first}",
        f"1d6 => {second} => {second}",
        f"(1d4)+(1d6) => {first + second}",
    ]


@pytest.mark.parametrize(("a", "b"), [(0, 0), (1, 2), (17, 25), (999, 1), (123456789, 987654321)])
def test_addition(a, b):
    assert calculate(f"{a}+{b}", fixed()) == f"{a}+{b} => {a + b}"


@pytest.mark.parametrize(("a", "b"), [(0, 5), (6, 3), (2, 4), (7, 3), (10, 4), (100, 7)])
def test_division_is_reduced(a, b):
    g = gcd(a, b)
    expected = str(a // b) if a % b == 0 else f"{a // g}/{b // g}"
    assert calculate(f"{a}/{b}", fixed()) == f"{a}/{b} => {expected}"


@pytest.mark.parametrize(("text", "value"), [("-2+3", "-5"), ("3+-2+5", "-4"), ("3+-2", "1")])
def test_greedy_negation(text, value):
    assert calculate(text, fixed()) == f"{text} => {value}"


def test_negative_fraction():
    assert calculate("-1/2", fixed()) == "-1/2 => -1/2"


@pytest.mark.parametrize("text", ["5/0", "1/(2-2)", "2d0", "0d0+1"])
def test_compute_failure_message(text):
    assert calculate(text, fixed()) == f"`{text}` => parsed but could not be computed"


@pytest.mark.parametrize("text", ["2+", "2 + 3", "", "abc", "(1"])
def test_parse_failure_message(text):
    assert calculate(text, fixed()) == f"`{text}` => could not be parsed"


def test_exhausted_source_is_reported():
    assert calculate("2d6", fixed(3)) == "`2d6` => parsed but could not be computed"


def test_same_rolls_same_output():
    text = "2d20*3-(1d4+1)/2"
    assert calculate(text, fixed(20, 1, 3)) == calculate(text, fixed(20, 1, 3))


@pytest.mark.parametrize(
    ("text", "limits"),
    [
        ("3d6", Limits(max_dice=2)),
        ("2d6+1d6", Limits(max_dice=2)),
        ("1d1001", Limits(max_sides=1000)),
        ("1+2+3", Limits(max_depth=2)),
    ],
)
def test_limits(text, limits):
    with pytest.raises(ExpressionLimitError):
        check_limits(parse(text), limits)
    assert calculate(text, fixed(1, 1, 1), limits) == f"`{text}` => parsed but could not be computed"


def test_within_limits():
    limits = Limits(max_dice=3, max_sides=6, max_depth=3)
    check_limits(parse("2d6+1d6"), limits)
    assert calculate("2d6+1d6", fixed(1, 2, 3), limits).endswith("2d6+1d6 => 6")


def test_compute_raises():
    with pytest.raises(ParseError):
        compute("2+", fixed())
    with pytest.raises(DivisionByZero):
        compute("5/0", fixed())


def test_calculate_detailed():
    record = calculate_detailed("2d4/3", fixed(1, 3))

    assert record["input"] == "2d4/3"
    assert record["rolls"] == [{"dice_count": 2, "sides": 4, "rolls": [1, 3], "total": 4}]
    assert record["value"] == "4/3"
    assert record["numerator"] == 4
    assert record["denominator"] == 3
    assert record["is_integer"] is False
    assert record["text"] == "2d4 => 1+3 => 4\n2d4/3 => 4/3"
    assert record["rng"] == {"source": "sequence"}
    assert len(record["request_id"]) == 32
    assert record["timestamp"].endswith("Z")


def test_calculate_detailed_raises():
    with pytest.raises(ParseError):
        calculate_detailed("2 + 3", fixed())


def test_result_longer_than_int_str_limit():
    big = "1" + "0" * 3000
    text = f"{big}*{big}"
    assert calculate(text, fixed()) == f"{text} => 1{'0' * 6000}"


def test_fraction_longer_than_int_str_limit():
    text = f"1/{'1' + '0' * 5000}"
    assert calculate(text, fixed()) == f"{text} => 1/1{'0' * 5000}"


def test_literals_longer_than_int_str_limit():
    text = f"{'1' * 5000}+{'2' * 5000}"
    assert calculate(text, fixed()) == f"{text} => {'3' * 5000}"


@pytest.mark.parametrize("text", ["(" * 3000 + "1" + ")" * 3000, "-" * 3000 + "1"])
def test_deep_nesting_is_a_parse_failure(text):
    assert calculate(text, fixed()) == f"`{text}` => could not be parsed"
    # The parser is reused afterwards.
    assert calculate("(1+2)*-3", fixed()) == "(1+2)*-3 => -9"


def test_long_chain_overflowing_evaluation_is_a_compute_failure():
    text = "+".join(["1"] * 5000)
    assert calculate(text, fixed()) == f"`{text}` => parsed but could not be computed"
