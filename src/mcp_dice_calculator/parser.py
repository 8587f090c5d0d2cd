from __future__ import annotations

import logging
import threading
from collections.abc import Iterator

from arpeggio import EOF, NoMatch, ParserPython, PTNodeVisitor, RegExMatch, ZeroOrMore, visit_parse_tree

from .errors import ParseError
from .models import BinaryOp, DiceTerm, IntegerLiteral, Negated, Node


logger = logging.getLogger(__name__)


# Grammar. Operand alternatives are an ordered choice, so a leading '-' is only
# read as negation when nothing else matches. Negation wraps a whole sum_expr,
# which means it extends to the next unmatched ')' or the end of input.
def dice_count():
    return RegExMatch(r"[0-9]+")


def die_marker():
    return RegExMatch(r"[dD]")


def dice_sides():
    return RegExMatch(r"[0-9]+")


def dice_term():
    return dice_count, die_marker, dice_sides


def integer():
    return RegExMatch(r"[0-9]+")


def additive_op():
    return RegExMatch(r"[+\-]")


def multiplicative_op():
    return RegExMatch(r"[*/]")


def paren_expr():
    return "(", sum_expr, ")"


def negated():
    return "-", sum_expr


def operand():
    return [dice_term, integer, paren_expr, negated]


def product():
    return operand, ZeroOrMore(multiplicative_op, operand)


def sum_expr():
    return product, ZeroOrMore(additive_op, product)


def expression():
    return sum_expr, EOF


class TreeBuilder(PTNodeVisitor):
    """Turns an arpeggio parse tree into model nodes.

    operand and paren_expr fall through to the default visit, which returns
    their single non-string child.
    """

    def visit_integer(self, node, children):
        return IntegerLiteral(node.value)

    def visit_dice_term(self, node, children):
        # [count, marker, sides]
        return DiceTerm(count_digits=children[0], sides_digits=children[-1])

    def visit_negated(self, node, children):
        return Negated(children[-1])

    def _fold_infix(self, children):
        tree = children[0]
        for op, right in zip(children[1::2], children[2::2]):
            tree = BinaryOp(op=op, left=tree, right=right)
        return tree

    def visit_product(self, node, children):
        return self._fold_infix(children)

    def visit_sum_expr(self, node, children):
        return self._fold_infix(children)

    def visit_expression(self, node, children):
        return children[0]


# Arpeggio parsers keep per-parse state on the instance, so each thread gets its own.
_local = threading.local()


def _parser() -> ParserPython:
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = _local.parser = ParserPython(expression, skipws=False)
    return parser


def parse(text: str) -> Node:
    """Parse an expression such as ``10d10-5+2/(2d2+6)`` into a tree.

    The whole text must match; whitespace is not accepted anywhere.

    Raises:
        ParseError: If the text does not fully match the grammar.
    """
    try:
        parse_tree = _parser().parse(text)
        tree = visit_parse_tree(parse_tree, TreeBuilder())
    except NoMatch as e:
        raise ParseError(text, getattr(e, "position", None)) from None
    except RecursionError:
        logger.warning("Expression nested too deeply to parse (%d chars)", len(text))
        raise ParseError(text) from None

    logger.debug("Parsed %r", text)
    return tree


def depth(tree: Node) -> int:
    """Nesting depth of a tree; a single leaf has depth 1."""
    if isinstance(tree, Negated):
        return 1 + depth(tree.inner)
    if isinstance(tree, BinaryOp):
        return 1 + max(depth(tree.left), depth(tree.right))
    return 1


def dice_terms(tree: Node) -> Iterator[DiceTerm]:
    """Dice leaves in left-to-right order."""
    if isinstance(tree, DiceTerm):
        yield tree
    elif isinstance(tree, Negated):
        yield from dice_terms(tree.inner)
    elif isinstance(tree, BinaryOp):
        yield from dice_terms(tree.left)
        yield from dice_terms(tree.right)
