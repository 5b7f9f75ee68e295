"""
Formula utilities for modal/epistemic logic.

Provides convenience functions for parsing and inspecting formulas:
subformula extraction, atom, agent and predicate listing, modal depth
and canonical string conversion.  Formulas are never rewritten here.
"""

from __future__ import annotations

from typing import FrozenSet

from modalparse.parser.ast_nodes import (
    Atom,
    Binary,
    Constant,
    Formula,
    Modal,
    Negation,
    Predicate,
    Quantifier,
)
from modalparse.parser.grammar import FormulaParser


_parser = FormulaParser()


def parse_formula(text: str) -> Formula:
    """
    Parse a formula string into an AST.

    Args:
        text: The formula string.

    Returns:
        The root Formula node of the AST.

    Raises:
        LexerError: If the formula contains an invalid character.
        ParseError: If the formula is syntactically invalid.
    """
    return _parser.parse(text)


def subformulas(formula: Formula) -> FrozenSet[Formula]:
    """
    Return all subformulas of the given formula, including itself.

    Args:
        formula: The formula to extract subformulas from.

    Returns:
        A frozenset of all subformulas.
    """
    return formula.subformulas()


def atoms(formula: Formula) -> FrozenSet[str]:
    """
    Return all atom names appearing in the formula.

    Quantified variables are listed only where they occur as atoms;
    predicate arguments are not atoms.
    """
    return frozenset(sub.name for sub in formula.subformulas() if isinstance(sub, Atom))


def agents(formula: Formula) -> FrozenSet[str]:
    """Return the agents named by agent-qualified modal operators."""
    return frozenset(
        sub.agent
        for sub in formula.subformulas()
        if isinstance(sub, Modal) and sub.agent is not None
    )


def predicates(formula: Formula) -> FrozenSet[str]:
    """Return the names of all predicates applied in the formula."""
    return frozenset(sub.name for sub in formula.subformulas() if isinstance(sub, Predicate))


def modal_depth(formula: Formula) -> int:
    """
    Return the maximal nesting of modal operators in the formula.

    Args:
        formula: The formula to measure.

    Returns:
        0 for a modal-free formula, otherwise the length of the longest
        chain of nested □/◊ operators.

    Raises:
        TypeError: If a node is not one of the known formula types.
    """
    deepest = 0
    stack = [(formula, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, (Atom, Constant, Predicate)):
            deepest = max(deepest, depth)
        elif isinstance(node, Modal):
            stack.append((node.operand, depth + 1))
        elif isinstance(node, (Negation, Quantifier)):
            stack.append((node.operand, depth))
        elif isinstance(node, Binary):
            stack.append((node.left, depth))
            stack.append((node.right, depth))
        else:
            raise TypeError(f"Unknown formula node: {type(node).__name__}")
    return deepest


def to_string(formula: Formula) -> str:
    """
    Convert a formula to its canonical string representation.

    The result parses back to an equal formula.
    """
    return str(formula)
