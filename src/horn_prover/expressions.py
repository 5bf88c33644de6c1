"""
horn_prover/expressions.py - Propositional Expression Algebra

Implements the formula structures the prover works over:
- Atom: a single uppercase letter carrying a truth value
- Conjunction: implicit AND, written as adjacent letters ("AB")
- Implication: premise=>conclusion ("AB=>C")

The three variants form a closed union (Expression). Every variant
answers evaluate(), is_atom() and renders its canonical text through
str(), which is used both for display and for goal matching.

Grammar:
    expression  := implication | conjunction
    implication := conjunction "=>" conjunction
    conjunction := atom atom*            (left-associative)
    atom        := [A-Z]
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidSymbolError, ParseError

IMPLIES = "=>"

_SYMBOL = re.compile(r"[A-Z]")


# =============================================================================
# TRUTH FUNCTIONS
# =============================================================================


def conjoin(lhs: bool, rhs: bool) -> bool:
    """Truth function of conjunction."""
    return lhs and rhs


def material_implication(lhs: bool, rhs: bool) -> bool:
    """Truth function of implication: false only when lhs holds and rhs does not."""
    return not lhs or rhs


# =============================================================================
# VARIANTS
# =============================================================================


@dataclass(frozen=True)
class Atom:
    """Propositional symbol.

    Declared facts are created with value=True and shared by every
    expression that names them. Any other atom starts out False and
    only becomes meaningful through derivation.

    Example:
        a = Atom("A", True)
        str(a)        # "A"
        a.evaluate()  # True
    """
    name: str
    value: bool = False

    @classmethod
    def from_symbol(cls, symbol: str, value: bool = False) -> Atom:
        """Create an atom after validating its symbol."""
        return cls(validate_symbol(symbol), value)

    def evaluate(self) -> bool:
        return self.value

    def is_atom(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Conjunction:
    """Implicit conjunction of two sub-expressions."""
    lhs: Expression
    rhs: Expression

    @staticmethod
    def apply(lhs: bool, rhs: bool) -> bool:
        return conjoin(lhs, rhs)

    def evaluate(self) -> bool:
        return conjoin(self.lhs.evaluate(), self.rhs.evaluate())

    def is_atom(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.lhs}{self.rhs}"


@dataclass(frozen=True)
class Implication:
    """Horn rule: premise (lhs) implies conclusion (rhs)."""
    lhs: Expression
    rhs: Expression

    @staticmethod
    def apply(lhs: bool, rhs: bool) -> bool:
        return material_implication(lhs, rhs)

    @property
    def premise(self) -> Expression:
        return self.lhs

    @property
    def conclusion(self) -> Expression:
        return self.rhs

    def evaluate(self) -> bool:
        return material_implication(self.lhs.evaluate(), self.rhs.evaluate())

    def is_atom(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.lhs}{IMPLIES}{self.rhs}"


# Type aliases for the closed union
Expression = Union[Atom, Conjunction, Implication]
Operator = Union[Conjunction, Implication]


# =============================================================================
# PARSING
# =============================================================================


def validate_symbol(symbol: str) -> str:
    """Return symbol unchanged if it is exactly one uppercase letter.

    Raises:
        InvalidSymbolError: for anything else
    """
    if len(symbol) != 1 or not _SYMBOL.fullmatch(symbol):
        raise InvalidSymbolError(f"Invalid symbol: '{symbol}'", text=symbol)
    return symbol


def parse_expression(
    text: str,
    known_atoms: Optional[Mapping[str, Atom]] = None,
    declaration: bool = False,
) -> Expression:
    """Parse expression text.

    Args:
        text: Expression text with whitespace already removed
        known_atoms: Declared facts; symbols found here are reused
        declaration: True when text is a standalone knowledge-base
            entry, where a bare multi-atom conjunction is illegal

    Returns:
        Parsed Expression

    Raises:
        ParseError: empty text, bad "=>" split, or an illegal
            top-level conjunction
        InvalidSymbolError: a symbol other than one uppercase letter
    """
    if not text:
        raise ParseError("Invalid expression: ''", text=text)

    known = known_atoms or {}

    if IMPLIES in text:
        parts = text.split(IMPLIES)
        if len(parts) != 2 or not all(parts):
            raise ParseError(f"Invalid expression: '{text}'", text=text)
        lhs = parse_expression(parts[0], known, declaration=False)
        rhs = parse_expression(parts[1], known, declaration=False)
        return Implication(lhs, rhs)

    atoms = [known.get(c) or Atom.from_symbol(c) for c in text]
    if declaration and len(atoms) > 1:
        raise ParseError(
            f"Invalid expression: '{text}' (a multi-atom entry must be an implication)",
            text=text,
        )

    expr: Expression = atoms[0]
    for atom in atoms[1:]:
        expr = Conjunction(expr, atom)
    return expr
