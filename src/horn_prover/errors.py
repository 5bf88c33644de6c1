"""
horn_prover/errors.py - Error taxonomy for parsing and proving

All errors are synchronous and leave the prover and any installed
knowledge base untouched.
"""

from __future__ import annotations


class ReasoningError(Exception):
    """Base class for every error raised by horn_prover."""


class ParseError(ReasoningError, ValueError):
    """Raised when expression or knowledge-base text is malformed."""

    def __init__(self, message: str, text: str = ""):
        self.text = text
        super().__init__(message)


class InvalidSymbolError(ParseError):
    """Raised when an atom symbol is not a single uppercase letter."""


class StateError(ReasoningError):
    """Raised when a query is asked before a knowledge base is loaded."""


class ProofDepthError(ReasoningError):
    """Raised when backward chaining recurses past the depth limit.

    A knowledge base containing a rule cycle (A=>B, B=>A) never
    terminates on its own; this error is how that surfaces.
    """

    def __init__(self, message: str, goal: str = "", depth: int = 0):
        self.goal = goal
        self.depth = depth
        super().__init__(message)
