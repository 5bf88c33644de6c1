"""
horn_prover - Propositional Horn-Clause Reasoning

Backward chaining over a knowledge base of facts and implication rules.

This module implements:
- Expression algebra (atoms, implicit conjunction, implication)
- Knowledge base parsing ("A, B, AB=>C")
- Goal-driven backward chaining with a per-query proof cache
- Proof tree generation and rendering

Example:
    from horn_prover import KnowledgeBase, Prover

    kb = KnowledgeBase.parse("A, A=>B, AB=>C")
    prover = Prover(kb)

    prover.ask("C")                      # True
    answer = prover.query("C", trace=True)
    print(answer.trace.explain())
"""

from .errors import (
    InvalidSymbolError,
    ParseError,
    ProofDepthError,
    ReasoningError,
    StateError,
)
from .expressions import Atom, Conjunction, Expression, Implication, parse_expression
from .inference import Answer, Outcome, ProofNode, ProofTree, Prover, backward_chain
from .knowledge_base import KnowledgeBase
from .rendering import render_tree

__version__ = "0.1.0"

__all__ = [
    # Expressions
    "Atom",
    "Conjunction",
    "Implication",
    "Expression",
    "parse_expression",
    # Knowledge Base
    "KnowledgeBase",
    # Inference
    "Prover",
    "Answer",
    "Outcome",
    "ProofNode",
    "ProofTree",
    "backward_chain",
    "render_tree",
    # Errors
    "ReasoningError",
    "ParseError",
    "InvalidSymbolError",
    "StateError",
    "ProofDepthError",
]
