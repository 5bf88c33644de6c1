"""
horn_prover/inference.py - Backward Chaining Prover

BACKWARD CHAINING (Goal-Driven):
    Start with a goal and work backwards through the rules whose
    conclusion mentions it, down to declared facts.

Each ask() runs against a fresh ProofContext, a memo of the atoms
resolved so far in that query. The context is discarded when the call
returns, so nothing proved in one query leaks into the next.

Search order, for an atom goal:
    1. already resolved in this query -> reuse the cached answer
    2. declared fact                  -> true
    3. matching rules, in declaration order:
         premise already true       -> true
         premise is a single atom   -> prove it and commit to that
                                       answer (later rules are skipped)
         premise is compound        -> evaluate it; on failure move on
                                       to the next rule
    4. otherwise                      -> false

Every attempt is recorded in a ProofTree for explainability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import get_settings
from .errors import ProofDepthError, StateError
from .expressions import Atom, Expression, Operator, parse_expression
from .knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """Outcome recorded on a proof-tree leaf."""

    PROVED = "proved"
    FAILED = "failed"
    ALREADY_PROVED = "already_proved"
    ALREADY_FAILED = "already_failed"

    @property
    def truth(self) -> bool:
        return self in (Outcome.PROVED, Outcome.ALREADY_PROVED)

    @property
    def from_cache(self) -> bool:
        return self in (Outcome.ALREADY_PROVED, Outcome.ALREADY_FAILED)


@dataclass
class ProofNode:
    """Node in a proof tree.

    Labels are the canonical text of the goal or rule attempted.
    Leaves carry an outcome; rule attempts that recursed carry children
    instead. Sibling labels may repeat.
    """

    label: str
    outcome: Optional[Outcome] = None
    children: List[ProofNode] = field(default_factory=list)

    def add(self, label: str, outcome: Optional[Outcome] = None) -> ProofNode:
        """Append and return a child node."""
        child = ProofNode(label=label, outcome=outcome)
        self.children.append(child)
        return child


@dataclass
class ProofTree:
    """Complete trace of one query."""

    root: ProofNode
    query: str
    result: bool

    @property
    def is_valid(self) -> bool:
        """True if the query was proved."""
        return self.result

    def explain(self, unicode: bool = True) -> str:
        """Generate human-readable explanation."""
        from .rendering import render_tree

        return render_tree(self, unicode=unicode)

    def to_dict(self) -> Dict[str, Any]:
        """Export proof tree to dictionary."""
        return {
            "query": self.query,
            "valid": self.result,
            "tree": self._node_to_dict(self.root),
        }

    def _node_to_dict(self, node: ProofNode) -> Dict[str, Any]:
        return {
            "label": node.label,
            "outcome": node.outcome.value if node.outcome else None,
            "children": [self._node_to_dict(c) for c in node.children],
        }


@dataclass
class Answer:
    """Result of a query, with its trace when one was requested."""

    result: bool
    trace: Optional[ProofTree] = None

    def __bool__(self) -> bool:
        return self.result


@dataclass
class ProofContext:
    """Proof cache for a single query: atom name -> last proven value."""

    max_depth: int
    proved: Dict[str, bool] = field(default_factory=dict)

    def lookup(self, name: str) -> Optional[bool]:
        return self.proved.get(name)

    def record(self, name: str, value: bool) -> None:
        self.proved[name] = value

    def clear(self) -> None:
        self.proved.clear()


class Prover:
    """Backward-chaining prover over a propositional knowledge base.

    Not safe for concurrent ask() calls on one instance; use one
    Prover per thread.

    Example:
        prover = Prover(KnowledgeBase.parse("A, A=>B, AB=>C"))
        prover.ask("C")                  # True
        answer = prover.query("C", trace=True)
        print(answer.trace.explain())
    """

    def __init__(
        self,
        kb: Optional[KnowledgeBase] = None,
        max_depth: Optional[int] = None,
    ):
        self.kb = kb
        self.max_depth = max_depth if max_depth is not None else get_settings().max_depth
        self.last_trace: Optional[ProofTree] = None

    def set_knowledge_base(self, kb: KnowledgeBase) -> None:
        """Replace the active knowledge base."""
        self.kb = kb

    # -------------------------------------------------------------------------
    # Public queries
    # -------------------------------------------------------------------------

    def ask(self, query_text: str, trace: bool = False) -> bool:
        """Check whether query_text is derivable.

        Args:
            query_text: Query in knowledge-base grammar ("A", "AB", "A=>B")
            trace: Keep the proof tree in last_trace

        Returns:
            True if the query is proved

        Raises:
            StateError: if no knowledge base is set
            ParseError: if query_text is malformed
            ProofDepthError: if the search exceeds max_depth
        """
        return self.query(query_text, trace=trace).result

    def query(self, query_text: str, trace: bool = False) -> Answer:
        """Like ask(), returning an Answer that carries the trace."""
        self.last_trace = None
        if self.kb is None:
            raise StateError("Cannot evaluate your query, knowledge base is empty.")

        goal = parse_expression(query_text, self.kb.facts)
        root = ProofNode(label=query_text)
        ctx = ProofContext(max_depth=self.max_depth)

        try:
            result = self._evaluate_goal(goal, root, ctx, 0)
        except RecursionError as e:
            logger.warning("Recursion limit reached while proving %r", query_text)
            raise ProofDepthError(
                f"Proof of '{query_text}' is too deep; the knowledge base may contain a rule cycle",
                goal=query_text,
            ) from e
        finally:
            ctx.clear()

        logger.debug("ask %r -> %s", query_text, result)

        tree = ProofTree(root=root, query=query_text, result=result)
        if trace:
            self.last_trace = tree
            return Answer(result=result, trace=tree)
        return Answer(result=result)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def _evaluate_goal(
        self, goal: Expression, node: ProofNode, ctx: ProofContext, depth: int
    ) -> bool:
        if isinstance(goal, Atom):
            return self._prove_atom(goal, node, ctx, depth)
        return self._evaluate_operator(goal, node, ctx, depth)

    def _prove_atom(
        self, goal: Atom, node: ProofNode, ctx: ProofContext, depth: int
    ) -> bool:
        """Recursively prove an atom, recording attempts under node."""
        if depth > ctx.max_depth:
            logger.warning("Proof depth %d exceeded at goal %s", ctx.max_depth, goal)
            raise ProofDepthError(
                f"Proof depth limit ({ctx.max_depth}) exceeded at goal '{goal}'; "
                "the knowledge base may contain a rule cycle",
                goal=str(goal),
                depth=depth,
            )

        name = goal.name

        cached = ctx.lookup(name)
        if cached is not None:
            node.add(name, Outcome.ALREADY_PROVED if cached else Outcome.ALREADY_FAILED)
            return cached

        if goal.evaluate():
            node.add(name, Outcome.PROVED)
            return True

        for rule in self.kb.matching_rules(goal):
            rule_node = node.add(str(rule))
            premise = rule.premise

            if premise.evaluate():
                rule_node.outcome = Outcome.PROVED
                self._save_conclusion(rule.conclusion, ctx)
                return True

            if isinstance(premise, Atom):
                # Commits to this rule whatever the outcome
                result = self._prove_atom(premise, rule_node, ctx, depth + 1)
                ctx.record(premise.name, result)
                if result:
                    self._save_conclusion(rule.conclusion, ctx)
                return result

            if self._evaluate_operator(premise, rule_node, ctx, depth + 1):
                self._save_conclusion(rule.conclusion, ctx)
                return True

        node.add(name, Outcome.FAILED)
        ctx.record(name, False)
        return False

    def _evaluate_operator(
        self, op: Operator, node: ProofNode, ctx: ProofContext, depth: int
    ) -> bool:
        """Resolve both operands, then apply the operator's truth function.

        Both operands are always resolved. Results are not cached at
        this level.
        """
        lhs = self._evaluate_goal(op.lhs, node, ctx, depth)
        rhs = self._evaluate_goal(op.rhs, node, ctx, depth)
        return op.apply(lhs, rhs)

    @staticmethod
    def _save_conclusion(conclusion: Expression, ctx: ProofContext) -> None:
        if isinstance(conclusion, Atom):
            ctx.record(conclusion.name, True)


# =============================================================================
# CONVENIENCE
# =============================================================================


def backward_chain(
    kb: KnowledgeBase, query_text: str, max_depth: Optional[int] = None
) -> ProofTree:
    """Prove query_text against kb and return its proof tree.

    Args:
        kb: Knowledge base with facts and rules
        query_text: Query to prove
        max_depth: Maximum proof depth (defaults to configuration)

    Returns:
        ProofTree showing the derivation (valid or not)
    """
    answer = Prover(kb, max_depth=max_depth).query(query_text, trace=True)
    return answer.trace
