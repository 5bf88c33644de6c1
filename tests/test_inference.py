"""
tests/test_inference.py - Backward Chaining Tests

Verifies the prover's answers and proof trees.

Key Properties Tested:
    - Facts are provable, underivable atoms are not
    - Conjunction and implication laws
    - Substring rule matching
    - Per-query proof cache: reuse inside a query, no leak across queries
    - Single-atom premises commit to their answer; compound ones backtrack
    - Cycles surface as ProofDepthError
"""

from __future__ import annotations

import pytest

from horn_prover import (
    Answer,
    KnowledgeBase,
    Outcome,
    ParseError,
    ProofDepthError,
    Prover,
    StateError,
    backward_chain,
)
from horn_prover.inference import ProofContext

# =============================================================================
# FIXTURES
# =============================================================================


def make_prover(text: str, **kwargs) -> Prover:
    return Prover(KnowledgeBase.parse(text), **kwargs)


def leaves(node):
    """(label, outcome) pairs of node's direct children."""
    return [(child.label, child.outcome) for child in node.children]


@pytest.fixture
def chain_prover():
    return make_prover("A, A=>B, AB=>C")


# =============================================================================
# BASIC ANSWERS
# =============================================================================


class TestAnswers:
    def test_fact_is_provable(self):
        prover = make_prover("F, G")
        assert prover.ask("F") is True
        assert prover.ask("G") is True

    def test_undeclared_atom_is_false(self):
        prover = make_prover("A, A=>B")
        assert prover.ask("Z") is False

    def test_implication_law(self):
        assert make_prover("A, A=>B").ask("B") is True
        assert make_prover("A=>B").ask("B") is False

    def test_conjunction_law(self):
        prover = make_prover("A, B")
        assert prover.ask("AB") == (prover.ask("A") and prover.ask("B"))
        assert prover.ask("AB") is True

        partial = make_prover("A, C=>D")
        assert partial.ask("AB") is False
        assert partial.ask("AB") == (partial.ask("A") and partial.ask("B"))

    def test_substring_match_permissiveness(self):
        prover = make_prover("C, C=>DA")
        assert prover.ask("A") is True

    def test_chained_rules(self, chain_prover):
        assert chain_prover.ask("C") is True

    def test_long_chain_under_depth_limit(self):
        letters = [chr(c) for c in range(ord("A"), ord("Z") + 1)]
        rules = [f"{a}=>{b}" for a, b in zip(letters, letters[1:])]
        prover = make_prover(",".join(["A"] + rules))
        assert prover.ask("Z") is True

    def test_implication_query(self):
        prover = make_prover("A, A=>B")
        assert prover.ask("A=>B") is True
        assert prover.ask("A=>C") is False
        assert prover.ask("C=>A") is True

    def test_idempotence(self, chain_prover):
        first = [chain_prover.ask(q) for q in ("A", "B", "C", "D", "BC")]
        second = [chain_prover.ask(q) for q in ("A", "B", "C", "D", "BC")]
        assert first == second == [True, True, True, False, True]

    def test_query_returns_answer(self, chain_prover):
        answer = chain_prover.query("C")
        assert isinstance(answer, Answer)
        assert answer.result is True
        assert answer.trace is None
        assert bool(answer) is True


# =============================================================================
# SEARCH ORDER
# =============================================================================


class TestSearchOrder:
    def test_single_atom_premise_commits_on_failure(self):
        # D=>A fails and C=>A is never tried
        prover = make_prover("C, D=>A, C=>A")
        assert prover.ask("A") is False

    def test_compound_premise_backtracks_on_failure(self):
        prover = make_prover("C, DE=>A, C=>A")
        assert prover.ask("A") is True

    def test_true_premise_stops_search(self):
        prover = make_prover("C, C=>A, D=>A")
        answer = prover.query("A", trace=True)
        assert answer.result is True
        assert leaves(answer.trace.root) == [("C=>A", Outcome.PROVED)]

    def test_single_atom_premise_success(self):
        prover = make_prover("A, A=>B, B=>C")
        answer = prover.query("C", trace=True)
        assert answer.result is True
        rule_node = answer.trace.root.children[0]
        assert rule_node.label == "B=>C"
        assert rule_node.outcome is None
        assert leaves(rule_node) == [("A=>B", Outcome.PROVED)]

    def test_operator_evaluates_both_operands(self):
        prover = make_prover("A")
        answer = prover.query("XA", trace=True)
        assert answer.result is False
        assert leaves(answer.trace.root) == [
            ("X", Outcome.FAILED),
            ("A", Outcome.PROVED),
        ]


# =============================================================================
# PROOF CACHE
# =============================================================================


class TestProofCache:
    def test_chain_trace(self, chain_prover):
        tree = chain_prover.query("C", trace=True).trace
        assert tree.root.label == "C"
        (rule_node,) = tree.root.children
        assert rule_node.label == "AB=>C"
        assert leaves(rule_node) == [
            ("A", Outcome.PROVED),
            ("A=>B", Outcome.PROVED),
        ]

    def test_second_reference_is_served_from_cache(self, chain_prover):
        tree = chain_prover.query("BC", trace=True).trace
        assert tree.is_valid
        first, second = tree.root.children
        assert (first.label, first.outcome) == ("A=>B", Outcome.PROVED)
        assert second.label == "AB=>C"
        assert leaves(second) == [
            ("A", Outcome.PROVED),
            ("B", Outcome.ALREADY_PROVED),
        ]

    def test_failures_are_cached(self):
        prover = make_prover("A")
        tree = prover.query("XX", trace=True).trace
        assert tree.result is False
        assert leaves(tree.root) == [
            ("X", Outcome.FAILED),
            ("X", Outcome.ALREADY_FAILED),
        ]

    def test_cache_does_not_leak_between_queries(self, chain_prover):
        chain_prover.ask("BC")
        tree = chain_prover.query("B", trace=True).trace
        assert leaves(tree.root) == [("A=>B", Outcome.PROVED)]

    def test_context_lifecycle(self):
        ctx = ProofContext(max_depth=10)
        assert ctx.lookup("A") is None
        ctx.record("A", False)
        assert ctx.lookup("A") is False
        ctx.record("A", True)
        assert ctx.lookup("A") is True
        ctx.clear()
        assert ctx.proved == {}


# =============================================================================
# TRACES
# =============================================================================


class TestTraces:
    def test_last_trace_only_when_requested(self, chain_prover):
        chain_prover.ask("C")
        assert chain_prover.last_trace is None
        chain_prover.ask("C", trace=True)
        assert chain_prover.last_trace is not None
        assert chain_prover.last_trace.query == "C"

    def test_to_dict(self):
        tree = make_prover("A, A=>B").query("B", trace=True).trace
        assert tree.to_dict() == {
            "query": "B",
            "valid": True,
            "tree": {
                "label": "B",
                "outcome": None,
                "children": [
                    {"label": "A=>B", "outcome": "proved", "children": []},
                ],
            },
        }

    def test_backward_chain(self):
        kb = KnowledgeBase.parse("A=>B")
        tree = backward_chain(kb, "B")
        assert not tree.is_valid
        rule_node = tree.root.children[0]
        assert rule_node.label == "A=>B"
        assert leaves(rule_node) == [("A", Outcome.FAILED)]


# =============================================================================
# ERRORS
# =============================================================================


class TestErrors:
    def test_no_knowledge_base(self):
        with pytest.raises(StateError):
            Prover().ask("A")

    @pytest.mark.parametrize("query", ["", "A=>B=>C", "a"])
    def test_bad_query(self, chain_prover, query):
        with pytest.raises(ParseError):
            chain_prover.ask(query)

    def test_failed_parse_keeps_installed_kb(self, chain_prover):
        kb = chain_prover.kb
        with pytest.raises(ParseError):
            chain_prover.set_knowledge_base(KnowledgeBase.parse("A, AB"))
        assert chain_prover.kb is kb
        assert chain_prover.ask("C") is True

    def test_cycle_raises_depth_error(self):
        prover = make_prover("A=>B, B=>A", max_depth=20)
        with pytest.raises(ProofDepthError) as exc_info:
            prover.ask("A")
        assert exc_info.value.depth == 21

    def test_prover_recovers_after_depth_error(self):
        prover = make_prover("A=>B, B=>A", max_depth=20)
        with pytest.raises(ProofDepthError):
            prover.ask("B")
        prover.set_knowledge_base(KnowledgeBase.parse("A, A=>B"))
        assert prover.ask("B") is True

    def test_cycle_past_interpreter_recursion_limit(self):
        prover = make_prover("A=>B, B=>A", max_depth=10**6)
        with pytest.raises(ProofDepthError) as exc_info:
            prover.ask("A")
        assert exc_info.value.goal == "A"
        assert isinstance(exc_info.value.__cause__, RecursionError)

        prover.set_knowledge_base(KnowledgeBase.parse("A, A=>B"))
        assert prover.ask("B") is True

    def test_set_knowledge_base_replaces(self):
        prover = make_prover("A")
        assert prover.ask("B") is False
        prover.set_knowledge_base(KnowledgeBase.parse("B"))
        assert prover.ask("B") is True
        assert prover.ask("A") is False
