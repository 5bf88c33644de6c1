"""
horn_prover/knowledge_base.py - Knowledge Base of Facts and Horn Rules

The knowledge base stores declared facts and implication rules, and
answers goal-directed rule lookups for backward chaining.

Features:
- Text format parsing ("A, B, AB=>C")
- Fact storage by atom name
- Rule storage in declaration order
- Persistence support (text/JSON-style dict/YAML)
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import yaml

from .errors import ParseError
from .expressions import Atom, Expression, Implication, parse_expression, validate_symbol

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class KnowledgeBase:
    """Propositional Horn-clause knowledge base.

    Rule order is significant: the prover tries matching rules in the
    order they were declared.

    Example:
        kb = KnowledgeBase.parse("A, B, AB=>C, C=>D")

        kb.fact_count                          # 2
        [str(r) for r in kb.matching_rules(Atom("D"))]   # ["C=>D"]
    """

    def __init__(
        self,
        facts: Optional[Dict[str, Atom]] = None,
        rules: Optional[List[Implication]] = None,
    ):
        self._facts: Dict[str, Atom] = dict(facts or {})
        self._rules: List[Implication] = list(rules or [])

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> KnowledgeBase:
        """Parse knowledge-base text.

        All whitespace is stripped before the text is split on commas.
        One-letter entries are facts; every other entry must be a rule.

        Args:
            text: Knowledge-base source

        Returns:
            A new KnowledgeBase (nothing is built if any entry fails)

        Raises:
            ParseError: if the text is empty or any entry is malformed
        """
        compact = _WHITESPACE.sub("", text or "")
        if not compact:
            raise ParseError("Invalid knowledge base: ''", text=text or "")

        entries = compact.split(",")

        # Facts first so rules may name a fact declared after them
        facts: Dict[str, Atom] = {}
        for entry in entries:
            if len(entry) == 1:
                facts[entry] = Atom(validate_symbol(entry), True)

        rules: List[Implication] = []
        for entry in entries:
            if len(entry) == 1:
                continue
            rules.append(cls._parse_rule(entry, facts))

        logger.debug(
            "Parsed knowledge base: %d facts, %d rules", len(facts), len(rules)
        )
        return cls(facts, rules)

    @staticmethod
    def _parse_rule(entry: str, facts: Dict[str, Atom]) -> Implication:
        rule = parse_expression(entry, facts, declaration=True)
        if not isinstance(rule, Implication):
            raise ParseError(f"Invalid rule: '{entry}'", text=entry)
        return rule

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> KnowledgeBase:
        """Load knowledge-base text from a file."""
        text = Path(path).read_text(encoding="utf-8")
        kb = cls.parse(text)
        logger.info("Loaded knowledge base from %s", path)
        return kb

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def matching_rules(self, goal: Expression) -> List[Implication]:
        """Get rules that may conclude goal, in declaration order.

        Matching is textual: a rule matches when the goal's text occurs
        anywhere in the conclusion's text, so the conclusion "DA"
        matches the goal "A".
        """
        target = str(goal)
        return [rule for rule in self._rules if target in str(rule.conclusion)]

    def get_fact(self, name: str) -> Optional[Atom]:
        return self._facts.get(name)

    @property
    def facts(self) -> Dict[str, Atom]:
        """Declared facts by name."""
        return dict(self._facts)

    @property
    def rules(self) -> List[Implication]:
        """Rules in declaration order."""
        return list(self._rules)

    @property
    def fact_count(self) -> int:
        return len(self._facts)

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    def __len__(self) -> int:
        """Total number of entries."""
        return len(self._facts) + len(self._rules)

    def __iter__(self) -> Iterator[Expression]:
        """Iterate over facts, then rules."""
        yield from self._facts.values()
        yield from self._rules

    def __contains__(self, name: object) -> bool:
        return name in self._facts

    def __str__(self) -> str:
        facts = ", ".join(self._facts)
        rules = ",\n".join(str(r) for r in self._rules)
        if not rules:
            return facts
        if not facts:
            return rules
        return f"{facts},\n{rules}"

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_text(self) -> str:
        """Export to the comma-separated source format."""
        return ", ".join(str(entry) for entry in self)

    def to_dict(self) -> Dict[str, Any]:
        """Export to dictionary."""
        return {
            "facts": list(self._facts),
            "rules": [str(r) for r in self._rules],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> KnowledgeBase:
        """Import from dictionary."""
        entries: List[Any] = []
        for key in ("facts", "rules"):
            value = data.get(key) or []
            if not isinstance(value, list):
                raise ParseError(
                    f"Invalid knowledge base: '{key}' must be a list", text=str(value)
                )
            entries.extend(value)
        return cls.parse(",".join(str(e) for e in entries))

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save to YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> KnowledgeBase:
        """Load from YAML file."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ParseError(f"Invalid knowledge base file: {path}", text=str(path))
        return cls.from_dict(data)
