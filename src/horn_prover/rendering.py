"""
horn_prover/rendering.py - Plain-text proof tree rendering

Turns a ProofTree into an indented tree:

    C
    └─ AB=>C
       ├─ A: true
       └─ A=>B: true

Repeated sibling labels are numbered (A, A2, A3) so every line can be
told apart.
"""

from __future__ import annotations

from typing import Dict, List, Union

from .inference import Outcome, ProofNode, ProofTree

# (branch, last branch, continuation, last continuation)
_UNICODE_GLYPHS = ("├─ ", "└─ ", "│  ", "   ")
_ASCII_GLYPHS = ("|-- ", "`-- ", "|   ", "    ")


def describe_outcome(outcome: Outcome) -> str:
    text = "true" if outcome.truth else "false"
    return f"{text} (already proved)" if outcome.from_cache else text


def unique_labels(nodes: List[ProofNode]) -> List[str]:
    """Labels for sibling nodes, numbering repeats from 2."""
    seen: Dict[str, int] = {}
    labels = []
    for node in nodes:
        count = seen.get(node.label, 0) + 1
        seen[node.label] = count
        labels.append(node.label if count == 1 else f"{node.label}{count}")
    return labels


def render_tree(tree: Union[ProofTree, ProofNode], unicode: bool = True) -> str:
    """Render a proof tree (or subtree) as text."""
    root = tree.root if isinstance(tree, ProofTree) else tree
    glyphs = _UNICODE_GLYPHS if unicode else _ASCII_GLYPHS

    lines = [_format_line(root.label, root)]
    _render_children(root, "", glyphs, lines)
    return "\n".join(lines)


def _format_line(label: str, node: ProofNode) -> str:
    if node.outcome is None:
        return label
    return f"{label}: {describe_outcome(node.outcome)}"


def _render_children(
    node: ProofNode, prefix: str, glyphs: tuple, lines: List[str]
) -> None:
    branch, last_branch, cont, last_cont = glyphs
    labels = unique_labels(node.children)

    for i, (child, label) in enumerate(zip(node.children, labels)):
        is_last = i == len(node.children) - 1
        lines.append(prefix + (last_branch if is_last else branch) + _format_line(label, child))
        _render_children(child, prefix + (last_cont if is_last else cont), glyphs, lines)
