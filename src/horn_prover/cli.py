"""CLI entry point for horn-prover.

Usage:
    # Interactive session
    horn-prover
    horn-prover --kb examples/family.kb

    # One-shot queries
    horn-prover --kb rules.kb --query C --query AB
    horn-prover --kb rules.kb --query C --trace

Interactive commands:
    loadkb <filename>   Load a knowledge base (text, or .yaml/.yml)
    ask <query>         Ask whether a query is provable
    trace <query>       Same as 'ask', printing the proof tree
    help                List commands
    exit                Leave the session
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .config import ProverSettings, get_settings
from .errors import ReasoningError
from .inference import Prover
from .knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)

HELP_TEXT = """Available commands:
* loadkb <filename>: Load a knowledge base in horn clause form
* ask <query>: Ask for a proof in horn clause form
* trace <query>: Same as 'ask' with a tree of the execution
* help: Display a list of commands
* exit"""


def load_knowledge_base(path: str) -> KnowledgeBase:
    """Load a knowledge base, picking the format from the file suffix."""
    if Path(path).suffix.lower() in (".yaml", ".yml"):
        return KnowledgeBase.from_yaml(path)
    return KnowledgeBase.from_file(path)


class Session:
    """One interactive session around a Prover.

    Errors from a command are reported and the session carries on.
    """

    def __init__(
        self,
        prover: Optional[Prover] = None,
        settings: Optional[ProverSettings] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.settings = settings or get_settings()
        self.prover = prover or Prover(max_depth=self.settings.max_depth)
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

    def load_kb(self, path: str) -> bool:
        if not path:
            print("Usage: loadkb <filename>", file=self.err)
            return False
        try:
            kb = load_knowledge_base(path)
        except (ReasoningError, OSError) as e:
            print(str(e), file=self.err)
            return False

        # Installed only once the whole file parsed
        self.prover.set_knowledge_base(kb)
        logger.debug("Installed knowledge base from %s (%d entries)", path, len(kb))
        print(str(kb), file=self.out)
        print("Knowledge base loaded successfully", file=self.out)
        return True

    def ask(self, query: str, trace: bool = False) -> Optional[bool]:
        try:
            answer = self.prover.query(query, trace=trace)
        except ReasoningError as e:
            print(str(e), file=self.err)
            return None

        if answer.trace is not None:
            print(answer.trace.explain(unicode=self.settings.trace_unicode), file=self.out)
        print("true" if answer.result else "false", file=self.out)
        return answer.result

    def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the session should end."""
        parts = line.strip().split(maxsplit=1)
        if not parts:
            return True

        command = parts[0]
        argument = parts[1].strip() if len(parts) > 1 else ""

        if command == "loadkb":
            self.load_kb(argument)
        elif command == "ask":
            self.ask("".join(argument.split()))
        elif command == "trace":
            self.ask("".join(argument.split()), trace=True)
        elif command == "help":
            print(HELP_TEXT, file=self.out)
        elif command == "exit":
            return False
        else:
            print(
                f"Unknown command: '{command}'\nType 'help' to get a list of commands.",
                file=self.err,
            )
        return True

    def run(self, stdin: Optional[TextIO] = None) -> None:
        """Read commands until 'exit' or end of input."""
        stdin = stdin if stdin is not None else sys.stdin
        interactive = stdin.isatty()
        while True:
            if interactive:
                self.out.write(self.settings.prompt)
                self.out.flush()
            line = stdin.readline()
            if not line:
                break
            if not self.handle(line):
                break


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="horn-prover",
        description="Backward-chaining prover for propositional Horn clauses.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--kb",
        metavar="FILE",
        help="Knowledge base to load before running",
    )
    parser.add_argument(
        "--query",
        "-q",
        action="append",
        metavar="QUERY",
        help="Query to answer without starting a session (repeatable)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the proof tree for each --query",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: HORN_LOG_LEVEL or WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    session = Session(settings=settings)

    if args.kb and not session.load_kb(args.kb):
        return 1

    if args.query:
        failed = False
        for query in args.query:
            if session.ask("".join(query.split()), trace=args.trace) is None:
                failed = True
        return 1 if failed else 0

    session.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
