import argparse
import logging
import os
import sys

from sequentSolver import AXIOM, COUNTER_EXAMPLE, Falsifier, ProofNode, Solver, merge
from sequentSyntax import (
    DEFAULT_REGISTRY,
    EXAMPLE,
    Dumper,
    ParseError,
    Registry,
    UnknownConnectiveError,
    export_latex,
    parse_sequent,
)

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[2J\033[H"


class Commands:
    """Line-oriented command interpreter writing to a text stream."""

    def __init__(self, registry=None, text_writer=None):
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.text_writer = text_writer if text_writer is not None else sys.stdout
        self.solver = Solver()
        self.falsifier = Falsifier()
        self.dumper = Dumper(self.registry)

    def write(self, text=""):
        self.text_writer.write(text + "\n")

    def interprete(self, text_reader):
        """Read and run one command. Returns False when the loop should stop."""
        self.text_writer.write(": ")
        self.text_writer.flush()

        line = text_reader.readline()
        if not line:
            return False
        return self.execute(line)

    def execute(self, line):
        words = line.strip().split(None, 1)
        if not words:
            return True

        command = words[0]
        argument = words[1].strip() if len(words) > 1 else ""

        if command == "q":
            return False
        if command == "h":
            self.help()
        elif command in (".", "?", "f"):
            if not argument:
                self.write("Required parameter is missing, type 'h' for help.")
                self.write()
            elif command == ".":
                self.load_from_file_proof(argument)
            elif command == "?":
                self.load_from_input_proof(argument)
            else:
                self.load_from_input_falsify(argument)
        elif command == "c":
            if self.text_writer.isatty():
                self.text_writer.write(CLEAR_SCREEN)
        else:
            self.write("Invalid input, type 'h' for help.")
            self.write("Hint: to prove a propositional formula, use '? [sequent]' command.")
            self.write()
        return True

    def help(self):
        self.write("Help")
        self.write("==================")
        self.write()
        self.write("? [sequent]     to load a sequent from input and show proof tree.")
        self.write("f [sequent]     to load a sequent from input and list all falsifying valuations.")
        self.write(". [path]        to load a sequent from file.")
        self.write("c               to clear console.")
        self.write("h               to help.")
        self.write("q               to quit.")
        self.write()

    def read(self, sequent_line, indentation=""):
        try:
            return parse_sequent(sequent_line, self.registry)
        except UnknownConnectiveError as e:
            self.write(f"{indentation}{e}.")
        except ParseError as e:
            logger.debug("rejected %r: %s", sequent_line, e)
        self.write(f"{indentation}Not a valid sequent. Ex: {EXAMPLE}")
        self.write()
        return None

    def load_from_file_proof(self, path, latex=False):
        """Prove every non-blank line of ``path``. Returns the proof trees."""
        lines = self._read_lines(path)
        if lines is None:
            return None
        return [self.load_from_input_proof(line, latex) for line in lines]

    def load_from_file_falsify(self, path):
        lines = self._read_lines(path)
        if lines is None:
            return None
        return [self.load_from_input_falsify(line) for line in lines]

    def _read_lines(self, path):
        if not os.path.isfile(path):
            self.write(f"File not found - {path}")
            self.write()
            return None

        with open(path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]

    def load_from_input_proof(self, sequent_line, latex=False):
        """Prove a sequent and print its tree. Returns the tree or None."""
        self.write(f"Proof tree of: {sequent_line}")
        self.write()

        sequent = self.read(sequent_line)
        if sequent is None:
            return None

        tree = self.solver.prove(sequent)

        counter_examples = []
        falsifying_valuations = []
        for node, indentation in self._dump_tree(tree):
            output = self.dumper.dump_sequent(node.sequent)
            self.write(f"{indentation}sequent = {output}")
            if node.status == AXIOM:
                self.write(f"{indentation}          ** axiom node **")
                self.write()
            elif node.status == COUNTER_EXAMPLE:
                counter_examples.append(output)
                self.write(f"{indentation}          ** counter-example node **")
                self.write()
                falsifying_valuations = merge(
                    falsifying_valuations, self.falsifier.valuation(node.sequent)
                )

        if counter_examples:
            self.write("Formula is not valid, details below.")

            self.write("+ Counter-examples:")
            for counter_example in counter_examples:
                self.write(f"  .. {counter_example}")
            self.write()

            self.write("+ Falsifying valuations:")
            for i, (atom, value) in enumerate(falsifying_valuations):
                self.write(f"  .. Valuation #{i}: {atom} -> {value}")
            self.write()
        else:
            self.write("Formula is valid.")

        if latex:
            self.write()
            self.write(export_latex(tree))

        self.write()
        return tree

    def load_from_input_falsify(self, sequent_line, indentation=""):
        """Print the merged falsifying valuations.

        Returns the counter-example leaves, or None for malformed input. An
        empty list means the sequent is valid. The empty sequent has one
        leaf and no valuation pairs, so the leaves decide validity.
        """
        self.write(f"{indentation}Falsifying valuations of: {sequent_line}")
        self.write()

        sequent = self.read(sequent_line, indentation)
        if sequent is None:
            return None

        leaves = list(self.falsifier.witnesses(sequent))
        if not leaves:
            self.write(f"{indentation}Formula is valid.")

        valuations = []
        for leaf in leaves:
            valuations = merge(valuations, self.falsifier.valuation(leaf))
        for i, (atom, value) in enumerate(valuations):
            self.write(f"{indentation}Valuation #{i}: {atom} -> {value}")
        self.write()
        return leaves

    def _dump_tree(self, node, depth=0):
        """Pre-order ``(node, indentation)``; only branching nodes indent."""
        yield node, "\t" * depth
        if len(node.children) >= 2:
            depth += 1
        for child in node.children:
            yield from self._dump_tree(child, depth)


def build_arg_parser():
    ap = argparse.ArgumentParser(
        prog="sequent-prover",
        description="Decide propositional sequents with Gentzen proof trees and list countermodels.",
    )
    ap.add_argument("sequents", nargs="*", help=f"sequents to prove, e.g. '{EXAMPLE}'")
    ap.add_argument("-f", "--falsify", action="store_true", help="list falsifying valuations instead of proof trees")
    ap.add_argument("--file", help="prove every line of a file, or falsify it with --falsify")
    ap.add_argument("--symbols", help="JSON file with extra connective symbols")
    ap.add_argument("--latex", action="store_true", help="also print proof trees as LaTeX")
    ap.add_argument("-v", "--verbose", action="store_true", help="log every decomposition step")
    ap.add_argument("--gui", action="store_true", help="open the desktop viewer")
    return ap


def main(argv=None, stdin=None, stdout=None):
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    registry = DEFAULT_REGISTRY
    if args.symbols:
        if not os.path.isfile(args.symbols):
            ap.error(f"symbol file not found: {args.symbols}")
        try:
            registry = Registry.load(args.symbols)
        except UnknownConnectiveError as e:
            ap.error(str(e))

    if args.gui:
        from sequentApp import run

        run(registry)
        return 0

    commands = Commands(registry, stdout or sys.stdout)

    if not args.sequents and not args.file:
        reader = stdin or sys.stdin
        while commands.interprete(reader):
            pass
        return 0

    results = []
    if args.file:
        if args.falsify:
            outcomes = commands.load_from_file_falsify(args.file)
        else:
            outcomes = commands.load_from_file_proof(args.file, args.latex)
        if outcomes is None:
            return 2
        results.extend(outcomes)

    for line in args.sequents:
        if args.falsify:
            results.append(commands.load_from_input_falsify(line))
        else:
            results.append(commands.load_from_input_proof(line, args.latex))

    if any(r is None for r in results):
        return 2
    valid = [r.is_closed if isinstance(r, ProofNode) else not r for r in results]
    return 0 if all(valid) else 1


if __name__ == "__main__":
    sys.exit(main())
