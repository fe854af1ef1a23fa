import json
import os
import tempfile
import unittest

from sequentLogic import And, Atom, ConnectiveKind, Iff, Implies, Not, Or
from sequentSolver import Solver
from sequentSyntax import (
    DEFAULT_REGISTRY,
    Dumper,
    LogicParser,
    ParseError,
    Registry,
    UnknownConnectiveError,
    export_latex,
    parse_sequent,
    read_sequent,
)

A, B, C, D = Atom("A"), Atom("B"), Atom("C"), Atom("D")


class TestLogicParser(unittest.TestCase):

    def setUp(self):
        self.parser = LogicParser()

    def test_precedence(self):
        self.assertEqual(self.parser.parse("A | B & C"), Or(A, And(B, C)))
        self.assertEqual(self.parser.parse("~A & B"), And(Not(A), B))
        self.assertEqual(self.parser.parse("A <=> B => C"), Iff(A, Implies(B, C)))
        self.assertEqual(self.parser.parse("A & B => C | D"), Implies(And(A, B), Or(C, D)))

    def test_associativity(self):
        self.assertEqual(self.parser.parse("A => B => C"), Implies(A, Implies(B, C)))
        self.assertEqual(self.parser.parse("A | B | C"), Or(Or(A, B), C))
        self.assertEqual(self.parser.parse("A <-> B <-> C"), Iff(A, Iff(B, C)))

    def test_words_and_unicode_symbols(self):
        self.assertEqual(self.parser.parse("not (A or B)"), Not(Or(A, B)))
        self.assertEqual(self.parser.parse("A AND B"), And(A, B))
        self.assertEqual(self.parser.parse("¬A ∧ B → C ∨ D"), Implies(And(Not(A), B), Or(C, D)))
        self.assertEqual(self.parser.parse("A ↔ B"), Iff(A, B))
        self.assertEqual(self.parser.parse("!!A"), Not(Not(A)))

    def test_atom_names(self):
        self.assertEqual(self.parser.parse("p1 & rain_today'"), And(Atom("p1"), Atom("rain_today'")))

    def test_malformed_formulas(self):
        for text in ["A &", "(A", "A)", "A B", "& A", "()", ""]:
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    self.parser.parse(text)

    def test_unregistered_symbol(self):
        with self.assertRaises(UnknownConnectiveError) as ctx:
            self.parser.parse("A ^ B")
        self.assertIn("'^'", str(ctx.exception))


class TestSequentReader(unittest.TestCase):

    def test_arrow_separates_the_sides(self):
        sequent = parse_sequent("A & B -> B | C, D")
        self.assertEqual(sequent.lhs, (And(A, B),))
        self.assertEqual(sequent.rhs, (Or(B, C), D))

    def test_turnstiles(self):
        self.assertEqual(parse_sequent("A, B |- C").lhs, (A, B))
        self.assertEqual(parse_sequent("A ⊢ B").rhs, (B,))
        self.assertEqual(parse_sequent("A -> B |- C").lhs, (Implies(A, B),))

    def test_only_the_first_top_level_arrow_separates(self):
        sequent = parse_sequent("A -> B -> C")
        self.assertEqual(sequent.lhs, (A,))
        self.assertEqual(sequent.rhs, (Implies(B, C),))

        sequent = parse_sequent("(A -> B) -> C")
        self.assertEqual(sequent.lhs, (Implies(A, B),))
        self.assertEqual(sequent.rhs, (C,))

    def test_empty_sides(self):
        self.assertEqual(parse_sequent("|- A").lhs, ())
        self.assertEqual(parse_sequent("A |-").rhs, ())
        self.assertEqual(parse_sequent("-> A").lhs, ())

    def test_no_separator_means_succedent(self):
        sequent = parse_sequent("A | ~A")
        self.assertEqual(sequent.lhs, ())
        self.assertEqual(sequent.rhs, (Or(A, Not(A)),))
        self.assertEqual(parse_sequent("A <-> B").rhs, (Iff(A, B),))

    def test_malformed_sequents(self):
        for text in ["A &", "A,, B |- C", "A |- B |- C", "(A |- B)", "A, |- B", "", "   "]:
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    parse_sequent(text)
                self.assertIsNone(read_sequent(text))

    def test_read_sequent_rejects_unknown_connectives(self):
        self.assertIsNone(read_sequent("A ^ B -> C"))
        with self.assertRaises(UnknownConnectiveError):
            parse_sequent("A ^ B -> C")


class TestRegistry(unittest.TestCase):

    def test_default_lookup(self):
        self.assertIs(DEFAULT_REGISTRY.lookup("&"), ConnectiveKind.AND)
        self.assertIs(DEFAULT_REGISTRY.lookup("OR"), ConnectiveKind.OR)
        self.assertIs(DEFAULT_REGISTRY.lookup("→"), ConnectiveKind.IMPLIES)
        with self.assertRaises(UnknownConnectiveError):
            DEFAULT_REGISTRY.lookup("^")

    def test_registry_is_immutable(self):
        with self.assertRaises(TypeError):
            DEFAULT_REGISTRY.symbols["^"] = ConnectiveKind.AND
        self.assertNotIn("^", DEFAULT_REGISTRY)

    def test_symbol_for_uses_first_registration(self):
        self.assertEqual(DEFAULT_REGISTRY.symbol_for(ConnectiveKind.NOT), "~")
        self.assertEqual(DEFAULT_REGISTRY.symbol_for(ConnectiveKind.IMPLIES), "=>")
        self.assertEqual(DEFAULT_REGISTRY.symbol_for(ConnectiveKind.IFF), "<=>")

    def test_extend_returns_a_new_registry(self):
        registry = DEFAULT_REGISTRY.extend({"^": ConnectiveKind.AND})

        self.assertEqual(LogicParser(registry).parse("A ^ B"), And(A, B))
        self.assertNotIn("^", DEFAULT_REGISTRY)

    def test_invalid_registrations(self):
        with self.assertRaises(TypeError):
            Registry({"^": "and"})
        with self.assertRaises(ValueError):
            Registry({",": ConnectiveKind.AND})

    def test_custom_registry_without_arrow(self):
        registry = Registry({"~": ConnectiveKind.NOT, "&": ConnectiveKind.AND, "v": ConnectiveKind.OR,
                             "=>": ConnectiveKind.IMPLIES})
        sequent = parse_sequent("A v B -> A & B", registry)
        self.assertEqual(sequent.lhs, (Or(A, B),))
        self.assertEqual(sequent.rhs, (And(A, B),))
        with self.assertRaises(ParseError):
            parse_sequent("|- A -> B", registry)


class TestRegistryConfiguration(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "symbols.json")

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, text):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)

    def test_load_aliases(self):
        self.write(json.dumps({"symbols": {"^": "and", "v": "OR", "⊃": "implies"}}))
        registry = Registry.load(self.path)

        self.assertEqual(LogicParser(registry).parse("A ^ B v C ⊃ D"), Implies(Or(And(A, B), C), D))
        self.assertIs(registry.lookup("&"), ConnectiveKind.AND)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(Registry.load(os.path.join(self.tmpdir.name, "nope.json")), DEFAULT_REGISTRY)

    def test_malformed_file_is_logged_and_ignored(self):
        self.write("{not json")
        with self.assertLogs("sequentSyntax", level="WARNING"):
            registry = Registry.load(self.path)
        self.assertEqual(registry, DEFAULT_REGISTRY)

    def test_unknown_connective_name(self):
        self.write(json.dumps({"symbols": {"%": "xor"}}))
        with self.assertRaises(UnknownConnectiveError):
            Registry.load(self.path)

    def test_invalid_symbol_is_logged_and_ignored(self):
        for symbol in ["(", "", "a,b"]:
            with self.subTest(symbol=symbol):
                self.write(json.dumps({"symbols": {symbol: "and"}}))
                with self.assertLogs("sequentSyntax", level="WARNING"):
                    registry = Registry.load(self.path)
                self.assertEqual(registry, DEFAULT_REGISTRY)


class TestDumper(unittest.TestCase):

    def setUp(self):
        self.dumper = Dumper()

    def test_dump_sequent(self):
        sequent = parse_sequent("A & B -> B | C, D")
        self.assertEqual(self.dumper.dump_sequent(sequent), "A & B -> B | C, D")
        self.assertEqual(self.dumper.dump_sequent(parse_sequent("|- A -> B")), "-> A => B")
        self.assertEqual(self.dumper.dump_sequent(parse_sequent("A |-")), "A ->")

    def test_dump_parenthesises_nested_formulas(self):
        self.assertEqual(self.dumper.dump_formula(Not(And(A, B))), "~(A & B)")
        self.assertEqual(self.dumper.dump_formula(Implies(A, Implies(B, C))), "A => (B => C)")
        self.assertEqual(self.dumper.dump_formula(Not(Not(A))), "~~A")

    def test_dump_rereads_to_the_same_formulas(self):
        for text in [
            "A & B -> B | C, D",
            "~(A | ~B), A <=> B |- (A => B) => C",
            "|- ((A => B) => A) => A",
            "A, B, C |-",
        ]:
            with self.subTest(text=text):
                sequent = parse_sequent(text)
                self.assertEqual(parse_sequent(self.dumper.dump_sequent(sequent)), sequent)

    def test_word_symbols(self):
        registry = Registry({"not": ConnectiveKind.NOT, "and": ConnectiveKind.AND})
        self.assertEqual(Dumper(registry).dump_formula(And(Not(A), B)), "not A and B")


class TestLatexExport(unittest.TestCase):

    def test_axiom_leaf(self):
        tree = Solver().prove(parse_sequent("A -> A"))
        self.assertEqual(
            export_latex(tree),
            "\\begin{rules}\n\\infer[\\ms{id}]\n  {A \\vdash A}\n  {}\n\\end{rules}",
        )

    def test_rules_and_counter_examples(self):
        latex = export_latex(Solver().prove(parse_sequent("A | B -> A")))

        self.assertIn("\\infer[\\lor L]", latex)
        self.assertIn("{(A \\lor B) \\vdash A}", latex)
        self.assertIn("\\deduce[?]\n    {B \\vdash A}", latex)
        self.assertIn("  &\n", latex)


if __name__ == '__main__':
    unittest.main()
