import json
import logging
import os
import re
from types import MappingProxyType

from sequentLogic import Atom, ConnectiveKind, build
from sequentSolver import AXIOM, Sequent

logger = logging.getLogger(__name__)

TURNSTILES = ("|-", "⊢")
ARROW = "->"
EXAMPLE = "A & B -> B | C, D"


class ParseError(ValueError):
    """The text is not a well-formed sequent."""


class UnknownConnectiveError(ParseError):
    """An operator symbol that no registered connective covers."""


DEFAULT_SYMBOLS = {
    "~": ConnectiveKind.NOT,
    "!": ConnectiveKind.NOT,
    "¬": ConnectiveKind.NOT,
    "not": ConnectiveKind.NOT,
    "&": ConnectiveKind.AND,
    "∧": ConnectiveKind.AND,
    "and": ConnectiveKind.AND,
    "|": ConnectiveKind.OR,
    "∨": ConnectiveKind.OR,
    "or": ConnectiveKind.OR,
    "=>": ConnectiveKind.IMPLIES,
    "->": ConnectiveKind.IMPLIES,
    "→": ConnectiveKind.IMPLIES,
    "implies": ConnectiveKind.IMPLIES,
    "<=>": ConnectiveKind.IFF,
    "<->": ConnectiveKind.IFF,
    "↔": ConnectiveKind.IFF,
    "iff": ConnectiveKind.IFF,
}


class Registry:
    """Immutable mapping from connective symbol to ``ConnectiveKind``.

    Word symbols (``and``, ``not`` ...) match case-insensitively. The first
    symbol registered for a kind is the one the dumper prints.
    """

    def __init__(self, symbols):
        table = {}
        for symbol, kind in symbols.items():
            if not isinstance(kind, ConnectiveKind):
                raise TypeError(f"{symbol!r} must map to a ConnectiveKind, got {kind!r}")
            symbol = symbol.strip()
            if not symbol or "," in symbol or "(" in symbol or ")" in symbol:
                raise ValueError(f"invalid connective symbol {symbol!r}")
            table[_normalize(symbol)] = kind
        self._symbols = MappingProxyType(table)
        self._operators = tuple(
            sorted((s for s in table if not _is_word(s)), key=len, reverse=True)
        )

    def __repr__(self):
        return f"Registry({dict(self._symbols)!r})"

    def __contains__(self, symbol):
        return _normalize(symbol) in self._symbols

    def __eq__(self, other):
        return isinstance(other, Registry) and dict(self._symbols) == dict(other._symbols)

    @property
    def symbols(self):
        return self._symbols

    @property
    def operators(self):
        """Non-word symbols, longest first."""
        return self._operators

    def lookup(self, symbol):
        try:
            return self._symbols[_normalize(symbol)]
        except KeyError:
            raise UnknownConnectiveError(f"Unregistered connective symbol '{symbol}'") from None

    def symbol_for(self, kind):
        for symbol, registered in self._symbols.items():
            if registered is kind:
                return symbol
        raise UnknownConnectiveError(f"No symbol registered for {kind.label}")

    def extend(self, symbols):
        return Registry({**self._symbols, **symbols})

    @classmethod
    def load(cls, path, base=None):
        """Default registry extended with the aliases of a JSON file.

        The file looks like ``{"symbols": {"^": "and", "v": "or"}}``. A
        missing or unreadable file leaves ``base`` unchanged.
        """
        base = base if base is not None else DEFAULT_REGISTRY
        if not os.path.exists(path):
            return base
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("ignoring connective configuration %s: %s", path, e)
            return base

        aliases = data.get("symbols", {}) if isinstance(data, dict) else {}
        if not isinstance(aliases, dict):
            logger.warning("ignoring connective configuration %s: 'symbols' is not an object", path)
            return base

        symbols = {}
        for symbol, name in aliases.items():
            try:
                symbols[symbol] = ConnectiveKind.from_label(str(name))
            except KeyError:
                raise UnknownConnectiveError(
                    f"{path}: '{symbol}' maps to unknown connective '{name}'"
                ) from None
        try:
            return base.extend(symbols)
        except ValueError as e:
            logger.warning("ignoring connective configuration %s: %s", path, e)
            return base


def _is_word(symbol):
    return bool(re.fullmatch(r"\w+", symbol))


def _normalize(symbol):
    return symbol.lower() if _is_word(symbol) else symbol


DEFAULT_REGISTRY = Registry(DEFAULT_SYMBOLS)


# ============================================================================
# READER
# ============================================================================

WORD = re.compile(r"[^\W\d]\w*'*")
PUNCTUATION = "(),"
OPERATOR_RUN = re.compile(r"[^\w\s(),]+")


class LogicParser:
    """Recursive-descent reader for propositional formulas.

    Precedence, loosest first: iff, implies (both right associative), or,
    and, not. Tokens are ``(tag, text)`` pairs where the tag is a
    ``ConnectiveKind`` or one of ``"atom"``, ``"("``, ``")"``, ``","``,
    ``"turnstile"``, ``"arrow"``.
    """

    def __init__(self, registry=None):
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.tokens = []
        self.pos = 0

    def tokenize(self, text):
        tokens = []
        pos = 0
        operators = sorted(
            set(self.registry.operators) | set(TURNSTILES) | {ARROW}, key=len, reverse=True
        )
        while pos < len(text):
            ch = text[pos]
            if ch.isspace():
                pos += 1
                continue
            if ch in PUNCTUATION:
                tokens.append((ch, ch))
                pos += 1
                continue

            word = WORD.match(text, pos)
            if word:
                name = word.group()
                if name in self.registry:
                    tokens.append((self.registry.lookup(name), name))
                else:
                    tokens.append(("atom", name))
                pos = word.end()
                continue

            for symbol in operators:
                if text.startswith(symbol, pos):
                    if symbol in TURNSTILES:
                        tokens.append(("turnstile", symbol))
                    elif symbol in self.registry:
                        tokens.append((self.registry.lookup(symbol), symbol))
                    else:
                        tokens.append(("arrow", symbol))
                    pos += len(symbol)
                    break
            else:
                run = OPERATOR_RUN.match(text, pos)
                if run is None:
                    raise ParseError(f"unexpected character '{ch}'")
                raise UnknownConnectiveError(f"Unregistered connective symbol '{run.group()}'")
        return tokens

    def parse(self, text):
        """Parse a single formula."""
        return self.parse_tokens(self.tokenize(text))

    def parse_tokens(self, tokens):
        self.tokens = list(tokens)
        self.pos = 0
        if not self.tokens:
            raise ParseError("empty formula")
        formula = self.parse_iff()
        if self.pos < len(self.tokens):
            raise ParseError(f"unexpected '{self.tokens[self.pos][1]}'")
        return formula

    def parse_list(self, tokens):
        """Parse comma-separated formulas; an empty token list is an empty side."""
        if not tokens:
            return []
        return [self.parse_tokens(chunk) for chunk in _split_top_level(tokens, ",")]

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos][0]
        return None

    def expect(self, tag):
        if self.peek() != tag:
            found = self.tokens[self.pos][1] if self.pos < len(self.tokens) else "end of input"
            raise ParseError(f"expected '{tag}' but found '{found}'")
        self.pos += 1

    def parse_iff(self):
        left = self.parse_implies()
        if self.peek() is ConnectiveKind.IFF:
            self.pos += 1
            right = self.parse_iff()
            return build(ConnectiveKind.IFF, left, right)
        return left

    def parse_implies(self):
        left = self.parse_or()
        if self.peek() is ConnectiveKind.IMPLIES:
            self.pos += 1
            right = self.parse_implies()
            return build(ConnectiveKind.IMPLIES, left, right)
        return left

    def parse_or(self):
        left = self.parse_and()
        while self.peek() is ConnectiveKind.OR:
            self.pos += 1
            right = self.parse_and()
            left = build(ConnectiveKind.OR, left, right)
        return left

    def parse_and(self):
        left = self.parse_not()
        while self.peek() is ConnectiveKind.AND:
            self.pos += 1
            right = self.parse_not()
            left = build(ConnectiveKind.AND, left, right)
        return left

    def parse_not(self):
        if self.peek() is ConnectiveKind.NOT:
            self.pos += 1
            return build(ConnectiveKind.NOT, self.parse_not())
        return self.parse_atom()

    def parse_atom(self):
        if self.pos >= len(self.tokens):
            raise ParseError("unexpected end of input")
        tag, text = self.tokens[self.pos]
        self.pos += 1
        if tag == "(":
            expr = self.parse_iff()
            self.expect(")")
            return expr
        if tag == "atom":
            return Atom(text)
        raise ParseError(f"unexpected '{text}'")


def _split_top_level(tokens, tag):
    """Split ``tokens`` on ``tag`` occurring outside parentheses."""
    chunks = [[]]
    depth = 0
    for token in tokens:
        if token[0] == "(":
            depth += 1
        elif token[0] == ")":
            depth -= 1
        if token[0] == tag and depth == 0:
            chunks.append([])
        else:
            chunks[-1].append(token)
    return chunks


def parse_sequent(text, registry=None):
    """Read ``antecedents |- succedents``.

    ``⊢`` may replace ``|-``. Without a turnstile the first top-level ``->``
    separates the sides, and text with no separator at all is a succedent.
    Raises ``ParseError``.
    """
    parser = LogicParser(registry)
    tokens = parser.tokenize(text)
    if not tokens:
        raise ParseError("empty sequent")

    depth = 0
    turnstiles = []
    arrow = None
    for index, (tag, symbol) in enumerate(tokens):
        if tag == "(":
            depth += 1
        elif tag == ")":
            depth -= 1
        elif tag == "turnstile":
            if depth != 0:
                raise ParseError(f"'{symbol}' inside parentheses")
            turnstiles.append(index)
        elif symbol == ARROW and depth == 0 and arrow is None:
            arrow = index

    if len(turnstiles) > 1:
        raise ParseError("more than one turnstile")
    split = turnstiles[0] if turnstiles else arrow
    if split is None:
        lhs_tokens, rhs_tokens = [], tokens
    else:
        lhs_tokens, rhs_tokens = tokens[:split], tokens[split + 1:]

    return Sequent(parser.parse_list(lhs_tokens), parser.parse_list(rhs_tokens))


def read_sequent(text, registry=None):
    """Like ``parse_sequent`` but returns ``None`` for malformed input."""
    try:
        return parse_sequent(text, registry)
    except ParseError as e:
        logger.debug("rejected %r: %s", text, e)
        return None


# ============================================================================
# DUMPER
# ============================================================================

class Dumper:
    """Prints formulas back in the registry's syntax."""

    def __init__(self, registry=None):
        self.registry = registry if registry is not None else DEFAULT_REGISTRY

    def dump_formula(self, formula, nested=False):
        if formula.is_atomic():
            return formula.name

        symbol = self.registry.symbol_for(formula.kind)
        if formula.kind is ConnectiveKind.NOT:
            sep = " " if _is_word(symbol) else ""
            return f"{symbol}{sep}{self.dump_formula(formula.inner, nested=True)}"

        text = f"{self.dump_formula(formula.left, True)} {symbol} {self.dump_formula(formula.right, True)}"
        return f"({text})" if nested else text

    def dump(self, formulas):
        return ", ".join(self.dump_formula(f) for f in formulas)

    def dump_sequent(self, sequent, separator=ARROW):
        return f"{self.dump(sequent.lhs)} {separator} {self.dump(sequent.rhs)}".strip()


LATEX_RULES = {"∧": "\\land ", "∨": "\\lor ", "→": "\\to ", "¬": "\\lnot ", "↔": "\\leftrightarrow "}


def export_latex(tree):
    """Render a proof tree for the ``rules`` LaTeX environment."""

    def recursive_build(node, depth=0):
        indent = "  " * depth
        sequent_tex = node.sequent.to_latex()

        # Leaf case
        if not node.children:
            if node.status == AXIOM:
                return f"{indent}\\infer[\\ms{{id}}]\n{indent}  {{{sequent_tex}}}\n{indent}  {{}}"
            return f"{indent}\\deduce[?]\n{indent}  {{{sequent_tex}}}\n{indent}  {{}}"

        rule_tex = node.rule or "?"
        for symbol, tex in LATEX_RULES.items():
            rule_tex = rule_tex.replace(symbol, tex)

        premises = [recursive_build(child, depth + 1) for child in node.children]
        joined_premises = f"\n{indent}  &\n".join(premises)

        return f"{indent}\\infer[{rule_tex}]\n{indent}  {{{sequent_tex}}}\n{indent}  {{\n{joined_premises}\n{indent}  }}"

    return "\\begin{rules}\n" + recursive_build(tree) + "\n\\end{rules}"
