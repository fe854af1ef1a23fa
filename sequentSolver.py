import logging

from sequentLogic import LHS, RHS, atoms, decompose, rule_name, truth_value, weight

logger = logging.getLogger(__name__)

# Leaf classification
AXIOM = "axiom"
COUNTER_EXAMPLE = "counter-example"
OPEN = "open"


class Sequent:
    """Antecedent formulas ⊢ succedent formulas.

    Valid iff no valuation makes every antecedent true and every succedent
    false. Both sides are stored as tuples; decomposition always builds a new
    sequent.
    """

    def __init__(self, lhs=(), rhs=()):
        self.lhs = tuple(lhs)
        self.rhs = tuple(rhs)

    def __str__(self):
        l = ", ".join(str(f) for f in self.lhs)
        r = ", ".join(str(f) for f in self.rhs)
        return f"{l} ⊢ {r}".strip()

    def __repr__(self):
        return f"Sequent({str(self)!r})"

    def __eq__(self, other):
        return isinstance(other, Sequent) and self.lhs == other.lhs and self.rhs == other.rhs

    def __hash__(self):
        return hash((self.lhs, self.rhs))

    def to_latex(self):
        l = ", ".join(f.to_latex() for f in self.lhs) or "\\cdot"
        r = ", ".join(f.to_latex() for f in self.rhs) or "\\cdot"
        return f"{l} \\vdash {r}"

    def formulas(self, side):
        return self.lhs if side == LHS else self.rhs

    def is_axiom(self):
        """Some formula occurs, structurally equal, on both sides."""
        return any(f in self.rhs for f in self.lhs)

    def is_atomic(self):
        return all(f.is_atomic() for f in self.lhs + self.rhs)

    def is_atomic_irreducible(self):
        return self.is_atomic() and not self.is_axiom()

    def complexity(self):
        return sum(weight(f) for f in self.lhs + self.rhs)

    def atoms(self, side=None):
        sides = (side,) if side else (LHS, RHS)
        names = []
        for s in sides:
            for f in self.formulas(s):
                for name in atoms(f):
                    if name not in names:
                        names.append(name)
        return names

    def evaluate(self, valuation):
        """Truth of the sequent under ``valuation`` (missing atoms are false)."""
        if all(truth_value(f, valuation) for f in self.lhs):
            return any(truth_value(f, valuation) for f in self.rhs)
        return True

    def select_principal(self):
        """First compound formula scanning the antecedent, then the succedent.

        Returns ``(side, index, formula)`` or ``None`` when every formula is
        atomic.
        """
        for side in (LHS, RHS):
            for index, formula in enumerate(self.formulas(side)):
                if not formula.is_atomic():
                    return side, index, formula
        return None

    def replace(self, side, index, additions):
        """Drop the formula at ``side[index]`` and append ``additions``.

        ``additions`` is an ``(lhs_additions, rhs_additions)`` pair.
        """
        next_lhs = list(self.lhs)
        next_rhs = list(self.rhs)

        if side == LHS:
            del next_lhs[index]
        else:
            del next_rhs[index]

        next_lhs.extend(additions[0])
        next_rhs.extend(additions[1])
        return Sequent(next_lhs, next_rhs)

    def decompose(self):
        """Apply the rule of the principal formula.

        Returns ``(rule_label, children)`` or ``None`` when the sequent has
        no compound formula left.
        """
        principal = self.select_principal()
        if principal is None:
            return None

        side, index, formula = principal
        children = [
            self.replace(side, index, delta)
            for delta in decompose(formula.kind, side, *formula.operands)
        ]

        bound = self.complexity()
        for child in children:
            if child.complexity() >= bound:
                raise AssertionError(
                    f"decomposition of {formula} did not shrink {self} (child {child})"
                )
        return rule_name(formula.kind, side), children


class ProofNode:
    """One sequent of a proof tree together with the subtrees above it."""

    def __init__(self, sequent, children=(), rule=None):
        self.sequent = sequent
        self.children = tuple(children)
        self.rule = rule

    def __repr__(self):
        return f"ProofNode({str(self.sequent)!r}, rule={self.rule!r}, children={len(self.children)})"

    def __eq__(self, other):
        return (
            isinstance(other, ProofNode)
            and self.sequent == other.sequent
            and self.rule == other.rule
            and self.children == other.children
        )

    def __hash__(self):
        return hash((self.sequent, self.rule, self.children))

    @property
    def status(self):
        if self.sequent.is_axiom():
            return AXIOM
        if self.sequent.is_atomic():
            return COUNTER_EXAMPLE
        return OPEN

    def is_leaf(self):
        return not self.children

    @property
    def is_closed(self):
        return all(leaf.status == AXIOM for leaf in self.leaves())

    def walk(self, depth=0):
        """Pre-order traversal yielding ``(node, depth)``."""
        yield self, depth
        for child in self.children:
            yield from child.walk(depth + 1)

    def leaves(self):
        return [node for node, _ in self.walk() if node.is_leaf()]

    def counter_examples(self):
        return [leaf for leaf in self.leaves() if leaf.status == COUNTER_EXAMPLE]

    def depth(self):
        return max(d for _, d in self.walk())

    def size(self):
        return sum(1 for _ in self.walk())


class Solver:
    """Builds complete proof trees by repeated decomposition."""

    def prove(self, sequent):
        return self.search(ProofNode(sequent))

    def is_valid(self, sequent):
        return self.prove(sequent).is_closed

    def search(self, node):
        """Return a copy of ``node`` with every open leaf fully decomposed.

        Subtrees that were already built are kept as they are and only their
        open leaves are expanded.
        """
        if node.children:
            return ProofNode(
                node.sequent,
                [self.search(child) for child in node.children],
                node.rule,
            )
        return self._build(node.sequent)

    def step(self, node):
        """Decompose the principal formula of a single leaf."""
        if node.children:
            raise ValueError(f"{node.sequent} has already been decomposed")
        if node.status != OPEN:
            return node

        rule, children = node.sequent.decompose()
        logger.debug("%s: %s yields %d child(ren)", node.sequent, rule, len(children))
        return ProofNode(node.sequent, [ProofNode(child) for child in children], rule)

    def _build(self, sequent):
        if sequent.is_axiom():
            logger.debug("axiom: %s", sequent)
            return ProofNode(sequent)

        step = sequent.decompose()
        if step is None:
            logger.debug("counter-example: %s", sequent)
            return ProofNode(sequent)

        rule, children = step
        logger.debug("%s: %s yields %d child(ren)", sequent, rule, len(children))
        return ProofNode(sequent, [self._build(child) for child in children], rule)


def merge(accumulated, valuation):
    """Add the ``(atom, value)`` pairs of ``valuation`` not already present.

    Pairs that disagree with earlier ones on the same atom are kept as
    separate entries. Returns a new list.
    """
    merged = list(accumulated)
    for pair in valuation.items():
        if pair not in merged:
            merged.append(pair)
    return merged


class Falsifier:
    """Collects valuations that falsify a sequent.

    Runs its own decomposition search, so it can be used without a proof
    tree. Every atomic-irreducible leaf contributes one local valuation:
    antecedent atoms true, succedent atoms false.
    """

    def witnesses(self, sequent):
        """Yield the counter-example leaves of ``sequent`` left to right."""
        pending = [sequent]
        while pending:
            current = pending.pop()
            if current.is_axiom():
                continue

            step = current.decompose()
            if step is None:
                yield current
                continue

            _, children = step
            pending.extend(reversed(children))

    def valuation(self, leaf):
        if not leaf.is_atomic_irreducible():
            raise ValueError(f"{leaf} is not an atomic-irreducible sequent")

        valuation = {}
        for formula in leaf.lhs:
            valuation[formula.name] = True
        for formula in leaf.rhs:
            valuation[formula.name] = False
        return valuation

    def countermodels(self, sequent):
        """One coherent valuation per counter-example leaf."""
        return [self.valuation(leaf) for leaf in self.witnesses(sequent)]

    def falsify(self, sequent):
        """Merged ``(atom, value)`` observations over all counter-example leaves."""
        valuations = []
        for leaf in self.witnesses(sequent):
            local = self.valuation(leaf)
            logger.debug("falsifying %s: %s", leaf, local)
            valuations = merge(valuations, local)
        return valuations
