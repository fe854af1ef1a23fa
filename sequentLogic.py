from enum import Enum


# Sides of a sequent
LHS = "lhs"
RHS = "rhs"


class ConnectiveKind(Enum):
    """The closed set of propositional connectives.

    Each member's value is its ``(label, arity)`` pair.
    """
    NOT = ("not", 1)
    AND = ("and", 2)
    OR = ("or", 2)
    IMPLIES = ("implies", 2)
    IFF = ("iff", 2)

    @property
    def arity(self):
        return self.value[1]

    @property
    def label(self):
        return self.value[0]

    @classmethod
    def from_label(cls, label):
        for kind in cls:
            if kind.label == label.lower():
                return kind
        raise KeyError(label)


class Formula:
    __slots__ = ()
    kind = None

    def __repr__(self):
        return str(self)

    def __hash__(self):
        return hash(self._key())

    def _key(self):
        raise NotImplementedError

    def to_latex(self):
        raise NotImplementedError

    def is_atomic(self):
        return self.kind is None


class Atom(Formula):
    __slots__ = ("name",)

    def __init__(self, name):
        object.__setattr__(self, "name", name.strip())

    def __setattr__(self, attr, value):
        raise AttributeError("formulas are immutable")

    def __str__(self):
        return self.name

    def to_latex(self):
        return self.name

    def __eq__(self, other):
        return isinstance(other, Atom) and self.name == other.name

    __hash__ = Formula.__hash__

    def _key(self):
        return ("atom", self.name)


class Not(Formula):
    __slots__ = ("inner",)
    kind = ConnectiveKind.NOT

    def __init__(self, inner):
        object.__setattr__(self, "inner", inner)

    def __setattr__(self, attr, value):
        raise AttributeError("formulas are immutable")

    def __str__(self):
        return f"¬{self.inner}" if isinstance(self.inner, (Atom, Not)) else f"¬({self.inner})"

    def to_latex(self):
        return f"\\lnot {self.inner.to_latex()}"

    def __eq__(self, other):
        return isinstance(other, Not) and self.inner == other.inner

    __hash__ = Formula.__hash__

    def _key(self):
        return (self.kind, self.inner)

    @property
    def operands(self):
        return (self.inner,)


class BinaryFormula(Formula):
    __slots__ = ("left", "right")
    symbol = "?"
    latex = "?"

    def __init__(self, left, right):
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "right", right)

    def __setattr__(self, attr, value):
        raise AttributeError("formulas are immutable")

    def __str__(self):
        return f"({self.left} {self.symbol} {self.right})"

    def to_latex(self):
        return f"({self.left.to_latex()} {self.latex} {self.right.to_latex()})"

    def __eq__(self, other):
        return (
            isinstance(other, self.__class__)
            and self.left == other.left
            and self.right == other.right
        )

    __hash__ = Formula.__hash__

    def _key(self):
        return (self.kind, self.left, self.right)

    @property
    def operands(self):
        return (self.left, self.right)


class And(BinaryFormula):
    __slots__ = ()
    kind = ConnectiveKind.AND
    symbol = "∧"
    latex = "\\land"


class Or(BinaryFormula):
    __slots__ = ()
    kind = ConnectiveKind.OR
    symbol = "∨"
    latex = "\\lor"


class Implies(BinaryFormula):
    __slots__ = ()
    kind = ConnectiveKind.IMPLIES
    symbol = "→"
    latex = "\\to"


class Iff(BinaryFormula):
    """Bi-implication (logical equivalence): F ↔ G"""
    __slots__ = ()
    kind = ConnectiveKind.IFF
    symbol = "↔"
    latex = "\\leftrightarrow"


FORMULA_CLASSES = {
    ConnectiveKind.NOT: Not,
    ConnectiveKind.AND: And,
    ConnectiveKind.OR: Or,
    ConnectiveKind.IMPLIES: Implies,
    ConnectiveKind.IFF: Iff,
}


def build(kind, *operands):
    """Construct the formula node for ``kind`` over ``operands``."""
    if len(operands) != kind.arity:
        raise ValueError(f"{kind.label} takes {kind.arity} operand(s), got {len(operands)}")
    return FORMULA_CLASSES[kind](*operands)


# ============================================================================
# CONNECTIVE TABLE
# ============================================================================

RULE_SYMBOLS = {
    ConnectiveKind.NOT: "¬",
    ConnectiveKind.AND: "∧",
    ConnectiveKind.OR: "∨",
    ConnectiveKind.IMPLIES: "→",
    ConnectiveKind.IFF: "↔",
}


def rule_name(kind, side):
    suffix = "L" if side == LHS else "R"
    return f"{RULE_SYMBOLS[kind]}{suffix}"


def evaluate(kind, *operands):
    """Truth table of ``kind`` applied to boolean ``operands``."""
    if len(operands) != kind.arity:
        raise ValueError(f"{kind.label} takes {kind.arity} operand(s), got {len(operands)}")

    if kind is ConnectiveKind.NOT:
        return not operands[0]
    left, right = operands
    if kind is ConnectiveKind.AND:
        return left and right
    if kind is ConnectiveKind.OR:
        return left or right
    if kind is ConnectiveKind.IMPLIES:
        return (not left) or right
    if kind is ConnectiveKind.IFF:
        return left == right
    raise AssertionError(f"unhandled connective {kind!r}")


def decompose(kind, side, left, right=None):
    """Two-sided sequent rule for a principal formula of ``kind`` on ``side``.

    Returns one ``(lhs_additions, rhs_additions)`` pair per child sequent.
    The principal formula itself is removed by the caller; the pairs only say
    which operands go where, so negation can move its operand across the
    turnstile.

        ∧L   Γ, F ∧ G ⊢ Δ   --->  Γ, F, G ⊢ Δ
        ∧R   Γ ⊢ F ∧ G, Δ   --->  Γ ⊢ F, Δ   and   Γ ⊢ G, Δ
        ∨L   Γ, F ∨ G ⊢ Δ   --->  Γ, F ⊢ Δ   and   Γ, G ⊢ Δ
        ∨R   Γ ⊢ F ∨ G, Δ   --->  Γ ⊢ F, G, Δ
        →L   Γ, F → G ⊢ Δ   --->  Γ ⊢ F, Δ   and   Γ, G ⊢ Δ
        →R   Γ ⊢ F → G, Δ   --->  Γ, F ⊢ G, Δ
        ¬L   Γ, ¬F ⊢ Δ      --->  Γ ⊢ F, Δ
        ¬R   Γ ⊢ ¬F, Δ      --->  Γ, F ⊢ Δ
        ↔L   Γ, F ↔ G ⊢ Δ   --->  Γ, F, G ⊢ Δ   and   Γ ⊢ F, G, Δ
        ↔R   Γ ⊢ F ↔ G, Δ   --->  Γ, F ⊢ G, Δ   and   Γ, G ⊢ F, Δ
    """
    if side not in (LHS, RHS):
        raise ValueError(f"unknown side {side!r}")
    if (right is None) != (kind.arity == 1):
        raise ValueError(f"{kind.label} takes {kind.arity} operand(s)")

    if kind is ConnectiveKind.NOT:
        if side == LHS:
            return [((), (left,))]
        return [((left,), ())]
    if kind is ConnectiveKind.AND:
        if side == LHS:
            return [((left, right), ())]
        return [((), (left,)), ((), (right,))]
    if kind is ConnectiveKind.OR:
        if side == LHS:
            return [((left,), ()), ((right,), ())]
        return [((), (left, right))]
    if kind is ConnectiveKind.IMPLIES:
        if side == LHS:
            return [((), (left,)), ((right,), ())]
        return [((left,), (right,))]
    if kind is ConnectiveKind.IFF:
        if side == LHS:
            return [((left, right), ()), ((), (left, right))]
        return [((left,), (right,)), ((right,), (left,))]
    raise AssertionError(f"unhandled connective {kind!r}")


# ============================================================================
# FORMULA UTILITIES
# ============================================================================

def weight(formula):
    """Number of connective nodes in ``formula``."""
    if formula.is_atomic():
        return 0
    return 1 + sum(weight(op) for op in formula.operands)


def atoms(formula):
    """Atom names of ``formula`` in first-occurrence order."""
    if formula.is_atomic():
        return [formula.name]
    names = []
    for op in formula.operands:
        for name in atoms(op):
            if name not in names:
                names.append(name)
    return names


def truth_value(formula, valuation):
    if formula.is_atomic():
        return bool(valuation.get(formula.name, False))
    return evaluate(formula.kind, *(truth_value(op, valuation) for op in formula.operands))
