"""
Abstract syntax tree node definitions for modal/epistemic formulas.

Defines immutable, hashable AST nodes for every formula shape the
grammar produces: atoms, truth constants, negation, the four binary
connectives, agent-indexed modal operators, quantifiers and predicates.

Every node records its ``depth`` (1 for leaves) and its ``nesting``, the
depth not counting links of a left-associative ∧/∨ chain; the parser bounds
``nesting``.  Hashes are computed once at construction, and equality,
rendering and subformula collection walk the tree with explicit stacks, so
long flat chains never recurse.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import FrozenSet, Iterable, List, Optional, Tuple, Union


AGENTS: FrozenSet[str] = frozenset("abcd")


class Formula(ABC):
    """
    Base class for all formula nodes.

    All formula nodes are immutable and support equality comparison
    and hashing for use in sets and dictionaries.
    """

    __slots__ = ("depth", "nesting", "_hash")

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def _set(self, **fields: object) -> None:
        """Assign fields once, during construction."""
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def _build(self, **fields: object) -> None:
        """Assign the node's own fields, then derive depth, nesting and hash."""
        self._set(**fields)
        children = self.children()
        self._set(
            depth=1 + max((child.depth for child in children), default=0),
            nesting=self._nesting(),
            _hash=hash(
                (type(self).__name__, self._key(), tuple(hash(c) for c in children))
            ),
        )

    def _nesting(self) -> int:
        return 1 + max((child.nesting for child in self.children()), default=0)

    def _key(self) -> Tuple[object, ...]:
        """Fields other than child formulas that take part in equality."""
        return ()

    @abstractmethod
    def children(self) -> Tuple[Formula, ...]:
        """Return the direct child formulas, left to right."""

    @abstractmethod
    def _pieces(self) -> List[Union[str, Formula]]:
        """Return the rendering of this node as text and child formulas."""

    def subformulas(self) -> FrozenSet[Formula]:
        """Return set of all subformulas including self."""
        seen = set()
        stack: List[Formula] = [self]
        while stack:
            node = stack.pop()
            if node not in seen:
                seen.add(node)
                stack.extend(node.children())
        return frozenset(seen)

    def __str__(self) -> str:
        """Return canonical string representation of formula."""
        out: List[str] = []
        stack: List[Union[str, Formula]] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                out.append(item)
            else:
                stack.extend(reversed(item._pieces()))
        return "".join(out)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Formula):
            return NotImplemented
        pairs = [(self, other)]
        while pairs:
            left, right = pairs.pop()
            if left is right:
                continue
            if (
                type(left) is not type(right)
                or left._hash != right._hash
                or left._key() != right._key()
            ):
                return False
            pairs.extend(zip(left.children(), right.children()))
        return True

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return str(self)


def _operand(operand: Formula) -> List[Union[str, Formula]]:
    """Render an operand that sits at modal precedence level."""
    if isinstance(operand, (Atom, Constant, Predicate, Modal, Quantifier, Binary)):
        return [operand]
    return ["(", operand, ")"]


# === Leaves ===


class Atom(Formula):
    """
    Represents a proposition or first-order term identifier.

    Attributes:
        name: The identifier (e.g., "p", "q1").
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self._build(name=name)

    def _key(self) -> Tuple[object, ...]:
        return (self.name,)

    def children(self) -> Tuple[Formula, ...]:
        return ()

    def _pieces(self) -> List[Union[str, Formula]]:
        return [self.name]


class Constant(Formula):
    """
    Represents a literal truth value.

    Attributes:
        value: True for top, False for bottom.
    """

    __slots__ = ("value",)

    def __init__(self, value: bool) -> None:
        self._build(value=bool(value))

    def _key(self) -> Tuple[object, ...]:
        return (self.value,)

    def children(self) -> Tuple[Formula, ...]:
        return ()

    def _pieces(self) -> List[Union[str, Formula]]:
        return ["⊤" if self.value else "⊥"]


class Predicate(Formula):
    """
    Represents a named relation applied to argument names, e.g. R(x, y).

    Attributes:
        name: The predicate name.
        args: Ordered, non-empty tuple of argument names.
    """

    __slots__ = ("name", "args")

    def __init__(self, name: str, args: Iterable[str]) -> None:
        args = tuple(args)
        if not args:
            raise ValueError(f"Predicate {name!r} requires at least one argument")
        self._build(name=name, args=args)

    def _key(self) -> Tuple[object, ...]:
        return (self.name, self.args)

    def children(self) -> Tuple[Formula, ...]:
        return ()

    def _pieces(self) -> List[Union[str, Formula]]:
        return [f"{self.name}({', '.join(self.args)})"]


# === Unary Operators ===


class Negation(Formula):
    """
    Represents ¬phi (negation).

    Attributes:
        operand: The formula being negated.
    """

    __slots__ = ("operand",)

    operator = "¬"

    def __init__(self, operand: Formula) -> None:
        self._build(operand=operand)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def _pieces(self) -> List[Union[str, Formula]]:
        return ["¬", self.operand]


class Modal(Formula):
    """
    Base class for the modal operators □ and ◊.

    Attributes:
        operand: The formula under the operator.
        agent: The agent whose accessibility relation the operator
            ranges over, or None for the unindexed operator.
    """

    __slots__ = ("operand", "agent")

    operator: str = ""

    def __init__(self, operand: Formula, agent: Optional[str] = None) -> None:
        if agent is not None and agent not in AGENTS:
            raise ValueError(f"Unknown agent {agent!r}; expected one of a, b, c, d")
        self._build(operand=operand, agent=agent)

    def _key(self) -> Tuple[object, ...]:
        return (self.agent,)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def _pieces(self) -> List[Union[str, Formula]]:
        if self.agent is None:
            return [self.operator, *_operand(self.operand)]
        return [f"{self.operator}_{self.agent} ", *_operand(self.operand)]


class Box(Modal):
    """
    Represents □phi or □_a phi (necessity; "agent a knows phi").
    """

    __slots__ = ()

    operator = "□"


class Diamond(Modal):
    """
    Represents ◊phi or ◊_a phi (possibility; "phi is consistent with
    what agent a knows").
    """

    __slots__ = ()

    operator = "◊"


class Quantifier(Formula):
    """
    Base class for ∀ and ∃.

    Attributes:
        variable: The bound variable name.
        operand: The formula in the quantifier's scope.
    """

    __slots__ = ("variable", "operand")

    operator: str = ""

    def __init__(self, variable: str, operand: Formula) -> None:
        self._build(variable=variable, operand=operand)

    def _key(self) -> Tuple[object, ...]:
        return (self.variable,)

    def children(self) -> Tuple[Formula, ...]:
        return (self.operand,)

    def _pieces(self) -> List[Union[str, Formula]]:
        # Dot-less form: the scope is exactly the rendered operand.
        return [f"{self.operator}{self.variable} ", *_operand(self.operand)]


class Forall(Quantifier):
    """Represents ∀x phi (universal quantification)."""

    __slots__ = ()

    operator = "∀"


class Exists(Quantifier):
    """Represents ∃x phi (existential quantification)."""

    __slots__ = ()

    operator = "∃"


# === Binary Operators ===


class Binary(Formula):
    """
    Base class for the binary connectives.

    Attributes:
        left: Left operand.
        right: Right operand.
    """

    __slots__ = ("left", "right")

    operator: str = ""

    # Left-associative connectives: a chain link on the left adds no nesting.
    chains_left: bool = False

    def __init__(self, left: Formula, right: Formula) -> None:
        self._build(left=left, right=right)

    def _nesting(self) -> int:
        left = self.left.nesting
        if not (self.chains_left and type(self.left) is type(self)):
            left += 1
        return max(left, self.right.nesting + 1)

    def children(self) -> Tuple[Formula, ...]:
        return (self.left, self.right)

    def _pieces(self) -> List[Union[str, Formula]]:
        return ["(", self.left, f" {self.operator} ", self.right, ")"]


class Conjunction(Binary):
    """Represents phi ∧ psi (conjunction/AND)."""

    __slots__ = ()

    operator = "∧"
    chains_left = True


class Disjunction(Binary):
    """Represents phi ∨ psi (disjunction/OR)."""

    __slots__ = ()

    operator = "∨"
    chains_left = True


class Implication(Binary):
    """
    Represents phi → psi (implication).

    Attributes:
        left: Antecedent (the "if" part).
        right: Consequent (the "then" part).
    """

    __slots__ = ()

    operator = "→"


class Biconditional(Binary):
    """Represents phi ↔ psi (biconditional/iff)."""

    __slots__ = ()

    operator = "↔"
