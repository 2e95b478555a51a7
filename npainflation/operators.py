"""
This file contains the classes for operators and strings of operators, and the
algorithm that brings strings of operators to canonical form.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from enum import IntEnum
from functools import total_ordering
from typing import Iterable, List, Tuple


class OperatorFlags(IntEnum):
    NONE = 0
    IDENTITY = 1
    IDEMPOTENT = 2


@total_ordering
class Operator:
    """A single operator, identified by its party and its id within the party.
    The flags (identity, idempotent) do not take part in comparisons.

    Parameters
    ----------
    id : int
        Index of the operator within its party.
    party : int
        Index of the party the operator belongs to.
    flags : OperatorFlags, optional
        Algebraic properties of the operator. By default ``NONE``.
    """
    __slots__ = ["id", "party", "flags"]

    def __init__(self, id: int, party: int, flags=OperatorFlags.NONE):
        self.id = id
        self.party = party
        self.flags = OperatorFlags(flags)

    @property
    def idempotent(self) -> bool:
        return self.flags == OperatorFlags.IDEMPOTENT

    @property
    def identity(self) -> bool:
        return self.flags == OperatorFlags.IDENTITY

    def __eq__(self, other):
        if not isinstance(other, Operator):
            return NotImplemented
        return (self.id == other.id) and (self.party == other.party)

    def __lt__(self, other):
        return (self.party, self.id) < (other.party, other.id)

    def __hash__(self):
        return hash((self.party, self.id))

    def __repr__(self):
        return f"Operator(id={self.id}, party={self.party})"


def to_canonical_form(operators: Iterable[Operator],
                      context) -> Tuple[List[Operator], bool]:
    """Bring a string of operators to canonical form.

    The steps are: sort by party (keeping the relative order of operators of
    the same party), remove repeated adjacent idempotent operators, apply the
    simplifications specific to the context, and finally remove identities.

    Parameters
    ----------
    operators : Iterable[Operator]
        The raw string of operators.
    context : Context
        The context defining the algebra of the operators.

    Returns
    -------
    Tuple[List[Operator], bool]
        The canonical string, and whether the string is identically zero.
    """
    ops = sorted(operators, key=lambda op: op.party)
    if len(ops) > 1:
        trimmed = [ops[0]]
        for op in ops[1:]:
            if op.idempotent and (op == trimmed[-1]):
                continue
            trimmed.append(op)
        ops = trimmed
    ops, is_zero = context.additional_simplification(ops)
    if is_zero:
        return [], True
    return [op for op in ops if not op.identity], False


class OperatorSequence:
    """An ordered string of operators, always stored in canonical form.

    The zero and the identity sequences are both empty, and are told apart by
    ``zero()``: callers must check ``zero()`` rather than ``len()``.

    Parameters
    ----------
    operators : Iterable[Operator]
        The operators of the string, in any (not necessarily canonical) form.
    context : Context
        The context the operators belong to. It must outlive the sequence.
    is_zero : bool, optional
        Whether the sequence is identically zero. By default ``False``.
    """
    __slots__ = ["operators", "is_zero", "context", "_hash"]

    def __init__(self,
                 operators: Iterable[Operator],
                 context,
                 is_zero: bool = False):
        self.context = context
        if is_zero:
            self.operators = tuple()
            self.is_zero = True
        else:
            ops, self.is_zero = to_canonical_form(operators, context)
            self.operators = tuple(ops)
        self._hash = context.hash(self)

    @classmethod
    def from_raw(cls, operators: Iterable[Operator], context):
        """Construct a sequence that is already known to be canonical."""
        seq = cls.__new__(cls)
        seq.context = context
        seq.operators = tuple(operators)
        seq.is_zero = False
        seq._hash = context.hash(seq)
        return seq

    @classmethod
    def Zero(cls, context):
        return cls((), context, is_zero=True)

    @classmethod
    def Identity(cls, context):
        return cls((), context)

    def zero(self) -> bool:
        return self.is_zero

    @property
    def hash(self) -> int:
        return self._hash

    @property
    def raw_ids(self) -> Tuple[int, ...]:
        """The global ids of the operators in the sequence."""
        return tuple(self.context.global_id(op) for op in self.operators)

    def conjugate(self):
        """Hermitian conjugate of the sequence: the reversed string, brought
        back to canonical form."""
        if self.is_zero:
            return self
        return OperatorSequence(reversed(self.operators), self.context)

    def __mul__(self, other):
        if self.is_zero or other.is_zero:
            return OperatorSequence.Zero(self.context)
        return OperatorSequence(self.operators + other.operators, self.context)

    def __len__(self):
        return len(self.operators)

    def __iter__(self):
        return iter(self.operators)

    def __getitem__(self, index):
        return self.operators[index]

    def __eq__(self, other):
        if not isinstance(other, OperatorSequence):
            return NotImplemented
        if self._hash != other._hash or self.is_zero != other.is_zero:
            return False
        return self.operators == other.operators

    def __hash__(self):
        return hash(self._hash)

    def __str__(self):
        return self.context.format_sequence(self)

    def __repr__(self):
        return "<" + self.context.format_sequence(self) + ">"
