"""
This file contains the table of symbols: the distinct (up to conjugation)
operator sequences appearing anywhere in a matrix system.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from collections import namedtuple
from typing import Dict, Iterator, Optional, Set, Tuple

from ..errors import UnknownSymbol
from ..operators import OperatorSequence

SymbolLookupResult = namedtuple("SymbolLookupResult",
                                ["entry", "conjugated", "is_aliased"])


class SymbolExpression:
    """Reference to a symbol inside a matrix: the symbol id, whether it is to
    be conjugated, and whether it is negated.

    Parameters
    ----------
    id : int
        The id of the symbol.
    conjugated : bool, optional
        Whether the entry is the conjugate of the symbol. By default ``False``.
    negated : bool, optional
        Whether the entry is minus the symbol. By default ``False``.
    """
    __slots__ = ["id", "conjugated", "negated"]

    def __init__(self, id: int, conjugated: bool = False,
                 negated: bool = False):
        self.id = id
        self.conjugated = conjugated
        self.negated = negated

    def __eq__(self, other):
        if not isinstance(other, SymbolExpression):
            return NotImplemented
        return ((self.id, self.conjugated, self.negated)
                == (other.id, other.conjugated, other.negated))

    def __hash__(self):
        return hash((self.id, self.conjugated, self.negated))

    def __str__(self):
        return (("-" if self.negated else "") + str(self.id)
                + ("*" if self.conjugated else ""))

    def __repr__(self):
        return f"SymbolExpression({self})"


class UniqueSequence:
    """A sequence registered (or candidate to be registered) as a symbol,
    together with its conjugate.

    Parameters
    ----------
    sequence : OperatorSequence
        The forward sequence.
    conjugate : OperatorSequence, optional
        The conjugate of the sequence. It is computed if not given.
    """
    def __init__(self,
                 sequence: OperatorSequence,
                 conjugate: Optional[OperatorSequence] = None):
        if conjugate is None:
            conjugate = sequence.conjugate()
        self.sequence = sequence
        self.conjugate = conjugate
        self.hermitian = (sequence.hash == conjugate.hash)
        self.id = -1
        self.real_index = -1
        self.imaginary_index = -1

    @classmethod
    def Zero(cls, context):
        zero = OperatorSequence.Zero(context)
        us = cls(zero, zero)
        us.id = 0
        return us

    @classmethod
    def Identity(cls, context):
        one = OperatorSequence.Identity(context)
        us = cls(one, one)
        us.id = 1
        us.real_index = 0
        return us

    @property
    def hash(self) -> int:
        return self.sequence.hash

    @property
    def hash_conj(self) -> int:
        return self.conjugate.hash

    @property
    def basis_key(self) -> Tuple[int, int]:
        return self.real_index, self.imaginary_index

    def __str__(self):
        if self.real_index >= 0:
            kind = "Complex" if self.imaginary_index >= 0 else "Real"
        else:
            kind = "Imaginary" if self.imaginary_index >= 0 else "Zero"
        strout = f"#{self.id}:\t{self.sequence}:\t{kind}"
        if self.hermitian:
            strout += ", Hermitian"
        if self.real_index >= 0:
            strout += f", Re#={self.real_index}"
        if self.imaginary_index >= 0:
            strout += f", Im#={self.imaginary_index}"
        strout += f", hash={self.hash}"
        if not self.hermitian:
            strout += f"/{self.hash_conj}"
        return strout

    def __repr__(self):
        return f"UniqueSequence({self.sequence!r}, id={self.id})"


class SymbolTable:
    """Append-only table of symbols. Entry 0 is the zero sequence, and entry 1
    is the identity. Every symbol has a real part, and non-Hermitian symbols
    also have an imaginary part.

    Parameters
    ----------
    context : Context
        The context the sequences belong to.
    """
    def __init__(self, context):
        self.context = context
        self.unique_sequences = [UniqueSequence.Zero(context),
                                 UniqueSequence.Identity(context)]
        self.hash_table = {0: 0, 1: 1}
        self.real_symbols = [1]
        self.imaginary_symbols = []

    def merge_in(self, candidates: Dict[int, UniqueSequence]) -> Set[int]:
        """Merge a batch of unique sequences into the table.

        Parameters
        ----------
        candidates : Dict[int, UniqueSequence]
            The candidate sequences, keyed by their forward hash.

        Returns
        -------
        Set[int]
            The ids of every symbol, old or new, referred to by the batch.
        """
        included = set()
        new_symbols = []
        for hash_, candidate in candidates.items():
            existing, _ = self.hash_to_index(hash_)
            if existing is None and not candidate.hermitian:
                existing, _ = self.hash_to_index(candidate.hash_conj)
            if existing is not None:
                included.add(existing)
            else:
                new_symbols.append(candidate)

        for candidate in sorted(new_symbols, key=lambda us: us.hash):
            # A conjugate pair in the same batch is registered only once
            if self.hash_to_index(candidate.hash)[0] is not None:
                included.add(self.hash_to_index(candidate.hash)[0])
                continue
            included.add(self._append(candidate))
        return included

    def _append(self, candidate: UniqueSequence) -> int:
        next_id = len(self.unique_sequences)
        candidate.id = next_id
        candidate.real_index = len(self.real_symbols)
        self.real_symbols.append(next_id)
        if not candidate.hermitian:
            candidate.imaginary_index = len(self.imaginary_symbols)
            self.imaginary_symbols.append(next_id)
        self.hash_table[candidate.hash] = next_id
        if not candidate.hermitian:
            self.hash_table[candidate.hash_conj] = -next_id
        self.unique_sequences.append(candidate)
        return next_id

    def merge_in_sequence(self, seq: OperatorSequence) -> int:
        """Merge a single sequence, returning its symbol id."""
        if self.context.can_have_aliases():
            seq = self.context.simplify_as_moment(seq)
        existing, _ = self.hash_to_index(seq.hash)
        if existing is not None:
            return existing
        conj = seq.conjugate()
        if self.context.can_have_aliases():
            conj = self.context.simplify_as_moment(conj)
        existing, _ = self.hash_to_index(conj.hash)
        if existing is not None:
            return existing
        if conj.hash < seq.hash:
            seq, conj = conj, seq
        return self._append(UniqueSequence(seq, conj))

    def hash_to_index(self, hash_: int) -> Tuple[Optional[int], bool]:
        """Symbol associated with a hash.

        Parameters
        ----------
        hash_ : int
            The hash of a sequence.

        Returns
        -------
        Tuple[Optional[int], bool]
            The id of the symbol (``None`` if not found), and whether the hash
            is that of the conjugate of the symbol.
        """
        index = self.hash_table.get(hash_)
        if index is None:
            return None, False
        if index >= 0:
            return index, False
        return -index, True

    def where(self, seq: OperatorSequence) -> Optional[SymbolLookupResult]:
        """Find the symbol corresponding to a sequence, or ``None`` if the
        sequence is not in the table."""
        index, conjugated = self.hash_to_index(seq.hash)
        if index is not None:
            return SymbolLookupResult(self.unique_sequences[index],
                                      conjugated, False)
        if self.context.can_have_aliases():
            alias = self.context.simplify_as_moment(seq)
            index, conjugated = self.hash_to_index(alias.hash)
            if index is not None:
                return SymbolLookupResult(self.unique_sequences[index],
                                          conjugated, True)
        return None

    def to_symbol(self, seq: OperatorSequence) -> SymbolExpression:
        """The symbol expression of a sequence. Sequences not in the table
        give the zero symbol."""
        found = self.where(seq)
        if found is None:
            return SymbolExpression(0)
        conjugated = found.conjugated and not found.entry.hermitian
        return SymbolExpression(found.entry.id, conjugated)

    def to_basis(self, symbol_id: int) -> Tuple[int, int]:
        """Real and imaginary basis indices of a symbol (-1 if absent)."""
        return self[symbol_id].basis_key

    def __getitem__(self, symbol_id: int) -> UniqueSequence:
        if not 0 <= symbol_id < len(self.unique_sequences):
            raise UnknownSymbol(f"Symbol {symbol_id} is not in the table.",
                                symbol_id)
        return self.unique_sequences[symbol_id]

    def __len__(self):
        return len(self.unique_sequences)

    def __iter__(self) -> Iterator[UniqueSequence]:
        return iter(self.unique_sequences)

    def __str__(self):
        n = len(self.unique_sequences)
        strout = (f"Symbol table with {n} unique sequence"
                  + ("s" if n != 1 else "") + ", "
                  + f"{len(self.real_symbols)} with real parts, "
                  + f"{len(self.imaginary_symbols)} with imaginary parts:\n")
        strout += ("Symbols with real parts: "
                   + ", ".join(str(i) for i in self.real_symbols) + "\n")
        if self.imaginary_symbols:
            strout += ("Symbols with imaginary parts: "
                       + ", ".join(str(i) for i in self.imaginary_symbols)
                       + "\n")
        else:
            strout += "No symbols with imaginary parts.\n"
        for us in self.unique_sequences:
            strout += f"{us}\n"
        return strout
