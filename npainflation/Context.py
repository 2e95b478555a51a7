"""
This file contains the base class describing the universe of operators in an
NPA hierarchy, and the generator of all distinct operator strings up to a given
length.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from itertools import product
from typing import Iterator, List, Tuple, Union

from .Party import Party
from .operators import Operator, OperatorSequence


class Context:
    """Set of operators in an NPA hierarchy, together with the rules for
    simplifying products of them.

    Operators of different parties commute. The only additional rule of the
    base context is that the product of two mutually exclusive operators of
    the same party is zero.

    Parameters
    ----------
    parties : Union[int, List[Party]]
        The parties of the scenario. If an integer ``n`` is given, a single
        party with ``n`` generic (non-idempotent, non-commuting) operators is
        created.
    """
    def __init__(self, parties: Union[int, List[Party]]):
        if isinstance(parties, int):
            parties = [Party(0, "X", parties)]
        self.parties = list(parties)
        self._generators = {}
        self.reenumerate()

    def reenumerate(self) -> None:
        """Assign global offsets to the parties, operators and measurements.
        This must be called whenever parties are modified, and before any
        sequence is built over the context."""
        operator_offset = 0
        measurement_offset = 0
        for index, party in enumerate(self.parties):
            party.set_offsets(index, operator_offset, measurement_offset)
            operator_offset += len(party)
            measurement_offset += len(party.measurements)
        self.operators = [op for party in self.parties
                          for op in party.operators]
        self._generators = {}

    @property
    def size(self) -> int:
        """Total number of operators in the context."""
        return len(self.operators)

    def global_id(self, op: Operator) -> int:
        return self.parties[op.party].global_offset + op.id

    def operator(self, global_id: int) -> Operator:
        return self.operators[global_id]

    def hash(self, seq: OperatorSequence) -> int:
        """Positional encoding of a sequence. The zero sequence has hash 0 and
        the identity has hash 1. Any other sequence is encoded with the global
        index of its operators, shifted by one, as digits in base
        ``1 + size``, the last operator being the least significant digit.

        Parameters
        ----------
        seq : OperatorSequence
            The sequence to hash.

        Returns
        -------
        int
            The hash of the sequence.
        """
        if seq.zero():
            return 0
        return self.hash_ids([self.global_id(op) for op in seq.operators])

    def hash_ids(self, global_ids) -> int:
        """Hash of a non-zero sequence given by the global ids of its
        operators."""
        base = 1 + self.size
        hash_ = 1
        multiplier = 1
        for gid in reversed(global_ids):
            hash_ += (int(gid) + 1) * multiplier
            multiplier *= base
        return hash_

    def additional_simplification(self, ops: List[Operator]
                                  ) -> Tuple[List[Operator], bool]:
        """Context-specific simplification of a party-sorted string of
        operators.

        Parameters
        ----------
        ops : List[Operator]
            The operators, sorted by party.

        Returns
        -------
        Tuple[List[Operator], bool]
            The simplified operators, and whether the product is zero.
        """
        for left, right in zip(ops, ops[1:]):
            if (left.party == right.party
                    and self.parties[left.party].exclusive(left.id,
                                                           right.id)):
                return [], True
        return ops, False

    def can_be_nonhermitian(self) -> bool:
        """Whether some operator sequence could differ from its conjugate."""
        return True

    def can_have_aliases(self) -> bool:
        """Whether different sequences can stand for the same moment."""
        return False

    def simplify_as_moment(self, seq: OperatorSequence) -> OperatorSequence:
        """Representative of the moment the sequence stands for."""
        return seq

    def can_be_simplified_as_moment(self, seq: OperatorSequence) -> bool:
        return False

    def raw_words(self, length: int) -> Iterator[Tuple[Operator, ...]]:
        """Iterates over all strings of ``length`` operators, before
        simplification."""
        return product(self.operators, repeat=length)

    def operator_sequence_generator(self, level: int, conjugated: bool = False
                                    ) -> "OperatorSequenceGenerator":
        """All distinct sequences of length up to ``level``, cached.

        Parameters
        ----------
        level : int
            The maximum length of the sequences.
        conjugated : bool, optional
            Whether to return the conjugates of the sequences. By default
            ``False``.

        Returns
        -------
        OperatorSequenceGenerator
            The generator of sequences.
        """
        key = (level, conjugated)
        if key not in self._generators:
            if conjugated:
                osg = self.operator_sequence_generator(level).conjugate()
            else:
                osg = OperatorSequenceGenerator(self, level)
            self._generators[key] = osg
        return self._generators[key]

    def format_operator(self, op: Operator) -> str:
        return f"X{self.global_id(op) + 1}"

    def format_sequence(self, seq: OperatorSequence) -> str:
        if seq.zero():
            return "0"
        if not len(seq):
            return "1"
        return ";".join(self.format_operator(op) for op in seq.operators)

    def __str__(self):
        strout = (f"Setting with {self.size} operators in total, "
                  + f"over {len(self.parties)} parties.\n")
        for party in self.parties:
            strout += f"{party}\n"
        return strout


class OperatorSequenceGenerator:
    """Ordered collection of all distinct non-zero operator sequences of length
    up to ``max_length``, the identity first. Strings are enumerated by
    increasing length, and are deduplicated by hash in order of first
    appearance.

    Parameters
    ----------
    context : Context
        The context generating the operators.
    max_length : int
        The maximum length of a string.
    sequences : List[OperatorSequence], optional
        Precomputed sequences. By default they are generated.
    """
    def __init__(self,
                 context: Context,
                 max_length: int,
                 sequences: List[OperatorSequence] = None):
        self.context = context
        self.max_length = max_length
        if sequences is None:
            sequences = self._generate()
        self.sequences = sequences

    def _generate(self) -> List[OperatorSequence]:
        unique = [OperatorSequence.Identity(self.context)]
        known_hashes = {unique[0].hash}
        for length in range(1, self.max_length + 1):
            for word in self.context.raw_words(length):
                seq = OperatorSequence(word, self.context)
                if seq.zero() or seq.hash in known_hashes:
                    continue
                known_hashes.add(seq.hash)
                unique.append(seq)
        return unique

    def conjugate(self) -> "OperatorSequenceGenerator":
        """The generator of the conjugates of these sequences, in the same
        order."""
        return OperatorSequenceGenerator(self.context,
                                         self.max_length,
                                         [seq.conjugate()
                                          for seq in self.sequences])

    def __len__(self):
        return len(self.sequences)

    def __iter__(self):
        return iter(self.sequences)

    def __getitem__(self, index):
        return self.sequences[index]
