"""
This file contains the classes describing parties, and the measurements they
perform, in a locality scenario.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from typing import List, Optional, Union

from .errors import BadMeasurement
from .operators import Operator, OperatorFlags
from .utils import AlphabeticNamer


class Measurement:
    """A measurement with a number of outcomes.

    A complete measurement has one operator fewer than outcomes: the operator
    of the last outcome is implied by the sum of all outcomes being the
    identity.

    Parameters
    ----------
    name : str
        The name of the measurement.
    num_outcomes : int
        Number of outcomes of the measurement.
    projective : bool, optional
        Whether the operators are orthogonal projectors. By default ``True``.
    complete : bool, optional
        Whether the outcomes sum to the identity. By default ``True``.
    """
    def __init__(self,
                 name: str,
                 num_outcomes: int,
                 projective: bool = True,
                 complete: bool = True):
        self.name = name
        self.num_outcomes = num_outcomes
        self.projective = projective
        self.complete = complete
        # Set when added to a party and when the context is enumerated
        self.party = -1
        self.local_index = -1
        self.global_index = -1
        self.party_offset = -1

    @property
    def num_operators(self) -> int:
        return self.num_outcomes - 1 if self.complete else self.num_outcomes

    def __repr__(self):
        return f"Measurement({self.name}, {self.num_outcomes} outcomes)"


class Party:
    """A collection of operators, some of which are grouped into measurements.
    Operators of different parties commute.

    Parameters
    ----------
    id : int
        Index of the party.
    name : str, optional
        Name of the party. By default, the alphabetic name of the index.
    operator_count : int, optional
        Number of operators not associated to any measurement. By default 0.
    flags : OperatorFlags, optional
        Flags for these operators. By default ``OperatorFlags.NONE``.
    """
    def __init__(self,
                 id: int,
                 name: Optional[str] = None,
                 operator_count: int = 0,
                 flags=OperatorFlags.NONE):
        self.id = id
        self.name = name if name is not None else AlphabeticNamer()(id)
        self.operators = [Operator(i, id, flags)
                          for i in range(operator_count)]
        self.measurements = []
        self.mutexes = set()
        self.operator_to_measurement = [-1] * operator_count
        self.global_offset = 0
        self.measurement_offset = 0

    def add_measurement(self, mmt: Measurement) -> None:
        """Append the operators of a measurement to the party."""
        if mmt.num_outcomes < 1:
            raise BadMeasurement(f"Measurement {mmt.name} of party "
                                 + f"{self.name} must have at least one "
                                 + "outcome.")
        offset = len(self.operators)
        flags = (OperatorFlags.IDEMPOTENT if mmt.projective
                 else OperatorFlags.NONE)
        mmt_index = len(self.measurements)
        for i in range(mmt.num_operators):
            self.operators.append(Operator(offset + i, self.id, flags))
            self.operator_to_measurement.append(mmt_index)
        if mmt.projective:
            for i in range(offset, offset + mmt.num_operators):
                for j in range(i + 1, offset + mmt.num_operators):
                    self.add_mutex(i, j)
        mmt.party = self.id
        mmt.local_index = mmt_index
        mmt.party_offset = offset
        self.measurements.append(mmt)

    def add_mutex(self, lhs: int, rhs: int) -> None:
        """Declare two operators of the party to have product zero."""
        self.mutexes.add((min(lhs, rhs), max(lhs, rhs)))

    def exclusive(self, lhs: int, rhs: int) -> bool:
        """Whether the product of the two operators is zero."""
        return (min(lhs, rhs), max(lhs, rhs)) in self.mutexes

    def set_offsets(self, new_id: int,
                    operator_offset: int,
                    measurement_offset: int) -> None:
        if new_id != self.id:
            self.id = new_id
            self.operators = [Operator(op.id, new_id, op.flags)
                              for op in self.operators]
        self.global_offset = operator_offset
        self.measurement_offset = measurement_offset
        for mmt in self.measurements:
            mmt.party = new_id
            mmt.global_index = measurement_offset + mmt.local_index

    def format_operator(self, op: Operator) -> str:
        mmt_index = self.operator_to_measurement[op.id]
        if mmt_index < 0:
            return f"{self.name}{op.id}"
        mmt = self.measurements[mmt_index]
        return f"{self.name}.{mmt.name}{op.id - mmt.party_offset}"

    def __len__(self):
        return len(self.operators)

    def __getitem__(self, index):
        return self.operators[index]

    def __repr__(self):
        return (f"Party({self.name}, {len(self.operators)} operators, "
                + f"{len(self.measurements)} measurements)")

    @staticmethod
    def make_list(num_parties: int,
                  mmts_per_party: Union[int, List[int]],
                  outcomes_per_mmt: Union[int, List[int]],
                  projective: bool = True) -> List["Party"]:
        """Create parties with the same number of measurements each, named
        ``A, B, ...``, with measurements named ``a, b, ...``.

        Parameters
        ----------
        num_parties : int
            Number of parties.
        mmts_per_party : Union[int, List[int]]
            Number of measurements of each party.
        outcomes_per_mmt : Union[int, List[int]]
            Number of outcomes of each measurement. If a list, it is read
            across all measurements of all parties in order.
        projective : bool, optional
            Whether the measurements are projective. By default ``True``.

        Returns
        -------
        List[Party]
            The list of parties.
        """
        if isinstance(mmts_per_party, int):
            mmts_per_party = [mmts_per_party] * num_parties
        total_mmts = sum(mmts_per_party)
        if isinstance(outcomes_per_mmt, int):
            outcomes_per_mmt = [outcomes_per_mmt] * total_mmts
        assert len(mmts_per_party) == num_parties, \
            "The number of measurements must be given for every party."
        assert len(outcomes_per_mmt) == total_mmts, \
            "The number of outcomes must be given for every measurement."
        lower_namer = AlphabeticNamer(is_upper=False)
        parties = []
        mmt_counter = 0
        for party_id in range(num_parties):
            party = Party(party_id)
            for m in range(mmts_per_party[party_id]):
                party.add_measurement(Measurement(lower_namer(m),
                                                  outcomes_per_mmt[mmt_counter],
                                                  projective))
                mmt_counter += 1
            parties.append(party)
        return parties
