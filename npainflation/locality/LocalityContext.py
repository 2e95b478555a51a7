"""
This file contains the context of a locality (Bell-type) scenario, where each
party performs one of several measurements, and operators of different parties
commute.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from collections import namedtuple
from typing import List, Union

from ..Context import Context
from ..Party import Measurement, Party
from ..errors import BadCGIndex
from ..operators import Operator

PMIndex = namedtuple("PMIndex", ["party", "mmt", "global_mmt"])
PMOIndex = namedtuple("PMOIndex", ["party", "mmt", "global_mmt", "outcome"])


class LocalityContext(Context):
    """Context of a scenario with parties performing measurements.

    Parameters
    ----------
    parties : List[Party]
        The parties, with their measurements already added.

    Examples
    --------
    >>> context = LocalityContext(Party.make_list(2, 2, 2))
    >>> context.measurement_count
    4
    """
    def __init__(self, parties: List[Party]):
        self.measurements = []
        super().__init__(parties)

    def reenumerate(self) -> None:
        super().reenumerate()
        self.measurements = [mmt for party in self.parties
                             for mmt in party.measurements]

    @property
    def measurement_count(self) -> int:
        return len(self.measurements)

    def get_global_mmt_index(self, index: Union[PMIndex, tuple]) -> int:
        """Global index of the measurement ``mmt`` of party ``party``."""
        party, mmt = index[0], index[1]
        if party >= len(self.parties):
            raise BadCGIndex(f"Party index {party} out of range.", index)
        if mmt >= len(self.parties[party].measurements):
            raise BadCGIndex(f"Measurement index {mmt} out of range for "
                             + f"party {self.parties[party].name}.", index)
        return self.parties[party].measurement_offset + mmt

    def get_pm_index(self, global_mmt: int) -> PMIndex:
        mmt = self._measurement(global_mmt)
        return PMIndex(mmt.party, mmt.local_index, global_mmt)

    def get_operator(self, index: PMOIndex) -> Operator:
        global_mmt = self.get_global_mmt_index(index)
        return self.measurement_operator(global_mmt, index.outcome)

    def _measurement(self, global_mmt: int) -> Measurement:
        if not 0 <= global_mmt < len(self.measurements):
            raise BadCGIndex(f"Measurement index {global_mmt} out of range.",
                             global_mmt)
        return self.measurements[global_mmt]

    ###########################################################################
    # MEASUREMENT LAYOUT, AS USED BY THE COLLINS-GISIN INDEX                  #
    ###########################################################################
    def measurement_parties(self) -> List[List[int]]:
        """For each party, the global indices of its measurements."""
        return [[mmt.global_index for mmt in party.measurements]
                for party in self.parties]

    def measurement_operator_count(self, global_mmt: int) -> int:
        return self._measurement(global_mmt).num_operators

    def measurement_outcome_count(self, global_mmt: int) -> int:
        return self._measurement(global_mmt).num_outcomes

    def measurement_complete(self, global_mmt: int) -> bool:
        return self._measurement(global_mmt).complete

    def measurement_operator(self, global_mmt: int, outcome: int) -> Operator:
        mmt = self._measurement(global_mmt)
        if not 0 <= outcome < mmt.num_operators:
            raise BadCGIndex(f"Outcome {outcome} of measurement {mmt.name} "
                             + "has no explicit operator.", outcome)
        return self.parties[mmt.party][mmt.party_offset + outcome]

    ###########################################################################
    # FORMATTING                                                              #
    ###########################################################################
    def format_operator(self, op: Operator) -> str:
        return self.parties[op.party].format_operator(op)

    def __str__(self):
        strout = (f"Locality setting with {self.size} operators in total, "
                  + f"{len(self.parties)} parties and "
                  + f"{self.measurement_count} measurements.\n")
        for party in self.parties:
            mmts = ", ".join(f"{mmt.name} ({mmt.num_outcomes} outcomes)"
                             for mmt in party.measurements)
            strout += f"Party {party.name}: {mmts}\n"
        return strout
