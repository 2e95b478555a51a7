"""
This file contains the table of implicit symbols: every joint outcome of a set
of measurements, written as a linear combination of the symbols of explicit
outcomes, using that the outcomes of a complete measurement sum to the
identity.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from collections import namedtuple
from itertools import combinations, product
from typing import Iterator, List, Sequence, Tuple

import sympy as sp

from ..errors import BadImplicitSymbol
from ..utils import mixed_radix, multi_dimensional_index, partition_iterator
from .CollinsGisin import CollinsGisinForm
from .SymbolTable import SymbolTable

PMODefinition = namedtuple("PMODefinition", ["symbol_id", "expression"])


class ImplicitSymbols:
    """Linear combinations of explicit symbols for all joint outcomes of sets
    of measurements of different parties.

    An outcome is explicit when it has an operator associated to it, and
    implicit when it is the last outcome of a complete measurement. Entries
    that correspond to a single explicit symbol have that ``symbol_id``;
    entries involving implicit outcomes have ``symbol_id == -1``.

    Parameters
    ----------
    context : Context
        The context, describing its measurements as for ``CollinsGisinForm``.
    symbols : SymbolTable
        The symbol table.
    cg : CollinsGisinForm
        The Collins-Gisin index of the explicit symbols.
    max_length : int
        The maximum number of measurements combined.
    """
    def __init__(self, context, symbols: SymbolTable, cg: CollinsGisinForm,
                 max_length: int):
        self.context = context
        self.symbols = symbols
        self.cg = cg
        self.parties = context.measurement_parties()
        self.max_length = min(max_length, cg.level)
        self.data = []
        self.indices = {}

        if len(symbols) < 2 or symbols[1].id != 1:
            raise BadImplicitSymbol("Zero and One should be defined in the "
                                    + "symbol table.")
        self.data.append(PMODefinition(1, [(1, 1.0)]))
        self.indices[()] = (0, 1)
        for mmts in self.measurement_strings():
            first = len(self.data)
            self.data.extend(self._definitions(mmts))
            self.indices[tuple(mmts)] = (first, len(self.data))

    def measurement_strings(self) -> Iterator[Tuple[int, ...]]:
        """Every choice of one measurement for each of up to ``max_length``
        distinct parties, in increasing order of global index."""
        for length in range(1, self.max_length + 1):
            for party_combo in combinations(range(len(self.parties)), length):
                yield from product(*[self.parties[p] for p in party_combo])

    def _definitions(self, mmts: Tuple[int, ...]) -> List[PMODefinition]:
        """Definitions of all joint outcomes of a string of measurements."""
        for mmt in mmts:
            self._check_complete(mmt)
        if len(mmts) == 1:
            return self._single_measurement(mmts[0])
        outcome_counts = [self.context.measurement_outcome_count(m)
                          for m in mmts]
        return [self._joint_outcome(mmts, outcomes)
                for outcomes in multi_dimensional_index(outcome_counts)]

    def _single_measurement(self, mmt: int) -> List[PMODefinition]:
        explicit = self.cg.get([mmt])
        if len(explicit) != self.context.measurement_operator_count(mmt):
            raise BadImplicitSymbol("Could not find measurement "
                                    + f"{mmt} in Collins-Gisin table.")
        definitions = []
        final_outcome = [(1, 1.0)]
        for symbol_id in explicit:
            symbol_id = int(symbol_id)
            definitions.append(PMODefinition(symbol_id, [(symbol_id, 1.0)]))
            final_outcome.append((symbol_id, -1.0))
        definitions.append(PMODefinition(-1, final_outcome))
        return definitions

    def _check_complete(self, mmt: int) -> None:
        if not self.context.measurement_complete(mmt):
            raise BadImplicitSymbol("Implicit symbols can only be generated "
                                    + "when all measurements are complete.")
        if (self.context.measurement_outcome_count(mmt)
                != self.context.measurement_operator_count(mmt) + 1):
            raise BadImplicitSymbol("Measurement should have one more "
                                    + "outcome than explicit operators.")

    def _joint_outcome(self, mmts: Tuple[int, ...],
                       outcomes: Tuple[int, ...]) -> PMODefinition:
        op_counts = [self.context.measurement_operator_count(m)
                     for m in mmts]
        implicit = [o == c for o, c in zip(outcomes, op_counts)]
        num_implicit = sum(implicit)
        if not num_implicit:
            symbol_id = int(self.cg.get(mmts)[mixed_radix(outcomes,
                                                          op_counts)])
            return PMODefinition(symbol_id, [(symbol_id, 1.0)])

        expression = []
        sign = 1. if num_implicit % 2 == 0 else -1.
        for missing in range(num_implicit, 0, -1):
            for bits in partition_iterator(num_implicit, missing):
                lookup_mmts = []
                lookup_outcomes = []
                implicit_counter = 0
                for mmt, outcome, is_implicit in zip(mmts, outcomes,
                                                     implicit):
                    if is_implicit:
                        if bits[implicit_counter]:
                            lookup_mmts.append(mmt)
                            lookup_outcomes.append(-1)
                        implicit_counter += 1
                    else:
                        lookup_mmts.append(mmt)
                        lookup_outcomes.append(outcome)
                for symbol_id in self.cg.get(lookup_mmts, lookup_outcomes):
                    expression.append((int(symbol_id), sign))
            sign = -sign

        # Normalization term, from the explicit outcomes only
        assert sign == 1., "Signs of the expansion must alternate."
        norm_mmts = [m for m, i in zip(mmts, implicit) if not i]
        norm_outcomes = [o for o, i in zip(outcomes, implicit) if not i]
        norm = self.cg.get(norm_mmts, norm_outcomes)
        assert len(norm) == 1, "Normalization must be a single symbol."
        expression.append((int(norm[0]), sign))
        return PMODefinition(-1, expression)

    def get(self, mmt_indices: Sequence[int]) -> List[PMODefinition]:
        """Definitions of all joint outcomes of a set of measurements, in
        row-major order of the outcomes.

        Parameters
        ----------
        mmt_indices : Sequence[int]
            Global indices of the measurements, of different parties and in
            increasing order.

        Returns
        -------
        List[PMODefinition]
            The definitions. Empty if the measurements are not in the table.
        """
        if len(mmt_indices) > self.max_length:
            raise BadImplicitSymbol("Cannot look up sequences longer than "
                                    + "the max sequence length.")
        first, last = self.indices.get(tuple(int(m) for m in mmt_indices),
                                       (0, 0))
        return self.data[first:last]

    def get_outcome(self, pmo_indices: Sequence) -> PMODefinition:
        """Definition of one joint outcome.

        Parameters
        ----------
        pmo_indices : Sequence[PMOIndex]
            For each measurement, its index (with attributes ``global_mmt`` and
            ``outcome``).

        Returns
        -------
        PMODefinition
            The definition of the outcome.
        """
        return self._outcome([index.global_mmt for index in pmo_indices],
                             [index.outcome for index in pmo_indices])

    def _outcome(self, mmts: Sequence[int],
                 outcomes: Sequence[int]) -> PMODefinition:
        definitions = self.get(mmts)
        if not definitions:
            raise BadImplicitSymbol("Could not find implicit symbols for "
                                    + "supplied measurement.")
        if not mmts:
            return definitions[0]
        outcome_counts = [self.context.measurement_outcome_count(m)
                          for m in mmts]
        for mmt, outcome, count in zip(mmts, outcomes, outcome_counts):
            if not 0 <= outcome < count:
                raise BadImplicitSymbol(f"Outcome {outcome} out of range "
                                        + f"for measurement {mmt}.")
        return definitions[mixed_radix(outcomes, outcome_counts)]

    @staticmethod
    def as_sympy(definition: PMODefinition) -> sp.Expr:
        """The definition as a linear expression over symbols ``y1, y2...``.
        """
        return sp.Add(*[sp.Float(coeff) * sp.Symbol(f"y{symbol_id}")
                        for symbol_id, coeff in definition.expression])

    def __len__(self):
        return len(self.data)

    def __str__(self):
        return (f"Implicit symbol table up to {self.max_length} "
                + f"measurements, with {len(self.data)} entries.")
