"""
This file contains the implicit symbols of an inflated scenario: every joint
outcome of a canonical string of observable copies, written in terms of the
explicit symbols of the inflation Collins-Gisin table.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from typing import Iterator, List, Sequence, Tuple

from ..errors import BadImplicitSymbol
from ..matrix.ImplicitSymbols import ImplicitSymbols, PMODefinition


class InflationImplicitSymbols(ImplicitSymbols):
    """Implicit symbols over every canonical string of observable copies.

    Parameters
    ----------
    context : InflationContext
        The inflated scenario.
    symbols : SymbolTable
        The symbol table.
    cg : InflationCollinsGisin
        The Collins-Gisin index of the explicit symbols.
    max_length : int
        The maximum number of observable copies combined.
    """
    def measurement_strings(self) -> Iterator[Tuple[int, ...]]:
        for entry in self.cg.canonical_observables:
            if not entry.empty() and len(entry) <= self.max_length:
                yield tuple(entry.flattened_indices)

    def get(self, mmt_indices: Sequence) -> List[PMODefinition]:
        """Definitions of all joint outcomes of a string of observable
        copies, in row-major order of the outcomes of the copies in the order
        given.

        Parameters
        ----------
        mmt_indices : Sequence[Union[int, Tuple[int, int]]]
            The copies, as global observable-variant indices or as
            (observable, variant) pairs. Strings that are not canonical are
            expanded over the symbols of their aliases.

        Returns
        -------
        List[PMODefinition]
            The definitions.
        """
        if len(mmt_indices) > self.max_length:
            raise BadImplicitSymbol("Cannot look up sequences longer than "
                                    + "the max sequence length.")
        mmts = tuple(self.cg.global_index(m) for m in mmt_indices)
        entry = self.cg.canonical_entry(mmts)
        if list(mmts) == entry.flattened_indices:
            first, last = self.indices[mmts]
            return self.data[first:last]
        return self._definitions(mmts)

    def get_outcome(self, ovo_indices: Sequence) -> PMODefinition:
        """Definition of one joint outcome.

        Parameters
        ----------
        ovo_indices : Sequence[OVOIndex]
            For each copy, its observable, variant and outcome.

        Returns
        -------
        PMODefinition
            The definition of the outcome.
        """
        return self._outcome([self.context.obs_variant_to_index(
                                 index.observable, index.variant)
                              for index in ovo_indices],
                             [index.outcome for index in ovo_indices])

    def __str__(self):
        return (f"Inflation implicit symbol table up to {self.max_length} "
                + f"observable copies, with {len(self.data)} entries.")
