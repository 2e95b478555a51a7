"""
This file contains the Collins-Gisin index of an inflated scenario, with one
block of explicit symbols per canonical string of observable copies.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

from ..errors import BadCGIndex, BadOVString
from ..matrix.CollinsGisin import CollinsGisinForm
from ..matrix.SymbolTable import SymbolTable
from ..utils import multi_dimensional_index
from .CanonicalObservables import CanonicalObservable, CanonicalObservables
from .InflationContext import InflationContext


class InflationCollinsGisin(CollinsGisinForm):
    """Collins-Gisin table over every copy of every observable.

    Measurements are indexed by their global observable-variant index, so
    that copies of the same observable can be measured jointly. The table
    stores one block for each canonical string of ``canonical_observables``;
    any other string is resolved through its canonical version.

    Parameters
    ----------
    context : InflationContext
        The inflated scenario.
    symbols : SymbolTable
        The symbol table, containing every product of up to ``level``
        explicit operators.
    canonical_observables : CanonicalObservables
        The canonical strings, generated up to at least ``level``.
    level : int
        The maximum number of observable copies combined.
    """
    def __init__(self, context: InflationContext, symbols: SymbolTable,
                 canonical_observables: CanonicalObservables, level: int):
        self.canonical_observables = canonical_observables
        super().__init__(context, symbols,
                         min(level, canonical_observables.max_level))

    def measurement_strings(self) -> Iterator[Tuple[int, ...]]:
        for entry in self.canonical_observables:
            if not entry.empty() and len(entry) <= self.level:
                yield tuple(entry.flattened_indices)

    def global_index(self, mmt: Union[int, Tuple[int, int]]) -> int:
        if isinstance(mmt, (int, np.integer)):
            return int(mmt)
        observable, variant = (int(i) for i in mmt)
        if not 0 <= observable < len(self.context.observables):
            raise BadCGIndex(f"Observable index {observable} out of range.",
                             tuple(mmt))
        obs = self.context.observables[observable]
        if not 0 <= variant < obs.variant_count:
            raise BadCGIndex(f"Variant {variant} of observable {observable} "
                             + "out of range.", tuple(mmt))
        return obs.variant_offset + variant

    def canonical_entry(self, mmt_indices: Sequence) -> CanonicalObservable:
        """The canonical string of a string of observable copies.

        Raises
        ------
        BadCGIndex
            If the string is not in the table, for instance because some copy
            of a projective observable appears twice.
        """
        mmts = [self.global_index(m) for m in mmt_indices]
        self._check_indices(mmts)
        try:
            return self.canonical_observables.canonical(mmts)
        except BadOVString as e:
            raise BadCGIndex(f"Observable variants {mmts} have no canonical "
                             + "entry in the Collins-Gisin table.",
                             tuple(mmts)) from e

    def get(self, mmt_indices: Sequence,
            fixed_outcomes: Sequence[int] = None) -> np.ndarray:
        """Symbols of the joint explicit outcomes of copies of observables.

        Parameters
        ----------
        mmt_indices : Sequence[Union[int, Tuple[int, int]]]
            The copies, as global observable-variant indices or as
            (observable, variant) pairs, in any order.
        fixed_outcomes : Sequence[int], optional
            For each copy, the outcome to fix, or ``-1`` to iterate over all
            its explicit outcomes. By default, all outcomes iterate.

        Returns
        -------
        numpy.ndarray
            The symbol ids, in row-major order of the outcomes of the copies
            in the order given.

        Examples
        --------
        With ``B`` depending on the second source only, ``B0`` and ``B1`` are
        copies of the same observable:

        >>> icg.get([(1, 0), (1, 1)])
        array([9])
        """
        mmts = tuple(self.global_index(m) for m in mmt_indices)
        entry = self.canonical_entry(mmts)
        if list(mmts) == entry.flattened_indices:
            first, last = self.indices.get(mmts, (0, 0))
            full = self.data[first:last]
        else:
            op_counts = [self.operator_counts[m] for m in mmts]
            full = np.array([self._find_symbol(mmts, outcomes)
                             for outcomes in multi_dimensional_index(
                                 op_counts)], dtype=np.int64)
        return self._select_outcomes(full, mmts, fixed_outcomes)

    def __str__(self):
        return (f"Inflation Collins-Gisin table of level {self.level} with "
                + f"{len(self.data)} entries over {len(self.indices)} "
                + "canonical strings of observable copies.")
