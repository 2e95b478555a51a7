"""
This file contains the Collins-Gisin index: for every choice of measurements
of distinct parties, the symbols of the products of their explicit outcomes.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from itertools import combinations, product
from typing import Iterator, Sequence, Tuple

import numpy as np

from ..errors import BadCGIndex
from ..operators import OperatorSequence
from ..utils import multi_dimensional_index
from .SymbolTable import SymbolTable


class CollinsGisinForm:
    """Table of the symbols associated to joint explicit outcomes of
    measurements of different parties.

    The context must describe its measurements through
    ``measurement_parties()``, ``measurement_operator_count(m)`` and
    ``measurement_operator(m, outcome)``, where ``m`` is a global measurement
    index.

    Parameters
    ----------
    context : Context
        The context of the operators.
    symbols : SymbolTable
        The table where the symbols of the products are looked up. Every
        product must be present.
    level : int
        The maximum number of measurements combined.
    """
    def __init__(self, context, symbols: SymbolTable, level: int):
        self.context = context
        self.symbols = symbols
        self.parties = context.measurement_parties()
        self.level = min(level, len(self.parties))
        self.operator_counts = [context.measurement_operator_count(m)
                                for party in self.parties for m in party]
        self.indices = {(): (0, 1)}
        data = [1]
        for mmts in self.measurement_strings():
            op_counts = [self.operator_counts[m] for m in mmts]
            if 0 in op_counts:
                continue
            first = len(data)
            for outcomes in multi_dimensional_index(op_counts):
                data.append(self._find_symbol(mmts, outcomes))
            self.indices[tuple(mmts)] = (first, len(data))
        self.data = np.array(data, dtype=np.int64)

    def measurement_strings(self) -> Iterator[Tuple[int, ...]]:
        """Every choice of one measurement for each of up to ``level``
        distinct parties, in increasing order of global index."""
        for current_level in range(1, self.level + 1):
            for party_combo in combinations(range(len(self.parties)),
                                            current_level):
                yield from product(*[self.parties[p] for p in party_combo])

    def _find_symbol(self, mmts: Tuple[int, ...],
                     outcomes: Tuple[int, ...]) -> int:
        seq = OperatorSequence([self.context.measurement_operator(m, o)
                                for m, o in zip(mmts, outcomes)],
                               self.context)
        found = self.symbols.where(seq)
        if found is None:
            raise BadCGIndex(f"The object at index {list(mmts)}, "
                             + f"corresponding to operator sequence \"{seq}\""
                             + " does not yet exist in the symbol table.",
                             mmts)
        return found.entry.id

    def _check_indices(self, mmt_indices: Sequence[int]) -> None:
        if len(mmt_indices) > self.level:
            raise BadCGIndex(f"Cannot look up {len(mmt_indices)} "
                             + "measurements in a Collins-Gisin table of "
                             + f"level {self.level}.", tuple(mmt_indices))
        for m in mmt_indices:
            if not 0 <= m < len(self.operator_counts):
                raise BadCGIndex(f"Measurement index {m} is out of range.",
                                 tuple(mmt_indices))

    def get(self, mmt_indices: Sequence[int],
            fixed_outcomes: Sequence[int] = None) -> np.ndarray:
        """Symbols of the joint explicit outcomes of a set of measurements.

        Parameters
        ----------
        mmt_indices : Sequence[int]
            Global indices of the measurements, of different parties and in
            increasing order.
        fixed_outcomes : Sequence[int], optional
            For each measurement, the outcome to fix, or ``-1`` to iterate
            over all its explicit outcomes. By default, all outcomes iterate.

        Returns
        -------
        numpy.ndarray
            The symbol ids, in row-major order of the outcomes (the last
            measurement varying fastest). Empty if the combination of
            measurements is not in the table.

        Examples
        --------
        >>> cg.get([0, 2], [0, -1])
        array([7, 8])
        """
        mmt_indices = tuple(int(m) for m in mmt_indices)
        self._check_indices(mmt_indices)
        first, last = self.indices.get(mmt_indices, (0, 0))
        return self._select_outcomes(self.data[first:last], mmt_indices,
                                     fixed_outcomes)

    def _select_outcomes(self, full: np.ndarray,
                         mmt_indices: Tuple[int, ...],
                         fixed_outcomes: Sequence[int]) -> np.ndarray:
        """Entries of a row-major block where some outcomes are fixed."""
        if fixed_outcomes is None or not len(full):
            return full
        assert len(fixed_outcomes) == len(mmt_indices), \
            "One outcome must be given for every measurement."
        if all(o == -1 for o in fixed_outcomes):
            return full

        offset = 0
        stride = 1
        free_strides = []
        free_sizes = []
        for m, outcome in zip(reversed(mmt_indices),
                              reversed(fixed_outcomes)):
            op_count = self.operator_counts[m]
            if outcome == -1:
                free_strides.append(stride)
                free_sizes.append(op_count)
            else:
                if not 0 <= outcome < op_count:
                    raise BadCGIndex(f"Outcome {outcome} out of range for "
                                     + f"measurement {m}.", mmt_indices)
                offset += stride * outcome
            stride *= op_count
        free_strides.reverse()
        free_sizes.reverse()
        positions = [offset + sum(i * s for i, s in zip(free, free_strides))
                     for free in multi_dimensional_index(free_sizes)]
        return full[positions]

    def real_basis(self, mmt_indices: Sequence[int]) -> np.ndarray:
        """Real basis indices of the symbols of a set of measurements."""
        return np.array([self.symbols.to_basis(int(s))[0]
                         for s in self.get(mmt_indices)], dtype=np.int64)

    def __len__(self):
        return len(self.data)

    def __str__(self):
        return (f"Collins-Gisin table of level {self.level} with "
                + f"{len(self.data)} entries over {len(self.indices)} "
                + "measurement combinations.")
