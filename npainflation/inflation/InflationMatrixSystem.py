"""
This file contains the matrix system of an inflated causal network, which
keeps the factorization of its symbols, the canonical strings of observable
copies, and the Collins-Gisin and implicit-symbol indices of the observables.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from ..matrix.MatrixSystem import MatrixSystem
from ..matrix.OperatorMatrix import (LocalizingMatrix, LocalizingMatrixIndex,
                                     MomentMatrix)
from .CanonicalObservables import CanonicalObservables
from .FactorTable import FactorTable
from .InflationCollinsGisin import InflationCollinsGisin
from .InflationContext import InflationContext
from .InflationImplicitSymbols import InflationImplicitSymbols


class InflationMatrixSystem(MatrixSystem):
    """Matrix system over an ``InflationContext``.

    Parameters
    ----------
    context : InflationContext
        The inflated scenario.
    verbose : int, optional
        Verbosity level. By default 0.
    max_passes : int, optional
        Maximum number of passes of the factor table. By default 16.

    Examples
    --------
    >>> network = CausalNetwork([2, 2], [[0, 1]])
    >>> ims = InflationMatrixSystem(InflationContext(network, 2))
    >>> index, mm = ims.create_moment_matrix(1)
    """
    def __init__(self, context: InflationContext, verbose: int = 0,
                 max_passes: int = 16):
        super().__init__(context, verbose)
        self.factors = FactorTable(context, self.symbols, max_passes, verbose)
        self.canonical_observables = CanonicalObservables(context)
        self.max_real_sequence_length = 0
        self.collins_gisin = None
        self.implicit_symbols = None

    def on_new_moment_matrix_created(self, level: int,
                                     matrix: MomentMatrix) -> None:
        new_factors = self.factors.on_new_symbols_added()
        if self.verbose > 1 and new_factors:
            print(f"Added {new_factors} entries to the factor table.")
        self.canonical_observables.generate_up_to_level(2 * level)

        new_length = min(2 * level, self.context.observable_variant_count)
        if (self.collins_gisin is not None
                and new_length <= self.max_real_sequence_length):
            return
        self.max_real_sequence_length = max(new_length,
                                            self.max_real_sequence_length)
        self.collins_gisin = InflationCollinsGisin(
            self.context, self.symbols, self.canonical_observables,
            self.max_real_sequence_length)
        self.implicit_symbols = InflationImplicitSymbols(
            self.context, self.symbols, self.collins_gisin,
            self.max_real_sequence_length)
        if self.verbose > 1:
            print(self.collins_gisin)
            print(self.implicit_symbols)

    def on_new_localizing_matrix_created(self, lmi: LocalizingMatrixIndex,
                                         matrix: LocalizingMatrix) -> None:
        self.factors.on_new_symbols_added()
