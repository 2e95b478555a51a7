"""
This file contains the matrix system of a locality scenario, which keeps
Collins-Gisin and implicit-symbol indices of the marginal probabilities.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from ..matrix.CollinsGisin import CollinsGisinForm
from ..matrix.ImplicitSymbols import ImplicitSymbols
from ..matrix.MatrixSystem import MatrixSystem
from ..matrix.OperatorMatrix import MomentMatrix
from .LocalityContext import LocalityContext


class LocalityMatrixSystem(MatrixSystem):
    """Matrix system over a ``LocalityContext``.

    Whenever a moment matrix increases the length of the longest sequence
    known, the Collins-Gisin index and the implicit symbols are rebuilt.

    Parameters
    ----------
    context : LocalityContext
        The locality scenario.
    verbose : int, optional
        Verbosity level. By default 0.
    """
    def __init__(self, context: LocalityContext, verbose: int = 0):
        super().__init__(context, verbose)
        self.max_real_sequence_length = 0
        self.collins_gisin = None
        self.implicit_symbols = None

    def on_new_moment_matrix_created(self, level: int,
                                     matrix: MomentMatrix) -> None:
        new_length = min(2 * level, len(self.context.parties))
        if (self.collins_gisin is not None
                and new_length <= self.max_real_sequence_length):
            return
        self.max_real_sequence_length = max(new_length,
                                            self.max_real_sequence_length)
        self.collins_gisin = CollinsGisinForm(self.context,
                                              self.symbols,
                                              self.max_real_sequence_length)
        self.implicit_symbols = ImplicitSymbols(self.context,
                                                self.symbols,
                                                self.collins_gisin,
                                                self.max_real_sequence_length)
        if self.verbose > 1:
            print(self.collins_gisin)
            print(self.implicit_symbols)
