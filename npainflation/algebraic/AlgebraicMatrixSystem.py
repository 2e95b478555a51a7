"""
This file contains the matrix system of an algebraic context, which makes
sure that the reductions of all strings needed by a matrix are known before
the matrix is built.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from ..matrix.MatrixSystem import MatrixSystem
from ..matrix.OperatorMatrix import LocalizingMatrixIndex
from .AlgebraicContext import AlgebraicContext


class AlgebraicMatrixSystem(MatrixSystem):
    """Matrix system over an ``AlgebraicContext``.

    Parameters
    ----------
    context : AlgebraicContext
        The algebraic scenario.
    verbose : int, optional
        Verbosity level. By default 0.
    """
    def __init__(self, context: AlgebraicContext, verbose: int = 0):
        super().__init__(context, verbose)

    def before_new_moment_matrix_created(self, level: int) -> None:
        if self.context.generate_aliases(2 * level) and self.verbose > 1:
            print(f"Generated aliases of strings up to length {2 * level}.")

    def before_new_localizing_matrix_created(self,
                                             lmi: LocalizingMatrixIndex
                                             ) -> None:
        length = 2 * lmi.level + len(lmi.word)
        if self.context.generate_aliases(length) and self.verbose > 1:
            print(f"Generated aliases of strings up to length {length}.")
