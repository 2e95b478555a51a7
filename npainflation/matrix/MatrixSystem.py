"""
This file contains the class that owns a context, its symbol table, and all
the moment and localizing matrices generated over it.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
import warnings

from typing import Dict, List, Tuple
from warnings import warn

from ..errors import MissingMatrix
from ..operators import OperatorSequence
from ..utils import ReadWriteLock
from .OperatorMatrix import (LocalizingMatrix, LocalizingMatrixIndex,
                             MomentMatrix, OperatorMatrix)
from .SymbolTable import SymbolTable

# Force warnings.warn() to omit the source code line in the message
# https://stackoverflow.com/questions/2187269/print-only-the-message-on-warnings
formatwarning_orig = warnings.formatwarning
warnings.formatwarning = lambda msg, category, filename, lineno, line=None: \
    formatwarning_orig(msg, category, filename, lineno, line="")


class MatrixSystem:
    """A context, together with a symbol table and the matrices built over it.

    Matrices are created on demand, stored in order of creation, and never
    modified afterwards. All state is guarded by a single read-write lock:
    creating a matrix takes the write lock, while looking matrices up takes the
    read lock. Callers inspecting the symbol table while other threads may be
    creating matrices should hold ``read_lock()``.

    Parameters
    ----------
    context : Context
        The context of the operators.
    verbose : int, optional
        Optional parameter for level of verbose:

            * 0: quiet (default),
            * 1: monitor level: track program process and show warnings,
            * 2: debug level: show properties of objects created.
    """
    def __init__(self, context, verbose: int = 0):
        self.verbose = verbose
        self._context = context
        self._symbols = SymbolTable(context)
        self.matrices = []
        self.moment_matrix_indices = {}
        self.localizing_matrix_indices = {}
        self._lock = ReadWriteLock()
        if self.verbose > 1:
            print(self._context)

    @property
    def context(self):
        return self._context

    @property
    def symbols(self) -> SymbolTable:
        return self._symbols

    def read_lock(self):
        """Context manager holding the lock for reading."""
        return self._lock.read_lock()

    def write_lock(self):
        """Context manager holding the lock for writing."""
        return self._lock.write_lock()

    ###########################################################################
    # MOMENT MATRICES                                                         #
    ###########################################################################
    def create_moment_matrix(self, level: int) -> Tuple[int, MomentMatrix]:
        """Generate the moment matrix of a level of the hierarchy, unless it
        already exists.

        Parameters
        ----------
        level : int
            The level of the hierarchy.

        Returns
        -------
        Tuple[int, MomentMatrix]
            The index of the matrix in the system, and the matrix.
        """
        with self._lock.write_lock():
            if level in self.moment_matrix_indices:
                index = self.moment_matrix_indices[level]
                return index, self.matrices[index]
            self.before_new_moment_matrix_created(level)
            matrix = MomentMatrix(self._context, self._symbols, level,
                                  self.verbose)
            index = self._push_back(matrix)
            self.moment_matrix_indices[level] = index
            if self.verbose > 0:
                print(f"Created moment matrix of level {level} with "
                      + f"dimension {matrix.dimension}. The system now has "
                      + f"{len(self._symbols)} symbols.")
            if self.verbose > 1:
                print(matrix.properties)
            self.on_new_moment_matrix_created(level, matrix)
            return index, matrix

    def moment_matrix(self, level: int) -> MomentMatrix:
        """The moment matrix of a level, which must exist already."""
        with self._lock.read_lock():
            if level not in self.moment_matrix_indices:
                raise MissingMatrix("A moment matrix for level " + str(level)
                                    + " has not yet been generated.")
            return self.matrices[self.moment_matrix_indices[level]]

    @property
    def highest_moment_matrix(self) -> int:
        """The highest level of generated moment matrix, or -1 if none."""
        with self._lock.read_lock():
            if not self.moment_matrix_indices:
                return -1
            return max(self.moment_matrix_indices)

    ###########################################################################
    # LOCALIZING MATRICES                                                     #
    ###########################################################################
    def create_localizing_matrix(self, level: int, word
                                 ) -> Tuple[int, LocalizingMatrix]:
        """Generate the localizing matrix of a word, unless it already exists.

        Parameters
        ----------
        level : int
            The level of the hierarchy.
        word : Union[OperatorSequence, List[Operator]]
            The localizing word.

        Returns
        -------
        Tuple[int, LocalizingMatrix]
            The index of the matrix in the system, and the matrix.
        """
        if not isinstance(word, OperatorSequence):
            word = OperatorSequence(word, self._context)
        lmi = LocalizingMatrixIndex(level, word)
        with self._lock.write_lock():
            if lmi in self.localizing_matrix_indices:
                index = self.localizing_matrix_indices[lmi]
                return index, self.matrices[index]
            if ((not self._context.can_be_nonhermitian())
                    and word != word.conjugate()):
                warn(f"The localizing word {word} is not Hermitian, so the "
                     + "localizing matrix will not be Hermitian.")
            self.before_new_localizing_matrix_created(lmi)
            matrix = LocalizingMatrix(self._context, self._symbols, lmi,
                                      self.verbose)
            index = self._push_back(matrix)
            self.localizing_matrix_indices[lmi] = index
            if self.verbose > 0:
                print(f"Created localizing matrix of level {level} for word "
                      + f"{word}. The system now has {len(self._symbols)} "
                      + "symbols.")
            self.on_new_localizing_matrix_created(lmi, matrix)
            return index, matrix

    def localizing_matrix(self, lmi: LocalizingMatrixIndex
                          ) -> LocalizingMatrix:
        """The localizing matrix of an index, which must exist already."""
        with self._lock.read_lock():
            if lmi not in self.localizing_matrix_indices:
                raise MissingMatrix(f"A localizing matrix of level {lmi.level}"
                                    + f" for word {lmi.word} has not yet "
                                    + "been generated.")
            return self.matrices[self.localizing_matrix_indices[lmi]]

    ###########################################################################
    # HOOKS FOR DERIVED SYSTEMS (CALLED WHILE HOLDING THE WRITE LOCK)         #
    ###########################################################################
    def before_new_moment_matrix_created(self, level: int) -> None:
        pass

    def on_new_moment_matrix_created(self, level: int,
                                     matrix: MomentMatrix) -> None:
        pass

    def before_new_localizing_matrix_created(self,
                                             lmi: LocalizingMatrixIndex
                                             ) -> None:
        pass

    def on_new_localizing_matrix_created(self, lmi: LocalizingMatrixIndex,
                                         matrix: LocalizingMatrix) -> None:
        pass

    ###########################################################################
    # ACCESS                                                                  #
    ###########################################################################
    def _push_back(self, matrix: OperatorMatrix) -> int:
        self.matrices.append(matrix)
        return len(self.matrices) - 1

    def __getitem__(self, index: int) -> OperatorMatrix:
        with self._lock.read_lock():
            if not 0 <= index < len(self.matrices):
                raise MissingMatrix(f"Matrix index {index} is out of range.")
            return self.matrices[index]

    def __len__(self):
        with self._lock.read_lock():
            return len(self.matrices)

    def __str__(self):
        return (f"Matrix system with {len(self.matrices)} matrices and "
                + f"{len(self._symbols)} symbols, over the context:\n"
                + str(self._context))
