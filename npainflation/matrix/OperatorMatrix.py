"""
This file contains the matrices of operator sequences (moment matrices and
localizing matrices), and their translation into matrices of symbols.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from collections import namedtuple
from typing import Dict, List, Set, Tuple

import numpy as np
from scipy.sparse import lil_matrix
from tqdm import tqdm

from ..errors import SymbolLookupError
from ..operators import OperatorSequence
from .SymbolTable import SymbolExpression, SymbolTable, UniqueSequence

LocalizingMatrixIndex = namedtuple("LocalizingMatrixIndex", ["level", "word"])


class SymbolMatrixProperties:
    """Summary of the symbols appearing in a matrix.

    Parameters
    ----------
    matrix : OperatorMatrix
        The matrix described.
    symbols : SymbolTable
        The symbol table the matrix was merged into.
    included_symbols : Set[int]
        The ids of the symbols appearing in the matrix.
    """
    def __init__(self,
                 matrix: "OperatorMatrix",
                 symbols: SymbolTable,
                 included_symbols: Set[int]):
        self.included_symbols = sorted(included_symbols)
        self.real_entries = [s for s in self.included_symbols
                             if symbols[s].real_index >= 0]
        self.imaginary_entries = [s for s in self.included_symbols
                                  if symbols[s].imaginary_index >= 0]
        self.basis_key = {s: symbols[s].basis_key
                          for s in self.included_symbols}
        if not matrix.is_hermitian:
            self.basis_type = "Generic"
        elif self.imaginary_entries:
            self.basis_type = "Hermitian"
        else:
            self.basis_type = "Symmetric"

    def __str__(self):
        return (f"{self.basis_type} matrix with "
                + f"{len(self.included_symbols)} unique symbols, "
                + f"{len(self.real_entries)} real and "
                + f"{len(self.imaginary_entries)} imaginary.")


class OperatorMatrix:
    """Square matrix of operator sequences, registered into a symbol table.

    The construction runs in a fixed order: the Hermiticity of the matrix of
    sequences is tested, the hashes of all entries are computed, the unique
    sequences are merged into the symbol table, and finally the matrix of
    symbols is built.

    Parameters
    ----------
    context : Context
        The context of the operators.
    symbols : SymbolTable
        The symbol table to merge the entries into.
    sequences : numpy.ndarray
        Square matrix (of ``object`` dtype) of OperatorSequences.
    verbose : int, optional
        Verbosity level. By default 0.
    """
    def __init__(self,
                 context,
                 symbols: SymbolTable,
                 sequences: np.ndarray,
                 verbose: int = 0):
        self.context = context
        self.symbols = symbols
        self.verbose = verbose
        self.sequence_matrix = sequences
        self.dimension = sequences.shape[0]

        self.is_hermitian, self.nonh_i, self.nonh_j = \
            self._calculate_hermiticity()
        self.hash_matrix = np.empty((self.dimension, self.dimension),
                                    dtype=object)
        for row in range(self.dimension):
            for col in range(self.dimension):
                self.hash_matrix[row, col] = sequences[row, col].hash
        included_symbols = self.symbols.merge_in(
            self._identify_unique_sequences())
        self.symbol_matrix = self._build_symbol_matrix()
        self.properties = SymbolMatrixProperties(self,
                                                 self.symbols,
                                                 included_symbols)

    def _calculate_hermiticity(self) -> Tuple[bool, int, int]:
        """Test whether ``M[i][j] == M[j][i].conjugate()``. The first failing
        entry is reported, looking first at the diagonal element of each row
        and then at the rest of the row."""
        M = self.sequence_matrix
        for row in range(self.dimension):
            if M[row, row] != M[row, row].conjugate():
                return False, row, row
            for col in range(row + 1, self.dimension):
                if M[row, col] != M[col, row].conjugate():
                    return False, row, col
        return True, -1, -1

    def _identify_unique_sequences(self) -> Dict[int, UniqueSequence]:
        unique = {0: UniqueSequence.Zero(self.context),
                  1: UniqueSequence.Identity(self.context)}
        known_hashes = {0, 1}
        for row in range(self.dimension):
            first_col = row if self.is_hermitian else 0
            for col in range(first_col, self.dimension):
                elem = self.sequence_matrix[row, col]
                if elem.hash in known_hashes:
                    continue
                conj_elem = elem.conjugate()
                if self.context.can_have_aliases():
                    conj_elem = self.context.simplify_as_moment(conj_elem)
                if conj_elem.hash in known_hashes:
                    continue
                if elem.hash <= conj_elem.hash:
                    us = UniqueSequence(elem, conj_elem)
                else:
                    us = UniqueSequence(conj_elem, elem)
                unique[us.hash] = us
                known_hashes.add(elem.hash)
                known_hashes.add(conj_elem.hash)
        return unique

    def _lookup(self, row: int, col: int) -> Tuple[UniqueSequence, bool]:
        symbol_id, conjugated = \
            self.symbols.hash_to_index(self.hash_matrix[row, col])
        if symbol_id is None:
            raise SymbolLookupError(
                f"Symbol \"{self.sequence_matrix[row, col]}\" at index "
                + f"[{row}, {col}] was not found in symbol table.", row, col)
        return self.symbols[symbol_id], conjugated

    def _build_symbol_matrix(self) -> np.ndarray:
        symbol_matrix = np.empty((self.dimension, self.dimension),
                                 dtype=object)
        for row in range(self.dimension):
            first_col = row if self.is_hermitian else 0
            for col in range(first_col, self.dimension):
                entry, conjugated = self._lookup(row, col)
                symbol_matrix[row, col] = SymbolExpression(entry.id,
                                                           conjugated)
                if self.is_hermitian and col > row:
                    mirrored = False if entry.hermitian else not conjugated
                    symbol_matrix[col, row] = SymbolExpression(entry.id,
                                                               mirrored)
        return symbol_matrix

    ###########################################################################
    # EXPORT                                                                  #
    ###########################################################################
    def symbol_matrix_as_strings(self) -> np.ndarray:
        """The matrix of symbols, with every entry as a string such as
        ``"5"`` or ``"5*"``."""
        as_strings = np.empty((self.dimension, self.dimension), dtype=object)
        for row in range(self.dimension):
            for col in range(self.dimension):
                as_strings[row, col] = str(self.symbol_matrix[row, col])
        return as_strings

    def symbol_id_matrix(self) -> np.ndarray:
        """The ids of the symbols of the matrix, as integers."""
        ids = np.zeros((self.dimension, self.dimension), dtype=np.int64)
        for row in range(self.dimension):
            for col in range(self.dimension):
                ids[row, col] = self.symbol_matrix[row, col].id
        return ids

    def sparse_basis(self) -> Tuple[List[lil_matrix], List[lil_matrix]]:
        """Decomposition of the matrix as ``sum_k x_k R_k + i sum_k y_k I_k``,
        where ``x_k`` and ``y_k`` are the real and imaginary parts of the
        symbols in the matrix.

        Returns
        -------
        Tuple[List[scipy.sparse.lil_matrix], List[scipy.sparse.lil_matrix]]
            The matrices ``R_k``, in the order of
            ``properties.real_entries``, and the matrices ``I_k``, in the order
            of ``properties.imaginary_entries``.
        """
        shape = (self.dimension, self.dimension)
        real_basis = {s: lil_matrix(shape, dtype=float)
                      for s in self.properties.real_entries}
        imaginary_basis = {s: lil_matrix(shape, dtype=float)
                           for s in self.properties.imaginary_entries}
        for row in range(self.dimension):
            for col in range(self.dimension):
                expr = self.symbol_matrix[row, col]
                sign = -1. if expr.negated else 1.
                if expr.id in real_basis:
                    real_basis[expr.id][row, col] = sign
                if expr.id in imaginary_basis:
                    imaginary_basis[expr.id][row, col] = \
                        -sign if expr.conjugated else sign
        return ([real_basis[s] for s in self.properties.real_entries],
                [imaginary_basis[s] for s in self.properties.imaginary_entries])

    def __getitem__(self, index):
        return self.symbol_matrix[index]

    def __len__(self):
        return self.dimension

    def __str__(self):
        return (f"Operator matrix of dimension {self.dimension}, "
                + str(self.properties))


class MomentMatrix(OperatorMatrix):
    """Moment matrix of a given level of the NPA hierarchy: the entry ``[i][j]``
    is ``conj(g_i) * g_j``, for ``g`` running over all distinct sequences of
    length up to ``level``.

    Parameters
    ----------
    context : Context
        The context of the operators.
    symbols : SymbolTable
        The symbol table to merge the entries into.
    level : int
        The level of the hierarchy.
    verbose : int, optional
        Verbosity level. By default 0.
    """
    def __init__(self, context, symbols: SymbolTable, level: int,
                 verbose: int = 0):
        self.level = level
        col_gen = context.operator_sequence_generator(level)
        row_gen = context.operator_sequence_generator(level, True)
        sequences = _build_sequence_matrix(context, row_gen, col_gen,
                                           None, verbose,
                                           f"Moment matrix level {level}  ")
        super().__init__(context, symbols, sequences, verbose)

    def __str__(self):
        return f"Moment matrix of level {self.level}: " + super().__str__()


class LocalizingMatrix(OperatorMatrix):
    """Localizing matrix of a word: the entry ``[i][j]`` is
    ``conj(g_i) * word * g_j``.

    Parameters
    ----------
    context : Context
        The context of the operators.
    symbols : SymbolTable
        The symbol table to merge the entries into.
    index : LocalizingMatrixIndex
        The level of the hierarchy, and the localizing word.
    verbose : int, optional
        Verbosity level. By default 0.
    """
    def __init__(self, context, symbols: SymbolTable,
                 index: LocalizingMatrixIndex,
                 verbose: int = 0):
        self.index = index
        self.level = index.level
        self.word = index.word
        col_gen = context.operator_sequence_generator(index.level)
        row_gen = context.operator_sequence_generator(index.level, True)
        sequences = _build_sequence_matrix(context, row_gen, col_gen,
                                           index.word, verbose,
                                           f"Localizing matrix {index.word}  ")
        super().__init__(context, symbols, sequences, verbose)

    def __str__(self):
        return (f"Localizing matrix of level {self.level} for word "
                + f"{self.word}: " + super().__str__())


def _build_sequence_matrix(context, row_gen, col_gen,
                           word: OperatorSequence = None,
                           verbose: int = 0,
                           desc: str = "") -> np.ndarray:
    """Matrix of products ``row_gen[i] * (word) * col_gen[j]``."""
    dimension = len(col_gen)
    simplify = context.can_have_aliases()
    sequences = np.empty((dimension, dimension), dtype=object)
    for row in tqdm(range(dimension), disable=not verbose, desc=desc):
        left = row_gen[row] if word is None else row_gen[row] * word
        for col in range(dimension):
            product = left * col_gen[col]
            if simplify:
                product = context.simplify_as_moment(product)
            sequences[row, col] = product
    return sequences
