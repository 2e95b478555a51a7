"""
This file contains helper functions to simplify and factorize operator
sequences of inflated causal scenarios. The functions in this file are
accelerated by JIT compilation in numba.

Operator sequences are passed in as 1D arrays of global operator ids, together
with aligned arrays giving, for each operator, the observable and the variant
(copy) of the observable it belongs to.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
import numpy as np

from numba import jit
from numba.types import bool_

nopython = True
cache = True


###############################################################################
# SIMPLIFICATION OF COMMUTING SEQUENCES                                       #
###############################################################################
@jit(nopython=nopython, cache=cache)
def nb_is_sorted(ids: np.ndarray) -> bool_:
    """Whether the array of operator ids is in non-decreasing order.

    Parameters
    ----------
    ids : numpy.ndarray
        1D array of integers.

    Returns
    -------
    bool
        ``True`` if no element is smaller than its predecessor.
    """
    for i in range(1, ids.shape[0]):
        if ids[i] < ids[i - 1]:
            return False
    return True


@jit(nopython=nopython, cache=cache)
def nb_first_orthogonal_pair(ids: np.ndarray,
                             observables: np.ndarray,
                             variants: np.ndarray) -> int:
    """Find the first pair of adjacent operators that are orthogonal
    projectors, this is, different outcomes of the same copy of the same
    observable. The product of such a pair is zero.

    Parameters
    ----------
    ids : numpy.ndarray
        Sorted global operator ids.
    observables : numpy.ndarray
        Observable of each operator.
    variants : numpy.ndarray
        Variant of the observable of each operator.

    Returns
    -------
    int
        The position of the second operator of the first orthogonal pair, or
        ``-1`` if there is none.

    Examples
    --------
    >>> nb_first_orthogonal_pair(np.array([0, 1]), np.array([0, 0]),
                                 np.array([0, 0]))
    1
    """
    for i in range(1, ids.shape[0]):
        if (observables[i] == observables[i - 1]
                and variants[i] == variants[i - 1]
                and ids[i] != ids[i - 1]):
            return i
    return -1


@jit(nopython=nopython, cache=cache)
def nb_remove_projector_squares(ids: np.ndarray,
                                projective: np.ndarray) -> np.ndarray:
    """Simplify the sequence by removing powers of projective operators. This
    is because we assume projectors, P**2=P. This corresponds to removing
    adjacent duplicates.

    Parameters
    ----------
    ids : numpy.ndarray
        Global operator ids.
    projective : numpy.ndarray
        Boolean array flagging which operators are projective.

    Returns
    -------
    numpy.ndarray
        The ids with repeated projectors removed.
    """
    to_keep = np.ones(ids.shape[0], dtype=bool_)
    for i in range(1, ids.shape[0]):
        if ids[i] == ids[i - 1] and projective[i]:
            to_keep[i] = False
    return ids[to_keep]


###############################################################################
# FACTORIZATION                                                               #
###############################################################################
@jit(nopython=nopython, cache=cache)
def nb_overlap_matrix(source_masks: np.ndarray) -> np.ndarray:
    """Given, for a number of operators, the boolean masks of inflated sources
    they are connected to, generate a boolean matrix whose entries denote
    whether the supports of the operator indexed by the row and of the
    operator indexed by the column overlap.

    Parameters
    ----------
    source_masks : numpy.ndarray
        2D boolean array, one row per operator and one column per inflated
        source.

    Returns
    -------
    numpy.ndarray
        The "adjacency matrix" whose entries denote whether the supports of the
        operator indexed by the row and of the operator indexed by the column
        overlap.
    """
    n = source_masks.shape[0]
    adj_mat = np.zeros((n, n), dtype=bool_)
    for i in range(n):
        adj_mat[i, i] = True
        for j in range(i):
            if np.logical_and(source_masks[i], source_masks[j]).any():
                adj_mat[i, j] = True
                adj_mat[j, i] = True
    return adj_mat


@jit(nopython=nopython, cache=cache)
def nb_classify_disconnected_components(adj_mat: np.ndarray) -> np.ndarray:
    """Given a boolean matrix where each cell indicates whether the supports of
    the operator denoting the row and the operator denoting the column overlap,
    generate a list determining to which disconnected component each operator
    belongs to.

    Components are numbered in order of their first operator.

    Parameters
    ----------
    adj_mat : numpy.ndarray
        Boolean 2d array where each cell indicates whether the supports of the
        operator denoting the row and the operator denoting the column overlap.

    Returns
    -------
    numpy.ndarray
        A list of integers of size the number of operators used for creating
        adj_mat, where each integer indexes the disconnected component the
        corresponding operator belongs to.
    """
    n = adj_mat.shape[0]
    component_labels = -np.ones(n, dtype=np.int64)
    component_counter = 0
    for i in range(n):
        if component_labels[i] >= 0:
            continue
        component_labels[i] = component_counter
        to_visit = [i]
        while len(to_visit):
            current = to_visit.pop()
            for j in range(n):
                if adj_mat[current, j] and component_labels[j] < 0:
                    component_labels[j] = component_counter
                    to_visit.append(j)
        component_counter += 1
    return component_labels


@jit(nopython=nopython, cache=cache)
def nb_sequence_to_components(source_masks: np.ndarray) -> np.ndarray:
    """Wrapper for obtaining the list of disconnected components of a
    sequence.

    Parameters
    ----------
    source_masks : numpy.ndarray
        2D boolean array, one row per operator and one column per inflated
        source.

    Returns
    -------
    numpy.ndarray
        A vector where each integer gives the component associated with the
        operator of that index.

    Examples
    --------
    >>> masks = np.array([[1, 0, 0, 0],
                          [0, 0, 1, 0],
                          [1, 0, 0, 1]], dtype=bool)
    >>> nb_sequence_to_components(masks)
    [0, 1, 0]
    """
    n = source_masks.shape[0]
    if n <= 1:
        return np.zeros(n, dtype=np.int64)
    return nb_classify_disconnected_components(nb_overlap_matrix(source_masks))
