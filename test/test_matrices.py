import unittest
import warnings

import numpy as np

from npainflation import (Context, LocalityContext, MatrixSystem,
                          OperatorSequence, Party, SymbolTable)
from npainflation.errors import MissingMatrix, UnknownSymbol
from npainflation.matrix import LocalizingMatrixIndex


def as_strings(matrix):
    return matrix.symbol_matrix_as_strings().tolist()


class TestSymbolTable(unittest.TestCase):
    def setUp(self):
        self.context = Context(2)
        self.X1, self.X2 = self.context.operators
        self.symbols = SymbolTable(self.context)

    def test_initial_entries(self):
        self.assertEqual(len(self.symbols), 2,
                         "A new table should only contain zero and one.")
        self.assertTrue(self.symbols[0].sequence.zero(),
                        "Symbol 0 is not the zero sequence.")
        self.assertEqual(self.symbols[1].basis_key, (0, -1),
                         "The identity should be the first real symbol.")

    def test_merge_orients_by_hash(self):
        X2X1 = OperatorSequence([self.X2, self.X1], self.context)
        new_id = self.symbols.merge_in_sequence(X2X1)
        self.assertEqual(new_id, 2, f"The new symbol got id {new_id}.")
        self.assertEqual(str(self.symbols[2].sequence), "X1;X2",
                         "Symbols should be stored by their lowest hash.")
        self.assertFalse(self.symbols[2].hermitian,
                         "X1X2 should not be Hermitian.")
        self.assertEqual(self.symbols[2].basis_key, (1, 0),
                         "Non-Hermitian symbols need a real and an " +
                         "imaginary part.")
        self.assertEqual(self.symbols.merge_in_sequence(X2X1.conjugate()), 2,
                         "The conjugate was registered as a new symbol.")

    def test_lookup(self):
        X1X2 = OperatorSequence([self.X1, self.X2], self.context)
        self.symbols.merge_in_sequence(X1X2)
        found = self.symbols.where(X1X2.conjugate())
        self.assertEqual((found.entry.id, found.conjugated), (2, True),
                         "Lookup of a conjugate symbol failed.")
        self.assertEqual(str(self.symbols.to_symbol(X1X2.conjugate())), "2*",
                         "The conjugate should be written as 2*.")
        X1 = OperatorSequence([self.X1], self.context)
        self.assertIsNone(self.symbols.where(X1),
                          "A missing sequence was found.")
        self.assertEqual(self.symbols.to_symbol(X1).id, 0,
                         "A missing sequence should map to symbol zero.")
        self.assertEqual(self.symbols.hash_to_index(12345), (None, False),
                         "A missing hash was found.")

    def test_unknown_symbol(self):
        with self.assertRaises(UnknownSymbol):
            self.symbols[5]


class TestMomentMatrix(unittest.TestCase):
    def test_generic_level_one(self):
        ms = MatrixSystem(Context(2))
        _, mm = ms.create_moment_matrix(1)
        self.assertEqual(as_strings(mm), [["1", "2", "3"],
                                          ["2", "4", "5"],
                                          ["3", "5*", "6"]],
                         f"The symbol matrix is {as_strings(mm)}.")
        self.assertTrue(mm.is_hermitian,
                        "The moment matrix should be Hermitian.")
        self.assertEqual(mm.properties.basis_type, "Hermitian",
                         "The matrix has complex symbols, so it should be " +
                         "flagged as Hermitian.")
        self.assertEqual(ms.symbols.real_symbols, [1, 2, 3, 4, 5, 6],
                         "Every symbol should have a real part.")
        self.assertEqual(ms.symbols.imaginary_symbols, [5],
                         "Only X1X2 should have an imaginary part.")

    def test_generic_level_two(self):
        ms = MatrixSystem(Context(2))
        _, mm = ms.create_moment_matrix(2)
        self.assertEqual(mm.dimension, 7,
                         f"The moment matrix has dimension {mm.dimension}.")
        # Zero, the identity, and every string of length 1 to 4 up to
        # reversal: 2 + 3 + 6 + 10
        self.assertEqual(len(ms.symbols), 23,
                         f"There are {len(ms.symbols)} symbols.")
        length_four = [us for us in ms.symbols if len(us.sequence) == 4]
        self.assertEqual(len(length_four), 10,
                         f"There are {len(length_four)} words of length 4.")

    def test_single_operator(self):
        ms = MatrixSystem(Context(1))
        _, mm1 = ms.create_moment_matrix(1)
        self.assertEqual(as_strings(mm1), [["1", "2"], ["2", "3"]],
                         "The level 1 matrix of one operator is wrong.")
        _, mm2 = ms.create_moment_matrix(2)
        self.assertEqual(as_strings(mm2), [["1", "2", "3"],
                                           ["2", "3", "4"],
                                           ["3", "4", "5"]],
                         "The level 2 matrix of one operator is wrong.")

    def test_locality(self):
        ms = MatrixSystem(LocalityContext(Party.make_list(2, 1, 2)))
        _, mm = ms.create_moment_matrix(1)
        self.assertEqual(mm.symbol_id_matrix().tolist(), [[1, 2, 3],
                                                          [2, 2, 4],
                                                          [3, 4, 3]],
                         "The CHSH-like moment matrix is wrong.")
        self.assertEqual(mm.properties.basis_type, "Symmetric",
                         "Commuting projectors give a real matrix.")

    def test_conjugate_symmetry(self):
        ms = MatrixSystem(Context(2))
        _, mm = ms.create_moment_matrix(2)
        for row in range(mm.dimension):
            for col in range(mm.dimension):
                self.assertEqual(mm.sequence_matrix[col, row],
                                 mm.sequence_matrix[row, col].conjugate(),
                                 f"Sequence [{col}, {row}] is not the " +
                                 f"conjugate of [{row}, {col}].")
                upper, lower = mm[row, col], mm[col, row]
                self.assertEqual(upper.id, lower.id,
                                 f"Entries [{row}, {col}] and [{col}, {row}]"
                                 + " should share a symbol.")
                if ms.symbols[upper.id].hermitian:
                    self.assertFalse(upper.conjugated or lower.conjugated,
                                     f"Symbol {upper.id} is Hermitian and " +
                                     "should never be conjugated.")
                else:
                    self.assertNotEqual(upper.conjugated, lower.conjugated,
                                        f"Entries [{row}, {col}] and " +
                                        f"[{col}, {row}] should be mutual " +
                                        "conjugates.")

    def test_deterministic(self):
        systems = [MatrixSystem(LocalityContext(Party.make_list(2, 2, 2)))
                   for _ in range(2)]
        matrices = [ms.create_moment_matrix(2)[1] for ms in systems]
        self.assertEqual(str(systems[0].symbols), str(systems[1].symbols),
                         "Identical systems should give identical symbols.")
        self.assertEqual(as_strings(matrices[0]), as_strings(matrices[1]),
                         "Identical systems should give identical matrices.")

    def test_sparse_basis(self):
        ms = MatrixSystem(Context(2))
        _, mm = ms.create_moment_matrix(1)
        real, imaginary = mm.sparse_basis()
        self.assertEqual((len(real), len(imaginary)), (6, 1),
                         "There should be one basis element per part.")
        re5 = real[4].toarray()
        im5 = imaginary[0].toarray()
        self.assertTrue(np.array_equal(re5, [[0, 0, 0],
                                             [0, 0, 1],
                                             [0, 1, 0]]),
                        f"The real basis of symbol 5 is {re5}.")
        self.assertTrue(np.array_equal(im5, [[0, 0, 0],
                                             [0, 0, 1],
                                             [0, -1, 0]]),
                        f"The imaginary basis of symbol 5 is {im5}.")


class TestMatrixSystem(unittest.TestCase):
    def setUp(self):
        self.ms = MatrixSystem(Context(1))
        self.X1 = self.ms.context.operators[0]

    def test_create_once(self):
        index, mm = self.ms.create_moment_matrix(1)
        index_again, mm_again = self.ms.create_moment_matrix(1)
        self.assertEqual(index, index_again,
                         "A repeated moment matrix got a new index.")
        self.assertIs(mm, mm_again,
                      "A repeated moment matrix was regenerated.")
        self.assertEqual(len(self.ms), 1,
                         f"The system has {len(self.ms)} matrices.")
        self.assertIs(self.ms.moment_matrix(1), mm,
                      "The moment matrix cannot be retrieved by level.")
        self.assertIs(self.ms[0], mm,
                      "The moment matrix cannot be retrieved by index.")

    def test_highest_moment_matrix(self):
        self.assertEqual(self.ms.highest_moment_matrix, -1,
                         "No moment matrix has been generated yet.")
        self.ms.create_moment_matrix(2)
        self.ms.create_moment_matrix(1)
        self.assertEqual(self.ms.highest_moment_matrix, 2,
                         "The highest moment matrix should be of level 2.")

    def test_missing(self):
        with self.assertRaises(MissingMatrix):
            self.ms.moment_matrix(3)
        with self.assertRaises(MissingMatrix):
            self.ms[0]
        word = OperatorSequence([self.X1], self.ms.context)
        with self.assertRaises(MissingMatrix):
            self.ms.localizing_matrix(LocalizingMatrixIndex(1, word))

    def test_localizing_matrix(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            index, lm = self.ms.create_localizing_matrix(1, [self.X1])
        self.assertEqual(as_strings(lm), [["2", "3"], ["3", "4"]],
                         f"The localizing matrix is {as_strings(lm)}.")
        word = OperatorSequence([self.X1], self.ms.context)
        self.assertIs(self.ms.localizing_matrix(LocalizingMatrixIndex(1,
                                                                      word)),
                      lm, "The localizing matrix cannot be retrieved.")
        self.assertEqual(self.ms.create_localizing_matrix(1, word)[0], index,
                         "A repeated localizing matrix got a new index.")

    def test_lock_is_released(self):
        self.ms.create_moment_matrix(1)
        with self.ms.read_lock():
            self.assertEqual(len(self.ms.symbols), 4,
                             "Symbols cannot be read under the lock.")
        with self.ms.write_lock():
            pass


if __name__ == "__main__":
    unittest.main()
