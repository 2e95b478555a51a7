import unittest

import networkx as nx

from npainflation import (CausalNetwork, InflationContext,
                          InflationMatrixSystem, OperatorSequence, SymbolTable)
from npainflation.errors import (BadCGIndex, BadObservable, BadOVString,
                                 BadSource, UnknownSymbol)
from npainflation.inflation import (CanonicalObservables, FactorTable,
                                    OVOIndex)
from npainflation.matrix.ImplicitSymbols import PMODefinition


class TestCausalNetwork(unittest.TestCase):
    def test_sources(self):
        network = CausalNetwork([2, 2], [[0], [0, 1]])
        self.assertEqual(network.observables[0].sources, [0, 1],
                         "A should depend on both sources.")
        self.assertEqual(network.observables[1].sources, [1],
                         "B should depend on the second source only.")
        self.assertEqual(network.total_operator_count(2), 6,
                         "A has 4 copies and B has 2 copies.")
        self.assertEqual(str(network),
                         "Causal network with 2 observables and 2 sources.\n"
                         + "Observable A [2] <- 0, 1\n"
                         + "Observable B [2] <- 1\n"
                         + "Source 0 -> A\n"
                         + "Source 1 -> A, B\n",
                         "The network is not described correctly.")

    def test_implicit_source(self):
        network = CausalNetwork([2, 3], [[0]])
        self.assertTrue(network.observables[1].singleton,
                        "B has no explicit source.")
        self.assertEqual((network.explicit_source_count,
                          network.implicit_source_count), (1, 1),
                         "B should receive one implicit source.")
        self.assertEqual(network.total_source_count(3), 4,
                         "Only explicit sources are copied.")
        self.assertEqual(network.source_variant_to_global_source(3, 1, 0), 3,
                         "The implicit source follows the explicit copies.")
        self.assertEqual(network.global_source_to_source_variant(3, 3),
                         (1, 0),
                         "The implicit source is not recovered.")
        self.assertEqual(network.global_source_to_source_variant(3, 2),
                         (0, 2),
                         "The third copy of the first source is wrong.")
        self.assertEqual(network.observables[1].count_copies(3), 1,
                         "Singleton observables are never copied.")

    def test_variant_indices(self):
        obs = CausalNetwork([2], [[0], [0]]).observables[0]
        self.assertEqual(obs.unflatten_index(2, 1), (0, 1),
                         "The first source index is the most significant.")
        self.assertEqual(obs.flatten_index(3, (2, 1)), 7,
                         "Variant (2, 1) at level 3 should be number 7.")

    def test_bad_network(self):
        with self.assertRaises(BadObservable):
            CausalNetwork([2, 0], [[0, 1]])
        with self.assertRaises(BadSource) as context:
            CausalNetwork([2], [[0, 1]])
        self.assertIn("Source 0 maps to out of bound observable 1",
                      str(context.exception),
                      "The error does not name the bad observable.")

    def test_graph(self):
        graph = CausalNetwork([2, 2], [[0], [0, 1]]).graph()
        self.assertTrue(nx.is_bipartite(graph),
                        "The network should be bipartite.")
        self.assertEqual(sorted(graph.edges),
                         [("s0", "A"), ("s1", "A"), ("s1", "B")],
                         "The edges of the network are wrong.")


class TestInflationContext(unittest.TestCase):
    context = InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 2)

    def op(self, observable, variant, outcome=0):
        return self.context.operators[
            self.context.operator_number(observable, variant, outcome)]

    def seq(self, *ovs):
        return OperatorSequence([self.op(o, v) for o, v in ovs],
                                self.context)

    def test_operators(self):
        self.assertEqual(self.context.size, 6,
                         f"There are {self.context.size} operators.")
        names = [self.context.format_operator(op)
                 for op in self.context.operators]
        self.assertEqual(names, ["A00", "A01", "A10", "A11", "B0", "B1"],
                         f"The operators are named {names}.")
        self.assertEqual(self.context.observable_variant_count, 6,
                         "Every copy of an observable has one operator.")
        self.assertEqual(self.context.index_to_obs_variant(5), (1, 1),
                         "The last copy should be B1.")

    def test_commuting_projectors(self):
        seq = OperatorSequence([self.op(1, 0), self.op(0, 2), self.op(1, 0)],
                               self.context)
        self.assertEqual(str(seq), "A10;B0",
                         f"The sequence was simplified to {seq}.")
        self.assertFalse(self.context.can_be_nonhermitian(),
                         "Commuting projectors are Hermitian.")

    def test_canonical_variants(self):
        for variant in range(4):
            self.assertEqual(self.context.canonical_variants([(0, variant)]),
                             [(0, 0)],
                             f"A with variant {variant} is not relabelled.")
        for variant in range(2):
            self.assertEqual(self.context.canonical_variants([(1, variant)]),
                             [(1, 0)],
                             f"B with variant {variant} is not relabelled.")
        for ovs in [[(0, 0), (1, 0)], [(0, 1), (1, 1)], [(1, 1), (0, 1)]]:
            self.assertEqual(self.context.canonical_variants(ovs),
                             [(0, 0), (1, 0)],
                             f"{ovs} should be relabelled to A00 B0.")

    def test_canonical_moment(self):
        cases = [([(0, 2), (1, 0)], "A00;B0"),
                 ([(0, 1), (1, 1)], "A00;B0"),
                 ([(0, 0), (1, 1)], "A00;B1"),
                 ([(0, 2), (1, 1)], "A00;B1"),
                 ([(0, 3), (0, 0)], "A00;A11"),
                 ([(0, 2), (0, 3)], "A00;A01"),
                 ([(0, 1), (0, 3)], "A00;A10"),
                 ([(0, 2), (0, 0)], "A00;A10")]
        for ovs, expected in cases:
            seq = self.seq(*ovs)
            canonical = self.context.canonical_moment(seq)
            self.assertEqual(str(canonical), expected,
                             f"The canonical form of {seq} is {canonical}.")
            self.assertEqual(self.context.can_be_simplified_as_moment(seq),
                             canonical != seq,
                             f"Whether {seq} can be simplified is wrong.")

    def test_canonical_moment_is_idempotent(self):
        for length in range(1, 4):
            for word in self.context.raw_words(length):
                seq = OperatorSequence(word, self.context)
                canonical = self.context.canonical_moment(seq)
                self.assertEqual(self.context.canonical_moment(canonical),
                                 canonical,
                                 f"{canonical} should be its own canonical " +
                                 "moment.")
                self.assertEqual(OperatorSequence(canonical.operators,
                                                  self.context),
                                 canonical,
                                 f"{canonical} is not in canonical form.")

    def test_no_aliases_without_inflation(self):
        context = InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 1)
        self.assertFalse(context.can_have_aliases(),
                         "Without inflation, no sequences are aliased.")
        self.assertEqual(context.size, 2,
                         "Without inflation, each observable has one copy.")
        self.assertEqual(str(OperatorSequence(context.operators, context)),
                         "A;B", "Indices should not be shown at level 1.")

    def test_factorize(self):
        factors = self.context.factorize(self.seq((0, 0), (1, 1)))
        self.assertEqual([str(f) for f in factors], ["A00", "B1"],
                         "A00 and B1 share no source.")
        factors = self.context.factorize(self.seq((0, 0), (1, 0)))
        self.assertEqual([str(f) for f in factors], ["A00;B0"],
                         "A00 and B0 share a copy of the second source.")
        factors = self.context.factorize(self.seq((1, 0), (0, 3), (0, 0)))
        self.assertEqual([str(f) for f in factors], ["A00;B0", "A11"],
                         "Factors should be ordered by their first operator.")
        single = self.seq((0, 1))
        self.assertEqual(self.context.factorize(single), [single],
                         "A single operator cannot be factorized.")

    def test_connected_sources(self):
        mask = self.context.connected_sources(self.seq((0, 1), (1, 1)))
        self.assertEqual(mask.tolist(), [True, False, False, True],
                         "A01 B1 depends on copy 0 of the first source and " +
                         "copy 1 of the second.")
        A00 = self.context.observables[0].variants[0]
        A11 = self.context.observables[0].variants[3]
        B0 = self.context.observables[1].variants[0]
        self.assertTrue(A00.independent(A11),
                        "A00 and A11 share no source.")
        self.assertFalse(A00.independent(B0),
                         "A00 and B0 share a source.")

    def test_str(self):
        self.assertTrue(str(self.context).startswith(
            "Inflation setting with 6 operators in total.\n\nCausal network"),
            "The context is not described correctly.")
        self.assertTrue(str(self.context).endswith("Inflation level: 2"),
                        "The inflation level is not described.")


class TestOutcomeIndices(unittest.TestCase):
    context = InflationContext(CausalNetwork([3, 2], [[0], [0, 1]]), 2)

    def test_counts(self):
        self.assertEqual(self.context.observable_variant_count, 6,
                         "A and B have 4 and 2 copies.")
        self.assertEqual(self.context.size, 10,
                         "A has 2 operators per copy and B has 1.")

    def test_flatten(self):
        self.assertEqual(self.context.flatten_outcome_index([(0, 0, 2),
                                                             (1, 1, 1)]), 5,
                         "Outcomes (2, 1) of observables with 3 and 2 " +
                         "outcomes should flatten to 5.")
        self.assertEqual(self.context.unflatten_outcome_index([(0, 0), (1, 1)],
                                                              5),
                         [(0, 0, 2), (1, 1, 1)],
                         "Outcome 5 should unflatten to (2, 1).")

    def test_bad_outcomes(self):
        with self.assertRaises(BadObservable):
            self.context.flatten_outcome_index([(0, 0, 3)])
        with self.assertRaises(BadObservable):
            self.context.flatten_outcome_index([(0, 4, 0)])
        with self.assertRaises(BadObservable):
            self.context.flatten_outcome_index([(2, 0, 0)])
        with self.assertRaises(BadObservable):
            self.context.unflatten_outcome_index([(2, 0)], 0)

    def test_zero_and_identity(self):
        ops = self.context.operators
        self.assertEqual((OperatorSequence.Zero(self.context).hash,
                          OperatorSequence.Identity(self.context).hash),
                         (0, 1),
                         "Zero and identity should have hashes 0 and 1.")
        self.assertEqual(OperatorSequence([ops[0], ops[1]],
                                          self.context).hash, 0,
                         "A product of orthogonal outcomes should hash to 0.")
        self.assertEqual(OperatorSequence([], self.context).hash, 1,
                         "The empty product should hash to 1.")

    def test_orthogonal_outcomes(self):
        ops = self.context.operators
        self.assertTrue(OperatorSequence([ops[1], ops[0]], self.context).zero(),
                        "Different outcomes of one copy are orthogonal.")
        self.assertFalse(OperatorSequence([ops[0], ops[3]],
                                          self.context).zero(),
                         "Outcomes of different copies are not orthogonal.")

    def test_format(self):
        ops = self.context.operators
        self.assertEqual(str(OperatorSequence([ops[1], ops[8]],
                                              self.context)), "A1[00];B[0]",
                         "Outcomes and bracketed indices should be shown.")


class TestInflationMatrixSystem(unittest.TestCase):
    def setUp(self):
        self.ims = InflationMatrixSystem(
            InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 2))
        self.ims.create_moment_matrix(1)

    def symbol(self, *ovs):
        context = self.ims.context
        seq = OperatorSequence([context.operators[
            context.operator_number(o, v, 0)] for o, v in ovs], context)
        return self.ims.symbols.where(seq).entry.id

    def test_symbols(self):
        self.assertEqual(len(self.ims.symbols), 10,
                         "Up to relabelling there are 2 single operators " +
                         "and 6 pairs.")
        self.assertEqual([self.symbol((0, 0)), self.symbol((1, 0))], [2, 3],
                         "A00 and B0 should be symbols 2 and 3.")
        self.assertEqual(self.symbol((0, 3)), 2,
                         "A11 should be an alias of A00.")
        self.assertEqual(self.symbol((0, 0), (1, 1)), 8,
                         "A00 B1 should be symbol 8.")

    def test_moment_matrix(self):
        mm = self.ims.moment_matrix(1)
        self.assertEqual(mm.dimension, 7,
                         "The identity and 6 operators index the matrix.")
        self.assertEqual(mm.properties.basis_type, "Symmetric",
                         "Inflation moment matrices are real.")
        self.assertEqual(mm.symbol_id_matrix()[0].tolist(),
                         [1, 2, 2, 2, 2, 3, 3],
                         "The copies of each observable should be aliased.")

    def test_factors(self):
        factors = self.ims.factors
        self.assertEqual(len(factors), len(self.ims.symbols),
                         "Every symbol should be factorized.")
        self.assertEqual(factors[8].canonical_symbols, [2, 3],
                         "A00 B1 should factor into A00 and B0.")
        self.assertEqual(factors[9].canonical_symbols, [3, 3],
                         "B0 B1 should factor into B0 twice.")
        self.assertTrue(factors[7].fundamental(),
                        "A00 B0 does not factorize.")
        self.assertEqual(factors[2].appearances, 3,
                         "A00 appears in A00 A11 twice and in A00 B1 once.")

    def test_multiply(self):
        factors = self.ims.factors
        self.assertEqual(factors.try_multiply(2, 3), 8,
                         "A00 times B0 should be A00 B1.")
        self.assertEqual(factors.try_multiply(3, 3), 9,
                         "B0 times B0 should be B0 B1.")
        self.assertEqual(factors.try_multiply(1, 7), 7,
                         "The identity should not change a symbol.")
        self.assertEqual(factors.try_multiply(0, 7), 0,
                         "Zero times anything is zero.")
        with self.assertRaises(UnknownSymbol):
            factors.try_multiply(6, 3)

    def test_combine_symbolic_factors(self):
        factors = self.ims.factors
        self.assertEqual(factors.combine_symbolic_factors([3, 1], [2]),
                         [2, 3], "Identities should be dropped.")
        self.assertEqual(factors.combine_symbolic_factors([3], [0, 2]), [0],
                         "Any zero should give zero.")

    def test_moment_matrix_is_symmetric(self):
        mm = self.ims.moment_matrix(1)
        for row in range(mm.dimension):
            for col in range(mm.dimension):
                self.assertEqual(mm[row, col], mm[col, row],
                                 f"Entries [{row}, {col}] and [{col}, {row}] "
                                 + "of a real moment matrix differ.")

    def test_deterministic(self):
        other = InflationMatrixSystem(
            InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 2))
        other.create_moment_matrix(1)
        self.assertEqual(str(other.symbols), str(self.ims.symbols),
                         "Identical systems should give identical symbols.")
        self.assertEqual(str(other.factors), str(self.ims.factors),
                         "Identical systems should give identical factors.")


class TestFactorTable(unittest.TestCase):
    def test_new_factors_get_entries(self):
        context = InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 2)
        symbols = SymbolTable(context)
        A00 = context.operators[context.operator_number(0, 0, 0)]
        B1 = context.operators[context.operator_number(1, 1, 0)]
        symbols.merge_in_sequence(OperatorSequence([A00, B1], context))
        factors = FactorTable(context, symbols)
        self.assertEqual(len(symbols), 5,
                         "A00 and B0 should be added as factors of A00 B1.")
        self.assertEqual(len(factors), len(symbols),
                         "Every factor should have an entry.")
        self.assertEqual(factors[2].canonical_symbols, [3, 4],
                         "A00 B1 should factor into the new symbols.")
        self.assertEqual([factors[3].appearances, factors[4].appearances],
                         [1, 1],
                         "Each new factor appears once, in A00 B1.")
        self.assertTrue(factors[3].fundamental() and factors[4].fundamental(),
                        "Single operators do not factorize.")
        self.assertEqual(factors.try_multiply(3, 4), 2,
                         "A00 times B0 should be A00 B1.")


class TestInflationCollinsGisin(unittest.TestCase):
    def setUp(self):
        self.ims = InflationMatrixSystem(
            InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 2))
        self.ims.create_moment_matrix(1)
        self.cg = self.ims.collins_gisin

    def test_every_symbol_indexed(self):
        self.assertEqual(self.cg.level, 2,
                         "A level 1 moment matrix holds pairs of copies.")
        self.assertEqual(self.cg.data.tolist(), list(range(1, 10)),
                         "Every canonical string should give one symbol.")
        self.assertEqual(len(self.cg.indices),
                         len(self.ims.canonical_observables),
                         "There should be one block per canonical string.")

    def test_copies_of_one_observable(self):
        self.assertEqual(self.cg.get([(1, 0), (1, 1)]).tolist(), [9],
                         "B0 B1 should be symbol 9.")
        self.assertEqual(self.cg.get([(0, 0), (0, 3)]).tolist(), [6],
                         "A00 A11 should be symbol 6.")
        self.assertEqual(self.cg.get([2, 3]).tolist(), [4],
                         "A10 A11 should be an alias of A00 A01.")

    def test_non_canonical_strings(self):
        self.assertEqual(self.cg.get([(0, 1), (1, 0)]).tolist(), [8],
                         "A01 B0 should be an alias of A00 B1.")
        self.assertEqual(self.cg.get([(1, 1), (0, 2)]).tolist(), [8],
                         "B1 A10 should be an alias of A00 B1.")
        self.assertEqual(self.cg.get([(0, 3)]).tolist(), [2],
                         "A11 should be an alias of A00.")
        self.assertEqual(self.cg.get([]).tolist(), [1],
                         "The normalization should be symbol 1.")

    def test_real_basis(self):
        self.assertEqual(self.cg.real_basis([(1, 1), (1, 0)]).tolist(), [8],
                         "B1 B0 is symbol 9, the 9th real symbol.")

    def test_bad_lookups(self):
        with self.assertRaises(BadCGIndex):
            self.cg.get([(0, 0), (0, 0)])
        with self.assertRaises(BadCGIndex):
            self.cg.get([6])
        with self.assertRaises(BadCGIndex):
            self.cg.get([(0, 4)])
        with self.assertRaises(BadCGIndex):
            self.cg.get([0, 1, 4])

    def test_outcomes_follow_given_order(self):
        ims = InflationMatrixSystem(
            InflationContext(CausalNetwork([3, 2], [[0], [0, 1]]), 2))
        ims.create_moment_matrix(1)
        context = ims.context
        for ovs in [[(0, 0), (0, 3)], [(0, 3), (0, 0)], [(1, 1), (0, 2)]]:
            expected = []
            for first in range(context.observables[ovs[0][0]].operators):
                for second in range(context.observables[ovs[1][0]].operators):
                    seq = OperatorSequence(
                        [context.operators[context.operator_number(*ovs[0],
                                                                   first)],
                         context.operators[context.operator_number(*ovs[1],
                                                                   second)]],
                        context)
                    expected.append(ims.symbols.where(seq).entry.id)
            self.assertEqual(ims.collins_gisin.get(ovs).tolist(), expected,
                             f"The symbols of {ovs} are not in row-major " +
                             "order of the given copies.")
            if ovs[0][0] == 0:
                self.assertEqual(
                    ims.collins_gisin.get(ovs, [1, -1]).tolist(),
                    expected[2:],
                    f"Fixing the first outcome of {ovs} to 1 should keep " +
                    "the second half.")


class TestInflationImplicitSymbols(unittest.TestCase):
    def setUp(self):
        self.ims = InflationMatrixSystem(
            InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 2))
        self.ims.create_moment_matrix(1)
        self.implicit = self.ims.implicit_symbols

    def test_single_copy(self):
        expected = [PMODefinition(3, [(3, 1.0)]),
                    PMODefinition(-1, [(1, 1.0), (3, -1.0)])]
        self.assertEqual(self.implicit.get([(1, 0)]), expected,
                         "The outcomes of B0 should be p(b0), 1 - p(b0).")
        self.assertEqual(self.implicit.get([(1, 1)]), expected,
                         "B1 should be expanded as its alias B0.")

    def test_copies_of_one_observable(self):
        definitions = self.implicit.get([(1, 0), (1, 1)])
        self.assertEqual(len(definitions), 4,
                         "Two binary copies have 4 joint outcomes.")
        self.assertEqual(definitions[0], PMODefinition(9, [(9, 1.0)]),
                         "The first outcome of B0 B1 is explicit.")
        self.assertEqual(definitions[1].expression, [(9, -1.0), (3, 1.0)],
                         "p(b0, not b1) should be p(b0) - p(b0 b1).")
        self.assertEqual(definitions[3].expression,
                         [(9, 1.0), (3, -1.0), (3, -1.0), (1, 1.0)],
                         "p(not b0, not b1) should be 1 - 2 p(b) + p(b0 b1).")
        self.assertEqual(self.implicit.get_outcome([OVOIndex(1, 0, 1),
                                                    OVOIndex(1, 1, 1)]),
                         definitions[3],
                         "Lookup of one outcome does not match the table.")

    def test_every_canonical_string(self):
        self.assertEqual(len(self.implicit.indices),
                         len(self.ims.canonical_observables),
                         "Every canonical string should have definitions.")


class TestCanonicalObservables(unittest.TestCase):
    def setUp(self):
        self.context = InflationContext(CausalNetwork([2, 2],
                                                      [[0], [0, 1]]), 2)
        self.table = CanonicalObservables(self.context)
        self.table.generate_up_to_level(2)

    def test_levels(self):
        self.assertEqual(self.table.distinct_observables_per_level, [1, 2, 6],
                         "There should be 2 single and 6 pairs of " +
                         "observables up to relabelling.")
        self.assertEqual(len(self.table), 9,
                         f"There are {len(self.table)} entries.")
        self.assertTrue(self.table[0].empty(),
                        "The first entry should be the normalization.")

    def test_hash(self):
        self.assertEqual(self.table.hash([(0, 0)]), 1,
                         "A00 is the first observable variant.")
        self.assertEqual(self.table.hash([(1, 0)]), 5,
                         "B0 is the fifth observable variant.")
        self.assertEqual(self.table.hash([0, 4]), 1 * 6 + 5,
                         "Hashes are mixed radix in the number of variants.")

    def test_canonical(self):
        entry = self.table.canonical([(0, 3)])
        self.assertEqual(entry.indices, [(0, 0)],
                         "A11 should map to A00.")
        entry = self.table.canonical([(1, 0), (0, 1)])
        self.assertEqual(entry.indices, [(0, 0), (1, 1)],
                         "A01 B0 should map to A00 B1.")
        self.assertEqual(entry.flattened_indices, [0, 5],
                         "The flat indices of A00 B1 are wrong.")
        self.assertEqual((entry.operators, entry.outcomes), (1, 4),
                         "Two binary observables have 4 joint outcomes.")
        self.assertIs(self.table.canonical(entry.hash), entry,
                      "Lookup by hash does not match lookup by string.")

    def test_bad_strings(self):
        with self.assertRaises(BadOVString):
            self.table.canonical([(0, 0), (0, 1), (0, 2)])
        with self.assertRaises(BadOVString):
            self.table.canonical(10 ** 6)

    def test_no_regeneration(self):
        entries = len(self.table)
        self.table.generate_up_to_level(1)
        self.assertEqual(len(self.table), entries,
                         "Generating a lower level should do nothing.")


if __name__ == "__main__":
    unittest.main()
