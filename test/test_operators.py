import unittest

from npainflation import (Context, LocalityContext, OperatorFlags,
                          OperatorSequence, Party)


class TestOperatorSequence(unittest.TestCase):
    context = Context(2)
    X1, X2 = context.operators

    def test_zero_and_identity(self):
        zero = OperatorSequence.Zero(self.context)
        one = OperatorSequence.Identity(self.context)
        self.assertTrue(zero.zero(), "The zero sequence is not flagged.")
        self.assertFalse(one.zero(), "The identity is flagged as zero.")
        self.assertEqual(len(zero), len(one),
                         "Zero and identity should both be empty.")
        self.assertEqual((zero.hash, one.hash), (0, 1),
                         "Zero and identity should have hashes 0 and 1, " +
                         f"got {zero.hash} and {one.hash}.")
        self.assertEqual((str(zero), str(one)), ("0", "1"),
                         "Zero and identity are not printed correctly.")
        self.assertNotEqual(zero, one, "Zero and identity compare equal.")

    def test_hash(self):
        hashes = [OperatorSequence(word, self.context).hash
                  for word in [[self.X1], [self.X2],
                               [self.X1, self.X1], [self.X1, self.X2],
                               [self.X2, self.X1], [self.X2, self.X2]]]
        self.assertEqual(hashes, [2, 3, 5, 6, 8, 9],
                         f"The hashes of the sequences are {hashes}.")
        self.assertEqual(hashes, sorted(hashes),
                         "The hash does not follow the shortlex order.")

    def test_generic_operators_do_not_simplify(self):
        seq = OperatorSequence([self.X2, self.X1, self.X1], self.context)
        self.assertEqual(str(seq), "X2;X1;X1",
                         f"Generic operators were simplified to {seq}.")

    def test_conjugate(self):
        seq = OperatorSequence([self.X1, self.X2], self.context)
        conj = seq.conjugate()
        self.assertEqual(str(conj), "X2;X1",
                         f"The conjugate of {seq} is given as {conj}.")
        self.assertEqual(conj.conjugate(), seq,
                         "Conjugating twice does not give back the sequence.")

    def test_multiplication(self):
        lhs = OperatorSequence([self.X1], self.context)
        rhs = OperatorSequence([self.X2], self.context)
        self.assertEqual(str(lhs * rhs), "X1;X2",
                         "Products of sequences are not concatenations.")
        zero = OperatorSequence.Zero(self.context)
        self.assertTrue((lhs * zero).zero(),
                        "Multiplying by zero does not give zero.")

    def test_idempotent(self):
        context = Context([Party(0, "X", 2, OperatorFlags.IDEMPOTENT)])
        X1, X2 = context.operators
        seq = OperatorSequence([X1, X1, X2, X2, X1], context)
        self.assertEqual(str(seq), "X1;X2;X1",
                         f"Repeated projectors are not removed: got {seq}.")


class TestLocalityOperators(unittest.TestCase):
    context = LocalityContext(Party.make_list(2, 2, 2))
    Aa, Ab, Ba, Bb = context.operators

    def test_parties_commute(self):
        seq = OperatorSequence([self.Bb, self.Aa, self.Ba, self.Ab],
                               self.context)
        self.assertEqual(str(seq), "A.a0;A.b0;B.b0;B.a0",
                         "Operators of different parties are not sorted " +
                         f"stably by party: got {seq}.")

    def test_same_party_does_not_commute(self):
        seq = OperatorSequence([self.Ab, self.Aa], self.context)
        self.assertEqual(str(seq), "A.b0;A.a0",
                         "Measurements of the same party should not commute.")

    def test_orthogonal_outcomes(self):
        context = LocalityContext(Party.make_list(1, 1, 3))
        a0, a1 = context.operators
        self.assertTrue(OperatorSequence([a0, a1], context).zero(),
                        "Different outcomes of a projective measurement " +
                        "should be orthogonal.")
        self.assertEqual(str(OperatorSequence([a1, a1], context)), "A.a1",
                         "Projective outcomes should be idempotent.")

    def test_zero_and_identity(self):
        self.assertEqual((OperatorSequence.Zero(self.context).hash,
                          OperatorSequence.Identity(self.context).hash),
                         (0, 1),
                         "Zero and identity should have hashes 0 and 1.")
        context = LocalityContext(Party.make_list(1, 1, 3))
        a0, a1 = context.operators
        self.assertEqual(OperatorSequence([a0, a1], context).hash, 0,
                         "A product of orthogonal outcomes should hash to 0.")

    def test_canonical_form_is_idempotent(self):
        for length in range(1, 4):
            for word in self.context.raw_words(length):
                seq = OperatorSequence(word, self.context)
                self.assertEqual(OperatorSequence(seq.operators,
                                                  self.context),
                                 seq,
                                 f"Simplifying {seq} again changes it.")


class TestOperatorSequenceGenerator(unittest.TestCase):
    def test_generic_level_two(self):
        context = Context(2)
        osg = context.operator_sequence_generator(2)
        strings = [str(seq) for seq in osg]
        self.assertEqual(strings,
                         ["1", "X1", "X2", "X1;X1", "X1;X2", "X2;X1",
                          "X2;X2"],
                         f"The generated sequences are {strings}.")
        self.assertIs(osg, context.operator_sequence_generator(2),
                      "Generators of sequences are not cached.")

    def test_conjugated(self):
        context = Context(2)
        conj = context.operator_sequence_generator(2, True)
        self.assertEqual(str(conj[5]), "X1;X2",
                         "The conjugated generator is not in the order of " +
                         "the original generator.")

    def test_deterministic(self):
        hashes = [[seq.hash for seq in LocalityContext(
            Party.make_list(2, 2, 2)).operator_sequence_generator(2)]
                  for _ in range(2)]
        self.assertEqual(hashes[0], hashes[1],
                         "Identical contexts should generate identical " +
                         "sequences.")

    def test_orthogonal_outcomes_skipped(self):
        context = LocalityContext(Party.make_list(1, 1, 3))
        osg = context.operator_sequence_generator(2)
        self.assertEqual([str(seq) for seq in osg], ["1", "A.a0", "A.a1"],
                         "Zero or repeated sequences were generated.")


if __name__ == "__main__":
    unittest.main()
