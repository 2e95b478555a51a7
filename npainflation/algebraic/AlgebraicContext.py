"""
This file contains the context of a scenario defined by a number of operators
and a set of rules rewriting monomials of them.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from itertools import combinations_with_replacement, product
from typing import Iterable, List, Tuple

from ..Context import Context
from ..operators import Operator
from .RuleBook import MonomialSubstitutionRule, RuleBook


class AlgebraicContext(Context):
    """Context of ``operator_count`` operators, subject to substitution rules.

    Sequences are reduced by applying the rules until none matches. The
    reductions of all strings up to a given length can be precomputed with
    ``generate_aliases``; longer strings are reduced and cached on demand.

    Parameters
    ----------
    operator_count : int
        Number of operators.
    rules : Iterable[MonomialSubstitutionRule], optional
        The substitution rules. By default, none.
    hermitian : bool, optional
        Whether the operators are self-adjoint. By default ``True``.
    commutative : bool, optional
        Whether all operators commute. By default ``False``.

    Examples
    --------
    >>> context = AlgebraicContext(2, [MonomialSubstitutionRule((1, 1), (0,))])
    >>> str(OperatorSequence([context.operators[1]] * 2, context))
    'X1'
    """
    def __init__(self,
                 operator_count: int,
                 rules: Iterable[MonomialSubstitutionRule] = (),
                 hermitian: bool = True,
                 commutative: bool = False):
        if not hermitian:
            raise NotImplementedError("Algebraic contexts with non-Hermitian "
                                      + "operators are not supported.")
        self.hermitian = hermitian
        self.commutative = commutative
        self._aliases = {}
        self.alias_length = -1
        super().__init__(operator_count)
        self.rules = RuleBook(self.hash_ids, rules, hermitian)
        if self.commutative:
            self.rules.add_rules(RuleBook.commutator_rules(operator_count))
        self.generate_aliases(0)

    def reduce(self, ids) -> Tuple[Tuple[int, ...], bool]:
        """Reduce a string of operator ids with the rules of the context."""
        return self.rules.reduce(ids)

    def generate_aliases(self, max_length: int) -> bool:
        """Precompute the reductions of all strings of up to ``max_length``
        operators. Returns whether any new string was considered."""
        if max_length <= self.alias_length:
            return False
        for length in range(self.alias_length + 1, max_length + 1):
            for ids in product(range(self.size), repeat=length):
                self._alias_of(ids)
        self.alias_length = max_length
        return True

    def _alias_of(self, ids):
        hash_ = self.hash_ids(ids)
        if hash_ not in self._aliases:
            reduced, is_zero = self.reduce(ids)
            self._aliases[hash_] = None if is_zero else reduced
        return self._aliases[hash_]

    def additional_simplification(self, ops: List[Operator]
                                  ) -> Tuple[List[Operator], bool]:
        if not self.rules:
            return ops, False
        reduced = self._alias_of(tuple(op.id for op in ops))
        if reduced is None:
            return [], True
        return [self.operators[i] for i in reduced], False

    def raw_words(self, length: int):
        if self.commutative:
            return combinations_with_replacement(self.operators, length)
        return super().raw_words(length)

    def __str__(self):
        n_ops = self.size
        n_rules = len(self.rules)
        strout = (f"Algebraic context with {n_ops} operator"
                  + ("s" if n_ops != 1 else "") + f" and {n_rules} rule"
                  + ("s" if n_rules != 1 else "") + ".\n")
        strout += ("Operators: "
                   + ", ".join(self.format_operator(op)
                               for op in self.operators) + "\n")
        if n_rules:
            strout += "Rules: \n" + "\n".join(f"\t{rule}"
                                              for rule in self.rules) + "\n"
        return strout
