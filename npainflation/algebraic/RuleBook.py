"""
This file contains the rewriting rules of monomials used by algebraic
contexts, and the book that applies them.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import BadRule, BadSubstitution


class MonomialSubstitutionRule:
    """Rule replacing the string of operators ``lhs`` by ``rhs`` wherever it
    appears. A ``rhs`` of ``None`` means that ``lhs`` is zero.

    Parameters
    ----------
    lhs : Sequence[int]
        The ids of the operators to replace.
    rhs : Optional[Sequence[int]]
        The ids of the replacement, or ``None`` for zero.
    """
    def __init__(self, lhs: Sequence[int], rhs: Optional[Sequence[int]]):
        self.lhs = tuple(lhs)
        self.rhs = tuple(rhs) if rhs is not None else None

    @property
    def implies_zero(self) -> bool:
        return self.rhs is None

    def trivial(self) -> bool:
        return self.lhs == self.rhs

    def matches_anywhere(self, ids: Sequence[int]) -> int:
        """Position of the first appearance of ``lhs`` in ``ids``, or -1."""
        n = len(self.lhs)
        for pos in range(len(ids) - n + 1):
            if tuple(ids[pos:pos + n]) == self.lhs:
                return pos
        return -1

    def apply_match(self, ids: Sequence[int], pos: int) -> Tuple[int, ...]:
        """Replace the appearance of ``lhs`` starting at ``pos``."""
        return (tuple(ids[:pos]) + self.rhs
                + tuple(ids[pos + len(self.lhs):]))

    def conjugate(self) -> "MonomialSubstitutionRule":
        """The rule acting on the conjugate strings. It may need to be
        reoriented before use."""
        return MonomialSubstitutionRule(
            tuple(reversed(self.lhs)),
            tuple(reversed(self.rhs)) if self.rhs is not None else None)

    def __eq__(self, other):
        if not isinstance(other, MonomialSubstitutionRule):
            return NotImplemented
        return (self.lhs, self.rhs) == (other.lhs, other.rhs)

    def __hash__(self):
        return hash((self.lhs, self.rhs))

    def __str__(self):
        lhs = "".join(f"X{i + 1}" for i in self.lhs) or "I"
        if self.rhs is None:
            rhs = "0"
        else:
            rhs = "".join(f"X{i + 1}" for i in self.rhs) or "I"
        return f"{lhs} -> {rhs}"

    def __repr__(self):
        return f"MonomialSubstitutionRule({self})"


class RuleBook:
    """Collection of substitution rules, each of them reducing the shortlex
    order of the strings it acts on.

    Parameters
    ----------
    hasher : Callable[[Sequence[int]], int]
        Shortlex hash of strings of operator ids.
    rules : Iterable[MonomialSubstitutionRule], optional
        The initial rules.
    hermitian : bool, optional
        Whether the operators are self-adjoint, in which case the conjugate
        of every rule is also a rule. By default ``True``.
    """
    def __init__(self,
                 hasher: Callable[[Sequence[int]], int],
                 rules: Iterable[MonomialSubstitutionRule] = (),
                 hermitian: bool = True):
        self.hasher = hasher
        self.hermitian = hermitian
        self.monomial_rules = {}
        self.add_rules(rules)

    def hash_of(self, ids: Optional[Sequence[int]]) -> int:
        return 0 if ids is None else self.hasher(ids)

    def add_rule(self, rule: MonomialSubstitutionRule) -> bool:
        """Add a rule, unless trivial or already present. Returns whether the
        rule was added."""
        if rule.trivial():
            return False
        lhs_hash = self.hash_of(rule.lhs)
        if lhs_hash <= self.hash_of(rule.rhs):
            raise BadRule(f"Rule \"{rule}\" must replace a string with "
                          + "one earlier in shortlex order.")
        if lhs_hash in self.monomial_rules:
            if self.monomial_rules[lhs_hash] != rule:
                raise BadRule(f"Rule \"{rule}\" conflicts with rule "
                              + f"\"{self.monomial_rules[lhs_hash]}\".")
            return False
        self.monomial_rules[lhs_hash] = rule
        if self.hermitian:
            self.add_rule(self._oriented(rule.conjugate()))
        return True

    def add_rules(self, rules: Iterable[MonomialSubstitutionRule]) -> int:
        return sum(self.add_rule(rule) for rule in rules)

    def _oriented(self, rule: MonomialSubstitutionRule
                  ) -> MonomialSubstitutionRule:
        if rule.rhs is None or self.hash_of(rule.lhs) > self.hash_of(rule.rhs):
            return rule
        return MonomialSubstitutionRule(rule.rhs, rule.lhs)

    @staticmethod
    def commutator_rules(operator_count: int
                         ) -> List[MonomialSubstitutionRule]:
        """Rules ``Xj Xi -> Xi Xj`` for all ``j > i``."""
        return [MonomialSubstitutionRule((j, i), (i, j))
                for i in range(operator_count)
                for j in range(i + 1, operator_count)]

    def rules(self) -> List[MonomialSubstitutionRule]:
        """The rules, in increasing order of the hash of their left side."""
        return [self.monomial_rules[h] for h in sorted(self.monomial_rules)]

    def reduce(self, ids: Sequence[int]) -> Tuple[Tuple[int, ...], bool]:
        """Apply the first matching rule, until none matches.

        Parameters
        ----------
        ids : Sequence[int]
            The string of operator ids.

        Returns
        -------
        Tuple[Tuple[int, ...], bool]
            The reduced string, and whether the string is zero.
        """
        current = tuple(ids)
        current_hash = self.hash_of(current)
        ordered_rules = self.rules()
        matched = True
        while matched:
            matched = False
            for rule in ordered_rules:
                pos = rule.matches_anywhere(current)
                if pos < 0:
                    continue
                if rule.implies_zero:
                    return (), True
                replacement = rule.apply_match(current, pos)
                replacement_hash = self.hash_of(replacement)
                if replacement_hash >= current_hash:
                    raise BadSubstitution(f"Applying rule \"{rule}\" did not "
                                          + "reduce the string.")
                current, current_hash = replacement, replacement_hash
                matched = True
                break
        return current, False

    def __len__(self):
        return len(self.monomial_rules)

    def __iter__(self):
        return iter(self.rules())

    def __str__(self):
        n = len(self)
        return (f"Rule book with {n} rule" + ("s" if n != 1 else "")
                + (":\n" + "\n".join(f"\t{rule}" for rule in self.rules())
                   if n else "."))
