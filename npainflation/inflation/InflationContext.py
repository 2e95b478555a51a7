"""
This file contains the context of an inflated causal network: every
observable is copied once for every combination of copies of the sources it
depends on, and all operators commute.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from collections import namedtuple
from itertools import combinations_with_replacement
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from ..Context import Context
from ..Party import Party
from ..errors import BadCGIndex, BadObservable
from ..fast_npa import (nb_first_orthogonal_pair, nb_is_sorted,
                        nb_remove_projector_squares,
                        nb_sequence_to_components)
from ..operators import Operator, OperatorFlags, OperatorSequence
from ..utils import AlphabeticNamer
from .CausalNetwork import CausalNetwork, Observable

ICOperatorInfo = namedtuple("ICOperatorInfo",
                            ["global_id", "observable", "variant", "outcome",
                             "projective"])
OVIndex = namedtuple("OVIndex", ["observable", "variant"])
OVOIndex = namedtuple("OVOIndex", ["observable", "variant", "outcome"])


class Variant:
    """One copy of an observable in the inflated network.

    Parameters
    ----------
    flat_index : int
        Index of the copy among the copies of the observable.
    indices : Tuple[int, ...]
        The copy index of each source of the observable.
    operator_offset : int
        Global id of the operator of the first outcome of the copy.
    connected_sources : numpy.ndarray
        Boolean mask over the inflated sources the copy depends on.
    singleton : bool, optional
        Whether the observable has only an implicit source. By default
        ``False``.
    """
    def __init__(self,
                 flat_index: int,
                 indices: Tuple[int, ...],
                 operator_offset: int,
                 connected_sources: np.ndarray,
                 singleton: bool = False):
        self.flat_index = flat_index
        self.indices = indices
        self.source_variants = {}
        self.operator_offset = operator_offset
        self.connected_sources = connected_sources
        self.singleton = singleton

    def independent(self, other: "Variant") -> bool:
        """Whether the two copies share no source. A copy of a singleton
        observable is only dependent on itself."""
        if self.singleton:
            return self.operator_offset != other.operator_offset
        return not np.logical_and(self.connected_sources,
                                  other.connected_sources).any()

    def __repr__(self):
        return f"Variant({self.flat_index}, indices={self.indices})"


class ICObservable:
    """An observable of the base network, with all its copies in the
    inflated network.

    Parameters
    ----------
    base : Observable
        The observable of the base network.
    network : CausalNetwork
        The base network.
    inflation_level : int
        Number of copies of every explicit source.
    operator_offset : int
        Global id of the first operator of the first copy.
    variant_offset : int
        Global index of the first copy among all copies of all observables.
    """
    def __init__(self,
                 base: Observable,
                 network: CausalNetwork,
                 inflation_level: int,
                 operator_offset: int,
                 variant_offset: int):
        self.base = base
        self.id = base.id
        self.outcomes = base.outcomes
        self.operators = base.operators
        self.sources = base.sources
        self.singleton = base.singleton
        self.projective = base.projective
        self.inflation_level = inflation_level
        self.operator_offset = operator_offset
        self.variant_offset = variant_offset
        self.variant_count = base.count_copies(inflation_level)

        total_sources = network.total_source_count(inflation_level)
        self.variants = []
        for flat_index in range(self.variant_count):
            indices = base.unflatten_index(inflation_level, flat_index)
            mask = np.zeros(total_sources, dtype=bool)
            for source_id, source_variant in zip(self.sources, indices):
                mask[network.source_variant_to_global_source(
                    inflation_level, source_id, source_variant)] = True
            variant = Variant(flat_index, indices,
                              operator_offset + flat_index * self.operators,
                              mask, self.singleton)
            if not self.singleton:
                variant.source_variants = dict(zip(self.sources, indices))
            self.variants.append(variant)

    def variant(self, indices: Sequence[int]) -> Variant:
        """The copy with the given source copy indices."""
        return self.variants[self.base.flatten_index(self.inflation_level,
                                                     indices)]

    def __repr__(self):
        return (f"ICObservable({self.id}, outcomes={self.outcomes}, "
                + f"{self.variant_count} variants)")


class InflationContext(Context):
    """Context of the inflation of a causal network.

    Parameters
    ----------
    network : CausalNetwork
        The base network.
    inflation_level : int
        Number of copies of every explicit source.

    Examples
    --------
    The bilocal-like network with observables ``A`` and ``B``, where ``A``
    depends on both sources and ``B`` on the second one only:

    >>> context = InflationContext(CausalNetwork([2, 2], [[0], [0, 1]]), 2)
    >>> context.size
    6
    """
    def __init__(self, network: CausalNetwork, inflation_level: int):
        assert inflation_level >= 1, "The inflation level must be positive."
        self.network = network
        self.inflation = inflation_level
        self.total_inflated_sources = network.total_source_count(
            inflation_level)
        parties = [Party(obs.id, AlphabeticNamer()(obs.id),
                         obs.operators * obs.count_copies(inflation_level),
                         OperatorFlags.IDEMPOTENT)
                   for obs in network.observables]
        super().__init__(parties)

        self.observables = []
        self.global_variant_indices = []
        self.operator_info = []
        for obs in network.observables:
            ic_obs = ICObservable(obs, network, inflation_level,
                                  self.parties[obs.id].global_offset,
                                  len(self.global_variant_indices))
            self.observables.append(ic_obs)
            for variant in ic_obs.variants:
                self.global_variant_indices.append(
                    OVIndex(obs.id, variant.flat_index))
                for outcome in range(obs.operators):
                    self.operator_info.append(
                        ICOperatorInfo(len(self.operator_info), obs.id,
                                       variant.flat_index, outcome,
                                       obs.projective))
        assert len(self.operator_info) == self.size, \
            "Every operator must belong to a copy of an observable."

        # Aligned arrays for the JIT-compiled kernels
        self._op_observable = np.array([i.observable
                                        for i in self.operator_info],
                                       dtype=np.int64)
        self._op_variant = np.array([i.variant for i in self.operator_info],
                                    dtype=np.int64)
        self._op_projective = np.array([i.projective
                                        for i in self.operator_info],
                                       dtype=bool)
        self._op_sources = np.zeros((self.size, self.total_inflated_sources),
                                    dtype=bool)
        for info in self.operator_info:
            variant = self.observables[info.observable].variants[info.variant]
            self._op_sources[info.global_id] = variant.connected_sources

    ###########################################################################
    # SIMPLIFICATION                                                          #
    ###########################################################################
    def additional_simplification(self, ops: List[Operator]
                                  ) -> Tuple[List[Operator], bool]:
        """All operators commute: sort them, detect products of different
        outcomes of the same copy of an observable, and remove repeated
        projectors."""
        if len(ops) < 2:
            return ops, False
        ids = np.array(sorted(self.global_id(op) for op in ops),
                       dtype=np.int64)
        if nb_first_orthogonal_pair(ids, self._op_observable[ids],
                                    self._op_variant[ids]) >= 0:
            return [], True
        ids = nb_remove_projector_squares(ids, self._op_projective[ids])
        return [self.operators[i] for i in ids], False

    def can_be_nonhermitian(self) -> bool:
        return False

    def can_have_aliases(self) -> bool:
        return self.inflation > 1

    def _source_permutation(self, ovs: Iterable[Tuple[int, int]]
                            ) -> Tuple[Dict[int, int], bool]:
        """Relabelling of the inflated sources such that, reading the copies
        of observables in order (and the sources of each of them from last to
        first), every copy of a source is the lowest one not yet used."""
        next_free = [0] * self.network.explicit_source_count
        permutation = {}
        non_trivial = False
        for observable, variant in ovs:
            obs = self.observables[observable]
            if obs.singleton:
                continue
            indices = obs.variants[variant].indices
            for src_id, src_variant in zip(reversed(obs.sources),
                                           reversed(indices)):
                src_global = self.inflation * src_id + src_variant
                if src_global in permutation:
                    continue
                target = self.inflation * src_id + next_free[src_id]
                permutation[src_global] = target
                next_free[src_id] += 1
                non_trivial |= (src_global != target)
        return permutation, non_trivial

    def _permuted_variant(self, observable: int, variant: int,
                          permutation: Dict[int, int]) -> int:
        obs = self.observables[observable]
        if obs.singleton:
            return variant
        new_indices = self.network.permute_variant(
            self.inflation, obs.sources, permutation,
            obs.variants[variant].indices)
        return obs.variant(new_indices).flat_index

    def can_be_simplified_as_moment(self, seq: OperatorSequence) -> bool:
        if seq.zero() or not len(seq) or not self.can_have_aliases():
            return False
        ovs = [(self.operator_info[gid].observable,
                self.operator_info[gid].variant) for gid in seq.raw_ids]
        return self._source_permutation(ovs)[1]

    def simplify_as_moment(self, seq: OperatorSequence) -> OperatorSequence:
        """The canonical representative of the moment of a sequence, under
        relabelling of the copies of each source.

        Parameters
        ----------
        seq : OperatorSequence
            The sequence to simplify.

        Returns
        -------
        OperatorSequence
            The representative sequence.

        Examples
        --------
        With ``A`` depending on two sources and the inflation level being 2:

        >>> str(context.simplify_as_moment(a10_b0))
        'A00;B0'
        """
        if seq.zero() or not len(seq) or not self.can_have_aliases():
            return seq
        infos = [self.operator_info[gid] for gid in seq.raw_ids]
        permutation, non_trivial = self._source_permutation(
            (info.observable, info.variant) for info in infos)
        if not non_trivial:
            return seq

        permuted = []
        for info in infos:
            new_variant = self._permuted_variant(info.observable,
                                                 info.variant, permutation)
            permuted.append(self.operator_number(info.observable, new_variant,
                                                 info.outcome))
        result = OperatorSequence([self.operators[i] for i in permuted], self)
        if not nb_is_sorted(np.array(permuted, dtype=np.int64)):
            return self.simplify_as_moment(result)
        return result

    canonical_moment = simplify_as_moment

    def canonical_variants(self, ovs: Iterable[Tuple[int, int]]
                           ) -> List[OVIndex]:
        """The canonical representative of a string of copies of observables,
        sorted.

        Parameters
        ----------
        ovs : Iterable[Tuple[int, int]]
            The (observable, variant) pairs.

        Returns
        -------
        List[OVIndex]
            The relabelled pairs, in increasing order.
        """
        current = sorted(OVIndex(*ov) for ov in ovs)
        if not self.can_have_aliases():
            return current
        while True:
            permutation, non_trivial = self._source_permutation(current)
            if not non_trivial:
                return current
            permuted = [OVIndex(o, self._permuted_variant(o, v, permutation))
                        for o, v in current]
            current = sorted(permuted)
            if permuted == current:
                return current

    ###########################################################################
    # FACTORIZATION                                                           #
    ###########################################################################
    def factorize(self, seq: OperatorSequence) -> List[OperatorSequence]:
        """Split a sequence into factors that share no inflated source.

        Factors are ordered by their first operator. Sequences of length 0
        or 1 cannot be factorized, and are returned as the single factor.

        Parameters
        ----------
        seq : OperatorSequence
            The sequence to factorize.

        Returns
        -------
        List[OperatorSequence]
            The factors.
        """
        if seq.zero() or len(seq) <= 1:
            return [seq]
        ids = np.array(seq.raw_ids, dtype=np.int64)
        labels = nb_sequence_to_components(self._op_sources[ids])
        factors = []
        for component in range(int(labels.max()) + 1):
            factors.append(OperatorSequence.from_raw(
                [op for op, label in zip(seq.operators, labels)
                 if label == component], self))
        return factors

    def connected_sources(self, seq: OperatorSequence) -> np.ndarray:
        """Mask of the inflated sources the sequence depends on."""
        mask = np.zeros(self.total_inflated_sources, dtype=bool)
        for gid in seq.raw_ids:
            mask |= self._op_sources[gid]
        return mask

    ###########################################################################
    # INDEXING                                                                #
    ###########################################################################
    @property
    def observable_variant_count(self) -> int:
        """Total number of copies of all observables."""
        return len(self.global_variant_indices)

    def operator_number(self, observable: int, variant: int,
                        outcome: int) -> int:
        """Global id of the operator of an outcome of a copy of an
        observable."""
        obs = self.observables[observable]
        assert 0 <= variant < obs.variant_count, "Variant out of range."
        return obs.operator_offset + variant * obs.operators + outcome

    def obs_variant_to_index(self, observable: int, variant: int) -> int:
        obs = self.observables[observable]
        assert 0 <= variant < obs.variant_count, "Variant out of range."
        return obs.variant_offset + variant

    def index_to_obs_variant(self, index: int) -> OVIndex:
        return self.global_variant_indices[index]

    def flatten_outcome_index(self, ovos: Sequence[Tuple[int, int, int]]
                              ) -> int:
        """Flatten the outcomes of a string of copies of observables into a
        single number, the last outcome varying fastest.

        Parameters
        ----------
        ovos : Sequence[Tuple[int, int, int]]
            The (observable, variant, outcome) triples.

        Returns
        -------
        int
            The flat outcome index.
        """
        flat = 0
        stride = 1
        for position in range(len(ovos) - 1, -1, -1):
            observable, variant, outcome = ovos[position]
            if not 0 <= observable < len(self.observables):
                raise BadObservable(position, f"Observable \"{observable}\" "
                                    + f"at index {position} is out of range.")
            obs = self.observables[observable]
            if not 0 <= variant < obs.variant_count:
                raise BadObservable(position, f"Variant \"{variant}\" for "
                                    + f"observable \"{observable}\" at index "
                                    + f"{position} is out of range.")
            if not 0 <= outcome < obs.outcomes:
                raise BadObservable(position, f"Outcome \"{outcome}\" for "
                                    + f"variant \"{variant}\" of observable "
                                    + f"\"{observable}\" at index "
                                    + f"{position} is out of range.")
            flat += stride * outcome
            stride *= obs.outcomes
        return flat

    def unflatten_outcome_index(self, ovs: Sequence[Tuple[int, int]],
                                outcome_number: int) -> List[OVOIndex]:
        """Inverse of ``flatten_outcome_index``, for the given copies of
        observables."""
        for position, (observable, _) in enumerate(ovs):
            if not 0 <= observable < len(self.observables):
                raise BadObservable(position, f"Observable \"{observable}\" "
                                    + f"at index {position} out of range.")
        outcomes = []
        for observable, _ in reversed(ovs):
            outcome_number, outcome = divmod(
                outcome_number, self.observables[observable].outcomes)
            outcomes.append(outcome)
        outcomes.reverse()
        return [OVOIndex(o, v, outcome)
                for (o, v), outcome in zip(ovs, outcomes)]

    ###########################################################################
    # MEASUREMENT LAYOUT, AS USED BY THE COLLINS-GISIN INDEX                  #
    ###########################################################################
    def measurement_parties(self) -> List[List[int]]:
        """Every copy of an observable is measured by its own party, indexed
        by its global observable-variant index."""
        return [[index] for index in range(self.observable_variant_count)]

    def _measured_variant(self, index: int) -> Tuple[ICObservable, Variant]:
        if not 0 <= index < self.observable_variant_count:
            raise BadCGIndex(f"Observable variant index {index} out of "
                             + "range.", index)
        observable, variant = self.global_variant_indices[index]
        obs = self.observables[observable]
        return obs, obs.variants[variant]

    def measurement_operator_count(self, index: int) -> int:
        return self._measured_variant(index)[0].operators

    def measurement_outcome_count(self, index: int) -> int:
        return self._measured_variant(index)[0].outcomes

    def measurement_complete(self, index: int) -> bool:
        return True

    def measurement_operator(self, index: int, outcome: int) -> Operator:
        obs, variant = self._measured_variant(index)
        if not 0 <= outcome < obs.operators:
            raise BadCGIndex(f"Outcome {outcome} of observable variant "
                             + f"{index} has no explicit operator.", outcome)
        return self.operators[variant.operator_offset + outcome]

    ###########################################################################
    # FORMATTING                                                              #
    ###########################################################################
    def raw_words(self, length: int):
        return combinations_with_replacement(self.operators, length)

    def format_observable_variant(self, observable: int, variant: int,
                                  outcome: int = None) -> str:
        obs = self.observables[observable]
        strout = AlphabeticNamer()(observable)
        if outcome is not None and obs.outcomes > 2:
            strout += str(outcome)
        if self.inflation > 1:
            separator = "," if self.inflation > 9 else ""
            indices = separator.join(str(i)
                                     for i in obs.variants[variant].indices)
            if any(o.outcomes > 2 for o in self.observables):
                indices = f"[{indices}]"
            strout += indices
        return strout

    def format_operator(self, op: Operator) -> str:
        info = self.operator_info[self.global_id(op)]
        return self.format_observable_variant(info.observable, info.variant,
                                              info.outcome)

    def format_sequence(self, seq: OperatorSequence) -> str:
        if seq.zero():
            return "0"
        if not len(seq):
            return "1"
        return ";".join(self.format_operator(op) for op in seq.operators)

    def __str__(self):
        return (f"Inflation setting with {self.size} operators in total.\n\n"
                + str(self.network)
                + f"\nInflation level: {self.inflation}")
