"""
This file contains the table of canonical strings of observable copies: the
distinct joint measurements of an inflated scenario, up to relabelling of the
copies of the sources.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from itertools import combinations, combinations_with_replacement
from typing import List, Sequence, Tuple, Union

from ..errors import BadOVString
from .InflationContext import InflationContext, OVIndex


class CanonicalObservable:
    """A canonical string of copies of observables.

    Parameters
    ----------
    index : int
        Position in the table.
    indices : List[OVIndex]
        The (observable, variant) pairs.
    flattened_indices : List[int]
        The global index of each pair.
    projective : bool
        Whether all the observables are projective.
    hash : int
        Hash of the string.
    operators : int
        Number of operators associated to the string.
    outcomes : int
        Number of joint outcomes.
    outcomes_per_observable : List[int]
        Number of outcomes of each observable.
    """
    def __init__(self, index: int,
                 indices: List[OVIndex],
                 flattened_indices: List[int],
                 projective: bool,
                 hash: int,
                 operators: int,
                 outcomes: int,
                 outcomes_per_observable: List[int]):
        self.index = index
        self.indices = indices
        self.flattened_indices = flattened_indices
        self.projective = projective
        self.hash = hash
        self.operators = operators
        self.outcomes = outcomes
        self.outcomes_per_observable = outcomes_per_observable

    def empty(self) -> bool:
        """Whether the string is empty, i.e. stands for the normalization."""
        return not self.indices

    def __len__(self):
        return len(self.indices)

    def __str__(self):
        return (f"#{self.index}: flat = ["
                + ";".join(str(i) for i in self.flattened_indices)
                + "], obs/var = ["
                + ";".join(f"{ov.observable}/{ov.variant}"
                           for ov in self.indices)
                + f"], hash = {self.hash}, operators = {self.operators}, "
                + f"outcomes = {self.outcomes}")


class CanonicalObservables:
    """Table of canonical strings of copies of observables, with aliases from
    every string to its canonical version.

    Parameters
    ----------
    context : InflationContext
        The inflation context.
    """
    def __init__(self, context: InflationContext):
        self.context = context
        self.max_level = 0
        self.canonical_observables = [CanonicalObservable(0, [], [], True, 0,
                                                          1, 1, [])]
        self.hash_aliases = {0: 0}
        self.distinct_observables_per_level = [1]

    def hash(self, indices: Sequence[Union[int, Tuple[int, int]]]) -> int:
        """Hash of a string of copies of observables, each given as an
        (observable, variant) pair or as a global variant index.

        Parameters
        ----------
        indices : Sequence[Union[int, Tuple[int, int]]]
            The string.

        Returns
        -------
        int
            The hash.
        """
        multiplier = 1
        hash_ = 0
        for index in reversed(indices):
            if not isinstance(index, int):
                index = self.context.obs_variant_to_index(index[0], index[1])
            hash_ += (1 + index) * multiplier
            multiplier *= self.context.observable_variant_count
        return hash_

    def generate_up_to_level(self, new_level: int) -> None:
        """Add every string of up to ``new_level`` copies of observables."""
        if new_level <= self.max_level:
            return
        projective = all(obs.projective for obs in self.context.observables)
        for level in range(self.max_level + 1, new_level + 1):
            at_start = len(self.canonical_observables)
            if projective:
                strings = combinations(
                    range(self.context.observable_variant_count), level)
            else:
                strings = combinations_with_replacement(
                    range(self.context.observable_variant_count), level)
            for global_indices in strings:
                self._try_add_entry(global_indices)
            self.distinct_observables_per_level.append(
                len(self.canonical_observables) - at_start)
        self.max_level = new_level

    def _try_add_entry(self, global_indices: Sequence[int]) -> None:
        raw_hash = self.hash(global_indices)
        canonical_indices = self.context.canonical_variants(
            self.context.index_to_obs_variant(i) for i in global_indices)
        canonical_hash = self.hash(canonical_indices)

        if canonical_hash not in self.hash_aliases:
            op_count = 1
            out_count = 1
            flat_indices = []
            outcomes_per_observable = []
            for ov in canonical_indices:
                obs = self.context.observables[ov.observable]
                flat_indices.append(obs.variant_offset + ov.variant)
                op_count *= obs.operators
                if obs.projective:
                    out_count *= obs.outcomes
                    outcomes_per_observable.append(obs.outcomes)
                else:
                    out_count = 0
                    outcomes_per_observable.append(0)
            projective = all(self.context.observables[ov.observable].projective
                             for ov in canonical_indices)
            self.hash_aliases[canonical_hash] = len(self.canonical_observables)
            self.canonical_observables.append(
                CanonicalObservable(len(self.canonical_observables),
                                    canonical_indices, flat_indices,
                                    projective, canonical_hash, op_count,
                                    out_count, outcomes_per_observable))
        self.hash_aliases.setdefault(raw_hash,
                                     self.hash_aliases[canonical_hash])

    def canonical(self, key: Union[int, Sequence]) -> CanonicalObservable:
        """The canonical entry of a string.

        Parameters
        ----------
        key : Union[int, Sequence]
            Either the hash of a string, or the string itself as a sequence
            of (observable, variant) pairs or of global variant indices.
            Copies of observables commute, so the string may come in any
            order.

        Returns
        -------
        CanonicalObservable
            The canonical entry.

        Raises
        ------
        BadOVString
            If the string is longer than the generated level, or is not in
            the table.
        """
        if isinstance(key, int):
            return self._from_hash(key)
        indices = [i if isinstance(i, int)
                   else self.context.obs_variant_to_index(i[0], i[1])
                   for i in key]
        try:
            if len(indices) > self.max_level:
                raise BadOVString("String is too long.")
            return self._from_hash(self.hash(sorted(indices)))
        except BadOVString as e:
            raise BadOVString(f"Error with indices \"{indices}\": {e}") \
                from e

    def _from_hash(self, hash_: int) -> CanonicalObservable:
        if hash_ not in self.hash_aliases:
            raise BadOVString(f"Could not find hash \"{hash_}\" in table.")
        return self.canonical_observables[self.hash_aliases[hash_]]

    def __getitem__(self, index: int) -> CanonicalObservable:
        return self.canonical_observables[index]

    def __len__(self):
        return len(self.canonical_observables)

    def __iter__(self):
        return iter(self.canonical_observables)

    def __str__(self):
        return ("Canonical entries:\n"
                + "\n".join(str(entry)
                            for entry in self.canonical_observables) + "\n")
