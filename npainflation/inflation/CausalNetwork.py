"""
This file contains the description of a causal network: observables (classical
random variables) and the latent sources that are their common causes.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from typing import Dict, Iterable, List, Sequence, Set, Tuple

import networkx as nx

from ..errors import BadObservable, BadSource
from ..utils import AlphabeticNamer


class Observable:
    """A measured variable, with a number of outcomes and the sources it
    depends on.

    Parameters
    ----------
    id : int
        Index of the observable.
    outcomes : int
        Number of outcomes.
    sources : Iterable[int]
        The sources the observable depends on.
    singleton : bool, optional
        Whether the observable has no explicit source, and so depends only on
        its own implicit source. By default ``False``.
    """
    def __init__(self, id: int, outcomes: int, sources: Iterable[int],
                 singleton: bool = False):
        self.id = id
        self.outcomes = outcomes
        self.sources = sorted(sources)
        self.singleton = singleton
        self.projective = True

    @property
    def operators(self) -> int:
        """Number of operators: one per outcome but the last."""
        return self.outcomes - 1

    @property
    def source_count(self) -> int:
        return len(self.sources)

    @property
    def explicit_source_count(self) -> int:
        return 0 if self.singleton else len(self.sources)

    def count_copies(self, inflation_level: int) -> int:
        """Number of copies of the observable in the inflated network."""
        return inflation_level ** self.explicit_source_count

    def flatten_index(self, inflation_level: int,
                      indices: Sequence[int]) -> int:
        """Variant number of the copy with the given source indices, the first
        source being the most significant."""
        if self.singleton:
            return 0
        flat = 0
        for index in indices:
            flat = flat * inflation_level + int(index)
        return flat

    def unflatten_index(self, inflation_level: int,
                        flat_index: int) -> Tuple[int, ...]:
        """Source indices of the copy with the given variant number."""
        if self.singleton:
            return (0,)
        indices = []
        for _ in range(self.source_count):
            flat_index, index = divmod(flat_index, inflation_level)
            indices.append(index)
        return tuple(reversed(indices))

    def __repr__(self):
        return (f"Observable({self.id}, outcomes={self.outcomes}, "
                + f"sources={self.sources})")


class Source:
    """A latent common cause of some observables.

    Parameters
    ----------
    id : int
        Index of the source.
    observables : Iterable[int]
        The observables influenced by the source.
    implicit : bool, optional
        Whether the source was added to a singleton observable. By default
        ``False``.
    """
    def __init__(self, id: int, observables: Iterable[int],
                 implicit: bool = False):
        self.id = id
        self.observables = sorted(observables)
        self.implicit = implicit

    def __repr__(self):
        return f"Source({self.id}, observables={self.observables})"


class CausalNetwork:
    """Bipartite network of observables and sources.

    Every observable that is not influenced by any source receives an implicit
    source of its own. Implicit sources are numbered after the explicit ones.

    Parameters
    ----------
    observable_outcomes : Sequence[int]
        Number of outcomes of each observable.
    source_sets : Sequence[Iterable[int]]
        For each source, the observables it influences.

    Examples
    --------
    The triangle scenario, with three observables of two outcomes each:

    >>> CausalNetwork([2, 2, 2], [[0, 1], [1, 2], [0, 2]])
    """
    def __init__(self,
                 observable_outcomes: Sequence[int],
                 source_sets: Sequence[Iterable[int]]):
        source_sets = [set(s) for s in source_sets]
        self.implicit_source_index = len(source_sets)
        observable_sources = self.reverse_observable_to_source(
            len(observable_outcomes), source_sets)

        self.observables = []
        singletons = []
        next_implicit = self.implicit_source_index
        for o, outcomes in enumerate(observable_outcomes):
            if outcomes < 1:
                raise BadObservable(o, f"Observable {o} must have at least "
                                    + "one outcome.")
            singleton = not observable_sources[o]
            if singleton:
                singletons.append(o)
                observable_sources[o].add(next_implicit)
                next_implicit += 1
            self.observables.append(Observable(o, int(outcomes),
                                               observable_sources[o],
                                               singleton))

        self.sources = [Source(s, observables)
                        for s, observables in enumerate(source_sets)]
        for o in singletons:
            self.sources.append(Source(len(self.sources), [o], True))

    @staticmethod
    def reverse_observable_to_source(num_observables: int,
                                     source_sets: List[Set[int]]
                                     ) -> List[Set[int]]:
        """For each observable, the set of sources influencing it."""
        output = [set() for _ in range(num_observables)]
        for s, source_set in enumerate(source_sets):
            for o in source_set:
                if not 0 <= o < num_observables:
                    raise BadSource(s, f"Source {s} maps to out of bound "
                                    + f"observable {o}")
                output[o].add(s)
        return output

    @property
    def explicit_source_count(self) -> int:
        return self.implicit_source_index

    @property
    def implicit_source_count(self) -> int:
        return len(self.sources) - self.implicit_source_index

    def total_source_count(self, inflation_level: int) -> int:
        """Number of sources in the inflated network."""
        return (self.explicit_source_count * inflation_level
                + self.implicit_source_count)

    def total_operator_count(self, inflation_level: int) -> int:
        """Number of operators in the inflated network."""
        return sum(obs.operators * obs.count_copies(inflation_level)
                   for obs in self.observables)

    def global_source_to_source_variant(self, inflation_level: int,
                                        global_id: int) -> Tuple[int, int]:
        """Source and copy index of an inflated source."""
        explicit_block = self.implicit_source_index * inflation_level
        if global_id >= explicit_block:
            return self.implicit_source_index + global_id - explicit_block, 0
        return divmod(global_id, inflation_level)

    def source_variant_to_global_source(self, inflation_level: int,
                                        source_id: int,
                                        variant_id: int) -> int:
        """Index, in the inflated network, of a copy of a source."""
        if source_id >= self.implicit_source_index:
            assert variant_id == 0, "Implicit sources are never copied."
            return (self.implicit_source_index * inflation_level
                    + source_id - self.implicit_source_index)
        return source_id * inflation_level + variant_id

    def permute_variant(self, inflation_level: int,
                        source_ids: Sequence[int],
                        permutation: Dict[int, int],
                        old_indices: Sequence[int]) -> Tuple[int, ...]:
        """Relabel the source indices of a copy of an observable.

        Parameters
        ----------
        inflation_level : int
            The inflation level.
        source_ids : Sequence[int]
            The sources of the observable.
        permutation : Dict[int, int]
            Map between global inflated sources. Sources not in the map are
            left untouched.
        old_indices : Sequence[int]
            The copy index of each source.

        Returns
        -------
        Tuple[int, ...]
            The new copy index of each source.
        """
        assert len(source_ids) == len(old_indices), \
            "One index must be given per source."
        remapped = []
        for source_id, old_variant in zip(source_ids, old_indices):
            global_src = self.source_variant_to_global_source(
                inflation_level, source_id, old_variant)
            if global_src in permutation:
                new_id, new_variant = self.global_source_to_source_variant(
                    inflation_level, permutation[global_src])
                assert new_id == source_id, \
                    "Permutations cannot exchange different sources."
                remapped.append(new_variant)
            else:
                remapped.append(old_variant)
        return tuple(remapped)

    def graph(self) -> nx.DiGraph:
        """The network as a directed bipartite graph, from sources to
        observables."""
        namer = AlphabeticNamer()
        graph = nx.DiGraph()
        for source in self.sources:
            graph.add_node(f"s{source.id}", bipartite=0,
                           implicit=source.implicit)
        for obs in self.observables:
            graph.add_node(namer(obs.id), bipartite=1, outcomes=obs.outcomes)
        for source in self.sources:
            for o in source.observables:
                graph.add_edge(f"s{source.id}", namer(o))
        return graph

    def __str__(self):
        namer = AlphabeticNamer()
        n_obs = len(self.observables)
        n_src = len(self.sources)
        strout = (f"Causal network with {n_obs} observable"
                  + ("s" if n_obs != 1 else "") + f" and {n_src} source"
                  + ("s" if n_src != 1 else "") + ".\n")
        for obs in self.observables:
            strout += f"Observable {namer(obs.id)} [{obs.outcomes}]"
            if obs.sources:
                strout += " <- " + ", ".join(str(s) for s in obs.sources)
            strout += "\n"
        for source in self.sources:
            strout += f"Source {source.id}"
            if source.observables:
                strout += " -> " + ", ".join(namer(o)
                                             for o in source.observables)
            strout += "\n"
        return strout
