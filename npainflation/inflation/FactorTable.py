"""
This file contains the table of factorizations of the symbols of an inflated
scenario: every moment splits into a product of moments of subsets of
operators that share no inflated source.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""
from typing import List, Optional, Sequence

from ..errors import FactorTableConvergenceError, UnknownSymbol
from ..matrix.SymbolTable import SymbolTable
from .InflationContext import InflationContext


class FactorEntry:
    """Factorization of one symbol.

    Parameters
    ----------
    id : int
        The id of the symbol.
    """
    def __init__(self, id: int):
        self.id = id
        self.raw_sequences = []
        self.canonical_sequences = []
        self.canonical_symbols = []
        self.appearances = 0

    def fundamental(self) -> bool:
        """Whether the symbol does not split into further factors."""
        return len(self.canonical_symbols) <= 1

    def sequence_string(self) -> str:
        if len(self.canonical_sequences) == 1:
            seq = self.canonical_sequences[0]
            if seq.zero():
                return "0"
            if not len(seq):
                return "1"
        return "".join(f"<{seq}>" for seq in self.canonical_sequences)

    def __str__(self):
        return (f"#{self.id}: {self.sequence_string()} -> "
                + "{" + ", ".join(str(s) for s in self.canonical_symbols)
                + "}")


class FactorTable:
    """Table of the factors of every symbol of a symbol table, kept in step
    with the symbol table.

    Factors that are not yet symbols are added to the symbol table. Since such
    factors have factors of their own, the table is updated until no new
    symbols appear.

    Parameters
    ----------
    context : InflationContext
        The inflation context.
    symbols : SymbolTable
        The symbol table to factorize. It is extended with missing factors.
    max_passes : int, optional
        Maximum number of passes when updating the table. By default 16.
    verbose : int, optional
        Verbosity level. By default 0.
    """
    def __init__(self,
                 context: InflationContext,
                 symbols: SymbolTable,
                 max_passes: int = 16,
                 verbose: int = 0):
        self.context = context
        self.symbols = symbols
        self.max_passes = max_passes
        self.verbose = verbose
        self.entries = []
        self.index_tree = {}
        self.on_new_symbols_added()

    def on_new_symbols_added(self) -> int:
        """Factorize every symbol not yet in the table.

        Returns
        -------
        int
            The number of new entries.
        """
        first_new = len(self.entries)
        passes = 0
        while len(self.entries) < len(self.symbols):
            if passes >= self.max_passes:
                raise FactorTableConvergenceError(
                    "Factorization did not converge after "
                    + f"{self.max_passes} passes.")
            self.check_for_new_factors()
            passes += 1
        new_entries = len(self.entries) - first_new
        if new_entries and self.verbose > 1:
            print(f"Factorized {new_entries} new symbols in {passes} "
                  + "passes.")
        return new_entries

    def check_for_new_factors(self) -> int:
        """One pass of factorization over the symbols added since the last
        pass. Factors that are not yet symbols are merged into the symbol
        table and given an entry of their own. Returns the number of new
        entries."""
        next_id = len(self.entries)
        up_to_id = len(self.symbols)
        for symbol_id in range(next_id, up_to_id):
            entry = FactorEntry(symbol_id)
            entry.raw_sequences = self.context.factorize(
                self.symbols[symbol_id].sequence)
            for factor in entry.raw_sequences:
                canonical = self.context.canonical_moment(factor)
                entry.canonical_sequences.append(canonical)
                found = self.symbols.where(canonical)
                if found is not None:
                    entry.canonical_symbols.append(found.entry.id)
                else:
                    entry.canonical_symbols.append(
                        self.symbols.merge_in_sequence(canonical))
            entry.canonical_symbols.sort()
            self.index_tree[tuple(entry.canonical_symbols)] = symbol_id
            self.entries.append(entry)

        # Factors merged in above are connected, so each is its own factor
        for factor_id in range(up_to_id, len(self.symbols)):
            seq = self.symbols[factor_id].sequence
            entry = FactorEntry(factor_id)
            entry.raw_sequences = [seq]
            entry.canonical_sequences = [seq]
            entry.canonical_symbols = [factor_id]
            self.index_tree[(factor_id,)] = factor_id
            self.entries.append(entry)

        for entry in self.entries[next_id:up_to_id]:
            if not entry.fundamental():
                for factor_id in entry.canonical_symbols:
                    self.entries[factor_id].appearances += 1
        return len(self.entries) - next_id

    def find_index_by_factors(self, symbol_ids: Sequence[int]
                              ) -> Optional[int]:
        """The symbol whose canonical factors are the given (sorted) symbols,
        or ``None``."""
        return self.index_tree.get(tuple(symbol_ids))

    def combine_symbolic_factors(self, lhs: Sequence[int],
                                 rhs: Sequence[int]) -> List[int]:
        """Product of two lists of factors: the merged sorted list, without
        identities. Any zero makes the product ``[0]``."""
        merged = sorted(list(lhs) + list(rhs))
        if 0 in merged:
            return [0]
        merged = [s for s in merged if s != 1]
        return merged if merged else [1]

    def _fundamental_factors(self, symbol_id: int) -> List[int]:
        if not 0 <= symbol_id < len(self.entries):
            raise UnknownSymbol(f"Symbol {symbol_id} has not been "
                                + "factorized.", symbol_id)
        entry = self.entries[symbol_id]
        if entry.fundamental():
            return [symbol_id]
        return list(entry.canonical_symbols)

    def try_multiply(self, lhs: int, rhs: int) -> int:
        """Symbol of the product of two symbols.

        Parameters
        ----------
        lhs : int
            The id of the first symbol.
        rhs : int
            The id of the second symbol.

        Returns
        -------
        int
            The id of the symbol of the product.

        Raises
        ------
        UnknownSymbol
            If the product is not in the symbol table.
        """
        factors = self.combine_symbolic_factors(
            self._fundamental_factors(lhs), self._fundamental_factors(rhs))
        if len(factors) == 1:
            return factors[0]
        found = self.find_index_by_factors(factors)
        if found is None:
            expression = "".join(f"<{self.symbols[s].sequence}>"
                                 for s in factors)
            raise UnknownSymbol("No symbol found in table for factored "
                                + f"expression \"{expression}\"",
                                tuple(factors))
        return found

    def __getitem__(self, symbol_id: int) -> FactorEntry:
        return self.entries[symbol_id]

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __str__(self):
        return ("Factors:\n"
                + "\n".join(str(entry) for entry in self.entries) + "\n")
