"""
This file contains the exceptions raised when building contexts, symbol tables
and matrices.

Configuration errors (malformed scenarios) derive from ``ValueError``, lookups
outside of the range of an index derive from ``IndexError`` or ``KeyError``,
and violations of internal invariants derive from ``RuntimeError``.

@authors: Emanuel-Cristian Boghiu, Elie Wolfe, Alejandro Pozas-Kerstjens
"""


###############################################################################
# CONFIGURATION ERRORS                                                        #
###############################################################################
class BadObservable(ValueError):
    """Raised when an observable is malformed or referenced out of range."""
    def __init__(self, index: int, message: str = ""):
        self.index = index
        if not message:
            message = f"Observable {index} is not valid."
        super().__init__(message)


class BadSource(ValueError):
    """Raised when a source references an observable that does not exist."""
    def __init__(self, index: int, message: str = ""):
        self.index = index
        if not message:
            message = f"Source {index} is not valid."
        super().__init__(message)


class BadMeasurement(ValueError):
    """Raised when a measurement cannot be added to a party."""
    pass


class BadRule(ValueError):
    """Raised when a substitution rule would not simplify its input."""
    pass


###############################################################################
# DOMAIN-RANGE ERRORS                                                         #
###############################################################################
class BadCGIndex(IndexError):
    """Raised on invalid look-ups in the Collins-Gisin index."""
    def __init__(self, message: str, index=None):
        self.index = index
        super().__init__(message)


class BadImplicitSymbol(IndexError):
    """Raised when implicit symbols cannot be constructed or found."""
    pass


class BadOVString(KeyError):
    """Raised when a string of observable variants has no canonical form."""
    def __str__(self):
        return str(self.args[0]) if self.args else ""


class UnknownSymbol(KeyError):
    """Raised when a symbol (or product of symbols) is not in the table."""
    def __init__(self, message: str, symbol_id=None):
        self.id = symbol_id
        super().__init__(message)

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class MissingMatrix(KeyError):
    """Raised when a matrix is requested before it has been generated."""
    def __str__(self):
        return str(self.args[0]) if self.args else ""


###############################################################################
# LOGIC ERRORS                                                                #
###############################################################################
class SymbolLookupError(RuntimeError):
    """Raised when a sequence inside a matrix has no entry in the symbol table,
    after the matrix's unique sequences were merged into it."""
    def __init__(self, message: str, row: int = -1, col: int = -1):
        self.row = row
        self.col = col
        super().__init__(message)


class BadSubstitution(RuntimeError):
    """Raised when a rewrite rule does not reduce the sequence it acts on."""
    pass


class FactorTableConvergenceError(RuntimeError):
    """Raised when factorizing new symbols keeps introducing further symbols
    after the maximum number of passes."""
    pass
