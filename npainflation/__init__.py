"""NPA-Inflation
==================
Provides
 1. Canonical forms of strings of operators in generic, locality (Bell-type),
    algebraic (rewriting-rule) and inflated causal-network scenarios.
 2. Moment and localizing matrices of the NPA hierarchy over these scenarios,
    with a shared table of symbols and their export as sparse bases.
 3. Collins-Gisin and implicit-symbol indices of probabilities, and the
    factorization of moments of inflated causal networks (see the definition
    of inflation in arXiv:1609.00672 and arXiv:1909.10519).
"""

from .Context import Context, OperatorSequenceGenerator
from .Party import Measurement, Party
from .operators import Operator, OperatorFlags, OperatorSequence
from .matrix import (CollinsGisinForm, ImplicitSymbols, LocalizingMatrix,
                     LocalizingMatrixIndex, MatrixSystem, MomentMatrix,
                     SymbolTable)
from .locality import LocalityContext, LocalityMatrixSystem
from .algebraic import (AlgebraicContext, AlgebraicMatrixSystem,
                        MonomialSubstitutionRule)
from .inflation import (CausalNetwork, InflationContext,
                        InflationMatrixSystem)
from .utils import AlphabeticNamer
from ._about import about
from ._version import __version__

__all__ = ["Context",
           "OperatorSequenceGenerator",
           "Measurement",
           "Party",
           "Operator",
           "OperatorFlags",
           "OperatorSequence",
           "SymbolTable",
           "MomentMatrix",
           "LocalizingMatrix",
           "LocalizingMatrixIndex",
           "MatrixSystem",
           "CollinsGisinForm",
           "ImplicitSymbols",
           "LocalityContext",
           "LocalityMatrixSystem",
           "AlgebraicContext",
           "AlgebraicMatrixSystem",
           "MonomialSubstitutionRule",
           "CausalNetwork",
           "InflationContext",
           "InflationMatrixSystem",
           "AlphabeticNamer"]
