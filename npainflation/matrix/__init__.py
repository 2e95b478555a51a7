from .SymbolTable import (SymbolExpression, SymbolLookupResult, SymbolTable,
                          UniqueSequence)
from .OperatorMatrix import (LocalizingMatrix, LocalizingMatrixIndex,
                             MomentMatrix, OperatorMatrix,
                             SymbolMatrixProperties)
from .MatrixSystem import MatrixSystem
from .CollinsGisin import CollinsGisinForm
from .ImplicitSymbols import ImplicitSymbols, PMODefinition
