from .LocalityContext import LocalityContext, PMIndex, PMOIndex
from .LocalityMatrixSystem import LocalityMatrixSystem
