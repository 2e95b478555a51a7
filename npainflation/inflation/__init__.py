from .CausalNetwork import CausalNetwork, Observable, Source
from .InflationContext import (ICObservable, ICOperatorInfo, InflationContext,
                               OVIndex, OVOIndex, Variant)
from .FactorTable import FactorEntry, FactorTable
from .CanonicalObservables import CanonicalObservable, CanonicalObservables
from .InflationCollinsGisin import InflationCollinsGisin
from .InflationImplicitSymbols import InflationImplicitSymbols
from .InflationMatrixSystem import InflationMatrixSystem
