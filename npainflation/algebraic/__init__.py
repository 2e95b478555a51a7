from .RuleBook import MonomialSubstitutionRule, RuleBook
from .AlgebraicContext import AlgebraicContext
from .AlgebraicMatrixSystem import AlgebraicMatrixSystem
