import platform


from networkx import __version__ as networkx_version
from numba import __version__ as numba_version
from numpy import __version__ as numpy_version
from scipy import __version__ as scipy_version
from sympy import __version__ as sympy_version
from tqdm import __version__ as tqdm_version

import npainflation


def about() -> None:
    """Displays information about NPA-Inflation, core packages, and Python
    version/platform information.
    """
    about_str = f"""
NPA-Inflation: Moment matrices for the NPA hierarchy and causal inflation
==============================================================================
Authored by: Emanuel-Cristian Boghiu, Elie Wolfe and Alejandro Pozas-Kerstjens

NPA-Inflation Version:\t{npainflation.__version__}

Core Dependencies
-----------------
NumPy Version:\t{numpy_version}
SciPy Version:\t{scipy_version}
SymPy Version:\t{sympy_version}
Numba Version:\t{numba_version}
tqdm Version:\t{tqdm_version}
NetworkX Version:\t{networkx_version}

Python Version:\t{platform.python_version()}
Platform Info:\t{platform.system()} ({platform.machine()})
"""
    print(about_str)


if __name__ == "__main__":
    about()
