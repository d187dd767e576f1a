"""Forward-mode automatic differentiation with dual numbers.

Example
-------
>>> from dualopt.autodiff import DualSpace, exp
>>> (m, c) = DualSpace(2).seed([0.5, 1.0])
>>> f = exp(m * 2.0 + c)
>>> round(f.value, 6)
7.389056
>>> [round(v, 6) for v in f.grad]
[14.778112, 7.389056]
"""

from .dual import Dual, DualSpace, Number
from .functions import cos, exp, log, power, sin, sqrt, tanh

__all__ = [
    "Dual",
    "DualSpace",
    "Number",
    "cos",
    "exp",
    "log",
    "power",
    "sin",
    "sqrt",
    "tanh",
]
