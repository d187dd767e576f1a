"""Box-constrained limited-memory quasi-Newton minimization.

Example
-------
>>> import numpy as np
>>> from dualopt.optimize import AutoDiffObjective, lbfgsb
>>> def rosen(x):
...     return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2
>>> objective = AutoDiffObjective(rosen, dim=2)
>>> res = lbfgsb(objective, np.array([-1.2, 1.0]), lower=-2.0, upper=2.0)
>>> res.success
True
>>> bool(np.allclose(res.x, [1.0, 1.0], atol=1e-4))
True
"""

from .bounds import Bounds
from .core import (
    LBFGSBParams,
    LBFGSBResult,
    SolverState,
    TerminationReason,
    check_convergence,
)
from .lbfgsb import lbfgsb
from .line_search import LineSearchResult, capped_wolfe, projected_backtracking
from .memory import CurvatureMemory
from .objective import AutoDiffObjective
from .utils import approx_grad, check_grad

__all__ = [
    "AutoDiffObjective",
    "Bounds",
    "CurvatureMemory",
    "LBFGSBParams",
    "LBFGSBResult",
    "LineSearchResult",
    "SolverState",
    "TerminationReason",
    "approx_grad",
    "capped_wolfe",
    "check_convergence",
    "check_grad",
    "lbfgsb",
    "projected_backtracking",
]
