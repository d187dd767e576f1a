"""dualopt - box-constrained L-BFGS driven by forward-mode dual numbers."""

__version__ = "0.1.0"

from . import autodiff, optimize, problems
from .autodiff import Dual, DualSpace, cos, exp, log, power, sin, sqrt, tanh
from .errors import (
    DimensionMismatch,
    DivisionByZero,
    DomainError,
    DualOptError,
    InvalidBounds,
    LineSearchFailed,
)
from .logging import configure_logging, get_logger, set_log_level
from .optimize import (
    AutoDiffObjective,
    Bounds,
    CurvatureMemory,
    LBFGSBParams,
    LBFGSBResult,
    SolverState,
    TerminationReason,
    lbfgsb,
)

__all__ = [
    "__version__",
    "autodiff",
    "optimize",
    "problems",
    # Dual numbers
    "Dual",
    "DualSpace",
    "cos",
    "exp",
    "log",
    "power",
    "sin",
    "sqrt",
    "tanh",
    # Solver
    "AutoDiffObjective",
    "Bounds",
    "CurvatureMemory",
    "LBFGSBParams",
    "LBFGSBResult",
    "SolverState",
    "TerminationReason",
    "lbfgsb",
    # Errors
    "DimensionMismatch",
    "DivisionByZero",
    "DomainError",
    "DualOptError",
    "InvalidBounds",
    "LineSearchFailed",
    # Logging
    "configure_logging",
    "get_logger",
    "set_log_level",
]
