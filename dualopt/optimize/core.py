"""Core configuration, state and result types for the box-constrained solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

import numpy as np

Array = np.ndarray
# Objective contract: fills ``grad`` in place and returns the value at ``x``.
Objective = Callable[[Array, Array], float]

LINE_SEARCHES = ("backtracking", "wolfe")


class TerminationReason(Enum):
    """Why a solve stopped."""

    CONVERGED = "converged"
    MAX_ITERATIONS = "max_iterations"
    LINE_SEARCH_FAILED = "line_search_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class LBFGSBParams:
    """Tuning parameters of :func:`~dualopt.optimize.lbfgsb`.

    Attributes:
        m: Number of curvature pairs kept in memory.
        epsilon: Absolute tolerance on the infinity norm of the projected
            gradient.
        epsilon_rel: Relative tolerance, scaled by the Euclidean norm of ``x``.
        past: Distance (in iterations) for the objective-decrease test;
            ``0`` disables it.
        delta: Relative objective-decrease tolerance used with ``past``.
        max_iterations: Iteration cap.
        max_linesearch: Maximum trial evaluations per line search.
        min_step: Smallest step length tried before giving up.
        max_step: Largest step length allowed.
        ftol: Sufficient-decrease (Armijo) constant.
        wolfe: Curvature constant of the strong Wolfe condition.
        backtrack: Contraction factor of the backtracking line search.
        curvature_tol: Minimum ``s.y`` for a pair to enter memory.
        line_search: ``"backtracking"`` (projected Armijo backtracking) or
            ``"wolfe"`` (strong Wolfe with the step capped at the box).
    """

    m: int = 6
    epsilon: float = 1e-8
    epsilon_rel: float = 0.0
    past: int = 1
    delta: float = 1e-10
    max_iterations: int = 500
    max_linesearch: int = 20
    min_step: float = 1e-20
    max_step: float = 1e20
    ftol: float = 1e-4
    wolfe: float = 0.9
    backtrack: float = 0.5
    curvature_tol: float = 1e-12
    line_search: str = "backtracking"

    def __post_init__(self) -> None:
        if self.m < 1:
            raise ValueError(f"m must be positive, got {self.m}")
        if self.epsilon < 0 or self.epsilon_rel < 0:
            raise ValueError("epsilon and epsilon_rel must be non-negative")
        if self.past < 0:
            raise ValueError(f"past must be non-negative, got {self.past}")
        if self.delta < 0:
            raise ValueError(f"delta must be non-negative, got {self.delta}")
        if self.max_iterations < 0:
            raise ValueError(
                f"max_iterations must be non-negative, got {self.max_iterations}"
            )
        if self.max_linesearch < 1:
            raise ValueError(
                f"max_linesearch must be positive, got {self.max_linesearch}"
            )
        if not (0 < self.min_step < self.max_step):
            raise ValueError("require 0 < min_step < max_step")
        if not (0 < self.ftol < 0.5):
            raise ValueError("ftol must lie in (0, 0.5)")
        if not (self.ftol < self.wolfe < 1):
            raise ValueError("wolfe must lie in (ftol, 1)")
        if not (0 < self.backtrack < 1):
            raise ValueError("backtrack must lie in (0, 1)")
        if self.curvature_tol < 0:
            raise ValueError("curvature_tol must be non-negative")
        if self.line_search not in LINE_SEARCHES:
            raise ValueError(
                f"line_search must be one of {LINE_SEARCHES}, got {self.line_search!r}"
            )


@dataclass
class SolverState:
    """Mutable per-solve state; callbacks receive copies."""

    x: Array
    fun: float
    grad: Array
    proj_grad: Array
    proj_grad_norm: float
    nit: int = 0
    nfev: int = 0
    memory_size: int = 0

    def snapshot(self) -> "SolverState":
        return SolverState(
            x=self.x.copy(),
            fun=self.fun,
            grad=self.grad.copy(),
            proj_grad=self.proj_grad.copy(),
            proj_grad_norm=self.proj_grad_norm,
            nit=self.nit,
            nfev=self.nfev,
            memory_size=self.memory_size,
        )


@dataclass(frozen=True)
class LBFGSBResult:
    """Outcome of a solve.

    Attributes:
        x: Final point (always inside the bounds).
        fun: Objective value at ``x``.
        grad: Gradient at ``x``.
        proj_grad_norm: Infinity norm of the projected gradient at ``x``.
        nit: Number of accepted steps.
        nfev: Number of objective evaluations.
        reason: Termination reason.
        message: Human-readable description of ``reason``.
        history: Iterates visited, when requested.
    """

    x: Array
    fun: float
    grad: Array
    proj_grad_norm: float
    nit: int
    nfev: int
    reason: TerminationReason
    message: str
    history: List[Array] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.reason is TerminationReason.CONVERGED

    def summary(self) -> str:
        """Multi-line console report of the result."""
        with np.printoptions(precision=8, suppress=False):
            return "\n".join(
                [
                    f"{self.nit} iterations ({self.reason.value})",
                    f"x = {self.x}",
                    f"f(x) = {self.fun:.10g}",
                    f"grad = {self.grad}",
                    f"projected grad norm = {self.proj_grad_norm:.6g}",
                ]
            )


def check_convergence(proj_grad_norm: float, x_norm: float, params: LBFGSBParams) -> bool:
    """Return True if the projected gradient satisfies the tolerances."""
    return proj_grad_norm <= max(params.epsilon, params.epsilon_rel * x_norm)


def check_decrease(f_past: float, f_now: float, delta: float) -> bool:
    """Return True if the objective stalled relative to ``f_past``."""
    scale = max(abs(f_past), abs(f_now), 1.0)
    return abs(f_past - f_now) <= delta * scale


__all__ = [
    "Array",
    "Objective",
    "LINE_SEARCHES",
    "TerminationReason",
    "LBFGSBParams",
    "SolverState",
    "LBFGSBResult",
    "check_convergence",
    "check_decrease",
]
