"""Limited-memory BFGS with simple box constraints.

The iteration works on the projected gradient: coordinates held at a bound
by the gradient are removed from the search direction, the remaining
direction comes from the L-BFGS two-loop recursion, and the line search keeps
every trial point inside the box.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, List, Optional

import numpy as np

from ..errors import DimensionMismatch, DomainError, LineSearchFailed
from ..logging import get_logger
from .bounds import BoundLike, Bounds
from .core import (
    Array,
    LBFGSBParams,
    LBFGSBResult,
    Objective,
    SolverState,
    TerminationReason,
    check_convergence,
    check_decrease,
)
from .line_search import LINE_SEARCH_METHODS
from .memory import CurvatureMemory

logger = get_logger(__name__)

_MESSAGES = {
    TerminationReason.CONVERGED: "Convergence criteria satisfied.",
    TerminationReason.MAX_ITERATIONS: "Maximum iterations reached.",
    TerminationReason.LINE_SEARCH_FAILED: "Line search failed to find an acceptable step.",
    TerminationReason.CANCELLED: "Cancelled by caller.",
}


def _search_direction(
    memory: CurvatureMemory, bounds: Bounds, x: Array, grad: Array, pg: Array
) -> tuple[Array, bool]:
    """Return the search direction and whether it is the steepest-descent fallback."""
    if len(memory) == 0:
        return -pg, True
    direction = -memory.apply(pg)
    direction[bounds.active(x, grad) | bounds.blocked(x, direction)] = 0.0
    if float(np.dot(grad, direction)) < 0:
        return direction, False
    logger.debug("quasi-Newton direction is not a descent direction; using -pg")
    return -pg, True


def lbfgsb(
    fun: Objective,
    x0: Array,
    lower: BoundLike = None,
    upper: BoundLike = None,
    params: Optional[LBFGSBParams] = None,
    callback: Optional[Callable[[SolverState], None]] = None,
    should_stop: Optional[Callable[[SolverState], bool]] = None,
    history: bool = False,
) -> LBFGSBResult:
    """Minimize ``fun`` subject to ``lower <= x <= upper``.

    Args:
        fun: Objective ``fun(x, grad) -> float`` writing the gradient at ``x``
            into ``grad``; :class:`~dualopt.optimize.AutoDiffObjective`
            provides one from a plain expression.
        x0: Starting point; coordinates outside the box are clipped.
        lower: Lower bounds (scalar, vector or ``None`` for ``-inf``).
        upper: Upper bounds (scalar, vector or ``None`` for ``+inf``).
        params: Solver parameters; defaults to :class:`LBFGSBParams()`.
        callback: Called with a snapshot of the state at every iterate,
            including the starting point.
        should_stop: Cancellation check called once per iteration; returning
            True ends the solve with :attr:`TerminationReason.CANCELLED`.
        history: Record every iterate in ``result.history``.

    Returns:
        The final point with its value, gradient and termination reason. Line
        search failures and the iteration cap are reported through
        ``result.reason`` rather than raised.

    Raises:
        DimensionMismatch: ``x0`` is not a non-empty vector, or bounds have
            the wrong length.
        InvalidBounds: Some ``lower[i] > upper[i]`` or a bound is NaN.
        DomainError: The objective is not finite at the starting point.
    """
    params = params if params is not None else LBFGSBParams()
    x = np.array(x0, dtype=float)
    if x.ndim != 1 or x.size == 0:
        raise DimensionMismatch(f"x0 must be a non-empty vector, got shape {x.shape}")
    n = x.size
    bounds = Bounds.create(n, lower, upper)
    line_search = LINE_SEARCH_METHODS[params.line_search]

    nfev = 0

    def evaluate(point: Array, grad_out: Array) -> float:
        nonlocal nfev
        nfev += 1
        value = fun(point.copy(), grad_out)
        if grad_out.shape != (n,):
            raise DimensionMismatch(f"objective changed the gradient shape to {grad_out.shape}")
        return float(value)

    x = bounds.project(x)
    grad = np.zeros(n)
    fx = evaluate(x, grad)
    if not (np.isfinite(fx) and np.all(np.isfinite(grad))):
        raise DomainError(f"objective is not finite at the starting point (f={fx!r})")

    logger.info(
        "L-BFGS-B start: n=%d, m=%d, line search=%s, f0=%.6e",
        n,
        params.m,
        params.line_search,
        fx,
    )

    memory = CurvatureMemory(params.m, params.curvature_tol)
    past: Deque[float] = deque([fx], maxlen=params.past + 1)
    hist: List[Array] = [x.copy()] if history else []
    nit = 0
    reason = TerminationReason.MAX_ITERATIONS
    state = SolverState(x=x, fun=fx, grad=grad, proj_grad=np.zeros(n), proj_grad_norm=np.inf)

    while True:
        pg = bounds.projected_gradient(x, grad)
        pg_norm = float(np.max(np.abs(pg)))
        state.x, state.fun, state.grad = x, fx, grad
        state.proj_grad, state.proj_grad_norm = pg, pg_norm
        state.nit, state.nfev, state.memory_size = nit, nfev, len(memory)
        if callback is not None:
            callback(state.snapshot())

        if check_convergence(pg_norm, float(np.linalg.norm(x)), params):
            reason = TerminationReason.CONVERGED
            break
        if params.past > 0 and len(past) > params.past and check_decrease(
            past[0], fx, params.delta
        ):
            reason = TerminationReason.CONVERGED
            break
        if nit >= params.max_iterations:
            reason = TerminationReason.MAX_ITERATIONS
            break
        if should_stop is not None and should_stop(state.snapshot()):
            reason = TerminationReason.CANCELLED
            break

        direction, steepest = _search_direction(memory, bounds, x, grad, pg)
        alpha0 = 1.0 / float(np.linalg.norm(direction)) if steepest else 1.0
        alpha0 = min(max(alpha0, params.min_step), params.max_step)
        try:
            step = line_search(evaluate, bounds, x, fx, grad, direction, alpha0, params)
        except LineSearchFailed as exc:
            logger.warning("iteration %d: %s", nit, exc)
            reason = TerminationReason.LINE_SEARCH_FAILED
            break

        s = step.x - x
        y = step.grad - grad
        if not memory.push(s, y):
            logger.debug("iteration %d: curvature pair rejected (s.y=%.3e)", nit, float(np.dot(s, y)))

        x, fx, grad = step.x, step.fun, step.grad
        past.append(fx)
        nit += 1
        if history:
            hist.append(x.copy())
        logger.debug(
            "iteration %d: f=%.10e |pg|=%.3e alpha=%.3e", nit, fx, pg_norm, step.alpha
        )

    logger.info(
        "L-BFGS-B stop: %s after %d iterations, f=%.10e, |pg|=%.3e",
        reason.value,
        nit,
        fx,
        pg_norm,
    )
    return LBFGSBResult(
        x=x.copy(),
        fun=float(fx),
        grad=grad.copy(),
        proj_grad_norm=pg_norm,
        nit=nit,
        nfev=nfev,
        reason=reason,
        message=_MESSAGES[reason],
        history=hist,
    )


__all__ = ["lbfgsb"]
