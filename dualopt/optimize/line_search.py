"""Line searches that keep every trial point inside the box.

Both routines evaluate the objective through the ``fun(x, grad) -> float``
contract, so each accepted step already carries the gradient at the new point.
They raise :class:`~dualopt.errors.LineSearchFailed` instead of returning a
non-improving step.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..errors import LineSearchFailed
from .bounds import Bounds
from .core import Array, LBFGSBParams, Objective


@dataclass(frozen=True)
class LineSearchResult:
    """Accepted step: length, new point, its value and gradient."""

    alpha: float
    x: Array
    fun: float
    grad: Array
    nfev: int


def _finite(value: float, grad: Array) -> bool:
    return bool(np.isfinite(value) and np.all(np.isfinite(grad)))


def projected_backtracking(
    fun: Objective,
    bounds: Bounds,
    x: Array,
    fx: float,
    grad: Array,
    direction: Array,
    alpha0: float,
    params: LBFGSBParams,
) -> LineSearchResult:
    """Armijo backtracking along the projected path ``P(x + alpha * d)``.

    A trial is accepted when its value is finite and
    ``f(x_t) <= f(x) + ftol * grad.(x_t - x)`` with a negative directional
    term. Trials whose projected step is not a descent step are skipped
    without evaluating the objective.
    """
    alpha = min(float(alpha0), params.max_step)
    nfev = 0
    while alpha >= params.min_step:
        candidate = bounds.project(x + alpha * direction)
        step = candidate - x
        if not np.any(step):
            raise LineSearchFailed(
                f"projected step vanished at alpha={alpha:.3e} after {nfev} evaluations"
            )
        slope = float(np.dot(grad, step))
        if slope < 0:
            if nfev >= params.max_linesearch:
                raise LineSearchFailed(
                    f"no sufficient decrease within {nfev} evaluations"
                )
            g_new = np.empty_like(x)
            f_new = float(fun(candidate, g_new))
            nfev += 1
            if _finite(f_new, g_new) and f_new <= fx + params.ftol * slope:
                return LineSearchResult(alpha, candidate, f_new, g_new, nfev)
        alpha *= params.backtrack
    raise LineSearchFailed(
        f"step length fell below min_step={params.min_step:g} after {nfev} evaluations"
    )


@dataclass(frozen=True)
class _Trial:
    alpha: float
    x: Array
    fun: float
    grad: Array
    slope: float
    finite: bool


class _Trials:
    """Evaluates ``x + alpha * d`` and enforces the evaluation budget."""

    def __init__(
        self, fun: Objective, bounds: Bounds, x: Array, direction: Array, budget: int
    ) -> None:
        self.fun = fun
        self.bounds = bounds
        self.x = x
        self.direction = direction
        self.budget = budget
        self.nfev = 0

    def __call__(self, alpha: float) -> _Trial:
        if self.nfev >= self.budget:
            raise LineSearchFailed(
                f"strong Wolfe conditions not met within {self.nfev} evaluations"
            )
        point = self.bounds.project(self.x + alpha * self.direction)
        g_new = np.empty_like(self.x)
        f_new = float(self.fun(point, g_new))
        self.nfev += 1
        finite = _finite(f_new, g_new)
        slope = float(np.dot(g_new, self.direction)) if finite else np.nan
        return _Trial(alpha, point, f_new, g_new, slope, finite)

    def result(self, trial: _Trial) -> LineSearchResult:
        return LineSearchResult(trial.alpha, trial.x, trial.fun, trial.grad, self.nfev)


def capped_wolfe(
    fun: Objective,
    bounds: Bounds,
    x: Array,
    fx: float,
    grad: Array,
    direction: Array,
    alpha0: float,
    params: LBFGSBParams,
) -> LineSearchResult:
    """Strong Wolfe search with the step capped where the first bound is hit.

    Follows the bracketing/zoom scheme of Nocedal & Wright (Algorithms 3.5
    and 3.6). Because no step may leave the box, expansion stops at the cap;
    the cap itself is accepted if it gives sufficient decrease.
    """
    slope0 = float(np.dot(grad, direction))
    if slope0 >= 0:
        raise LineSearchFailed("search direction is not a descent direction")
    cap = min(bounds.max_step(x, direction), params.max_step)
    if cap < params.min_step:
        raise LineSearchFailed("no feasible step along the search direction")

    trials = _Trials(fun, bounds, x, direction, params.max_linesearch)
    c1, c2 = params.ftol, params.wolfe

    def armijo_fails(trial: _Trial) -> bool:
        return not trial.finite or trial.fun > fx + c1 * trial.alpha * slope0

    prev = _Trial(0.0, x, fx, grad, slope0, True)
    alpha = min(float(alpha0), cap)
    while True:
        try:
            cur = trials(alpha)
        except LineSearchFailed:
            if prev.alpha > 0:
                return trials.result(prev)
            raise
        if armijo_fails(cur) or (prev.alpha > 0 and cur.fun >= prev.fun):
            return _zoom(trials, prev, cur, fx, slope0, params)
        if abs(cur.slope) <= -c2 * slope0:
            return trials.result(cur)
        if cur.slope >= 0:
            return _zoom(trials, cur, prev, fx, slope0, params)
        if alpha >= cap:
            return trials.result(cur)
        prev = cur
        alpha = min(2.0 * alpha, cap)


def _zoom(
    trials: _Trials,
    lo: _Trial,
    hi: _Trial,
    fx: float,
    slope0: float,
    params: LBFGSBParams,
) -> LineSearchResult:
    """Bisection zoom; ``lo`` always satisfies sufficient decrease."""
    c1, c2 = params.ftol, params.wolfe
    while abs(hi.alpha - lo.alpha) >= params.min_step:
        alpha = 0.5 * (lo.alpha + hi.alpha)
        try:
            cur = trials(alpha)
        except LineSearchFailed:
            break
        if (
            not cur.finite
            or cur.fun > fx + c1 * alpha * slope0
            or cur.fun >= lo.fun
        ):
            hi = cur
            continue
        if abs(cur.slope) <= -c2 * slope0:
            return trials.result(cur)
        if cur.slope * (hi.alpha - lo.alpha) >= 0:
            hi = lo
        lo = cur
    if lo.alpha > 0:
        return trials.result(lo)
    raise LineSearchFailed(
        f"zoom found no step with sufficient decrease in {trials.nfev} evaluations"
    )


LINE_SEARCH_METHODS = {
    "backtracking": projected_backtracking,
    "wolfe": capped_wolfe,
}


__all__ = [
    "LINE_SEARCH_METHODS",
    "LineSearchResult",
    "capped_wolfe",
    "projected_backtracking",
]
