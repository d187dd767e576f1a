import dataclasses
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from dualopt.autodiff import log
from dualopt.errors import DimensionMismatch, DivisionByZero, DomainError, InvalidBounds
from dualopt.optimize import (
    AutoDiffObjective,
    LBFGSBParams,
    TerminationReason,
    lbfgsb,
)
from dualopt.problems import quadratic, rosenbrock_chain


def shifted_sphere(center):
    center = np.asarray(center, dtype=float)

    def expr(x):
        return sum((xi - ci) * (xi - ci) for xi, ci in zip(x, center))

    return AutoDiffObjective(expr, dim=center.size)


@pytest.mark.parametrize("start", [0.0, -100.0, 37.5, 1e4, 10.0])
def test_quadratic_exactness(start):
    objective = AutoDiffObjective(quadratic, dim=1)
    res = lbfgsb(objective, np.array([start]))
    assert res.success
    assert res.x[0] == pytest.approx(10.0, abs=1e-8)
    assert res.fun == pytest.approx(0.0, abs=1e-12)
    assert res.nit <= 3


def test_bounds_hold_at_every_iterate():
    lower = np.array([0.5, 0.8, 0.9, -np.inf, 1.0])
    upper = np.array([1.5, 1.2, 1.0, np.inf, 1.0])
    seen = []

    def check(state):
        assert np.all(state.x >= lower)
        assert np.all(state.x <= upper)
        seen.append(state.nit)

    objective = AutoDiffObjective(rosenbrock_chain)
    res = lbfgsb(
        objective,
        np.array([1.4, 0.0, 5.0, -3.0, 1.0]),
        lower=lower,
        upper=upper,
        callback=check,
    )
    assert seen == list(range(res.nit + 1))
    assert np.all(res.x >= lower) and np.all(res.x <= upper)


def test_start_is_clipped_into_box():
    first = []
    objective = shifted_sphere([0.0, 0.0])
    lbfgsb(
        objective,
        np.array([5.0, -5.0]),
        lower=-1.0,
        upper=1.0,
        callback=lambda state: first.append(state.x) if not first else None,
    )
    assert first[0].tolist() == [1.0, -1.0]


@pytest.mark.parametrize("line_search", ["backtracking", "wolfe"])
def test_frozen_coordinate_never_moves(line_search):
    objective = shifted_sphere([4.0, -3.0, 2.0])
    lower = np.array([-10.0, 0.25, -10.0])
    upper = np.array([10.0, 0.25, 10.0])
    values = []
    res = lbfgsb(
        objective,
        np.array([0.0, 5.0, 0.0]),
        lower=lower,
        upper=upper,
        params=LBFGSBParams(line_search=line_search),
        callback=lambda state: values.append(state.x[1]),
    )
    assert values and all(v == 0.25 for v in values)
    assert res.x[1] == 0.25
    assert np.allclose(res.x[[0, 2]], [4.0, 2.0], atol=1e-6)
    assert res.success


def test_active_bound_gives_zero_projected_gradient():
    objective = shifted_sphere([3.0, -2.0])
    res = lbfgsb(objective, np.zeros(2), lower=-1.0, upper=1.0)
    assert res.success
    assert res.x.tolist() == [1.0, -1.0]
    assert res.proj_grad_norm == 0.0
    assert np.allclose(res.grad, [-4.0, 2.0])


def test_unbounded_infinite_bounds_match_no_bounds():
    objective = AutoDiffObjective(rosenbrock_chain, dim=3)
    x0 = np.array([-1.2, 1.0, 0.5])
    free = lbfgsb(objective, x0)
    inf = lbfgsb(objective, x0, lower=[-np.inf] * 3, upper=[np.inf] * 3)
    assert np.array_equal(free.x, inf.x)
    assert free.nit == inf.nit


def test_max_iterations_returns_partial_result():
    objective = AutoDiffObjective(rosenbrock_chain, dim=4)
    x0 = np.array([-1.2, 1.0, -1.0, 1.0])
    res = lbfgsb(objective, x0, params=LBFGSBParams(max_iterations=3))
    assert res.reason is TerminationReason.MAX_ITERATIONS
    assert not res.success
    assert res.nit == 3
    assert res.fun < objective.value(x0)
    assert res.message == "Maximum iterations reached."


def test_zero_iterations_evaluates_once():
    objective = AutoDiffObjective(quadratic, dim=1)
    res = lbfgsb(objective, np.array([0.0]), params=LBFGSBParams(max_iterations=0))
    assert res.reason is TerminationReason.MAX_ITERATIONS
    assert res.nit == 0
    assert res.nfev == 1
    assert res.fun == 50.0


def test_line_search_failure_is_reported():
    def wrong_gradient(x, grad):
        grad[:] = -2.0 * x
        return float(x @ x)

    res = lbfgsb(wrong_gradient, np.array([1.0]), params=LBFGSBParams(max_linesearch=5))
    assert res.reason is TerminationReason.LINE_SEARCH_FAILED
    assert res.x.tolist() == [1.0]
    assert res.nit == 0
    assert res.nfev == 6


def test_cancellation_after_two_iterations():
    objective = AutoDiffObjective(rosenbrock_chain, dim=4)
    calls = []

    def stop(state):
        calls.append(state.nit)
        return state.nit >= 2

    res = lbfgsb(objective, np.array([-1.2, 1.0, -1.0, 1.0]), should_stop=stop)
    assert res.reason is TerminationReason.CANCELLED
    assert res.nit == 2
    assert calls == [0, 1, 2]


def test_callback_receives_copies():
    objective = shifted_sphere([1.0, 2.0])

    def vandal(state):
        state.x[:] = 100.0
        state.grad[:] = 0.0

    res = lbfgsb(objective, np.zeros(2), callback=vandal)
    assert np.allclose(res.x, [1.0, 2.0])


def test_history_records_iterates():
    objective = shifted_sphere([1.0, 2.0])
    res = lbfgsb(objective, np.zeros(2), history=True)
    assert len(res.history) == res.nit + 1
    assert res.history[0].tolist() == [0.0, 0.0]
    assert np.array_equal(res.history[-1], res.x)
    assert lbfgsb(objective, np.zeros(2)).history == []


def test_objective_cannot_alias_solver_state():
    def mutating(x, grad):
        grad[:] = 2.0 * (x - 3.0)
        value = float(np.sum((x - 3.0) ** 2))
        x[:] = -1e6
        return value

    res = lbfgsb(mutating, np.zeros(2))
    assert res.success
    assert np.allclose(res.x, [3.0, 3.0])


def test_invalid_bounds_detected_before_evaluation():
    calls = []

    def fun(x, grad):
        calls.append(1)
        grad[:] = 0.0
        return 0.0

    with pytest.raises(InvalidBounds):
        lbfgsb(fun, np.zeros(2), lower=[0.0, 1.0], upper=[1.0, 0.0])
    assert calls == []


@pytest.mark.parametrize(
    "x0,lower,upper",
    [
        (np.zeros((2, 2)), None, None),
        (np.zeros(0), None, None),
        (np.zeros(2), [0.0, 0.0, 0.0], None),
        (np.zeros(2), None, [1.0]),
    ],
)
def test_dimension_mismatch(x0, lower, upper):
    with pytest.raises(DimensionMismatch):
        lbfgsb(shifted_sphere([0.0, 0.0]), x0, lower=lower, upper=upper)


def test_fixed_width_objective_rejects_wrong_start():
    with pytest.raises(DimensionMismatch):
        lbfgsb(AutoDiffObjective(quadratic, dim=1), np.zeros(2))


def test_domain_error_propagates_from_line_search():
    objective = AutoDiffObjective(lambda x: log(x[0]))
    with pytest.raises(DomainError):
        lbfgsb(objective, np.array([1.0]))


def test_division_by_zero_propagates():
    objective = AutoDiffObjective(lambda x: 1.0 / x[0])
    with pytest.raises(DivisionByZero):
        lbfgsb(objective, np.array([0.0]))


def test_non_finite_start_rejected():
    def fun(x, grad):
        grad[:] = 0.0
        return float("nan")

    with pytest.raises(DomainError):
        lbfgsb(fun, np.zeros(1))


@pytest.mark.parametrize("seed", range(5))
def test_termination_completeness(seed):
    rng = np.random.default_rng(seed)
    n = int(rng.integers(2, 8))
    lower = rng.uniform(-2.0, 0.0, n)
    upper = lower + rng.uniform(0.0, 3.0, n)
    x0 = rng.uniform(-3.0, 3.0, n)
    max_iterations = int(rng.integers(1, 40))
    objective = AutoDiffObjective(rosenbrock_chain)
    res = lbfgsb(
        objective, x0, lower=lower, upper=upper,
        params=LBFGSBParams(max_iterations=max_iterations),
    )
    assert isinstance(res.reason, TerminationReason)
    assert res.nit <= max_iterations
    assert np.all(res.x >= lower) and np.all(res.x <= upper)
    assert np.isfinite(res.fun)


def test_wolfe_variant_converges():
    objective = AutoDiffObjective(rosenbrock_chain, dim=2)
    res = lbfgsb(
        objective,
        np.array([-1.2, 1.0]),
        params=LBFGSBParams(line_search="wolfe", past=0),
    )
    assert res.success
    assert np.allclose(res.x, [1.0, 1.0], atol=1e-4)


def test_objective_decrease_criterion_converges():
    objective = AutoDiffObjective(rosenbrock_chain, dim=2)
    res = lbfgsb(
        objective,
        np.array([-1.2, 1.0]),
        params=LBFGSBParams(epsilon=0.0, past=1, delta=1e-10),
    )
    assert res.reason is TerminationReason.CONVERGED
    assert res.proj_grad_norm > 0.0
    assert res.fun < 1e-6


def test_memory_size_is_bounded():
    sizes = []
    objective = AutoDiffObjective(rosenbrock_chain, dim=6)
    lbfgsb(
        objective,
        np.full(6, -0.5),
        params=LBFGSBParams(m=3),
        callback=lambda state: sizes.append(state.memory_size),
    )
    assert max(sizes) <= 3
    assert sizes[0] == 0


def test_independent_solves_run_concurrently():
    centers = [np.arange(3.0) + k for k in range(6)]

    def solve(center):
        return lbfgsb(shifted_sphere(center), np.zeros(3), lower=0.0, upper=4.0)

    sequential = [solve(c) for c in centers]
    with ThreadPoolExecutor(max_workers=3) as pool:
        parallel = list(pool.map(solve, centers))
    for a, b in zip(sequential, parallel):
        assert np.array_equal(a.x, b.x)
        assert a.nit == b.nit


def test_result_is_immutable_and_summarized():
    res = lbfgsb(AutoDiffObjective(quadratic, dim=1), np.array([0.0]))
    with pytest.raises(dataclasses.FrozenInstanceError):
        res.fun = 1.0
    text = res.summary()
    assert "iterations" in text
    assert "projected grad norm" in text


@pytest.mark.parametrize(
    "kwargs",
    [
        {"m": 0},
        {"epsilon": -1.0},
        {"past": -1},
        {"max_iterations": -1},
        {"max_linesearch": 0},
        {"ftol": 0.6},
        {"wolfe": 1e-5},
        {"backtrack": 1.0},
        {"min_step": 1.0, "max_step": 0.5},
        {"line_search": "exact"},
    ],
)
def test_invalid_params(kwargs):
    with pytest.raises(ValueError):
        LBFGSBParams(**kwargs)
