"""Benchmark objectives usable on both floats and dual numbers.

Each function takes a sequence of scalars and returns a scalar, so it can be
wrapped directly in :class:`~dualopt.optimize.AutoDiffObjective`.
"""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from .autodiff import exp

# Observations (t, y) of y = exp(m t + c) + noise, generated with m=0.3, c=0.1.
EXPONENTIAL_DATA = np.array(
    [
        [0.000, 1.133898], [0.075, 1.334902], [0.150, 1.213546],
        [0.225, 1.252016], [0.300, 1.392265], [0.375, 1.314458],
        [0.450, 1.472541], [0.525, 1.536218], [0.600, 1.355679],
        [0.675, 1.463566], [0.750, 1.490201], [0.825, 1.658699],
        [0.900, 1.067574], [0.975, 1.464629], [1.050, 1.402653],
        [1.125, 1.713141], [1.200, 1.527021], [1.275, 1.702632],
        [1.350, 1.423899], [1.425, 1.543078], [1.500, 1.664015],
        [1.575, 1.732484], [1.650, 1.543296], [1.725, 1.959523],
        [1.800, 1.685132], [1.875, 1.951791], [1.950, 2.095346],
        [2.025, 2.361460], [2.100, 2.169119], [2.175, 2.061745],
        [2.250, 2.178641], [2.325, 2.104346], [2.400, 2.584470],
        [2.475, 1.914158], [2.550, 2.368375], [2.625, 2.686125],
        [2.700, 2.712395], [2.775, 2.499511], [2.850, 2.558897],
        [2.925, 2.309154], [3.000, 2.869503], [3.075, 3.116645],
        [3.150, 3.094907], [3.225, 2.471759], [3.300, 3.017131],
        [3.375, 3.232381], [3.450, 2.944596], [3.525, 3.385343],
        [3.600, 3.199826], [3.675, 3.423039], [3.750, 3.621552],
        [3.825, 3.559255], [3.900, 3.530713], [3.975, 3.561766],
        [4.050, 3.544574], [4.125, 3.867945], [4.200, 4.049776],
        [4.275, 3.885601], [4.350, 4.110505], [4.425, 4.345320],
        [4.500, 4.161241], [4.575, 4.363407], [4.650, 4.161576],
        [4.725, 4.619728], [4.800, 4.737410], [4.875, 4.727863],
        [4.950, 4.669206],
    ]
)


def quadratic(x: Sequence):
    """``0.5 * (10 - x0)**2``, minimized at ``x0 = 10``."""
    return 0.5 * (10.0 - x[0]) * (10.0 - x[0])


def rosenbrock_chain(x: Sequence):
    """Chained Rosenbrock valley ``(x0 - 1)^2 + 4 sum (x_i - x_{i-1}^2)^2``.

    The global minimizer is the all-ones vector with value zero.
    """
    fx = (x[0] - 1.0) * (x[0] - 1.0)
    for i in range(1, len(x)):
        t = x[i] - x[i - 1] * x[i - 1]
        fx = fx + 4.0 * t * t
    return fx


def powell(x: Sequence):
    """Powell's singular function of four variables, minimized at the origin."""
    term1 = x[0] + 10.0 * x[1]
    term2 = x[2] - x[3]
    term3 = x[1] - 2.0 * x[2]
    term4 = x[0] - x[3]
    return term1 * term1 + 5.0 * term2 * term2 + term3**4 + 10.0 * term4**4


def exp_model(t, m, c):
    """Exponential growth model ``exp(m t + c)``."""
    return exp(m * t + c)


def exponential_fit(t: Sequence[float], y: Sequence[float]) -> Callable[[Sequence], object]:
    """Least-squares loss of :func:`exp_model` over ``(t, y)``; parameters ``(m, c)``."""
    t = np.asarray(t, dtype=float)
    y = np.asarray(y, dtype=float)
    if t.shape != y.shape or t.ndim != 1:
        raise ValueError(f"t and y must be matching vectors, got {t.shape} and {y.shape}")

    def loss(params: Sequence):
        m, c = params[0], params[1]
        total = 0.0
        for ti, yi in zip(t, y):
            residual = exp_model(ti, m, c) - yi
            total = total + residual * residual
        return total

    return loss


def default_exponential_fit() -> Callable[[Sequence], object]:
    """:func:`exponential_fit` over :data:`EXPONENTIAL_DATA`."""
    return exponential_fit(EXPONENTIAL_DATA[:, 0], EXPONENTIAL_DATA[:, 1])


__all__ = [
    "EXPONENTIAL_DATA",
    "default_exponential_fit",
    "exp_model",
    "exponential_fit",
    "powell",
    "quadratic",
    "rosenbrock_chain",
]
