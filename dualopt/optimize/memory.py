"""Limited-memory curvature pairs and the L-BFGS two-loop recursion."""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, Tuple

import numpy as np


class CurvatureMemory:
    """Bounded FIFO of ``(s, y)`` pairs defining an implicit inverse Hessian.

    Pairs failing the curvature condition ``s.y > tol`` are rejected so the
    implicit approximation stays positive definite. Once ``m`` pairs are held,
    pushing a new one evicts the oldest.
    """

    def __init__(self, m: int, tol: float = 1e-12) -> None:
        if m <= 0:
            raise ValueError("Memory parameter m must be positive.")
        self.m = int(m)
        self.tol = float(tol)
        self._pairs: Deque[Tuple[np.ndarray, np.ndarray, float]] = deque(maxlen=self.m)

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        for s, y, _ in self._pairs:
            yield s, y

    def push(self, s: np.ndarray, y: np.ndarray) -> bool:
        """Store a pair if it satisfies the curvature condition."""
        ys = float(np.dot(y, s))
        if not np.isfinite(ys) or ys <= self.tol:
            return False
        self._pairs.append((s.copy(), y.copy(), 1.0 / ys))
        return True

    def reset(self) -> None:
        self._pairs.clear()

    @property
    def gamma(self) -> float:
        """Initial inverse-Hessian scaling ``s.y / y.y`` from the newest pair."""
        if not self._pairs:
            return 1.0
        s, y, rho = self._pairs[-1]
        return 1.0 / (rho * float(np.dot(y, y)))

    def apply(self, g: np.ndarray) -> np.ndarray:
        """Return ``H g`` for the implicit inverse Hessian ``H``."""
        q = np.array(g, dtype=float, copy=True)
        alphas = []
        for s, y, rho in reversed(self._pairs):
            alpha_i = rho * float(np.dot(s, q))
            q -= alpha_i * y
            alphas.append(alpha_i)
        r = self.gamma * q
        for (s, y, rho), alpha_i in zip(self._pairs, reversed(alphas)):
            beta = rho * float(np.dot(y, r))
            r += s * (alpha_i - beta)
        return r


__all__ = ["CurvatureMemory"]
