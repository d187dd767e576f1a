import numpy as np
import pytest

from dualopt.optimize import CurvatureMemory


def test_invalid_capacity():
    with pytest.raises(ValueError):
        CurvatureMemory(0)


def test_empty_memory_is_identity():
    memory = CurvatureMemory(5)
    g = np.array([1.0, -2.0, 3.0])
    assert np.array_equal(memory.apply(g), g)
    assert memory.gamma == 1.0


def test_curvature_condition_rejects_pairs():
    memory = CurvatureMemory(3)
    assert not memory.push(np.array([1.0, 0.0]), np.array([-1.0, 0.0]))
    assert not memory.push(np.array([1.0, 0.0]), np.array([0.0, 1.0]))
    assert len(memory) == 0
    assert memory.push(np.array([1.0, 0.0]), np.array([2.0, 0.0]))
    assert len(memory) == 1


def test_fifo_eviction():
    memory = CurvatureMemory(2)
    pairs = [(np.array([float(k), 1.0]), np.array([1.0, float(k)])) for k in range(1, 4)]
    for s, y in pairs:
        assert memory.push(s, y)
    assert len(memory) == 2
    stored = [s.tolist() for s, _ in memory]
    assert stored == [[2.0, 1.0], [3.0, 1.0]]


def test_pairs_are_copied():
    memory = CurvatureMemory(2)
    s = np.array([1.0, 0.0])
    y = np.array([1.0, 0.0])
    memory.push(s, y)
    s[0] = 100.0
    assert next(iter(memory))[0].tolist() == [1.0, 0.0]


def test_two_loop_recovers_quadratic_inverse_hessian():
    # For f = 0.5 x^T A x with A-conjugate steps the two-loop product
    # reproduces A^{-1} exactly.
    A = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 0.5], [0.0, 0.5, 2.0]])
    memory = CurvatureMemory(3)
    _, vecs = np.linalg.eigh(A)
    for s in vecs.T:
        memory.push(s, A @ s)
    g = np.array([1.0, -1.0, 2.0])
    assert np.allclose(memory.apply(g), np.linalg.solve(A, g), atol=1e-10)


def test_apply_is_positive_definite(rng):
    memory = CurvatureMemory(4)
    A = np.diag([1.0, 10.0, 100.0])
    for _ in range(4):
        s = rng.standard_normal(3)
        memory.push(s, A @ s)
    for _ in range(10):
        g = rng.standard_normal(3)
        assert float(g @ memory.apply(g)) > 0.0


def test_reset_clears_pairs():
    memory = CurvatureMemory(2)
    memory.push(np.array([1.0]), np.array([1.0]))
    memory.reset()
    assert len(memory) == 0
