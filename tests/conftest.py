"""Pytest configuration and shared fixtures for dualopt tests."""

import os

import numpy as np
import pytest


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed numpy's global generator so every test starts from the same state."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))
