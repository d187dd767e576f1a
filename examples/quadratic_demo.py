"""
Example: one-dimensional quadratic with bounds.

Minimizes 0.5 * (10 - x)^2 on [-5, 15] starting from x = 0. The gradient is
produced by dual numbers; no derivative is written by hand.
"""

import numpy as np

from dualopt import AutoDiffObjective, LBFGSBParams, lbfgsb
from dualopt.problems import quadratic


def main() -> None:
    objective = AutoDiffObjective(quadratic, dim=1)
    params = LBFGSBParams(epsilon=1e-8, max_iterations=100)
    result = lbfgsb(objective, np.array([0.0]), lower=-5.0, upper=15.0, params=params)
    print(result.summary())


if __name__ == "__main__":
    main()
