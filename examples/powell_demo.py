"""
Example: Powell's singular function in four variables.

The start (3, -1, 0, 1) lies outside the box [-2, 2] on the first coordinate
and is clipped before the first iteration. The third coordinate is unbounded.
"""

import numpy as np

from dualopt import AutoDiffObjective, LBFGSBParams, lbfgsb
from dualopt.problems import powell


def main() -> None:
    n = 4
    lower = np.full(n, -2.0)
    upper = np.full(n, 2.0)
    lower[2] = -np.inf
    upper[2] = np.inf

    objective = AutoDiffObjective(powell, dim=n)
    params = LBFGSBParams(epsilon=1e-8, max_iterations=500)
    result = lbfgsb(
        objective, np.array([3.0, -1.0, 0.0, 1.0]), lower=lower, upper=upper, params=params
    )
    print(result.summary())


if __name__ == "__main__":
    main()
