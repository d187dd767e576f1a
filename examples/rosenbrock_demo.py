"""
Example: 25-dimensional chained Rosenbrock valley with mixed bounds.

Every coordinate is restricted to [2, 4] except the third, which is free.
The box excludes the unconstrained minimizer (all ones), so several
coordinates finish on their lower bound with a zero projected gradient.
"""

import numpy as np

from dualopt import AutoDiffObjective, lbfgsb
from dualopt.problems import rosenbrock_chain


def main() -> None:
    n = 25
    lower = np.full(n, 2.0)
    upper = np.full(n, 4.0)
    lower[2] = -np.inf
    upper[2] = np.inf

    x0 = np.full(n, 3.0)
    x0[0] = x0[1] = 2.0
    x0[5] = x0[7] = 4.0

    objective = AutoDiffObjective(rosenbrock_chain)
    result = lbfgsb(objective, x0, lower=lower, upper=upper)
    print(result.summary())


if __name__ == "__main__":
    main()
