"""
Example: fitting y = exp(m t + c) to 67 noisy observations.

The two parameters use a fixed-width dual space (width 2). The data were
generated with m = 0.3 and c = 0.1.
"""

import numpy as np

from dualopt import AutoDiffObjective, lbfgsb
from dualopt.problems import default_exponential_fit


def main() -> None:
    objective = AutoDiffObjective(default_exponential_fit(), dim=2)
    result = lbfgsb(objective, np.array([0.0, 0.0]))
    m, c = result.x
    print(f"Solved in {result.nit} iterations ({result.reason.value})")
    print(f"m = {m:.6f}, c = {c:.6f}")
    print(f"Final loss: {result.fun:.6f}")


if __name__ == "__main__":
    main()
