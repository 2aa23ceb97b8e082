"""Ordinary least-squares fit of ``y = a + b * x`` with R².

Pure function, no Django dependencies beyond the result type. Never raises
for degenerate input: too few points or no spread in x yield documented
flat-line results instead.
"""
import math
from typing import Sequence

from lumistudy.calibration.helpers.trials import LinearModel


def linear_regression(x_values: Sequence[float], y_values: Sequence[float]) -> LinearModel:
    """
    Fit a straight line through paired samples.

    Returns:
      LinearModel(0, 0, 0)          : fewer than 2 points
      LinearModel(mean(y), 0, 0)    : all x identical (slope undefined)
      LinearModel(a, b, r2)         : otherwise; r2 is clamped to >= 0

    Raises:
      ValueError if the two sequences differ in length (a caller bug, not
      insufficient data).
    """
    if len(x_values) != len(y_values):
        raise ValueError("x_values and y_values must be the same length")

    n = len(x_values)
    if n < 2:
        return LinearModel(a=0.0, b=0.0, r2=0.0)

    sum_x = math.fsum(x_values)
    sum_y = math.fsum(y_values)
    sum_xy = math.fsum(x * y for x, y in zip(x_values, y_values))
    sum_x2 = math.fsum(x * x for x in x_values)

    denominator = n * sum_x2 - sum_x * sum_x
    # Identical x values can leave a rounding residue in the denominator.
    if denominator == 0 or all(x == x_values[0] for x in x_values):
        return LinearModel(a=sum_y / n, b=0.0, r2=0.0)

    b = (n * sum_xy - sum_x * sum_y) / denominator
    a = (sum_y - b * sum_x) / n

    y_mean = sum_y / n
    ss_total = math.fsum((y - y_mean) ** 2 for y in y_values)
    ss_residual = math.fsum((y - (a + b * x)) ** 2 for x, y in zip(x_values, y_values))
    r2 = 1 - ss_residual / ss_total if ss_total > 0 else 0.0

    return LinearModel(a=a, b=b, r2=max(0.0, r2))
