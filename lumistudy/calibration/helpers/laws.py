"""
Personalised Fitts' and Hick's Law models.

Both models go through one routine, ``fit_with_policy``, parameterised by:
  keep       : predicate selecting usable trials
  trim       : outliers dropped from each end (by y) once enough trials remain
  aggregate  : optional grouping key; one mean-y point per group is fitted

Whenever too little data survives a step the population-average
``FALLBACK_EQUATION`` is returned instead of a fitted line.
"""
from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass
from typing import Callable, Hashable, Sequence

from lumistudy.calibration.helpers.regression import linear_regression
from lumistudy.calibration.helpers.trials import (
    FALLBACK_EQUATION,
    FittsTrialResult,
    HicksTrialResult,
    LinearModel,
    index_of_difficulty,
)
from lumistudy.calibration.registry import (
    FITTS_TRIM_ABOVE,
    FITTS_TRIM_COUNT,
    HICKS_MIN_LEVELS,
    HICKS_RT_MAX_MS,
    HICKS_RT_MIN_MS,
    MIN_FIT_TRIALS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitPolicy:
    name: str
    keep: Callable[[object], bool]
    x: Callable[[object], float]
    y: Callable[[object], float]
    trim_count: int = 0
    trim_above: int = 0
    aggregate_by: Callable[[object], Hashable] | None = None
    level_x: Callable[[Hashable], float] | None = None
    min_trials: int = MIN_FIT_TRIALS
    min_levels: int = 0


def fit_with_policy(trials: Sequence, policy: FitPolicy) -> LinearModel:
    """Filter, trim and optionally aggregate *trials*, then fit a line."""
    kept = [t for t in trials if policy.keep(t)]
    if len(kept) < policy.min_trials:
        logger.debug("%s fit: %d usable trials, using fallback", policy.name, len(kept))
        return FALLBACK_EQUATION

    if policy.trim_count and len(kept) > policy.trim_above:
        ordered = sorted(kept, key=policy.y)
        kept = ordered[policy.trim_count:len(ordered) - policy.trim_count]
        if len(kept) < policy.min_trials:
            logger.debug("%s fit: %d trials after trimming, using fallback", policy.name, len(kept))
            return FALLBACK_EQUATION

    if policy.aggregate_by is None:
        return linear_regression([policy.x(t) for t in kept], [policy.y(t) for t in kept])

    groups: dict[Hashable, list[float]] = {}
    for t in kept:
        groups.setdefault(policy.aggregate_by(t), []).append(policy.y(t))
    levels = sorted(groups)
    if len(levels) < policy.min_levels:
        logger.debug("%s fit: %d distinct levels, using fallback", policy.name, len(levels))
        return FALLBACK_EQUATION

    return linear_regression(
        [policy.level_x(level) for level in levels],
        [statistics.fmean(groups[level]) for level in levels],
    )


FITTS_POLICY = FitPolicy(
    name="fitts",
    keep=lambda t: t.success,
    x=lambda t: t.index_of_difficulty,
    y=lambda t: t.movement_time_ms,
    trim_count=FITTS_TRIM_COUNT,
    trim_above=FITTS_TRIM_ABOVE,
)

HICKS_POLICY = FitPolicy(
    name="hicks",
    keep=lambda t: t.correct and HICKS_RT_MIN_MS <= t.reaction_time_ms <= HICKS_RT_MAX_MS,
    x=lambda t: math.log2(t.num_choices),
    y=lambda t: t.reaction_time_ms,
    aggregate_by=lambda t: t.num_choices,
    level_x=math.log2,
    min_levels=HICKS_MIN_LEVELS,
)


def compute_fitts_equation(trials: Sequence[FittsTrialResult]) -> LinearModel:
    """MT = a + b * log2(D/W + 1), fitted on successful trials with outliers trimmed."""
    return fit_with_policy(trials, FITTS_POLICY)


def compute_hicks_equation(trials: Sequence[HicksTrialResult]) -> LinearModel:
    """RT = a + b * log2(n), fitted on per-level mean RT of correct, plausible trials."""
    return fit_with_policy(trials, HICKS_POLICY)


def predict_fitts_time(equation: LinearModel, distance: float, width: float) -> float:
    return max(0.0, equation.predict(index_of_difficulty(distance, width)))


def predict_hicks_time(equation: LinearModel, num_choices: float) -> float:
    return max(0.0, equation.predict(math.log2(num_choices)))
