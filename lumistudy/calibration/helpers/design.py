"""Balanced, shuffled trial designs for the two calibration activities.

The full sequence is generated up front (no adaptive or staircase design).
Sizes are fixed by the registry; order and Hick's targets come from the
supplied ``random.Random``, which callers seed so a run can be replayed
for auditing.
"""
import random

from lumistudy.calibration.helpers.trials import FittsTrialSpec, HicksTrialSpec
from lumistudy.calibration.registry import (
    FITTS_DISTANCES_PX,
    FITTS_REPETITIONS,
    FITTS_WIDTHS_PX,
    HICKS_CHOICE_LEVELS,
    HICKS_KEYS,
    HICKS_REPETITIONS,
)


def generate_fitts_trials(
    rng: random.Random | None = None,
    widths=None,
    distances=None,
    repetitions: int | None = None,
) -> list[FittsTrialSpec]:
    """Every width x distance pair, ``repetitions`` times each, shuffled."""
    rng = rng or random.Random()
    widths = FITTS_WIDTHS_PX if widths is None else widths
    distances = FITTS_DISTANCES_PX if distances is None else distances
    repetitions = FITTS_REPETITIONS if repetitions is None else repetitions

    trials = [
        FittsTrialSpec(width=width, distance=distance)
        for width in widths
        for distance in distances
        for _ in range(repetitions)
    ]
    rng.shuffle(trials)
    return trials


def generate_hicks_trials(
    rng: random.Random | None = None,
    choice_levels=None,
    repetitions: int | None = None,
    keys=None,
) -> list[HicksTrialSpec]:
    """
    ``repetitions`` trials per choice level, shuffled across levels.

    Each trial shows a random contiguous window of ``num_choices`` keys and
    the target is drawn uniformly from that window.
    """
    rng = rng or random.Random()
    choice_levels = HICKS_CHOICE_LEVELS if choice_levels is None else choice_levels
    repetitions = HICKS_REPETITIONS if repetitions is None else repetitions
    keys = HICKS_KEYS if keys is None else keys

    trials = []
    for num_choices in choice_levels:
        for _ in range(repetitions):
            range_start_index = rng.randrange(len(keys) - num_choices + 1)
            window = keys[range_start_index:range_start_index + num_choices]
            trials.append(
                HicksTrialSpec(
                    num_choices=num_choices,
                    target_key=rng.choice(window),
                    range_start_index=range_start_index,
                )
            )
    rng.shuffle(trials)
    return trials
