"""
Calibration design constants.

Every value is configurable via Django settings so a study can be
re-parameterised without code changes.
"""
from django.conf import settings

# Fitts' Law pointing design: widths x distances, each pair repeated.
FITTS_WIDTHS_PX: list[int] = getattr(settings, "FITTS_WIDTHS_PX", [20, 40, 60, 80, 100])
FITTS_DISTANCES_PX: list[int] = getattr(settings, "FITTS_DISTANCES_PX", [100, 200, 300, 400, 500])
FITTS_REPETITIONS: int = getattr(settings, "FITTS_REPETITIONS", 2)

# Hick's Law choice design: a contiguous window of keys per trial.
HICKS_KEYS: list[str] = getattr(settings, "HICKS_KEYS", ["1", "2", "3", "4", "5", "6", "7"])
HICKS_CHOICE_LEVELS: list[int] = getattr(settings, "HICKS_CHOICE_LEVELS", [2, 3, 4, 5, 6])
HICKS_REPETITIONS: int = getattr(settings, "HICKS_REPETITIONS", 8)

# Model fitting policy
MIN_FIT_TRIALS: int = getattr(settings, "MIN_FIT_TRIALS", 3)
FITTS_TRIM_COUNT: int = getattr(settings, "FITTS_TRIM_COUNT", 5)
FITTS_TRIM_ABOVE: int = getattr(settings, "FITTS_TRIM_ABOVE", 10)
HICKS_RT_MIN_MS: float = getattr(settings, "HICKS_RT_MIN_MS", 150)
HICKS_RT_MAX_MS: float = getattr(settings, "HICKS_RT_MAX_MS", 1500)
HICKS_MIN_LEVELS: int = getattr(settings, "HICKS_MIN_LEVELS", 3)

# Population-average prior used whenever a personal model cannot be fitted.
FALLBACK_INTERCEPT_MS: float = 200
FALLBACK_SLOPE_MS: float = 150
