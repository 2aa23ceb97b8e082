"""Calibration trial specs, trial results and fitted equations.

All records are frozen dataclasses: once created they are never mutated.
Each has ``as_dict()`` / ``from_dict()`` so it can travel through the
JSON-serialised Django session.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field

from django.utils import timezone

from lumistudy.calibration.registry import FALLBACK_INTERCEPT_MS, FALLBACK_SLOPE_MS


def index_of_difficulty(distance: float, width: float) -> float:
    """Return the Shannon index of difficulty ``log2(distance / width + 1)`` in bits."""
    return math.log2(distance / width + 1)


@dataclass(frozen=True)
class FittsTrialSpec:
    width: float
    distance: float

    def __post_init__(self):
        if self.width <= 0 or self.distance <= 0:
            raise ValueError(f"Fitts trial geometry must be positive (width={self.width}, distance={self.distance})")

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> FittsTrialSpec:
        return cls(width=data["width"], distance=data["distance"])


@dataclass(frozen=True)
class HicksTrialSpec:
    num_choices: int
    target_key: str
    range_start_index: int

    def active_keys(self, keys: list[str]) -> list[str]:
        """The contiguous window of response keys shown for this trial."""
        return keys[self.range_start_index:self.range_start_index + self.num_choices]

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> HicksTrialSpec:
        return cls(
            num_choices=data["num_choices"],
            target_key=data["target_key"],
            range_start_index=data["range_start_index"],
        )


@dataclass(frozen=True)
class FittsTrialResult:
    trial_index: int
    target_width: float
    target_distance: float
    movement_time_ms: float
    index_of_difficulty: float
    success: bool
    timestamp: str

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> FittsTrialResult:
        return cls(**data)


@dataclass(frozen=True)
class HicksTrialResult:
    trial_index: int
    num_choices: int
    target_key: str
    reaction_time_ms: float
    correct: bool
    timestamp: str
    range_start_index: int = 0
    active_keys: tuple[str, ...] = ()

    def as_dict(self) -> dict:
        data = asdict(self)
        data["active_keys"] = list(self.active_keys)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> HicksTrialResult:
        data = dict(data)
        data["active_keys"] = tuple(data.get("active_keys", ()))
        return cls(**data)


@dataclass(frozen=True)
class LinearModel:
    """``y = a + b * x`` with its coefficient of determination."""

    a: float
    b: float
    r2: float

    def predict(self, x: float) -> float:
        return self.a + self.b * x

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None) -> LinearModel | None:
        if data is None:
            return None
        return cls(a=data["a"], b=data["b"], r2=data["r2"])


FALLBACK_EQUATION = LinearModel(a=FALLBACK_INTERCEPT_MS, b=FALLBACK_SLOPE_MS, r2=0.0)


def is_uncalibrated(equation: LinearModel | None) -> bool:
    """True if *equation* is missing or is the population-average fallback."""
    return equation is None or equation == FALLBACK_EQUATION


@dataclass(frozen=True)
class CalibrationData:
    fitts_trials: tuple[FittsTrialResult, ...] = ()
    hicks_trials: tuple[HicksTrialResult, ...] = ()
    fitts_equation: LinearModel | None = None
    hicks_equation: LinearModel | None = None
    calibration_complete: bool = False
    random_seed: str = field(default="", compare=False)

    def as_dict(self) -> dict:
        return {
            "fitts_trials": [t.as_dict() for t in self.fitts_trials],
            "hicks_trials": [t.as_dict() for t in self.hicks_trials],
            "fitts_equation": self.fitts_equation.as_dict() if self.fitts_equation else None,
            "hicks_equation": self.hicks_equation.as_dict() if self.hicks_equation else None,
            "calibration_complete": self.calibration_complete,
            "random_seed": self.random_seed,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> CalibrationData | None:
        if data is None:
            return None
        return cls(
            fitts_trials=tuple(FittsTrialResult.from_dict(t) for t in data.get("fitts_trials", [])),
            hicks_trials=tuple(HicksTrialResult.from_dict(t) for t in data.get("hicks_trials", [])),
            fitts_equation=LinearModel.from_dict(data.get("fitts_equation")),
            hicks_equation=LinearModel.from_dict(data.get("hicks_equation")),
            calibration_complete=data.get("calibration_complete", False),
            random_seed=data.get("random_seed", ""),
        )


def record_fitts_trial(
    spec: FittsTrialSpec,
    movement_time_ms: float,
    success: bool,
    trial_index: int = 0,
    timestamp: str | None = None,
) -> FittsTrialResult:
    """Build the immutable result of one pointing trial.

    Raises ``ValueError`` for a negative movement time or a non-boolean ``success``.
    """
    if movement_time_ms < 0:
        raise ValueError(f"movement_time_ms must be >= 0, got {movement_time_ms}")
    if not isinstance(success, bool):
        raise ValueError(f"success must be true or false, got {success!r}")
    return FittsTrialResult(
        trial_index=trial_index,
        target_width=spec.width,
        target_distance=spec.distance,
        movement_time_ms=movement_time_ms,
        index_of_difficulty=index_of_difficulty(spec.distance, spec.width),
        success=success,
        timestamp=timestamp or timezone.now().isoformat(),
    )


def record_hicks_trial(
    spec: HicksTrialSpec,
    reaction_time_ms: float,
    correct: bool,
    trial_index: int = 0,
    timestamp: str | None = None,
    keys: list[str] | None = None,
) -> HicksTrialResult:
    """Build the immutable result of one choice-reaction trial.

    Raises ``ValueError`` for a negative reaction time or a non-boolean ``correct``.
    """
    if reaction_time_ms < 0:
        raise ValueError(f"reaction_time_ms must be >= 0, got {reaction_time_ms}")
    if not isinstance(correct, bool):
        raise ValueError(f"correct must be true or false, got {correct!r}")
    return HicksTrialResult(
        trial_index=trial_index,
        num_choices=spec.num_choices,
        target_key=spec.target_key,
        reaction_time_ms=reaction_time_ms,
        correct=correct,
        timestamp=timestamp or timezone.now().isoformat(),
        range_start_index=spec.range_start_index,
        active_keys=tuple(spec.active_keys(keys)) if keys else (),
    )
