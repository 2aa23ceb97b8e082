"""
Calibration run state machine.

    idle -> generating-trials -> running-trials -> fitting-model -> complete

Trials run strictly one at a time: Fitts' trials first, then Hick's. A trial
must be armed (its ready period has elapsed) before a response registers,
and exactly one response is recorded per trial.

Every transition is a pure function returning a new ``CalibrationRun``.
Transitions that name a trial the run has already left (a late timer, a
duplicate submission) return the run unchanged with ``accepted=False``.
"""
from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, replace

from lumistudy.calibration.helpers.design import generate_fitts_trials, generate_hicks_trials
from lumistudy.calibration.helpers.laws import compute_fitts_equation, compute_hicks_equation
from lumistudy.calibration.helpers.trials import (
    CalibrationData,
    FittsTrialResult,
    FittsTrialSpec,
    HicksTrialResult,
    HicksTrialSpec,
    LinearModel,
    record_fitts_trial,
    record_hicks_trial,
)
from lumistudy.calibration.registry import HICKS_KEYS

logger = logging.getLogger(__name__)

STAGE_IDLE = "idle"
STAGE_GENERATING = "generating-trials"
STAGE_RUNNING = "running-trials"
STAGE_FITTING = "fitting-model"
STAGE_COMPLETE = "complete"

PHASE_FITTS = "fitts"
PHASE_HICKS = "hicks"


@dataclass(frozen=True)
class CalibrationRun:
    stage: str = STAGE_IDLE
    random_seed: str = ""
    fitts_specs: tuple[FittsTrialSpec, ...] = ()
    hicks_specs: tuple[HicksTrialSpec, ...] = ()
    phase: str = PHASE_FITTS
    trial_index: int = 0
    armed: bool = False
    fitts_results: tuple[FittsTrialResult, ...] = ()
    hicks_results: tuple[HicksTrialResult, ...] = ()
    fitts_equation: LinearModel | None = None
    hicks_equation: LinearModel | None = None

    @property
    def current_specs(self) -> tuple:
        return self.fitts_specs if self.phase == PHASE_FITTS else self.hicks_specs

    @property
    def current_spec(self):
        specs = self.current_specs
        if self.stage != STAGE_RUNNING or self.trial_index >= len(specs):
            return None
        return specs[self.trial_index]

    def as_dict(self) -> dict:
        return {
            "stage": self.stage,
            "random_seed": self.random_seed,
            "fitts_specs": [s.as_dict() for s in self.fitts_specs],
            "hicks_specs": [s.as_dict() for s in self.hicks_specs],
            "phase": self.phase,
            "trial_index": self.trial_index,
            "armed": self.armed,
            "fitts_results": [r.as_dict() for r in self.fitts_results],
            "hicks_results": [r.as_dict() for r in self.hicks_results],
            "fitts_equation": self.fitts_equation.as_dict() if self.fitts_equation else None,
            "hicks_equation": self.hicks_equation.as_dict() if self.hicks_equation else None,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> CalibrationRun | None:
        if data is None:
            return None
        return cls(
            stage=data["stage"],
            random_seed=data.get("random_seed", ""),
            fitts_specs=tuple(FittsTrialSpec.from_dict(s) for s in data.get("fitts_specs", [])),
            hicks_specs=tuple(HicksTrialSpec.from_dict(s) for s in data.get("hicks_specs", [])),
            phase=data.get("phase", PHASE_FITTS),
            trial_index=data.get("trial_index", 0),
            armed=data.get("armed", False),
            fitts_results=tuple(FittsTrialResult.from_dict(r) for r in data.get("fitts_results", [])),
            hicks_results=tuple(HicksTrialResult.from_dict(r) for r in data.get("hicks_results", [])),
            fitts_equation=LinearModel.from_dict(data.get("fitts_equation")),
            hicks_equation=LinearModel.from_dict(data.get("hicks_equation")),
        )


def begin_generation(run: CalibrationRun, seed: str | None = None) -> CalibrationRun:
    if run.stage != STAGE_IDLE:
        return run
    return replace(run, stage=STAGE_GENERATING, random_seed=seed or str(uuid.uuid4()))


def generate_trials(run: CalibrationRun) -> CalibrationRun:
    """Build both trial sequences from the run's seed and start the first trial."""
    if run.stage != STAGE_GENERATING:
        return run
    rng = random.Random(run.random_seed)
    fitts_specs = tuple(generate_fitts_trials(rng))
    hicks_specs = tuple(generate_hicks_trials(rng))
    logger.info(
        "Calibration trials generated seed=%s fitts=%d hicks=%d",
        run.random_seed, len(fitts_specs), len(hicks_specs),
    )
    return replace(
        run,
        stage=STAGE_RUNNING,
        fitts_specs=fitts_specs,
        hicks_specs=hicks_specs,
        phase=PHASE_FITTS,
        trial_index=0,
        armed=False,
    )


def start_run(seed: str | None = None) -> CalibrationRun:
    """A fresh run with its trials generated and the first Fitts' trial pending."""
    return generate_trials(begin_generation(CalibrationRun(), seed))


def _is_current(run: CalibrationRun, phase: str, trial_index: int) -> bool:
    return (
        run.stage == STAGE_RUNNING
        and run.phase == phase
        and run.trial_index == trial_index
        and run.trial_index < len(run.current_specs)
    )


def arm(run: CalibrationRun, phase: str, trial_index: int) -> tuple[CalibrationRun, bool]:
    """Open the response window of the current trial."""
    if not _is_current(run, phase, trial_index):
        logger.debug("Stale arm ignored phase=%s trial=%s", phase, trial_index)
        return run, False
    return replace(run, armed=True), True


def _advance(run: CalibrationRun) -> CalibrationRun:
    next_index = run.trial_index + 1
    if next_index < len(run.current_specs):
        return replace(run, trial_index=next_index, armed=False)
    if run.phase == PHASE_FITTS and run.hicks_specs:
        return replace(run, phase=PHASE_HICKS, trial_index=0, armed=False)
    return fit_models(replace(run, stage=STAGE_FITTING, trial_index=next_index, armed=False))


def respond_fitts(
    run: CalibrationRun,
    trial_index: int,
    movement_time_ms: float,
    success: bool,
) -> tuple[CalibrationRun, bool]:
    """Record the single response of the current armed Fitts' trial."""
    if not _is_current(run, PHASE_FITTS, trial_index) or not run.armed:
        logger.debug("Fitts response ignored trial=%s armed=%s", trial_index, run.armed)
        return run, False
    result = record_fitts_trial(run.current_spec, movement_time_ms, success, trial_index=trial_index)
    return _advance(replace(run, fitts_results=run.fitts_results + (result,))), True


def respond_hicks(
    run: CalibrationRun,
    trial_index: int,
    reaction_time_ms: float,
    correct: bool,
) -> tuple[CalibrationRun, bool]:
    """Record the single response of the current armed Hick's trial."""
    if not _is_current(run, PHASE_HICKS, trial_index) or not run.armed:
        logger.debug("Hick's response ignored trial=%s armed=%s", trial_index, run.armed)
        return run, False
    result = record_hicks_trial(
        run.current_spec, reaction_time_ms, correct, trial_index=trial_index, keys=HICKS_KEYS
    )
    return _advance(replace(run, hicks_results=run.hicks_results + (result,))), True


def fit_models(run: CalibrationRun) -> CalibrationRun:
    if run.stage != STAGE_FITTING:
        return run
    fitts_equation = compute_fitts_equation(run.fitts_results)
    hicks_equation = compute_hicks_equation(run.hicks_results)
    logger.info(
        "Calibration fitted fitts=(a=%.2f b=%.2f r2=%.3f) hicks=(a=%.2f b=%.2f r2=%.3f)",
        fitts_equation.a, fitts_equation.b, fitts_equation.r2,
        hicks_equation.a, hicks_equation.b, hicks_equation.r2,
    )
    return replace(
        run,
        stage=STAGE_COMPLETE,
        fitts_equation=fitts_equation,
        hicks_equation=hicks_equation,
    )


def preview(run: CalibrationRun) -> dict:
    """Live equations over the results so far; not binding on the final fit."""
    return {
        "fitts_equation": compute_fitts_equation(run.fitts_results).as_dict() if run.fitts_results else None,
        "hicks_equation": compute_hicks_equation(run.hicks_results).as_dict() if run.hicks_results else None,
    }


def to_calibration_data(run: CalibrationRun) -> CalibrationData | None:
    """Freeze a completed run into ``CalibrationData``; None until complete."""
    if run.stage != STAGE_COMPLETE:
        return None
    return CalibrationData(
        fitts_trials=run.fitts_results,
        hicks_trials=run.hicks_results,
        fitts_equation=run.fitts_equation,
        hicks_equation=run.hicks_equation,
        calibration_complete=True,
        random_seed=run.random_seed,
    )
