"""
Study session state and its transitions.

``StudyState`` is the single source of truth for one participant run. It is
frozen: every transition takes the previous state and returns a complete
new one (``next = transition(prev, ...)``), so a late timer callback can
never write into a half-updated state.

Phases:
    consent -> instructions -> calibration -> condition-intro -> task
    -> condition-complete -> (condition-intro ... | completion)
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace

from django.utils import timezone

from lumistudy.calibration.helpers.runner import CalibrationRun
from lumistudy.calibration.helpers.trials import CalibrationData
from lumistudy.tasks.helpers.prediction import Equations
from lumistudy.tasks.helpers.results import Condition, Task, TaskResult
from lumistudy.tasks.helpers.session_helpers import (
    build_task_result,
    create_conditions,
    create_tasks,
    generate_participant_id,
)

logger = logging.getLogger(__name__)

PHASE_CONSENT = "consent"
PHASE_INSTRUCTIONS = "instructions"
PHASE_CALIBRATION = "calibration"
PHASE_CONDITION_INTRO = "condition-intro"
PHASE_TASK = "task"
PHASE_CONDITION_COMPLETE = "condition-complete"
PHASE_COMPLETION = "completion"


@dataclass(frozen=True)
class ParticipantData:
    participant_id: str = ""
    start_time: str = ""
    end_time: str | None = None
    condition_order: tuple[str, ...] = ()
    completed: bool = False

    def as_dict(self) -> dict:
        return {
            "participant_id": self.participant_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "condition_order": list(self.condition_order),
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ParticipantData:
        return cls(
            participant_id=data.get("participant_id", ""),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time"),
            condition_order=tuple(data.get("condition_order", ())),
            completed=data.get("completed", False),
        )


@dataclass(frozen=True)
class StudyState:
    phase: str = PHASE_CONSENT
    participant_id: str = ""
    conditions: tuple[Condition, ...] = ()
    current_condition_index: int = 0
    tasks: tuple[Task, ...] = ()
    current_task_index: int = 0
    results: tuple[TaskResult, ...] = ()
    participant_data: ParticipantData = ParticipantData()
    calibration_data: CalibrationData | None = None
    calibration_run: CalibrationRun | None = None

    @property
    def current_condition(self) -> Condition | None:
        if self.current_condition_index >= len(self.conditions):
            return None
        return self.conditions[self.current_condition_index]

    @property
    def current_task(self) -> Task | None:
        if self.current_task_index >= len(self.tasks):
            return None
        return self.tasks[self.current_task_index]

    @property
    def equations(self) -> Equations:
        if self.calibration_data is None:
            return Equations()
        return Equations(self.calibration_data.fitts_equation, self.calibration_data.hicks_equation)

    def as_dict(self) -> dict:
        return {
            "phase": self.phase,
            "participant_id": self.participant_id,
            "conditions": [c.as_dict() for c in self.conditions],
            "current_condition_index": self.current_condition_index,
            "tasks": [t.as_dict() for t in self.tasks],
            "current_task_index": self.current_task_index,
            "results": [r.as_dict() for r in self.results],
            "participant_data": self.participant_data.as_dict(),
            "calibration_data": self.calibration_data.as_dict() if self.calibration_data else None,
            "calibration_run": self.calibration_run.as_dict() if self.calibration_run else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StudyState:
        return cls(
            phase=data["phase"],
            participant_id=data.get("participant_id", ""),
            conditions=tuple(Condition.from_dict(c) for c in data.get("conditions", [])),
            current_condition_index=data.get("current_condition_index", 0),
            tasks=tuple(Task.from_dict(t) for t in data.get("tasks", [])),
            current_task_index=data.get("current_task_index", 0),
            results=tuple(TaskResult.from_dict(r) for r in data.get("results", [])),
            participant_data=ParticipantData.from_dict(data.get("participant_data", {})),
            calibration_data=CalibrationData.from_dict(data.get("calibration_data")),
            calibration_run=CalibrationRun.from_dict(data.get("calibration_run")),
        )


def initial_state() -> StudyState:
    return StudyState()


def start_study(prev: StudyState, rng: random.Random | None = None) -> StudyState:
    """Consent given: assign a participant id, condition order and first battery."""
    if prev.phase != PHASE_CONSENT:
        return prev
    rng = rng or random.Random()
    participant_id = generate_participant_id(rng)
    conditions = tuple(create_conditions(rng))
    logger.info("Study started participant=%s", participant_id)
    return StudyState(
        phase=PHASE_INSTRUCTIONS,
        participant_id=participant_id,
        conditions=conditions,
        tasks=tuple(create_tasks(rng)),
        participant_data=ParticipantData(
            participant_id=participant_id,
            start_time=timezone.now().isoformat(),
            condition_order=tuple(c.label for c in conditions),
        ),
    )


def next_phase(prev: StudyState, rng: random.Random | None = None) -> StudyState:
    """Advance one step along the study flow. Calibration leaves via ``set_calibration_data``."""
    if prev.phase == PHASE_INSTRUCTIONS:
        return replace(prev, phase=PHASE_CALIBRATION)

    if prev.phase == PHASE_CONDITION_INTRO:
        return replace(
            prev,
            phase=PHASE_TASK,
            current_task_index=0,
            tasks=tuple(create_tasks(rng or random.Random())),
        )

    if prev.phase == PHASE_TASK:
        if prev.current_task_index < len(prev.tasks) - 1:
            return replace(prev, current_task_index=prev.current_task_index + 1)
        return replace(prev, phase=PHASE_CONDITION_COMPLETE)

    if prev.phase == PHASE_CONDITION_COMPLETE:
        if prev.current_condition_index < len(prev.conditions) - 1:
            return replace(
                prev,
                phase=PHASE_CONDITION_INTRO,
                current_condition_index=prev.current_condition_index + 1,
                current_task_index=0,
            )
        logger.info("Study completed participant=%s results=%d", prev.participant_id, len(prev.results))
        return replace(
            prev,
            phase=PHASE_COMPLETION,
            participant_data=replace(
                prev.participant_data,
                end_time=timezone.now().isoformat(),
                completed=True,
            ),
        )

    return prev


def set_calibration_run(prev: StudyState, run: CalibrationRun | None) -> StudyState:
    if prev.phase != PHASE_CALIBRATION:
        return prev
    return replace(prev, calibration_run=run)


def set_calibration_data(prev: StudyState, data: CalibrationData) -> StudyState:
    """Freeze the calibration result into the session. Allowed exactly once."""
    if prev.phase != PHASE_CALIBRATION or prev.calibration_data is not None:
        logger.warning(
            "Calibration data rejected participant=%s phase=%s", prev.participant_id, prev.phase
        )
        return prev
    return replace(
        prev,
        calibration_data=data,
        calibration_run=None,
        phase=PHASE_CONDITION_INTRO,
    )


def record_task_result(prev: StudyState, metrics: dict) -> StudyState:
    """Append the annotated result of the current task. Raises ``ValueError`` for invalid metrics."""
    task = prev.current_task
    if prev.phase != PHASE_TASK or task is None:
        return prev
    result = build_task_result(
        task,
        prev.current_condition,
        prev.participant_id,
        metrics,
        prev.equations,
    )
    return replace(prev, results=prev.results + (result,))


def reset_study(prev: StudyState) -> StudyState:
    """Discard everything, including any calibration in progress. Nothing is kept."""
    logger.info("Study reset participant=%s", prev.participant_id or "-")
    return initial_state()
