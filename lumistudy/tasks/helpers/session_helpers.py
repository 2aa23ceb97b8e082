import math
import random
import time

from django.core.exceptions import ValidationError
from django.utils import timezone

from lumistudy.tasks.helpers.prediction import Equations, compute_prediction
from lumistudy.tasks.helpers.results import OPTIONAL_METRIC_FIELDS, Condition, Task, TaskResult
from lumistudy.tasks.registry import CONDITIONS, TASK_ID_PREFIXES, TASK_REGISTRY

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_participant_id(rng=None, now_ms=None) -> str:
    """
    Return a pseudonymous participant id ``P_<time>_<random>``, upper-cased.

    <time> is epoch milliseconds in base 36; <random> is six base-36 characters.
    """
    rng = rng or random.Random()
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    random_part = "".join(rng.choice(_BASE36) for _ in range(6))
    return f"P_{_to_base36(now_ms)}_{random_part}".upper()


def create_conditions(rng=None) -> list[Condition]:
    """The four interface x room conditions in a random order."""
    rng = rng or random.Random()
    conditions = [Condition(**c) for c in CONDITIONS]
    rng.shuffle(conditions)
    return conditions


def _target_value(task_type, rng):
    option_sets = TASK_REGISTRY[task_type]["option_sets"]
    if not option_sets:
        return None
    return rng.choice(rng.choice(option_sets))


def create_tasks(rng=None) -> list[Task]:
    """
    Build one condition's battery: each registered task type repeated per the
    registry, with a random target value and matching instruction, shuffled.
    """
    rng = rng or random.Random()
    tasks = []
    for task_type, meta in TASK_REGISTRY.items():
        for n in range(1, meta["repetitions"] + 1):
            target = _target_value(task_type, rng)
            instruction = meta["instruction"]
            if target is not None and meta["target_instruction"]:
                instruction = meta["target_instruction"].format(target=target)
            tasks.append(
                Task(
                    id=f"{TASK_ID_PREFIXES[task_type]}-{n}",
                    type=task_type,
                    instruction=instruction,
                    target_value=target,
                )
            )
    rng.shuffle(tasks)
    return tasks


def validate_task(task: Task) -> None:
    """
    Raise ``ValidationError`` if *task* cannot be presented meaningfully:
    an unknown type, or a target value absent from that type's option sets.
    """
    if task.type not in TASK_REGISTRY:
        raise ValidationError({"type": f"'{task.type}' is not a registered task type."})
    option_sets = TASK_REGISTRY[task.type]["option_sets"]
    if not option_sets:
        return
    allowed = {option for options in option_sets for option in options}
    if task.target_value not in allowed:
        raise ValidationError(
            {"target_value": f"'{task.target_value}' is not an option for task type '{task.type}'."}
        )


def list_options_for(task: Task) -> list[str]:
    """The option set containing the task's target (what the widget shows)."""
    for options in TASK_REGISTRY[task.type]["option_sets"]:
        if task.target_value in options:
            return list(options)
    return []


def calculate_cursor_distance(points) -> int:
    """
    Rounded Euclidean length of a cursor path given as ``{"x", "y"}`` points.

    Raises ``ValueError`` for a point that is not a mapping with ``x`` and ``y``.
    """
    for point in points:
        if not isinstance(point, dict) or "x" not in point or "y" not in point:
            raise ValueError(f"cursor_path points need x and y, got {point!r}")
    if len(points) < 2:
        return 0
    distance = 0.0
    for previous, current in zip(points, points[1:]):
        distance += math.hypot(current["x"] - previous["x"], current["y"] - previous["y"])
    return round(distance)


def build_task_result(
    task: Task,
    condition: Condition | None,
    participant_id: str,
    metrics: dict,
    equations: Equations = Equations(),
) -> TaskResult:
    """
    Stamp raw widget *metrics* with session context and annotate them with
    the predicted time and efficiency.

    Raises ``ValueError`` for negative times or counts, or a non-boolean ``success``.
    """
    if not isinstance(metrics["success"], bool):
        raise ValueError(f"success must be true or false, got {metrics['success']!r}")
    for key in ("completion_time_ms", "total_clicks", "incorrect_clicks"):
        if metrics[key] < 0:
            raise ValueError(f"{key} must be >= 0, got {metrics[key]}")

    cursor_distance_px = metrics.get("cursor_distance_px")
    if cursor_distance_px is None:
        cursor_distance_px = calculate_cursor_distance(metrics.get("cursor_path") or [])

    optional = {key: metrics[key] for key in OPTIONAL_METRIC_FIELDS if metrics.get(key) is not None}
    prediction = compute_prediction(task.type, metrics, equations)

    return TaskResult(
        participant_id=participant_id,
        task_id=task.id,
        task_type=task.type,
        condition_label=condition.label if condition else "",
        interface_mode=condition.interface_mode if condition else "light",
        room_condition=condition.room_condition if condition else "bright",
        completion_time_ms=metrics["completion_time_ms"],
        total_clicks=metrics["total_clicks"],
        incorrect_clicks=metrics["incorrect_clicks"],
        cursor_distance_px=cursor_distance_px,
        success=metrics["success"],
        timestamp=timezone.now().isoformat(),
        predicted_time_ms=prediction["predicted_time_ms"],
        efficiency=prediction["efficiency"],
        **optional,
    )
