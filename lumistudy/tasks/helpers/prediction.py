"""
Predicted completion time and efficiency for a completed task.

``PREDICTORS`` maps each task type to a pure function
``(equations, metrics) -> predicted ms | None``. ``metrics`` is the dict of
raw measurements the task widget reported (geometry included). Any missing
input (no calibration yet, geometry not reported) gives ``None``; nothing
here raises.

Hick's driving variable: ``num_choices`` when the widget reports it,
otherwise ``total_clicks + 1``.
"""
from __future__ import annotations

from typing import Callable, NamedTuple

from django.conf import settings

from lumistudy.calibration.helpers.laws import predict_fitts_time, predict_hicks_time
from lumistudy.calibration.helpers.trials import LinearModel

KLM_KEYSTROKE_SECONDS: float = getattr(settings, "KLM_KEYSTROKE_SECONDS", 0.2)
VISUAL_SEARCH_FLOOR_MS: float = getattr(settings, "VISUAL_SEARCH_FLOOR_MS", 100)


class Equations(NamedTuple):
    fitts: LinearModel | None = None
    hicks: LinearModel | None = None


def predict_klm_time(characters: int, keystroke_time_seconds: float = KLM_KEYSTROKE_SECONDS) -> float:
    """Keystroke-Level Model: (characters + 1) keystrokes, in milliseconds."""
    return (characters + 1) * keystroke_time_seconds * 1000


def _positive(*values) -> bool:
    return all(v is not None and v > 0 for v in values)


def _fitts_term(equations: Equations, distance, width) -> float | None:
    if equations.fitts is None or distance is None or not _positive(width) or distance < 0:
        return None
    return predict_fitts_time(equations.fitts, distance, width)


def _hicks_term(equations: Equations, metrics: dict) -> float | None:
    if equations.hicks is None:
        return None
    choices = metrics.get("num_choices")
    if choices is None:
        total_clicks = metrics.get("total_clicks")
        if total_clicks is None or total_clicks < 0:
            return None
        choices = total_clicks + 1
    if choices < 1:
        return None
    return predict_hicks_time(equations.hicks, choices)


def _sum_terms(*terms) -> float | None:
    if any(t is None for t in terms):
        return None
    return sum(terms)


def predict_button_click(equations: Equations, metrics: dict) -> float | None:
    return _fitts_term(equations, metrics.get("target_distance_px"), metrics.get("target_width_px"))


def predict_drag_drop(equations: Equations, metrics: dict) -> float | None:
    # Acquire: cursor start -> item. Transport: item start -> drop zone.
    acquire = _fitts_term(equations, metrics.get("acquire_distance_px"), metrics.get("acquire_width_px"))
    transport = _fitts_term(equations, metrics.get("drag_distance_px"), metrics.get("drop_width_px"))
    return _sum_terms(acquire, transport)


def predict_list_select(equations: Equations, metrics: dict) -> float | None:
    return _sum_terms(
        _fitts_term(equations, metrics.get("target_distance_px"), metrics.get("target_width_px")),
        _hicks_term(equations, metrics),
    )


def predict_choice_reaction(equations: Equations, metrics: dict) -> float | None:
    return _hicks_term(equations, metrics)


def predict_form_input(equations: Equations, metrics: dict) -> float | None:
    characters = metrics.get("character_count")
    if characters is None and metrics.get("target_text") is not None:
        characters = len(metrics["target_text"])
    if characters is None or characters < 0:
        return None
    return predict_klm_time(characters)


def predict_visual_search(equations: Equations, metrics: dict) -> float | None:
    return None


PREDICTORS: dict[str, Callable[[Equations, dict], float | None]] = {
    "button-click": predict_button_click,
    "drag-drop": predict_drag_drop,
    "list-select": predict_list_select,
    "choice-reaction": predict_choice_reaction,
    "form-input": predict_form_input,
    "visual-search": predict_visual_search,
}


def visual_search_slope(completion_time_ms, distractor_count) -> float | None:
    """Milliseconds per distractor scanned after the perceptual/motor floor."""
    if completion_time_ms is None or not _positive(distractor_count):
        return None
    return (completion_time_ms - VISUAL_SEARCH_FLOOR_MS) / distractor_count


def compute_prediction(task_type: str, metrics: dict, equations: Equations = Equations()) -> dict:
    """
    Return ``{"predicted_time_ms": ..., "efficiency": ...}`` for one task.

    efficiency = predicted / actual when both are defined and actual > 0;
    visual-search uses the search slope instead.
    """
    predictor = PREDICTORS.get(task_type)
    predicted = predictor(equations, metrics) if predictor else None
    if predicted is not None:
        predicted = round(predicted)

    completion_time_ms = metrics.get("completion_time_ms")
    if task_type == "visual-search":
        efficiency = visual_search_slope(completion_time_ms, metrics.get("distractor_count"))
    elif predicted is not None and _positive(completion_time_ms):
        efficiency = predicted / completion_time_ms
    else:
        efficiency = None

    return {"predicted_time_ms": predicted, "efficiency": efficiency}
