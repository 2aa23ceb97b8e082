"""Unit tests for predicted completion time and efficiency."""
import math

import pytest

from lumistudy.calibration.helpers.trials import LinearModel
from lumistudy.tasks.helpers.prediction import (
    PREDICTORS,
    Equations,
    compute_prediction,
    predict_klm_time,
    visual_search_slope,
)
from lumistudy.tasks.registry import TASK_REGISTRY

FITTS = LinearModel(a=100, b=100, r2=0.9)
HICKS = LinearModel(a=200, b=100, r2=0.9)
CALIBRATED = Equations(fitts=FITTS, hicks=HICKS)


def _predict(task_type, equations=CALIBRATED, **metrics):
    return compute_prediction(task_type, metrics, equations)


class TestDispatch:
    def test_every_task_type_has_a_predictor(self):
        assert set(PREDICTORS) == set(TASK_REGISTRY)

    def test_unknown_type_has_no_prediction(self):
        assert _predict("juggling", completion_time_ms=500) == {"predicted_time_ms": None, "efficiency": None}


# ─────────────────────────────────────────────────────────────────────────────
# Fitts-driven tasks
# ─────────────────────────────────────────────────────────────────────────────

class TestButtonClick:
    def test_prediction_and_efficiency(self):
        # ID = log2(300/100 + 1) = 2 bits -> 100 + 100 * 2 = 300 ms
        out = _predict("button-click", completion_time_ms=600, target_distance_px=300, target_width_px=100)
        assert out["predicted_time_ms"] == 300
        assert out["efficiency"] == pytest.approx(0.5)

    def test_missing_geometry_gives_none(self):
        out = _predict("button-click", completion_time_ms=600)
        assert out == {"predicted_time_ms": None, "efficiency": None}

    def test_zero_width_gives_none(self):
        out = _predict("button-click", completion_time_ms=600, target_distance_px=300, target_width_px=0)
        assert out["predicted_time_ms"] is None

    def test_uncalibrated_gives_none(self):
        out = _predict(
            "button-click", Equations(), completion_time_ms=600, target_distance_px=300, target_width_px=100
        )
        assert out == {"predicted_time_ms": None, "efficiency": None}

    def test_prediction_rounded_to_whole_ms(self):
        out = _predict("button-click", completion_time_ms=600, target_distance_px=200, target_width_px=100)
        assert out["predicted_time_ms"] == round(100 + 100 * math.log2(3))

    def test_prediction_clamped_at_zero(self):
        equations = Equations(fitts=LinearModel(a=-1000, b=10, r2=0.5))
        out = _predict("button-click", equations, completion_time_ms=600, target_distance_px=300, target_width_px=100)
        assert out["predicted_time_ms"] == 0
        assert out["efficiency"] == 0

    def test_zero_completion_time_has_no_efficiency(self):
        out = _predict("button-click", completion_time_ms=0, target_distance_px=300, target_width_px=100)
        assert out["predicted_time_ms"] == 300
        assert out["efficiency"] is None


class TestDragDrop:
    def test_sum_of_acquire_and_transport(self):
        # acquire ID 1 bit (200 ms) + transport ID 2 bits (300 ms)
        out = _predict(
            "drag-drop",
            completion_time_ms=1000,
            acquire_distance_px=50,
            acquire_width_px=50,
            drag_distance_px=300,
            drop_width_px=100,
        )
        assert out["predicted_time_ms"] == 500
        assert out["efficiency"] == pytest.approx(0.5)

    def test_missing_transport_geometry_gives_none(self):
        out = _predict("drag-drop", completion_time_ms=1000, acquire_distance_px=50, acquire_width_px=50)
        assert out["predicted_time_ms"] is None


class TestListSelect:
    def test_fitts_plus_hicks(self):
        # Fitts 300 ms + Hick's log2(4) = 2 -> 400 ms
        out = _predict(
            "list-select",
            completion_time_ms=1400,
            target_distance_px=300,
            target_width_px=100,
            num_choices=4,
        )
        assert out["predicted_time_ms"] == 700
        assert out["efficiency"] == pytest.approx(0.5)

    def test_total_clicks_drive_hicks_when_choices_missing(self):
        out = _predict(
            "list-select",
            completion_time_ms=1400,
            target_distance_px=300,
            target_width_px=100,
            total_clicks=3,
        )
        assert out["predicted_time_ms"] == 700

    def test_missing_hicks_equation_gives_none(self):
        equations = Equations(fitts=FITTS)
        out = _predict(
            "list-select", equations, completion_time_ms=1400, target_distance_px=300, target_width_px=100, num_choices=4
        )
        assert out["predicted_time_ms"] is None


class TestChoiceReaction:
    def test_hicks_only(self):
        out = _predict("choice-reaction", completion_time_ms=500, num_choices=2)
        assert out["predicted_time_ms"] == 300
        assert out["efficiency"] == pytest.approx(0.6)


# ─────────────────────────────────────────────────────────────────────────────
# Form input and visual search
# ─────────────────────────────────────────────────────────────────────────────

class TestFormInput:
    def test_klm_ten_characters(self):
        assert predict_klm_time(10) == pytest.approx(2200)

    def test_klm_uses_target_text_length(self):
        out = _predict("form-input", Equations(), completion_time_ms=4400, target_text="abcdefghij")
        assert out["predicted_time_ms"] == 2200
        assert out["efficiency"] == pytest.approx(0.5)

    def test_character_count_preferred(self):
        out = _predict("form-input", completion_time_ms=4400, character_count=4, target_text="abcdefghij")
        assert out["predicted_time_ms"] == 1000

    def test_no_text_gives_none(self):
        assert _predict("form-input", completion_time_ms=4400)["predicted_time_ms"] is None


class TestVisualSearch:
    def test_no_prediction_efficiency_is_search_slope(self):
        out = _predict("visual-search", completion_time_ms=900, distractor_count=8)
        assert out["predicted_time_ms"] is None
        assert out["efficiency"] == pytest.approx(100)

    def test_no_distractors_gives_none(self):
        assert visual_search_slope(900, 0) is None
        assert visual_search_slope(900, None) is None
