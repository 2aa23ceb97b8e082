import pytest
from django.urls import reverse

from lumistudy.study.tests.flow import advance_to_calibration, post_json, run_calibration, start_study


# ─────────────────────────────────────────────────────────────────────────────
# CalibrationStartView
# ─────────────────────────────────────────────────────────────────────────────

class TestCalibrationStartView:
    def test_409_before_calibration_phase(self, client):
        start_study(client)
        response = post_json(client, "calibration:start")
        assert response.status_code == 409

    def test_start_returns_first_fitts_trial(self, client):
        advance_to_calibration(client)
        response = post_json(client, "calibration:start")
        assert response.status_code == 201
        data = response.json()
        assert data["stage"] == "running-trials"
        assert data["phase"] == "fitts"
        assert data["trial_index"] == 0
        assert data["armed"] is False
        assert data["fitts_trial_count"] == 50
        assert data["hicks_trial_count"] == 40
        assert set(data["current_trial"]) == {"width", "distance"}

    def test_second_start_returns_run_in_progress(self, client):
        advance_to_calibration(client)
        first = post_json(client, "calibration:start").json()
        second = post_json(client, "calibration:start")
        assert second.status_code == 200
        assert second.json()["current_trial"] == first["current_trial"]


# ─────────────────────────────────────────────────────────────────────────────
# CalibrationArmView / CalibrationRespondView
# ─────────────────────────────────────────────────────────────────────────────

class TestCalibrationTrials:
    def test_arm_current_trial(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        data = post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 0}).json()
        assert data["ok"] is True
        assert data["armed"] is True

    def test_arm_other_trial_is_stale(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        data = post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 5}).json()
        assert data == {"ok": True, "stale": True}

    def test_arm_outside_calibration_is_stale(self, client):
        start_study(client)
        data = post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 0}).json()
        assert data == {"ok": True, "stale": True}

    def test_response_before_arm_is_stale(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        response = post_json(
            client,
            "calibration:respond",
            {"phase": "fitts", "trial_index": 0, "movement_time_ms": 400, "success": True},
        )
        assert response.json() == {"ok": True, "stale": True}

    def test_response_advances_trial(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 0})
        data = post_json(
            client,
            "calibration:respond",
            {"phase": "fitts", "trial_index": 0, "movement_time_ms": 400, "success": True},
        ).json()
        assert data["ok"] is True
        assert data["trial_index"] == 1
        assert data["armed"] is False

    def test_duplicate_response_is_stale(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 0})
        payload = {"phase": "fitts", "trial_index": 0, "movement_time_ms": 400, "success": True}
        post_json(client, "calibration:respond", payload)
        assert post_json(client, "calibration:respond", payload).json()["stale"] is True

    def test_unknown_phase_returns_422(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        response = post_json(client, "calibration:respond", {"phase": "stroop", "trial_index": 0})
        assert response.status_code == 422

    def test_missing_fields_return_422(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        response = post_json(client, "calibration:respond", {"phase": "fitts", "trial_index": 0})
        assert response.status_code == 422
        assert "movement_time_ms" in response.json()["error"]

    def test_negative_time_returns_422(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 0})
        response = post_json(
            client,
            "calibration:respond",
            {"phase": "fitts", "trial_index": 0, "movement_time_ms": -1, "success": True},
        )
        assert response.status_code == 422

    def test_non_boolean_success_returns_422(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 0})
        response = post_json(
            client,
            "calibration:respond",
            {"phase": "fitts", "trial_index": 0, "movement_time_ms": 400, "success": "false"},
        )
        assert response.status_code == 422
        data = post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": 0}).json()
        assert data["trial_index"] == 0

    def test_non_boolean_correct_returns_422(self, client):
        advance_to_calibration(client)
        summary = post_json(client, "calibration:start").json()
        for index in range(summary["fitts_trial_count"]):
            post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": index})
            post_json(
                client,
                "calibration:respond",
                {"phase": "fitts", "trial_index": index, "movement_time_ms": 500, "success": True},
            )
        post_json(client, "calibration:arm", {"phase": "hicks", "trial_index": 0})
        response = post_json(
            client,
            "calibration:respond",
            {"phase": "hicks", "trial_index": 0, "reaction_time_ms": 400, "correct": 0},
        )
        assert response.status_code == 422

    def test_invalid_json_returns_422(self, client):
        advance_to_calibration(client)
        response = client.post(reverse("calibration:arm"), data="{oops", content_type="application/json")
        assert response.status_code == 422

    def test_hicks_trial_exposes_active_keys(self, client):
        advance_to_calibration(client)
        summary = post_json(client, "calibration:start").json()
        for index in range(summary["fitts_trial_count"]):
            post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": index})
            data = post_json(
                client,
                "calibration:respond",
                {"phase": "fitts", "trial_index": index, "movement_time_ms": 500, "success": True},
            ).json()
        assert data["phase"] == "hicks"
        trial = data["current_trial"]
        assert len(trial["active_keys"]) == trial["num_choices"]
        assert trial["target_key"] in trial["active_keys"]


# ─────────────────────────────────────────────────────────────────────────────
# Completion and preview
# ─────────────────────────────────────────────────────────────────────────────

class TestCalibrationCompletion:
    def test_completion_returns_equations_and_moves_study_on(self, client):
        advance_to_calibration(client)
        data = run_calibration(client)
        assert data["stage"] == "complete"
        assert data["study_phase"] == "condition-intro"
        assert data["fitts_equation"]["a"] == pytest.approx(180, rel=0.01)
        assert data["fitts_equation"]["b"] == pytest.approx(140, rel=0.01)
        assert data["hicks_equation"]["a"] == pytest.approx(200, rel=0.01)
        assert data["hicks_equation"]["b"] == pytest.approx(120, rel=0.01)

        state = client.get(reverse("study:state")).json()
        assert state["phase"] == "condition-intro"
        assert state["calibration_complete"] is True

    def test_start_after_completion_is_409(self, client):
        advance_to_calibration(client)
        run_calibration(client)
        assert post_json(client, "calibration:start").status_code == 409

    def test_preview_during_run(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        for index in range(4):
            post_json(client, "calibration:arm", {"phase": "fitts", "trial_index": index})
            post_json(
                client,
                "calibration:respond",
                {"phase": "fitts", "trial_index": index, "movement_time_ms": 300 + 50 * index, "success": True},
            )
        data = client.get(reverse("calibration:preview")).json()
        assert data["fitts_equation"] is not None
        assert data["hicks_equation"] is None

    def test_preview_outside_calibration_is_409(self, client):
        assert client.get(reverse("calibration:preview")).status_code == 409
