from django.test import Client
from django.urls import reverse

from lumistudy.study.tests.flow import (
    advance_to_calibration,
    advance_to_first_task,
    post_json,
    start_study,
    submit_current_task,
)


class TestStudyStateView:
    def test_fresh_session_is_consent(self, client):
        data = client.get(reverse("study:state")).json()
        assert data["phase"] == "consent"
        assert data["participant_id"] == ""
        assert data["calibration_complete"] is False


class TestStudyStartView:
    def test_start_creates_participant(self, client):
        data = start_study(client)
        assert data["phase"] == "instructions"
        assert data["participant_id"].startswith("P_")
        assert data["condition_count"] == 4

    def test_second_start_is_409(self, client):
        start_study(client)
        assert client.post(reverse("study:start")).status_code == 409

    def test_sessions_are_independent(self, client):
        start_study(client)
        other = Client()
        assert other.get(reverse("study:state")).json()["phase"] == "consent"


class TestStudyNextView:
    def test_instructions_to_calibration(self, client):
        advance_to_calibration(client)
        assert client.get(reverse("study:state")).json()["phase"] == "calibration"

    def test_stale_from_phase_is_acknowledged(self, client):
        start_study(client)
        response = post_json(client, "study:next", {"from_phase": "condition-intro"})
        assert response.json() == {"ok": True, "stale": True}
        assert client.get(reverse("study:state")).json()["phase"] == "instructions"

    def test_cannot_skip_calibration(self, client):
        advance_to_calibration(client)
        assert post_json(client, "study:next").status_code == 409

    def test_cannot_skip_task(self, client):
        advance_to_first_task(client)
        assert post_json(client, "study:next").status_code == 409

    def test_condition_complete_to_next_condition(self, client):
        advance_to_first_task(client)
        for _ in range(10):
            submit_current_task(client)
        data = post_json(client, "study:next", {"from_phase": "condition-complete"}).json()
        assert data["phase"] == "condition-intro"
        assert data["condition_index"] == 1
        assert data["result_count"] == 10


class TestStudyResetView:
    def test_reset_discards_run(self, client):
        advance_to_calibration(client)
        post_json(client, "calibration:start")
        data = post_json(client, "study:reset").json()
        assert data["phase"] == "consent"
        assert client.get(reverse("study:state")).json()["phase"] == "consent"

    def test_can_start_again_after_reset(self, client):
        first = start_study(client)["participant_id"]
        post_json(client, "study:reset")
        second = start_study(client)["participant_id"]
        assert second != first
