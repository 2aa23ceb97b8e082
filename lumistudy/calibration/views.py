import logging

from django.http import JsonResponse
from django.views import View

from lumistudy.calibration.helpers.runner import (
    PHASE_FITTS,
    PHASE_HICKS,
    STAGE_COMPLETE,
    STAGE_IDLE,
    arm,
    preview,
    respond_fitts,
    respond_hicks,
    start_run,
    to_calibration_data,
)
from lumistudy.calibration.registry import HICKS_KEYS
from lumistudy.study.helpers.http import parse_json_body, stale_response, wrong_phase_response
from lumistudy.study.helpers.state import PHASE_CALIBRATION, set_calibration_data, set_calibration_run
from lumistudy.study.helpers.store import load_state, save_state

logger = logging.getLogger(__name__)


def run_summary(run) -> dict:
    spec = run.current_spec
    current = None
    if spec is not None:
        current = spec.as_dict()
        if run.phase == PHASE_HICKS:
            current["active_keys"] = spec.active_keys(HICKS_KEYS)
    return {
        "stage": run.stage,
        "phase": run.phase,
        "trial_index": run.trial_index,
        "armed": run.armed,
        "fitts_trial_count": len(run.fitts_specs),
        "hicks_trial_count": len(run.hicks_specs),
        "current_trial": current,
    }


def _calibration_phase_state(request):
    """Return the study state, or None if the session is not in calibration."""
    state = load_state(request)
    if state.phase != PHASE_CALIBRATION or state.calibration_run is None:
        return None
    return state


class CalibrationStartView(View):
    """
    Generate both trial sequences and begin the first Fitts' trial.

    Idempotent: a second POST returns the run already under way (200).
    """

    def post(self, request):
        state = load_state(request)
        if state.phase != PHASE_CALIBRATION:
            return wrong_phase_response(state.phase)
        if state.calibration_run is not None and state.calibration_run.stage != STAGE_IDLE:
            return JsonResponse(run_summary(state.calibration_run))

        run = start_run()
        state = set_calibration_run(state, run)
        save_state(request, state)
        logger.info("Calibration started participant=%s", state.participant_id)
        return JsonResponse(run_summary(run), status=201)


class CalibrationArmView(View):
    """
    The ready period of a trial has elapsed; responses may now register.

    POST body: { phase, trial_index }
    """

    def post(self, request):
        data, error = parse_json_body(request)
        if error:
            return error
        state = _calibration_phase_state(request)
        if state is None:
            return stale_response()
        run, accepted = arm(state.calibration_run, data.get("phase"), data.get("trial_index"))
        if not accepted:
            return stale_response()
        save_state(request, set_calibration_run(state, run))
        return JsonResponse({"ok": True, **run_summary(run)})


class CalibrationRespondView(View):
    """
    Record the one response of the current armed trial.

    POST body (fitts): { phase: "fitts", trial_index, movement_time_ms, success }
    POST body (hicks): { phase: "hicks", trial_index, reaction_time_ms, correct }

    When the last Hick's trial is recorded both models are fitted and the
    calibration is frozen into the session.
    """

    def post(self, request):
        data, error = parse_json_body(request)
        if error:
            return error
        state = _calibration_phase_state(request)
        if state is None:
            return stale_response()

        phase = data.get("phase")
        if phase == PHASE_FITTS:
            time_key, flag_key, respond = "movement_time_ms", "success", respond_fitts
        elif phase == PHASE_HICKS:
            time_key, flag_key, respond = "reaction_time_ms", "correct", respond_hicks
        else:
            return JsonResponse({"error": f"Unknown calibration phase: '{phase}'"}, status=422)

        missing = {"trial_index", time_key, flag_key} - set(data.keys())
        if missing:
            return JsonResponse({"error": f"Missing fields: {', '.join(sorted(missing))}"}, status=422)

        try:
            run, accepted = respond(
                state.calibration_run, data["trial_index"], float(data[time_key]), data[flag_key]
            )
        except (TypeError, ValueError) as exc:
            return JsonResponse({"error": str(exc)}, status=422)
        if not accepted:
            return stale_response()

        if run.stage == STAGE_COMPLETE:
            calibration = to_calibration_data(run)
            state = set_calibration_data(set_calibration_run(state, run), calibration)
            save_state(request, state)
            return JsonResponse(
                {
                    "ok": True,
                    **run_summary(run),
                    "fitts_equation": calibration.fitts_equation.as_dict(),
                    "hicks_equation": calibration.hicks_equation.as_dict(),
                    "study_phase": state.phase,
                }
            )

        save_state(request, set_calibration_run(state, run))
        return JsonResponse({"ok": True, **run_summary(run)})


class CalibrationPreviewView(View):
    """Live equations over the trials recorded so far."""

    def get(self, request):
        state = _calibration_phase_state(request)
        if state is None:
            return wrong_phase_response(load_state(request).phase)
        return JsonResponse(preview(state.calibration_run))


calibration_start_view = CalibrationStartView.as_view()
calibration_arm_view = CalibrationArmView.as_view()
calibration_respond_view = CalibrationRespondView.as_view()
calibration_preview_view = CalibrationPreviewView.as_view()
