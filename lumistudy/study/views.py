from django.http import JsonResponse
from django.views import View

from lumistudy.study.helpers.http import parse_json_body, stale_response, wrong_phase_response
from lumistudy.study.helpers.state import (
    PHASE_CONDITION_COMPLETE,
    PHASE_CONDITION_INTRO,
    PHASE_CONSENT,
    PHASE_INSTRUCTIONS,
    next_phase,
    reset_study,
    start_study,
)
from lumistudy.study.helpers.store import clear_state, load_state, save_state

# Phases the participant leaves by pressing "continue"; calibration and task
# phases are advanced by their own endpoints.
_MANUAL_ADVANCE_PHASES = frozenset({PHASE_INSTRUCTIONS, PHASE_CONDITION_INTRO, PHASE_CONDITION_COMPLETE})


def state_summary(state) -> dict:
    condition = state.current_condition
    return {
        "phase": state.phase,
        "participant_id": state.participant_id,
        "condition_index": state.current_condition_index,
        "condition_count": len(state.conditions),
        "condition": condition.as_dict() if condition else None,
        "task_index": state.current_task_index,
        "task_count": len(state.tasks),
        "result_count": len(state.results),
        "calibration_complete": bool(state.calibration_data and state.calibration_data.calibration_complete),
    }


class StudyStateView(View):
    """Current phase and progress of this browser's study session."""

    def get(self, request):
        return JsonResponse(state_summary(load_state(request)))


class StudyStartView(View):
    """
    Consent given: creates the participant run.

    Returns 201 with the state summary, 409 if a run is already under way.
    """

    def post(self, request):
        state = load_state(request)
        if state.phase != PHASE_CONSENT:
            return wrong_phase_response(state.phase)
        state = start_study(state)
        save_state(request, state)
        return JsonResponse(state_summary(state), status=201)


class StudyNextView(View):
    """
    Advance from an intro / instructions / condition-complete screen.

    POST body: { from_phase }  (optional; a mismatch means the request is stale)
    """

    def post(self, request):
        data, error = parse_json_body(request)
        if error:
            return error
        state = load_state(request)
        from_phase = data.get("from_phase")
        if from_phase is not None and from_phase != state.phase:
            return stale_response()
        if state.phase not in _MANUAL_ADVANCE_PHASES:
            return wrong_phase_response(state.phase)
        state = next_phase(state)
        save_state(request, state)
        return JsonResponse(state_summary(state))


class StudyResetView(View):
    """Abandon the run. In-progress calibration and all results are discarded."""

    def post(self, request):
        state = reset_study(load_state(request))
        clear_state(request)
        return JsonResponse(state_summary(state))


study_state_view = StudyStateView.as_view()
study_start_view = StudyStartView.as_view()
study_next_view = StudyNextView.as_view()
study_reset_view = StudyResetView.as_view()
