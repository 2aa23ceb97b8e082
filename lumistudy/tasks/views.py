import logging

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views import View

from lumistudy.study.helpers.http import parse_json_body, stale_response, wrong_phase_response
from lumistudy.study.helpers.state import PHASE_TASK, next_phase, record_task_result
from lumistudy.study.helpers.store import load_state, save_state
from lumistudy.tasks.helpers.session_helpers import list_options_for, validate_task
from lumistudy.tasks.registry import TASK_REGISTRY

logger = logging.getLogger(__name__)


class CurrentTaskView(View):
    """
    Configuration of the task the participant should perform now.

    Returns:
        200 {task, label, options, ...}
        422 {"configuration_error": ...}  the widget must not be rendered
        409 not in the task phase
    """

    def get(self, request):
        state = load_state(request)
        task = state.current_task
        if state.phase != PHASE_TASK or task is None:
            return wrong_phase_response(state.phase)

        try:
            validate_task(task)
        except ValidationError as exc:
            logger.warning(
                "Task configuration rejected participant=%s task=%s: %s",
                state.participant_id, task.id, exc.messages,
            )
            return JsonResponse(
                {"configuration_error": exc.messages, "task": task.as_dict()}, status=422
            )

        meta = TASK_REGISTRY[task.type]
        payload = {
            "task": task.as_dict(),
            "label": meta["label"],
            "condition_index": state.current_condition_index,
            "task_index": state.current_task_index,
            "task_count": len(state.tasks),
            "condition": state.current_condition.as_dict() if state.current_condition else None,
            "options": list_options_for(task),
        }
        for key in ("sentences", "distractor_counts", "choice_counts"):
            if key in meta:
                payload[key] = meta[key]
        return JsonResponse(payload)


class TaskResultSubmitView(View):
    """
    Receives raw metrics from a task widget, annotates them with predicted
    time and efficiency, appends them to the results log and advances.

    POST body: { condition_index, task_index, task_id, completion_time_ms,
                 total_clicks, incorrect_clicks, success,
                 cursor_distance_px | cursor_path, ...optional geometry }

    Returns:
        201 {"ok": true, "result": {...}, "phase": ...}
        200 {"ok": true, "stale": true}  submission for a task already left
        422 on validation failure
    """

    REQUIRED_FIELDS = frozenset(
        {
            "condition_index",
            "task_index",
            "task_id",
            "completion_time_ms",
            "total_clicks",
            "incorrect_clicks",
            "success",
        }
    )

    def post(self, request):
        data, error = parse_json_body(request)
        if error:
            return error

        missing = self.REQUIRED_FIELDS - set(data.keys())
        if missing:
            return JsonResponse(
                {"error": f"Missing fields: {', '.join(sorted(missing))}"},
                status=422,
            )

        state = load_state(request)
        task = state.current_task
        if (
            state.phase != PHASE_TASK
            or task is None
            or data["condition_index"] != state.current_condition_index
            or data["task_index"] != state.current_task_index
            or data["task_id"] != task.id
        ):
            logger.debug("Stale task submission discarded task=%s", data.get("task_id"))
            return stale_response()

        try:
            validate_task(task)
        except ValidationError as exc:
            return JsonResponse({"configuration_error": exc.messages}, status=422)

        try:
            state = record_task_result(state, data)
        except (TypeError, ValueError) as exc:
            return JsonResponse({"error": str(exc)}, status=422)

        result = state.results[-1]
        state = next_phase(state)
        save_state(request, state)
        return JsonResponse(
            {"ok": True, "result": result.as_dict(), "phase": state.phase},
            status=201,
        )


current_task_view = CurrentTaskView.as_view()
task_result_submit_view = TaskResultSubmitView.as_view()
