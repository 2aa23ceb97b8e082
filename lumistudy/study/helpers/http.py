import json

from django.http import JsonResponse


def parse_json_body(request):
    """
    Return ``(data, None)`` for a JSON object body, else ``(None, error_response)``.
    """
    try:
        data = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, ValueError):
        return None, JsonResponse({"error": "Invalid JSON"}, status=422)
    if not isinstance(data, dict):
        return None, JsonResponse({"error": "Expected a JSON object"}, status=422)
    return data, None


def stale_response():
    """Acknowledge an event for a trial, task or phase the session has already left."""
    return JsonResponse({"ok": True, "stale": True})


def wrong_phase_response(phase):
    return JsonResponse({"error": f"Not available in phase '{phase}'"}, status=409)
