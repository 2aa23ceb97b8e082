"""Participant data export views.

Exports read the in-memory study session of the requesting browser; nothing
is stored server-side. Files carry the pseudonymous participant id only.
Export events are logged to the standard Python logger.
"""
import logging

from django.http import HttpResponse, JsonResponse
from django.views import View

from lumistudy.export.helpers.formatting import calibration_to_csv, results_to_csv, results_to_json
from lumistudy.study.helpers.state import PHASE_CONSENT
from lumistudy.study.helpers.store import load_state

logger = logging.getLogger(__name__)


def _attachment(content, content_type, filename):
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


class StudyExportMixin:
    """Refuse to export before a participant run exists."""

    def dispatch(self, request, *args, **kwargs):
        self.state = load_state(request)
        if self.state.phase == PHASE_CONSENT:
            return JsonResponse({"error": "No study in progress"}, status=409)
        return super().dispatch(request, *args, **kwargs)


# ─────────────────────────────────────────────────────────────────────────────
# Results log
# ─────────────────────────────────────────────────────────────────────────────


class ResultsCsvExportView(StudyExportMixin, View):
    """One row per completed task; columns are the union of fields seen."""

    def get(self, request):
        state = self.state
        logger.info(
            "Results CSV export participant=%s rows=%d", state.participant_id, len(state.results)
        )
        return _attachment(
            results_to_csv(state.results),
            "text/csv",
            f"study-results-{state.participant_id}.csv",
        )


class ResultsJsonExportView(StudyExportMixin, View):
    """Participant metadata, calibration summary (no raw trials) and all results."""

    def get(self, request):
        state = self.state
        logger.info(
            "Results JSON export participant=%s rows=%d", state.participant_id, len(state.results)
        )
        return _attachment(
            results_to_json(state.results, state.participant_data, state.calibration_data),
            "application/json",
            f"study-data-{state.participant_id}.json",
        )


# ─────────────────────────────────────────────────────────────────────────────
# Calibration
# ─────────────────────────────────────────────────────────────────────────────


class CalibrationCsvExportView(StudyExportMixin, View):
    """One row per calibration trial, followed by the fitted equations."""

    def get(self, request):
        state = self.state
        if state.calibration_data is None:
            return JsonResponse({"error": "Calibration not complete"}, status=409)
        calibration = state.calibration_data
        logger.info(
            "Calibration CSV export participant=%s fitts=%d hicks=%d",
            state.participant_id, len(calibration.fitts_trials), len(calibration.hicks_trials),
        )
        return _attachment(
            calibration_to_csv(calibration),
            "text/csv",
            f"calibration-{state.participant_id}.csv",
        )


results_csv_export_view = ResultsCsvExportView.as_view()
results_json_export_view = ResultsJsonExportView.as_view()
calibration_csv_export_view = CalibrationCsvExportView.as_view()
