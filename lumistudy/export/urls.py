from django.urls import path

from .views import calibration_csv_export_view, results_csv_export_view, results_json_export_view

app_name = "export"

urlpatterns = [
    path("results.csv", results_csv_export_view, name="results_csv"),
    path("results.json", results_json_export_view, name="results_json"),
    path("calibration.csv", calibration_csv_export_view, name="calibration_csv"),
]
