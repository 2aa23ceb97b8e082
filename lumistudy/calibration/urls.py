from django.urls import path

from .views import (
    calibration_arm_view,
    calibration_preview_view,
    calibration_respond_view,
    calibration_start_view,
)

app_name = "calibration"
urlpatterns = [
    path("api/start/", view=calibration_start_view, name="start"),
    path("api/arm/", view=calibration_arm_view, name="arm"),
    path("api/respond/", view=calibration_respond_view, name="respond"),
    path("api/preview/", view=calibration_preview_view, name="preview"),
]
