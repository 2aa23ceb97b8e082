from django.urls import path

from .views import study_next_view, study_reset_view, study_start_view, study_state_view

app_name = "study"
urlpatterns = [
    path("state/", view=study_state_view, name="state"),
    path("start/", view=study_start_view, name="start"),
    path("next/", view=study_next_view, name="next"),
    path("reset/", view=study_reset_view, name="reset"),
]
