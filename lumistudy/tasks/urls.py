from django.urls import path

from .views import current_task_view, task_result_submit_view

app_name = "tasks"
urlpatterns = [
    path("api/current/", view=current_task_view, name="current"),
    path("api/submit-result/", view=task_result_submit_view, name="submit_result"),
]
