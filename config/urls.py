from django.urls import include, path

urlpatterns = [
    path("study/", include("lumistudy.study.urls", namespace="study")),
    path("calibration/", include("lumistudy.calibration.urls", namespace="calibration")),
    path("tasks/", include("lumistudy.tasks.urls", namespace="tasks")),
    path("export/", include("lumistudy.export.urls", namespace="export")),
]
