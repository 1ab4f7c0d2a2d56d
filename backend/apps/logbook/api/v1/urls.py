from django.urls import path

from apps.logbook.api.v1.views import LogImportDetailView, LogImportFinalizeView, LogImportListView


urlpatterns = [
    path(
        "users/<str:username>/log-imports/",
        LogImportListView.as_view(),
        name="logbook-import-list",
    ),
    path(
        "users/<str:username>/log-imports/<uuid:import_id>/",
        LogImportDetailView.as_view(),
        name="logbook-import-detail",
    ),
    path(
        "users/<str:username>/log-imports/<uuid:import_id>/finalize/",
        LogImportFinalizeView.as_view(),
        name="logbook-import-finalize",
    ),
]
