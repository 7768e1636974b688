"""
Reports app URL configuration.

Mounted by ``noisewatch/urls.py`` as::

    path("reports/", include("reports.urls"))

Endpoint summary
----------------
POST /reports/new-report                 Submit a report (multipart).
GET  /reports/get-report                 All reports, newest first.
GET  /reports/get-user-report/<userId>   One reporter's reports.
GET  /reports/map-data                   Counts per point.
GET  /reports/total-reports              Total count.
GET  /reports/response-options/<id>      Policy options (admin).
PUT  /reports/update-status/<id>         Status transition (admin).
"""

from django.urls import path

from . import views

app_name = "reports"

urlpatterns = [
    path("new-report", views.ReportCreateView.as_view(), name="new-report"),
    path("get-report", views.ReportListView.as_view(), name="get-report"),
    path(
        "get-user-report/<int:user_id>",
        views.UserReportListView.as_view(),
        name="get-user-report",
    ),
    path("map-data", views.MapDataView.as_view(), name="map-data"),
    path("total-reports", views.TotalReportsView.as_view(), name="total-reports"),
    path(
        "response-options/<int:report_id>",
        views.ResponseOptionsView.as_view(),
        name="response-options",
    ),
    path(
        "update-status/<int:report_id>",
        views.UpdateStatusView.as_view(),
        name="update-status",
    ),
]
