"""
Core app URL configuration.

Two route groups are exposed and mounted by ``noisewatch/urls.py``::

    path("analytics/", include((analytics_patterns, "analytics")))
    path("notification/", include((notification_patterns, "notification")))

Endpoint summary
----------------
GET  /analytics/dashboard           — Full dashboard payload for a period.
GET  /analytics/users               — User totals for a period.
GET  /analytics/reports             — Report totals for a period.
GET  /analytics/recent-activity     — Reports and registrations of the last day.
GET  /analytics/noise-categories    — Top 8 reasons.
GET  /analytics/health              — Liveness (public).
GET  /notification/all              — Derived notification feed.
GET  /notification/unread-count     — Items newer than ``since``.
GET  /notification/recent-activity  — Latest registrations and reports.
GET  /notification/test             — Liveness (public).
"""

from django.urls import path

from . import views

analytics_patterns = [
    path("dashboard", views.DashboardView.as_view(), name="dashboard"),
    path("users", views.UserStatsView.as_view(), name="users"),
    path("reports", views.ReportStatsView.as_view(), name="reports"),
    path("recent-activity", views.AnalyticsRecentActivityView.as_view(), name="recent-activity"),
    path("noise-categories", views.NoiseCategoriesView.as_view(), name="noise-categories"),
    path("health", views.AnalyticsHealthView.as_view(), name="health"),
]

notification_patterns = [
    path("all", views.NotificationFeedView.as_view(), name="all"),
    path("unread-count", views.UnreadCountView.as_view(), name="unread-count"),
    path("recent-activity", views.NotificationRecentActivityView.as_view(), name="recent-activity"),
    path("test", views.NotificationTestView.as_view(), name="test"),
]
