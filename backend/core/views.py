"""
Core app views — **Thin Views**.

Each view delegates all aggregation to the corresponding service in
``core.services``.  Views are responsible only for:

1. Validating query parameters with a serializer.
2. Calling the service.
3. Returning the resulting payload in a ``Response``.

No model imports, no aggregation logic, no cross-app queries.
"""

from __future__ import annotations

from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import IsAdministrator

from .serializers import (
    HealthSerializer,
    NotificationFeedQuerySerializer,
    PeriodQuerySerializer,
    RecentActivityQuerySerializer,
    ServerInfoSerializer,
)
from .services import DashboardAggregationService, NotificationFeedService

PERIOD_PARAMETER = OpenApiParameter(
    name="period",
    type=str,
    required=False,
    enum=["daily", "weekly", "monthly", "yearly"],
    description="Reporting window (default weekly).",
)


def _validated(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# ════════════════════════════════════════════════════════════════════
#  Service endpoints
# ════════════════════════════════════════════════════════════════════

class ApiRootView(APIView):
    """**GET /** — list the endpoint groups."""

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(summary="API index", tags=["System"])
    def get(self, request: Request) -> Response:
        return Response({
            "message": "API is running",
            "endpoints": {
                "auth": "/auth",
                "users": "/user",
                "reports": "/reports",
                "analytics": "/analytics",
                "notifications": "/notification",
            },
        })


class ServerInfoView(APIView):
    """**GET /api/test** — liveness probe with the configured environment."""

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Server liveness",
        responses={200: ServerInfoSerializer},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        return Response({
            "message": "Server is running!",
            "timestamp": timezone.now(),
            "environment": settings.NOISEWATCH["ENVIRONMENT"],
        })


# ════════════════════════════════════════════════════════════════════
#  Analytics
# ════════════════════════════════════════════════════════════════════

class DashboardView(APIView):
    """
    **GET /analytics/dashboard?period=weekly**

    Everything the admin dashboard renders in one payload: user and
    report totals, per-bucket trends for the period, the busiest noise
    categories, and the last day's activity.

    **Authentication**: administrator.

    **Error Responses**:
        - ``400 Bad Request``: Unknown ``period``.
        - ``401 Unauthorized`` / ``403 Forbidden``.
    """

    permission_classes = [IsAdministrator]

    @extend_schema(
        summary="Dashboard analytics",
        parameters=[PERIOD_PARAMETER],
        responses={
            200: OpenApiResponse(description="Dashboard payload."),
            400: OpenApiResponse(description="Invalid period."),
        },
        tags=["Analytics"],
    )
    def get(self, request: Request) -> Response:
        params = _validated(PeriodQuerySerializer, request)
        service = DashboardAggregationService(period=params["period"])
        return Response(service.get_dashboard(), status=status.HTTP_200_OK)


class UserStatsView(APIView):
    """**GET /analytics/users?period=** — user totals for the period."""

    permission_classes = [IsAdministrator]

    @extend_schema(summary="User statistics", parameters=[PERIOD_PARAMETER], tags=["Analytics"])
    def get(self, request: Request) -> Response:
        params = _validated(PeriodQuerySerializer, request)
        service = DashboardAggregationService(period=params["period"])
        return Response({"success": True, **service.get_user_stats()})


class ReportStatsView(APIView):
    """**GET /analytics/reports?period=** — report totals for the period."""

    permission_classes = [IsAdministrator]

    @extend_schema(summary="Report statistics", parameters=[PERIOD_PARAMETER], tags=["Analytics"])
    def get(self, request: Request) -> Response:
        params = _validated(PeriodQuerySerializer, request)
        service = DashboardAggregationService(period=params["period"])
        stats = service.get_report_stats()
        stats.pop("resolvedReports")
        return Response({"success": True, **stats})


class AnalyticsRecentActivityView(APIView):
    permission_classes = [IsAdministrator]

    @extend_schema(summary="Recent activity (last 24 hours)", tags=["Analytics"])
    def get(self, request: Request) -> Response:
        return Response(DashboardAggregationService().get_recent_activity())


class NoiseCategoriesView(APIView):
    permission_classes = [IsAdministrator]

    @extend_schema(summary="Top noise categories", tags=["Analytics"])
    def get(self, request: Request) -> Response:
        return Response(DashboardAggregationService().get_noise_categories())


class AnalyticsHealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(summary="Analytics liveness", responses={200: HealthSerializer}, tags=["Analytics"])
    def get(self, request: Request) -> Response:
        return Response({
            "status": "OK",
            "timestamp": timezone.now(),
            "message": "Analytics API is running",
        })


# ════════════════════════════════════════════════════════════════════
#  Notification feed
# ════════════════════════════════════════════════════════════════════

class NotificationFeedView(APIView):
    """
    **GET /notification/all?hours=24&limit=50&since=<ISO-8601>**

    Registrations and noise reports from the last ``hours`` hours,
    newest first, capped at ``limit``.  Nothing is persisted: the
    ``read`` flag of each item is derived from ``since``.

    **Authentication**: administrator.
    """

    permission_classes = [IsAdministrator]

    @extend_schema(
        summary="Notification feed",
        parameters=[
            OpenApiParameter(name="hours", type=int, required=False, description="Look-back window (default 24)."),
            OpenApiParameter(name="limit", type=int, required=False, description="Maximum items (default 50)."),
            OpenApiParameter(name="since", type=str, required=False, description="Items at or before this instant are marked read."),
        ],
        tags=["Notifications"],
    )
    def get(self, request: Request) -> Response:
        params = _validated(NotificationFeedQuerySerializer, request)
        service = NotificationFeedService(
            hours=params["hours"],
            limit=params["limit"],
            since=params["since"],
        )
        return Response(service.get_feed(), status=status.HTTP_200_OK)


class UnreadCountView(APIView):
    """**GET /notification/unread-count?hours=24&since=** — badge counter."""

    permission_classes = [IsAdministrator]

    @extend_schema(summary="Unread notification count", tags=["Notifications"])
    def get(self, request: Request) -> Response:
        params = _validated(NotificationFeedQuerySerializer, request)
        service = NotificationFeedService(hours=params["hours"], since=params["since"])
        return Response(service.get_unread_count())


class NotificationRecentActivityView(APIView):
    permission_classes = [IsAdministrator]

    @extend_schema(summary="Latest registrations and reports", tags=["Notifications"])
    def get(self, request: Request) -> Response:
        params = _validated(RecentActivityQuerySerializer, request)
        return Response(NotificationFeedService().get_recent_activity(limit=params["limit"]))


class NotificationTestView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(summary="Notification liveness", tags=["Notifications"])
    def get(self, request: Request) -> Response:
        return Response({
            "success": True,
            "message": "Notification route is working!",
            "timestamp": timezone.now(),
        })
