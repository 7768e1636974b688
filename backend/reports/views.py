"""
Reports app views.

Thin views: validate with a serializer, delegate to ``services.py``,
serialise the result.

View Map
--------
- ``ReportCreateView``       — POST /reports/new-report
- ``ReportListView``         — GET  /reports/get-report
- ``UserReportListView``     — GET  /reports/get-user-report/<userId>
- ``MapDataView``            — GET  /reports/map-data
- ``TotalReportsView``       — GET  /reports/total-reports
- ``ResponseOptionsView``    — GET  /reports/response-options/<id>  (admin)
- ``UpdateStatusView``       — PUT  /reports/update-status/<id>     (admin)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import IsAdministrator

from .serializers import (
    MapPointSerializer,
    NoiseReportSerializer,
    ReportSubmissionSerializer,
    StatusUpdateSerializer,
)
from .services import (
    ReportQueryService,
    ReportSubmissionService,
    ReportWorkflowService,
)


class ReportCreateView(APIView):
    """
    POST /reports/new-report

    Public endpoint (anonymous reports are accepted).  When the request
    carries a valid token the report is attached to that account.

    Request body  → ``ReportSubmissionSerializer`` (multipart)
    Response body → ``{message, report}`` (201 Created)
    """

    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        summary="Submit a noise report",
        request={"multipart/form-data": ReportSubmissionSerializer},
        responses={
            201: OpenApiResponse(description="Report created."),
            400: OpenApiResponse(description="Validation error."),
        },
        tags=["Reports"],
    )
    def post(self, request: Request) -> Response:
        serializer = ReportSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = ReportSubmissionService.submit(serializer.validated_data, user=request.user)
        report = ReportQueryService.get_with_actions(report.pk)
        return Response(
            {
                "message": "Noise report submitted and awaiting admin review.",
                "report": NoiseReportSerializer(report).data,
            },
            status=status.HTTP_201_CREATED,
        )


class ReportListView(APIView):
    """GET /reports/get-report — every report, newest first."""

    permission_classes = [AllowAny]

    @extend_schema(summary="List reports", responses={200: NoiseReportSerializer(many=True)}, tags=["Reports"])
    def get(self, request: Request) -> Response:
        reports = ReportQueryService.list_reports()
        return Response(NoiseReportSerializer(reports, many=True).data)


class UserReportListView(APIView):
    """GET /reports/get-user-report/<userId> — one reporter's history."""

    permission_classes = [AllowAny]

    @extend_schema(summary="List a reporter's reports", tags=["Reports"])
    def get(self, request: Request, user_id: int) -> Response:
        reports = NoiseReportSerializer(ReportQueryService.list_for_user(user_id), many=True).data
        return Response({
            "message": "User reports fetched.",
            "count": len(reports),
            "reports": reports,
        })


class MapDataView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(summary="Report counts per point", responses={200: MapPointSerializer(many=True)}, tags=["Reports"])
    def get(self, request: Request) -> Response:
        return Response(ReportQueryService.map_data())


class TotalReportsView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(summary="Total number of reports", tags=["Reports"])
    def get(self, request: Request) -> Response:
        return Response({"totalReports": ReportQueryService.total()})


class ResponseOptionsView(APIView):
    """
    GET /reports/response-options/<id>

    The responses an administrator may send right now, in display order,
    with the statuses a transition may currently target.
    """

    permission_classes = [IsAdministrator]

    @extend_schema(summary="Available responses for a report", tags=["Reports"])
    def get(self, request: Request, report_id: int) -> Response:
        return Response(ReportWorkflowService.get_response_options(report_id))


class UpdateStatusView(APIView):
    """
    PUT /reports/update-status/<id>

    ``{status, note?}`` → ``{message, report}``.

    **Error Responses**:
        - ``400 Bad Request``: Unknown status or one the policy does
          not offer for this report.
        - ``403 Forbidden``: Caller is not an administrator.
        - ``404 Not Found``: Unknown report.
    """

    permission_classes = [IsAdministrator]
    parser_classes = [JSONParser, FormParser, MultiPartParser]

    @extend_schema(
        summary="Change a report's status",
        request=StatusUpdateSerializer,
        responses={
            200: OpenApiResponse(description="Updated report."),
            400: OpenApiResponse(description="Status not allowed."),
            404: OpenApiResponse(description="Report not found."),
        },
        tags=["Reports"],
    )
    def put(self, request: Request, report_id: int) -> Response:
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ReportWorkflowService.update_status(
            report_id,
            serializer.validated_data["status"],
            performed_by=request.user,
            note=serializer.validated_data["note"],
        )
        report = ReportQueryService.get_with_actions(report_id)
        return Response(
            {"message": "Status updated successfully", "report": NoiseReportSerializer(report).data},
            status=status.HTTP_200_OK,
        )

    @extend_schema(summary="Change a report's status (PATCH)", request=StatusUpdateSerializer, tags=["Reports"])
    def patch(self, request: Request, report_id: int) -> Response:
        return self.put(request, report_id)
