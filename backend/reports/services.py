"""
Reports Service Layer.

Architecture
------------
- ``ConsecutiveDayMatcher``    — links a new report to the same disturbance
                                 reported earlier and derives its day count.
- ``ReportSubmissionService``  — stores the media and creates the report.
- ``ReportWorkflowService``    — the status-transition gateway.
- ``ReportQueryService``       — read-side lists, map clustering, totals.

Views must stay thin: validate with a serializer, call one of these
services, serialise the result.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.core.files.uploadedfile import UploadedFile
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from core.domain.access import require_admin
from core.domain.exceptions import InvalidTransition, NotFound, StorageError
from core.domain.transactions import lock_for_update, run_in_atomic
from core.media import MediaStorageService

from . import policy
from .geo import bounding_box, haversine_m, longitude_ranges
from .models import NoiseReport, ReportAdminAction, ReportStatus

logger = logging.getLogger(__name__)

MEDIA_FOLDER = "noise_reports"


# ═══════════════════════════════════════════════════════════════════
#  Consecutive-Day Matcher
# ═══════════════════════════════════════════════════════════════════


class ConsecutiveDayMatcher:
    """
    Decides whether a new report continues an existing disturbance.

    A prior report matches when it

    1. is not resolved,
    2. has the same reason (case-insensitive),
    3. lies within ``NOISEWATCH["MATCH_RADIUS_METERS"]`` of the new point,
    4. was filed by the same reporter (anonymous matches anonymous).

    Only the most recent match counts.  Calendar days are taken in the
    configured ``TIME_ZONE``.
    """

    @staticmethod
    def radius_m() -> float:
        return float(settings.NOISEWATCH["MATCH_RADIUS_METERS"])

    @staticmethod
    def find_prior(
        *,
        reason: str,
        latitude: float | None,
        longitude: float | None,
        user: Any = None,
        now: datetime | None = None,
    ) -> NoiseReport | None:
        if latitude is None or longitude is None:
            return None

        now = now or timezone.now()
        today = timezone.localtime(now).date()
        window_start = timezone.make_aware(
            datetime.combine(today - timedelta(days=1), datetime.min.time()),
        )
        radius = ConsecutiveDayMatcher.radius_m()
        min_lat, max_lat, min_lon, max_lon = bounding_box(latitude, longitude, radius)
        lon_filter = Q()
        for low, high in longitude_ranges(min_lon, max_lon):
            lon_filter |= Q(geo_longitude__range=(low, high))

        qs = (
            NoiseReport.objects
            .exclude(status=ReportStatus.RESOLVED)
            .filter(
                lon_filter,
                reason__iexact=reason.strip(),
                created_at__gte=window_start,
                created_at__lte=now,
                geo_latitude__range=(min_lat, max_lat),
            )
        )
        if user is not None and getattr(user, "is_authenticated", False):
            qs = qs.filter(user=user)
        else:
            qs = qs.filter(user__isnull=True)

        for candidate in qs.order_by("-created_at", "-id"):
            distance = haversine_m(
                latitude, longitude, candidate.geo_latitude, candidate.geo_longitude,
            )
            if distance <= radius:
                return candidate
        return None

    @staticmethod
    def days_after(prior: NoiseReport | None, now: datetime | None = None) -> int:
        """
        Day count for a new report following ``prior``.

        Same local day → inherit; previous local day → one more;
        anything else starts over at 1.
        """
        if prior is None:
            return 1
        today = timezone.localtime(now or timezone.now()).date()
        prior_day = timezone.localtime(prior.created_at).date()
        if prior_day == today:
            return prior.consecutive_days
        if prior_day == today - timedelta(days=1):
            return prior.consecutive_days + 1
        return 1

    @staticmethod
    def compute(
        *,
        reason: str,
        latitude: float | None,
        longitude: float | None,
        user: Any = None,
        now: datetime | None = None,
    ) -> int:
        prior = ConsecutiveDayMatcher.find_prior(
            reason=reason,
            latitude=latitude,
            longitude=longitude,
            user=user,
            now=now,
        )
        days = ConsecutiveDayMatcher.days_after(prior, now)
        if prior is not None:
            logger.debug("Report continues #%s: day %d", prior.pk, days)
        return days


# ═══════════════════════════════════════════════════════════════════
#  Submission Service
# ═══════════════════════════════════════════════════════════════════


class ReportSubmissionService:
    """
    Creates noise reports from validated submissions.
    """

    @staticmethod
    def submit(
        validated_data: dict[str, Any],
        *,
        user: Any = None,
    ) -> NoiseReport:
        """
        Store the media, compute the consecutive-day count, and save the
        report as ``pending``.

        Parameters
        ----------
        validated_data : dict
            From ``ReportSubmissionSerializer``: ``media`` (upload),
            ``reason``, ``comment``, ``location`` (dict or ``None``),
            ``media_type``, ``noise_level``.
        user : User | AnonymousUser | None
            The reporter; anonymous submissions have no owner.

        Raises
        ------
        StorageError
            The media or the row could not be written.
        """
        media: UploadedFile = validated_data["media"]
        location = validated_data.get("location")
        latitude = longitude = None
        if location:
            latitude = location.get("latitude")
            longitude = location.get("longitude")

        owner = user if getattr(user, "is_authenticated", False) else None
        stored = MediaStorageService.store(media, MEDIA_FOLDER)

        def _create() -> NoiseReport:
            consecutive_days = ConsecutiveDayMatcher.compute(
                reason=validated_data["reason"],
                latitude=latitude,
                longitude=longitude,
                user=owner,
            )
            return NoiseReport.objects.create(
                user=owner,
                media_url=stored.url,
                media_type=validated_data["media_type"],
                reason=validated_data["reason"].strip(),
                comment=validated_data.get("comment", ""),
                location=location,
                geo_latitude=latitude,
                geo_longitude=longitude,
                noise_level=validated_data["noise_level"],
                consecutive_days=consecutive_days,
                status=ReportStatus.PENDING,
                admin_response=policy.PENDING_RESPONSE_TEXT,
            )

        try:
            report = run_in_atomic(_create)
        except StorageError:
            MediaStorageService.discard(stored.name)
            raise
        logger.info(
            "Report #%s submitted (%s, %s, day %d) by %s",
            report.pk,
            report.noise_level,
            report.reason,
            report.consecutive_days,
            owner.pk if owner else "anonymous",
        )
        return report


# ═══════════════════════════════════════════════════════════════════
#  Workflow Service
# ═══════════════════════════════════════════════════════════════════


class ReportWorkflowService:
    """
    Manages **all** status transitions of a noise report.

    ``update_status`` is the single validated gateway: it locks the row,
    checks the target against the escalation policy for the report's
    current ``(noise_level, consecutive_days)``, writes the new status
    and response text, and appends exactly one ``ReportAdminAction``,
    all inside one transaction.
    """

    @staticmethod
    def get_report(report_id: Any) -> NoiseReport:
        try:
            return NoiseReport.objects.get(pk=report_id)
        except (NoiseReport.DoesNotExist, ValueError, TypeError):
            raise NotFound("Report not found.")

    @staticmethod
    def get_response_options(report_id: Any) -> dict[str, Any]:
        """Evaluator output for a report, plus its current state."""
        report = ReportWorkflowService.get_report(report_id)
        options = policy.get_response_options(report.noise_level, report.consecutive_days)
        return {
            "reportId": report.pk,
            "noiseLevel": report.noise_level,
            "consecutiveDays": report.consecutive_days,
            "currentStatus": report.status,
            "currentResponse": report.admin_response,
            "options": [option.as_dict() for option in options],
            "allowedStatuses": list(
                policy.allowed_statuses(report.noise_level, report.consecutive_days)
            ),
        }

    @staticmethod
    def update_status(
        report_id: Any,
        target_status: str,
        *,
        performed_by: Any = None,
        note: str = "",
    ) -> NoiseReport:
        """
        Move a report to ``target_status``.

        Re-applying the current status is accepted and still appends an
        audit entry.

        Raises
        ------
        NotFound
            Unknown ``report_id``.
        InvalidTransition
            ``target_status`` is not offered for the report right now.
        PermissionDenied
            ``performed_by`` is not an administrator.
        StorageError
            The database rejected the write; nothing was changed.
        """
        if performed_by is not None:
            require_admin(performed_by, "Only administrators can change a report's status.")

        def _apply() -> NoiseReport:
            report = lock_for_update(NoiseReport, report_id, "Report not found.")
            allowed = policy.allowed_statuses(report.noise_level, report.consecutive_days)
            if target_status not in allowed:
                raise InvalidTransition(
                    current=report.status,
                    target=target_status,
                    reason=f"Allowed: {', '.join(allowed)}",
                )

            previous = report.status
            report.status = target_status
            report.admin_response = policy.response_text_for(
                report.noise_level, report.consecutive_days, target_status,
            )
            report.save(update_fields=["status", "admin_response", "updated_at"])

            ReportAdminAction.objects.create(
                report=report,
                action=policy.label_for(target_status),
                note=note or "",
                from_status=previous,
                to_status=target_status,
                performed_by=performed_by,
            )
            return report

        report = run_in_atomic(_apply)
        logger.info(
            "Report #%s status -> %s by %s",
            report.pk,
            report.status,
            getattr(performed_by, "pk", None),
        )
        return report


# ═══════════════════════════════════════════════════════════════════
#  Query Service
# ═══════════════════════════════════════════════════════════════════


class ReportQueryService:
    """Read-side helpers used by the public report endpoints."""

    @staticmethod
    def _base_queryset() -> QuerySet[NoiseReport]:
        return (
            NoiseReport.objects
            .select_related("user")
            .prefetch_related("admin_actions")
            .order_by("-created_at", "-id")
        )

    @staticmethod
    def list_reports() -> QuerySet[NoiseReport]:
        return ReportQueryService._base_queryset()

    @staticmethod
    def list_for_user(user_id: int) -> QuerySet[NoiseReport]:
        return ReportQueryService._base_queryset().filter(user_id=user_id)

    @staticmethod
    def get_with_actions(report_id: Any) -> NoiseReport:
        try:
            return ReportQueryService._base_queryset().get(pk=report_id)
        except (NoiseReport.DoesNotExist, ValueError, TypeError):
            raise NotFound("Report not found.")

    @staticmethod
    def map_data() -> list[dict[str, Any]]:
        """Reports grouped by identical point: ``[{coordinates, count}]``."""
        rows = (
            NoiseReport.objects
            .filter(geo_longitude__isnull=False, geo_latitude__isnull=False)
            .values("geo_longitude", "geo_latitude")
            .annotate(count=Count("id"))
            .order_by("-count", "geo_longitude", "geo_latitude")
        )
        return [
            {
                "coordinates": [row["geo_longitude"], row["geo_latitude"]],
                "count": row["count"],
            }
            for row in rows
        ]

    @staticmethod
    def total() -> int:
        return NoiseReport.objects.count()
