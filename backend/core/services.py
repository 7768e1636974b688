"""
Core app services — **Service Layer**.

Contains the cross-app read models: dashboard analytics and the admin
notification feed.  Both are projections computed on demand from
``accounts.User`` and ``reports.NoiseReport``; nothing here is stored.
Views delegate all aggregation to the classes defined here.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULE                                             ║
║                                                                    ║
║  The core app is the only app allowed to query models from the     ║
║  other apps.  Never import them at module level; resolve them      ║
║  inside methods with ``apps.get_model("reports", "NoiseReport")``  ║
║  so that ``migrate`` works regardless of app loading order.        ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

import calendar
import logging
import math
from datetime import datetime, timedelta
from typing import Any

from django.apps import apps
from django.db.models import Count, QuerySet
from django.db.models.functions import TruncDay, TruncHour, TruncMonth
from django.utils import timezone

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════
#  Shared helpers
# ════════════════════════════════════════════════════════════════════

PERIOD_DAILY = "daily"
PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"
PERIOD_YEARLY = "yearly"
PERIODS = (PERIOD_DAILY, PERIOD_WEEKLY, PERIOD_MONTHLY, PERIOD_YEARLY)

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_LABELS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

STATUS_COLORS = {
    "resolved": "#4CAF50",
    "monitoring": "#2196F3",
    "pending": "#FF9800",
    "action_required": "#F44336",
}
LEVEL_COLORS = {
    "green": "#4CAF50",
    "yellow": "#FFC107",
    "red": "#F44336",
}
FALLBACK_COLOR = "#999999"

CATEGORY_COLORS = {
    "Music": "#DAA520",
    "Vehicle": "#8B4513",
    "Traffic": "#8B4513",
    "Construction": "#B8860B",
    "Shouting": "#8B7355",
    "Party": "#CD853F",
    "Animal": "#D2B48C",
    "Industrial": "#654321",
    "Machinery": "#A0522D",
}
FALLBACK_CATEGORY_COLOR = "#8B7355"


def get_date_range(period: str, now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Return the ``[start, end)`` window for ``period`` in the current
    time zone.

    * daily   — today
    * weekly  — Monday to Sunday of the current week
    * monthly — first to last day of the current month
    * yearly  — 1 January to 31 December
    """
    local_now = timezone.localtime(now)
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == PERIOD_DAILY:
        start = midnight
        end = start + timedelta(days=1)
    elif period == PERIOD_WEEKLY:
        start = midnight - timedelta(days=midnight.weekday())
        end = start + timedelta(days=7)
    elif period == PERIOD_MONTHLY:
        start = midnight.replace(day=1)
        days = calendar.monthrange(start.year, start.month)[1]
        end = start + timedelta(days=days)
    elif period == PERIOD_YEARLY:
        start = midnight.replace(month=1, day=1)
        end = start.replace(year=start.year + 1)
    else:
        raise ValueError(f"Unknown period: {period!r}")

    # Re-localise so DST shifts inside the window land on wall-clock midnight.
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(start.replace(tzinfo=None), tz)
    end = timezone.make_aware(end.replace(tzinfo=None), tz)
    return start, end


def format_time_ago(timestamp: datetime, now: datetime | None = None, *, verbose: bool = False) -> str:
    """
    Humanise the distance between ``timestamp`` and ``now``.

    The compact form (``"5m ago"``) is used by analytics, the verbose
    form (``"5 min ago"``) by the notification feed.  Anything a week or
    older is shown as a short date such as ``"Oct 3"``.
    """
    now = now or timezone.now()
    minutes = int((now - timestamp).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago" if verbose else f"{minutes}m ago"
    if hours < 24:
        return f"{hours} hr ago" if verbose else f"{hours}h ago"
    if days < 7:
        return f"{days} day ago" if verbose else f"{days}d ago"
    local = timezone.localtime(timestamp)
    return f"{MONTH_LABELS[local.month - 1]} {local.day}"


def percentage(count: int, total: int) -> int:
    """Share of ``total`` as a whole percent, halves rounded up."""
    return int(math.floor(count / (total or 1) * 100 + 0.5))


def _report_model():
    return apps.get_model("reports", "NoiseReport")


def _user_model():
    return apps.get_model("accounts", "User")


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Builds the admin analytics payload for one reporting period.

    Counts are grouped in the database with ``values().annotate()``;
    the trend series are bucketed with ``Trunc*`` functions evaluated in
    the configured ``TIME_ZONE``.

    Usage::

        service = DashboardAggregationService(period="weekly")
        payload = service.get_dashboard()
    """

    #: Maximum number of reasons returned by ``get_noise_categories``.
    CATEGORY_LIMIT: int = 8

    #: Window for the recent activity list.
    RECENT_WINDOW = timedelta(hours=24)

    def __init__(self, period: str = PERIOD_WEEKLY, now: datetime | None = None) -> None:
        self.period = period
        self.now = now or timezone.now()
        self.start, self.end = get_date_range(period, self.now)

    # ── Public API ──────────────────────────────────────────────────

    def get_dashboard(self) -> dict[str, Any]:
        """Return the combined dashboard payload."""
        user_stats = self.get_user_stats()
        report_stats = self.get_report_stats()
        labels = self._bucket_labels()
        user_growth = self._bucket_counts(self._users_in_period())
        report_trend = self._bucket_counts(self._reports_in_period())

        user_stats.update({
            "userGrowth": user_growth,
            "userActivity": list(report_trend),
            "activityLabels": labels,
        })
        report_stats.update({
            "reportTrend": report_trend,
            "trendLabels": list(labels),
        })

        return {
            "success": True,
            "period": self.period.capitalize(),
            "dateRange": {"start": self.start, "end": self.end},
            "userStats": user_stats,
            "reportStats": report_stats,
            "noiseCategories": self.get_noise_categories(),
            "recentActivity": self.get_recent_activity(report_limit=10, user_limit=5),
        }

    def get_user_stats(self) -> dict[str, Any]:
        User = _user_model()
        total_users = User.objects.count()
        active_users = (
            self._reports_in_period()
            .filter(user__isnull=False)
            .values("user")
            .distinct()
            .count()
        )
        rows = (
            User.objects
            .values("user_type")
            .annotate(count=Count("id"))
            .order_by("user_type")
        )
        return {
            "totalUsers": total_users,
            "activeUsers": active_users,
            "newUsers": self._users_in_period().count(),
            "userByType": [
                {
                    "type": row["user_type"] or "user",
                    "count": row["count"],
                    "percentage": percentage(row["count"], total_users),
                }
                for row in rows
            ],
        }

    def get_report_stats(self) -> dict[str, Any]:
        NoiseReport = _report_model()
        period_qs = self._reports_in_period()
        period_reports = period_qs.count()

        status_rows = list(
            period_qs.values("status").annotate(count=Count("id")).order_by("status")
        )
        level_rows = (
            period_qs.values("noise_level").annotate(count=Count("id")).order_by("noise_level")
        )
        resolved = next(
            (row["count"] for row in status_rows if row["status"] == "resolved"),
            0,
        )

        return {
            "totalReports": NoiseReport.objects.count(),
            "periodReports": period_reports,
            "resolvedReports": resolved,
            "noiseLevels": [
                {
                    "level": row["noise_level"],
                    "count": row["count"],
                    "percentage": percentage(row["count"], period_reports),
                    "color": LEVEL_COLORS.get(row["noise_level"], FALLBACK_COLOR),
                }
                for row in level_rows
            ],
            "reportStatus": [
                {
                    "status": row["status"],
                    "count": row["count"],
                    "percentage": percentage(row["count"], period_reports),
                    "color": STATUS_COLORS.get(row["status"], FALLBACK_COLOR),
                }
                for row in status_rows
            ],
        }

    def get_noise_categories(self) -> list[dict[str, Any]]:
        """Most reported reasons across all time, busiest first."""
        rows = (
            _report_model().objects
            .values("reason")
            .annotate(count=Count("id"))
            .order_by("-count", "reason")[: self.CATEGORY_LIMIT]
        )
        return [
            {
                "name": row["reason"],
                "count": row["count"],
                "color": CATEGORY_COLORS.get(row["reason"], FALLBACK_CATEGORY_COLOR),
            }
            for row in rows
        ]

    def get_recent_activity(self, report_limit: int = 8, user_limit: int = 3) -> list[dict[str, Any]]:
        """Reports and registrations from the last 24 hours, newest first."""
        since = self.now - self.RECENT_WINDOW
        reports = (
            _report_model().objects
            .filter(created_at__gte=since)
            .select_related("user")
            .order_by("-created_at")[:report_limit]
        )
        users = (
            _user_model().objects
            .filter(created_at__gte=since)
            .order_by("-created_at")[:user_limit]
        )

        activities = [
            {
                "id": report.pk,
                "type": "report",
                "user": report.user.username if report.user else "Anonymous User",
                "action": "reported noise",
                "reason": report.reason,
                "noiseLevel": report.noise_level,
                "location": report.address,
                "time": format_time_ago(report.created_at, self.now),
                "timestamp": report.created_at,
            }
            for report in reports
        ]
        activities.extend(
            {
                "id": user.pk,
                "type": "registration",
                "user": user.username or "New User",
                "action": "registered as new user",
                "time": format_time_ago(user.created_at, self.now),
                "timestamp": user.created_at,
            }
            for user in users
        )
        activities.sort(key=lambda item: item["timestamp"], reverse=True)
        return activities[:10]

    # ── Private helpers ─────────────────────────────────────────────

    def _reports_in_period(self) -> QuerySet:
        return _report_model().objects.filter(
            created_at__gte=self.start, created_at__lt=self.end,
        )

    def _users_in_period(self) -> QuerySet:
        return _user_model().objects.filter(
            created_at__gte=self.start, created_at__lt=self.end,
        )

    def _bucket_labels(self) -> list[str]:
        if self.period == PERIOD_DAILY:
            return [_hour_label(hour) for hour in range(24)]
        if self.period == PERIOD_WEEKLY:
            return list(WEEKDAY_LABELS)
        if self.period == PERIOD_MONTHLY:
            days = calendar.monthrange(self.start.year, self.start.month)[1]
            return [str(day) for day in range(1, days + 1)]
        return list(MONTH_LABELS)

    def _bucket_counts(self, qs: QuerySet) -> list[int]:
        """Count ``qs`` rows per bucket of the current period."""
        tz = timezone.get_current_timezone()
        if self.period == PERIOD_DAILY:
            trunc = TruncHour("created_at", tzinfo=tz)
        elif self.period == PERIOD_YEARLY:
            trunc = TruncMonth("created_at", tzinfo=tz)
        else:
            trunc = TruncDay("created_at", tzinfo=tz)

        counts = [0] * len(self._bucket_labels())
        rows = (
            qs.annotate(bucket=trunc)
            .values("bucket")
            .annotate(count=Count("id"))
            .order_by("bucket")
        )
        for row in rows:
            index = self._bucket_index(timezone.localtime(row["bucket"], tz))
            if 0 <= index < len(counts):
                counts[index] += row["count"]
        return counts

    def _bucket_index(self, bucket: datetime) -> int:
        if self.period == PERIOD_DAILY:
            return bucket.hour
        if self.period == PERIOD_WEEKLY:
            return (bucket.date() - self.start.date()).days
        if self.period == PERIOD_MONTHLY:
            return bucket.day - 1
        return bucket.month - 1


def _hour_label(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    return f"{hour} AM" if hour < 12 else f"{hour - 12} PM"


# ════════════════════════════════════════════════════════════════════
#  Notification Feed Service
# ════════════════════════════════════════════════════════════════════

class NotificationFeedService:
    """
    Read-only admin notification feed.

    Items are derived from recent registrations and noise reports every
    time the feed is requested.  The caller passes ``since`` (the moment
    it last looked at the feed); items created at or before that moment
    are flagged ``read``.  No read markers are stored server-side.
    """

    PRIORITY_BY_LEVEL = {
        "red": "emergency",
        "yellow": "high",
        "green": "medium",
    }
    ICON_BY_LEVEL = {
        "red": "🚨",
        "yellow": "⚠️",
        "green": "🔊",
    }
    TITLE_BY_LEVEL = {
        "red": "🚨 CRITICAL: High Noise Report",
        "yellow": "⚠️ Medium Noise Report",
    }
    ACTIVITY_ICON_BY_LEVEL = {
        "red": "warning",
        "yellow": "volume_up",
    }

    DEFAULT_HOURS: int = 24
    DEFAULT_LIMIT: int = 50

    def __init__(
        self,
        hours: int = DEFAULT_HOURS,
        limit: int = DEFAULT_LIMIT,
        since: datetime | None = None,
        now: datetime | None = None,
    ) -> None:
        self.hours = hours
        self.limit = limit
        self.since = since
        self.now = now or timezone.now()
        self.window_start = self.now - timedelta(hours=hours)

    # ── Public API ──────────────────────────────────────────────────

    def get_feed(self) -> dict[str, Any]:
        users = (
            _user_model().objects
            .filter(created_at__gte=self.window_start)
            .order_by("-created_at")[: self.limit]
        )
        reports = (
            _report_model().objects
            .filter(created_at__gte=self.window_start)
            .select_related("user")
            .order_by("-created_at")[: self.limit]
        )

        items = [self._registration_item(user) for user in users]
        items.extend(self._report_item(report) for report in reports)
        items.sort(key=lambda item: item["timestamp"], reverse=True)
        limited = items[: self.limit]

        logger.debug(
            "Notification feed: %d of %d items from the last %d hours",
            len(limited), len(items), self.hours,
        )
        return {
            "success": True,
            "count": len(limited),
            "total": len(items),
            "hours": self.hours,
            "notifications": limited,
        }

    def get_unread_count(self) -> dict[str, Any]:
        """Count feed items newer than both the window start and ``since``."""
        threshold = self.window_start
        if self.since is not None and self.since > threshold:
            users = _user_model().objects.filter(created_at__gt=self.since).count()
            reports = _report_model().objects.filter(created_at__gt=self.since).count()
        else:
            users = _user_model().objects.filter(created_at__gte=threshold).count()
            reports = _report_model().objects.filter(created_at__gte=threshold).count()
        return {
            "success": True,
            "count": users + reports,
            "details": {"users": users, "reports": reports},
        }

    def get_recent_activity(self, limit: int = 10) -> list[dict[str, Any]]:
        """Latest three registrations and five reports regardless of age."""
        users = _user_model().objects.order_by("-created_at")[:3]
        reports = (
            _report_model().objects
            .select_related("user")
            .order_by("-created_at")[:5]
        )

        activities = [
            {
                "id": user.pk,
                "type": "registration",
                "user": user.username or "New User",
                "action": "registered as new user",
                "time": format_time_ago(user.created_at, self.now, verbose=True),
                "timestamp": user.created_at,
                "icon": "person_add",
            }
            for user in users
        ]
        activities.extend(
            {
                "id": report.pk,
                "type": "report",
                "user": report.user.username if report.user else "Anonymous",
                "action": "reported noise",
                "reason": report.reason,
                "noiseLevel": report.noise_level,
                "location": report.address or None,
                "time": format_time_ago(report.created_at, self.now, verbose=True),
                "timestamp": report.created_at,
                "icon": self.ACTIVITY_ICON_BY_LEVEL.get(report.noise_level, "notifications"),
            }
            for report in reports
        )
        activities.sort(key=lambda item: item["timestamp"], reverse=True)
        return activities[:limit]

    # ── Item builders ───────────────────────────────────────────────

    def _is_read(self, created_at: datetime) -> bool:
        return self.since is not None and created_at <= self.since

    def _registration_item(self, user) -> dict[str, Any]:
        return {
            "id": f"user-{user.pk}-{_epoch_ms(user.created_at)}",
            "type": "registration",
            "title": "New User Registration",
            "message": f"{user.username or 'A new user'} joined the platform",
            "user": {
                "id": user.pk,
                "username": user.username,
                "email": user.email,
                "profilePhoto": user.profile_photo,
            },
            "time": format_time_ago(user.created_at, self.now, verbose=True),
            "timestamp": user.created_at,
            "priority": "medium",
            "icon": "👤",
            "read": self._is_read(user.created_at),
            "data": {"userId": user.pk, "userType": user.user_type},
        }

    def _report_item(self, report) -> dict[str, Any]:
        owner = report.user
        username = owner.username if owner else "Anonymous"
        return {
            "id": f"report-{report.pk}-{_epoch_ms(report.created_at)}",
            "type": "report",
            "title": self.TITLE_BY_LEVEL.get(report.noise_level, "New Noise Report"),
            "message": (
                f"{username} reported {report.reason or 'noise'} "
                f"({report.noise_level} level)"
            ),
            "user": (
                {"id": owner.pk, "username": owner.username, "email": owner.email}
                if owner else None
            ),
            "location": report.address or "Unknown location",
            "noiseLevel": report.noise_level,
            "reason": report.reason,
            "status": report.status,
            "time": format_time_ago(report.created_at, self.now, verbose=True),
            "timestamp": report.created_at,
            "priority": self.PRIORITY_BY_LEVEL.get(report.noise_level, "low"),
            "icon": self.ICON_BY_LEVEL.get(report.noise_level, "📢"),
            "read": self._is_read(report.created_at),
            "data": {
                "reportId": report.pk,
                "mediaUrl": report.media_url,
                "coordinates": report.coordinates,
            },
        }


def _epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)
