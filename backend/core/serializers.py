"""
Core app serializers.

**Query-parameter** serializers for the analytics and notification feed
endpoints.  The payloads themselves are plain dicts built by
``core.services`` and returned as-is; the serializers here only validate
what the caller asked for, so that bad input becomes a regular DRF 400.
"""

from __future__ import annotations

from rest_framework import serializers

from .services import PERIOD_WEEKLY, PERIODS, NotificationFeedService


class PeriodQuerySerializer(serializers.Serializer):
    """``?period=daily|weekly|monthly|yearly`` (defaults to weekly)."""

    period = serializers.ChoiceField(
        choices=PERIODS,
        default=PERIOD_WEEKLY,
        help_text="Reporting window.",
    )


class NotificationFeedQuerySerializer(serializers.Serializer):
    """
    Query parameters of ``/notification/all`` and
    ``/notification/unread-count``.

    ``since`` is the moment the admin last opened the feed; items created
    at or before it are reported as read.
    """

    hours = serializers.IntegerField(
        min_value=1,
        max_value=24 * 365,
        default=NotificationFeedService.DEFAULT_HOURS,
    )
    limit = serializers.IntegerField(
        min_value=1,
        max_value=500,
        default=NotificationFeedService.DEFAULT_LIMIT,
    )
    since = serializers.DateTimeField(required=False, allow_null=True, default=None)


class RecentActivityQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=50, default=10)


class HealthSerializer(serializers.Serializer):
    status = serializers.CharField()
    timestamp = serializers.DateTimeField()
    message = serializers.CharField()


class ServerInfoSerializer(serializers.Serializer):
    message = serializers.CharField()
    timestamp = serializers.DateTimeField()
    environment = serializers.CharField()
