"""
Reports app serializers.

Request serializers validate multipart submissions and status updates;
response serializers render reports with the camelCase keys the web and
mobile clients read (``mediaUrl``, ``noiseLevel``, ``adminActions`` …).
"""

from __future__ import annotations

import json
from typing import Any

from rest_framework import serializers

from .models import MediaType, NoiseLevel, NoiseReport, ReportAdminAction, ReportStatus


# ═══════════════════════════════════════════════════════════════════
#  Response Serializers
# ═══════════════════════════════════════════════════════════════════


class ReportAdminActionSerializer(serializers.ModelSerializer):
    fromStatus = serializers.CharField(source="from_status", read_only=True)
    toStatus = serializers.CharField(source="to_status", read_only=True)
    performedBy = serializers.IntegerField(source="performed_by_id", read_only=True, allow_null=True)
    timestamp = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = ReportAdminAction
        fields = ["id", "action", "note", "fromStatus", "toStatus", "performedBy", "timestamp"]
        read_only_fields = fields


class NoiseReportSerializer(serializers.ModelSerializer):
    """
    Full report representation, audit log included (oldest entry first).
    """

    _id = serializers.IntegerField(source="pk", read_only=True)
    userId = serializers.IntegerField(source="user_id", read_only=True, allow_null=True)
    mediaUrl = serializers.CharField(source="media_url", read_only=True)
    mediaType = serializers.CharField(source="media_type", read_only=True)
    geoLocation = serializers.JSONField(source="geo_location", read_only=True)
    noiseLevel = serializers.CharField(source="noise_level", read_only=True)
    consecutiveDays = serializers.IntegerField(source="consecutive_days", read_only=True)
    adminResponse = serializers.CharField(source="admin_response", read_only=True)
    adminActions = ReportAdminActionSerializer(source="admin_actions", many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = NoiseReport
        fields = [
            "id",
            "_id",
            "userId",
            "mediaUrl",
            "mediaType",
            "reason",
            "comment",
            "location",
            "geoLocation",
            "noiseLevel",
            "consecutiveDays",
            "status",
            "adminResponse",
            "adminActions",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  Request Serializers
# ═══════════════════════════════════════════════════════════════════


class LocationField(serializers.Field):
    """
    Accepts the location as a JSON string (multipart) or an object (JSON
    body) and normalises it to ``{latitude, longitude, address}``.
    """

    default_error_messages = {
        "invalid": "Invalid location format.",
    }

    def to_internal_value(self, data: Any) -> dict | None:
        if data in (None, ""):
            return None
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                self.fail("invalid")
        if data is None:
            return None
        if not isinstance(data, dict):
            self.fail("invalid")

        latitude = data.get("latitude")
        longitude = data.get("longitude")
        if (latitude is None) != (longitude is None):
            self.fail("invalid")
        if isinstance(latitude, bool) or isinstance(longitude, bool):
            self.fail("invalid")
        if latitude is not None:
            try:
                latitude = float(latitude)
                longitude = float(longitude)
            except (TypeError, ValueError):
                self.fail("invalid")
            if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
                self.fail("invalid")

        return {
            "latitude": latitude,
            "longitude": longitude,
            "address": data.get("address"),
        }

    def to_representation(self, value: Any) -> Any:
        return value


def media_kind(upload) -> str | None:
    """``audio`` / ``video`` from an upload's content type, else ``None``."""
    content_type = (getattr(upload, "content_type", "") or "").lower()
    kind = content_type.split("/", 1)[0]
    return kind if kind in MediaType.values else None


class ReportSubmissionSerializer(serializers.Serializer):
    """
    Multipart fields of ``POST /reports/new-report``.

    ``mediaType`` may be omitted; it is then taken from the upload's
    content type.  When given it must agree with the upload.
    """

    media = serializers.FileField(
        error_messages={"required": "Media is required."},
    )
    reason = serializers.CharField(
        max_length=255,
        error_messages={
            "required": "Reason is required.",
            "blank": "Reason is required.",
        },
    )
    comment = serializers.CharField(required=False, allow_blank=True, default="")
    location = LocationField(required=False, allow_null=True, default=None)
    mediaType = serializers.ChoiceField(
        source="media_type",
        choices=MediaType.choices,
        required=False,
        error_messages={"invalid_choice": "Invalid media type."},
    )
    noiseLevel = serializers.ChoiceField(
        source="noise_level",
        choices=NoiseLevel.choices,
        error_messages={
            "required": "Noise level is required.",
            "invalid_choice": "Invalid noise level.",
        },
    )

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        kind = media_kind(attrs["media"])
        if kind is None:
            raise serializers.ValidationError(
                {"media": "Media must be an audio or video file."}
            )
        declared = attrs.get("media_type")
        if declared and declared != kind:
            raise serializers.ValidationError(
                {"mediaType": f"Media type '{declared}' does not match the uploaded {kind} file."}
            )
        attrs["media_type"] = kind
        return attrs


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=ReportStatus.choices,
        error_messages={"invalid_choice": "Invalid status value."},
    )
    note = serializers.CharField(required=False, allow_blank=True, default="")


class MapPointSerializer(serializers.Serializer):
    coordinates = serializers.ListField(child=serializers.FloatField(), min_length=2, max_length=2)
    count = serializers.IntegerField()
