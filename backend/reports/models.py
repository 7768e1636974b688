"""
Reports app models.

A ``NoiseReport`` is one citizen complaint: an audio/video recording,
the reason, an optional location, and the observed severity.  Its
``status`` only changes through administrator action, and every such
change appends one ``ReportAdminAction`` row to the report's audit log.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel

from . import policy


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class NoiseLevel(models.TextChoices):
    """Observed severity, chosen by the reporter.  Never changed afterwards."""

    RED = policy.RED, "Red (High)"
    YELLOW = policy.YELLOW, "Yellow (Medium)"
    GREEN = policy.GREEN, "Green (Low)"


class MediaType(models.TextChoices):
    AUDIO = "audio", "Audio"
    VIDEO = "video", "Video"


class ReportStatus(models.TextChoices):
    PENDING = policy.PENDING, "Pending"
    MONITORING = policy.MONITORING, "Monitoring"
    ACTION_REQUIRED = policy.ACTION_REQUIRED, "Action Required"
    RESOLVED = policy.RESOLVED, "Resolved"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class NoiseReport(TimeStampedModel):
    """
    A single noise complaint.

    ``location`` keeps the structured point exactly as submitted
    (``{latitude, longitude, address}``); ``geo_longitude`` /
    ``geo_latitude`` hold the normalised point used for spatial
    matching and map clustering.
    """

    media_url = models.CharField(
        max_length=500,
        verbose_name="Media URL",
    )
    media_type = models.CharField(
        max_length=10,
        choices=MediaType.choices,
        verbose_name="Media Type",
    )
    reason = models.CharField(
        max_length=255,
        verbose_name="Reason",
    )
    comment = models.TextField(
        blank=True,
        default="",
        verbose_name="Comment",
    )
    location = models.JSONField(
        null=True,
        blank=True,
        verbose_name="Location",
    )
    geo_longitude = models.FloatField(
        null=True,
        blank=True,
        verbose_name="Longitude",
    )
    geo_latitude = models.FloatField(
        null=True,
        blank=True,
        verbose_name="Latitude",
    )
    noise_level = models.CharField(
        max_length=10,
        choices=NoiseLevel.choices,
        db_index=True,
        verbose_name="Noise Level",
    )
    consecutive_days = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name="Consecutive Days",
    )
    status = models.CharField(
        max_length=20,
        choices=ReportStatus.choices,
        default=ReportStatus.PENDING,
        db_index=True,
        verbose_name="Status",
    )
    admin_response = models.TextField(
        default=policy.PENDING_RESPONSE_TEXT,
        verbose_name="Admin Response",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="noise_reports",
        verbose_name="Reporter",
    )

    class Meta:
        verbose_name = "Noise Report"
        verbose_name_plural = "Noise Reports"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["geo_longitude", "geo_latitude"], name="report_geo_point_idx"),
            models.Index(fields=["reason", "status"], name="report_reason_status_idx"),
        ]

    def __str__(self):
        return f"Report #{self.pk} [{self.noise_level}] {self.reason}"

    @property
    def coordinates(self) -> list[float] | None:
        """``[longitude, latitude]`` or ``None`` when no point was given."""
        if self.geo_longitude is None or self.geo_latitude is None:
            return None
        return [self.geo_longitude, self.geo_latitude]

    @property
    def geo_location(self) -> dict | None:
        coordinates = self.coordinates
        if coordinates is None:
            return None
        return {"type": "Point", "coordinates": coordinates}

    @property
    def address(self) -> str:
        """Human-readable address from ``location`` (may be empty)."""
        value = (self.location or {}).get("address")
        if isinstance(value, dict):
            return ", ".join(str(part) for part in value.values() if part)
        return str(value) if value else ""


class ReportAdminAction(TimeStampedModel):
    """
    Append-only audit trail of administrator responses to a report.

    Stores the option label chosen, the free-text note, the status
    before and after, and who acted.  Rows are never edited or
    reordered; the log reads oldest first.
    """

    report = models.ForeignKey(
        NoiseReport,
        on_delete=models.CASCADE,
        related_name="admin_actions",
        verbose_name="Report",
    )
    action = models.CharField(
        max_length=100,
        verbose_name="Action",
    )
    note = models.TextField(
        blank=True,
        default="",
        verbose_name="Note",
    )
    from_status = models.CharField(
        max_length=20,
        choices=ReportStatus.choices,
        verbose_name="Previous Status",
    )
    to_status = models.CharField(
        max_length=20,
        choices=ReportStatus.choices,
        verbose_name="New Status",
    )
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="report_actions",
        verbose_name="Performed By",
    )

    class Meta:
        verbose_name = "Report Admin Action"
        verbose_name_plural = "Report Admin Actions"
        ordering = ["created_at", "id"]

    def __str__(self):
        return (
            f"Report #{self.report_id}: "
            f"{self.from_status} → {self.to_status}"
        )
